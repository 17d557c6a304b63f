from typing import List, Optional
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from app.core.errors import DuplicateBaselineError, ReleaseNotFoundError
from app.repositories.interfaces.release_repository import IReleaseRepository
from app.models.database import ReleaseBaselineModel, ReleaseModel
from app.models.schemas import (
    BaselineCreate,
    Release,
    ReleaseBaseline,
    ReleaseCreate,
    ReleaseStatus,
)


class SQLReleaseRepository(IReleaseRepository):
    """SQLAlchemy implementation of the release repository"""

    def __init__(self, db: Session):
        self.db = db

    async def create(self, release: ReleaseCreate) -> Release:
        db_release = ReleaseModel(**release.model_dump(), status=ReleaseStatus.PLANNING)
        self.db.add(db_release)
        self.db.commit()
        self.db.refresh(db_release)
        return Release.model_validate(db_release)

    async def get_by_id(self, release_id: str) -> Optional[Release]:
        db_release = self.db.query(ReleaseModel).filter(ReleaseModel.id == release_id).first()
        if db_release:
            return Release.model_validate(db_release)
        return None

    async def get_by_project(self, project_id: str) -> List[Release]:
        rows = (
            self.db.query(ReleaseModel)
            .filter(ReleaseModel.project_id == project_id)
            .order_by(ReleaseModel.created_at.desc())
            .all()
        )
        return [Release.model_validate(r) for r in rows]

    async def update_status(self, release_id: str, status: ReleaseStatus) -> Release:
        db_release = self.db.query(ReleaseModel).filter(ReleaseModel.id == release_id).first()
        if not db_release:
            raise ReleaseNotFoundError(release_id)
        db_release.status = status
        self.db.commit()
        self.db.refresh(db_release)
        return Release.model_validate(db_release)

    async def add_baseline(self, release_id: str, baseline: BaselineCreate) -> ReleaseBaseline:
        existing = (
            self.db.query(ReleaseBaselineModel.id)
            .filter(
                ReleaseBaselineModel.release_id == release_id,
                ReleaseBaselineModel.source_list_revision_id == baseline.source_list_revision_id,
            )
            .first()
        )
        if existing:
            raise DuplicateBaselineError(release_id, baseline.source_list_revision_id)

        db_baseline = ReleaseBaselineModel(release_id=release_id, **baseline.model_dump())
        self.db.add(db_baseline)
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise DuplicateBaselineError(release_id, baseline.source_list_revision_id)
        self.db.refresh(db_baseline)
        return ReleaseBaseline.model_validate(db_baseline)

    async def get_baselines(self, release_id: str) -> List[ReleaseBaseline]:
        rows = (
            self.db.query(ReleaseBaselineModel)
            .filter(ReleaseBaselineModel.release_id == release_id)
            .order_by(ReleaseBaselineModel.created_at)
            .all()
        )
        return [ReleaseBaseline.model_validate(r) for r in rows]
