from datetime import datetime
from typing import List, Optional
from sqlalchemy.orm import Session
from app.core.timeutils import to_naive_utc
from app.repositories.interfaces.waiver_repository import IWaiverRepository
from app.models.database import WaiverModel
from app.models.schemas import Waiver, WaiverCreate, WaiverTargetType


class SQLWaiverRepository(IWaiverRepository):
    """SQLAlchemy implementation of the waiver repository"""

    def __init__(self, db: Session):
        self.db = db

    async def create(self, release_id: str, waiver: WaiverCreate) -> Waiver:
        db_waiver = WaiverModel(
            release_id=release_id,
            target_type=waiver.target_type,
            target_id=waiver.target_id,
            reason=waiver.reason.strip(),
            expires_at=to_naive_utc(waiver.expires_at),
            issuer_id=waiver.issuer_id,
        )
        self.db.add(db_waiver)
        self.db.commit()
        self.db.refresh(db_waiver)
        return Waiver.model_validate(db_waiver)

    async def get_by_id(self, waiver_id: str) -> Optional[Waiver]:
        db_waiver = self.db.query(WaiverModel).filter(WaiverModel.id == waiver_id).first()
        if db_waiver:
            return Waiver.model_validate(db_waiver)
        return None

    async def get_by_release(self, release_id: str) -> List[Waiver]:
        rows = (
            self.db.query(WaiverModel)
            .filter(WaiverModel.release_id == release_id)
            .order_by(WaiverModel.created_at.desc())
            .all()
        )
        return [Waiver.model_validate(r) for r in rows]

    async def find_valid_for_target(
        self,
        release_id: str,
        target_type: WaiverTargetType,
        now: datetime,
        target_id: Optional[str] = None,
    ) -> Optional[Waiver]:
        query = self.db.query(WaiverModel).filter(
            WaiverModel.release_id == release_id,
            WaiverModel.target_type == target_type,
            WaiverModel.expires_at > to_naive_utc(now),
        )
        if target_id is not None:
            query = query.filter(WaiverModel.target_id == target_id)
        db_waiver = query.order_by(WaiverModel.created_at.desc()).first()
        if db_waiver:
            return Waiver.model_validate(db_waiver)
        return None

    async def find_expired(self, now: datetime) -> List[Waiver]:
        rows = (
            self.db.query(WaiverModel)
            .filter(WaiverModel.expires_at < to_naive_utc(now))
            .order_by(WaiverModel.expires_at)
            .all()
        )
        return [Waiver.model_validate(r) for r in rows]

    async def delete(self, waiver_id: str) -> bool:
        db_waiver = self.db.query(WaiverModel).filter(WaiverModel.id == waiver_id).first()
        if not db_waiver:
            return False
        self.db.delete(db_waiver)
        self.db.commit()
        return True
