from datetime import datetime
from typing import List, Optional
from sqlalchemy.orm import Session
from app.core.errors import TestRunGroupNotFoundError, TestRunNotFoundError
from app.repositories.interfaces.test_run_repository import ITestRunRepository
from app.models.database import TestRunGroupModel, TestRunItemModel, TestRunModel
from app.models.schemas import (
    RunGroupStatus,
    TestRun,
    TestRunCreate,
    TestRunGroup,
    TestRunGroupCreate,
    TestRunItem,
    TestRunItemPlan,
    TestRunStatus,
)


class SQLTestRunRepository(ITestRunRepository):
    """SQLAlchemy implementation of the test run repository"""

    def __init__(self, db: Session):
        self.db = db

    async def create_group(self, group: TestRunGroupCreate) -> TestRunGroup:
        db_group = TestRunGroupModel(**group.model_dump(), status=RunGroupStatus.NOT_STARTED)
        self.db.add(db_group)
        self.db.commit()
        self.db.refresh(db_group)
        return TestRunGroup.model_validate(db_group)

    async def get_group(self, group_id: str) -> Optional[TestRunGroup]:
        db_group = self.db.query(TestRunGroupModel).filter(TestRunGroupModel.id == group_id).first()
        if db_group:
            return TestRunGroup.model_validate(db_group)
        return None

    async def get_groups_by_release(self, release_id: str) -> List[TestRunGroup]:
        rows = (
            self.db.query(TestRunGroupModel)
            .filter(TestRunGroupModel.release_id == release_id)
            .order_by(TestRunGroupModel.created_at)
            .all()
        )
        return [TestRunGroup.model_validate(r) for r in rows]

    async def update_group_status(self, group_id: str, status: RunGroupStatus) -> TestRunGroup:
        db_group = self.db.query(TestRunGroupModel).filter(TestRunGroupModel.id == group_id).first()
        if not db_group:
            raise TestRunGroupNotFoundError(group_id)
        db_group.status = status
        self.db.commit()
        self.db.refresh(db_group)
        return TestRunGroup.model_validate(db_group)

    async def create_run(self, run: TestRunCreate, items: List[TestRunItemPlan]) -> TestRun:
        db_run = TestRunModel(**run.model_dump(), status=TestRunStatus.ASSIGNED)
        db_run.items = [TestRunItemModel(**item.model_dump()) for item in items]
        self.db.add(db_run)
        try:
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        self.db.refresh(db_run)
        return TestRun.model_validate(db_run)

    async def get_run(self, run_id: str) -> Optional[TestRun]:
        db_run = self.db.query(TestRunModel).filter(TestRunModel.id == run_id).first()
        if db_run:
            return TestRun.model_validate(db_run)
        return None

    async def get_runs_by_group(self, group_id: str) -> List[TestRun]:
        rows = (
            self.db.query(TestRunModel)
            .filter(TestRunModel.run_group_id == group_id)
            .order_by(TestRunModel.created_at.desc())
            .all()
        )
        return [TestRun.model_validate(r) for r in rows]

    async def update_run_status(
        self,
        run_id: str,
        status: TestRunStatus,
        started_at: Optional[datetime] = None,
        completed_at: Optional[datetime] = None,
    ) -> TestRun:
        db_run = self.db.query(TestRunModel).filter(TestRunModel.id == run_id).first()
        if not db_run:
            raise TestRunNotFoundError(run_id)
        db_run.status = status
        if started_at is not None:
            db_run.started_at = started_at
        if completed_at is not None:
            db_run.completed_at = completed_at
        self.db.commit()
        self.db.refresh(db_run)
        return TestRun.model_validate(db_run)

    async def get_items(self, run_id: str) -> List[TestRunItem]:
        rows = (
            self.db.query(TestRunItemModel)
            .filter(TestRunItemModel.run_id == run_id)
            .order_by(TestRunItemModel.order)
            .all()
        )
        return [TestRunItem.model_validate(r) for r in rows]

    async def get_item(self, item_id: str) -> Optional[TestRunItem]:
        db_item = self.db.query(TestRunItemModel).filter(TestRunItemModel.id == item_id).first()
        if db_item:
            return TestRunItem.model_validate(db_item)
        return None
