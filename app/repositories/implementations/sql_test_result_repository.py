from typing import Dict, List
from sqlalchemy import func
from sqlalchemy.orm import Session
from app.core.timeutils import utcnow
from app.repositories.interfaces.test_result_repository import ITestResultRepository
from app.models.database import TestResultModel, TestRunItemModel
from app.models.schemas import TestResult, TestResultCreate


class SQLTestResultRepository(ITestResultRepository):
    """SQLAlchemy implementation of the test result repository"""

    def __init__(self, db: Session):
        self.db = db

    async def create(self, run_item_id: str, result: TestResultCreate) -> TestResult:
        previous = (
            self.db.query(func.max(TestResultModel.attempt))
            .filter(TestResultModel.run_item_id == run_item_id)
            .scalar()
        )
        db_result = TestResultModel(
            run_item_id=run_item_id,
            status=result.status,
            evidence=result.evidence.model_dump(mode="json") if result.evidence else None,
            bug_links=[link.model_dump(mode="json") for link in result.bug_links],
            executed_by=result.executed_by,
            executed_at=utcnow(),
            attempt=(previous or 0) + 1,
        )
        self.db.add(db_result)
        self.db.commit()
        self.db.refresh(db_result)
        return TestResult.model_validate(db_result)

    async def get_by_item(self, run_item_id: str) -> List[TestResult]:
        rows = (
            self.db.query(TestResultModel)
            .filter(TestResultModel.run_item_id == run_item_id)
            .order_by(TestResultModel.executed_at.desc(), TestResultModel.attempt.desc())
            .all()
        )
        return [TestResult.model_validate(r) for r in rows]

    async def get_latest_by_run(self, run_id: str) -> Dict[str, TestResult]:
        rows = (
            self.db.query(TestResultModel)
            .join(TestRunItemModel, TestRunItemModel.id == TestResultModel.run_item_id)
            .filter(TestRunItemModel.run_id == run_id)
            .order_by(TestResultModel.executed_at, TestResultModel.attempt)
            .all()
        )
        latest: Dict[str, TestResult] = {}
        # Ascending order, so later rows overwrite earlier ones
        for row in rows:
            latest[row.run_item_id] = TestResult.model_validate(row)
        return latest
