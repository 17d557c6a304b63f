from typing import Dict, Iterable, List, Optional
from sqlalchemy import func
from sqlalchemy.orm import Session
from app.repositories.interfaces.test_case_repository import ITestCaseRepository
from app.models.database import TestCaseModel, TestCaseRevisionModel
from app.models.schemas import (
    RevisionStatus,
    TestCase,
    TestCaseContent,
    TestCaseRevision,
    TestCaseWithLatestRevision,
)

INITIAL_REVISION_REASON = "Initial version"


class SQLTestCaseRepository(ITestCaseRepository):
    """SQLAlchemy implementation of test case repository"""

    def __init__(self, db: Session):
        self.db = db

    async def create(
        self,
        project_id: str,
        title: str,
        content: TestCaseContent,
        created_by: str,
        reason: Optional[str] = None,
    ) -> TestCaseWithLatestRevision:
        """Create a new test case with revision 1"""
        db_test_case = TestCaseModel(project_id=project_id, created_by=created_by)
        db_revision = TestCaseRevisionModel(
            rev=1,
            status=RevisionStatus.DRAFT,
            title=title,
            content=content.model_dump(mode="json"),
            reason=reason or INITIAL_REVISION_REASON,
            created_by=created_by,
        )
        db_test_case.revisions.append(db_revision)
        self.db.add(db_test_case)
        self.db.commit()
        self.db.refresh(db_test_case)
        self.db.refresh(db_revision)
        return TestCaseWithLatestRevision(
            test_case=TestCase.model_validate(db_test_case),
            latest_revision=TestCaseRevision.model_validate(db_revision),
        )

    async def get_by_id(self, case_id: str) -> Optional[TestCase]:
        """Get test case by ID"""
        db_test_case = self.db.query(TestCaseModel).filter(TestCaseModel.id == case_id).first()
        if db_test_case:
            return TestCase.model_validate(db_test_case)
        return None

    async def get_by_project(self, project_id: str, skip: int = 0, limit: int = 100) -> List[TestCase]:
        """Get the test cases of a project with pagination"""
        db_test_cases = (
            self.db.query(TestCaseModel)
            .filter(TestCaseModel.project_id == project_id)
            .order_by(TestCaseModel.created_at)
            .offset(skip)
            .limit(limit)
            .all()
        )
        return [TestCase.model_validate(test_case) for test_case in db_test_cases]

    async def create_revision(
        self,
        case_id: str,
        title: str,
        content: TestCaseContent,
        reason: str,
        created_by: str,
    ) -> TestCaseRevision:
        current_rev = (
            self.db.query(func.max(TestCaseRevisionModel.rev))
            .filter(TestCaseRevisionModel.case_stable_id == case_id)
            .scalar()
        ) or 0
        db_revision = TestCaseRevisionModel(
            case_stable_id=case_id,
            rev=current_rev + 1,
            status=RevisionStatus.DRAFT,
            title=title,
            content=content.model_dump(mode="json"),
            reason=reason,
            created_by=created_by,
        )
        self.db.add(db_revision)
        self.db.commit()
        self.db.refresh(db_revision)
        return TestCaseRevision.model_validate(db_revision)

    async def get_revision(self, revision_id: str) -> Optional[TestCaseRevision]:
        db_revision = (
            self.db.query(TestCaseRevisionModel).filter(TestCaseRevisionModel.id == revision_id).first()
        )
        if db_revision:
            return TestCaseRevision.model_validate(db_revision)
        return None

    async def get_revisions(self, revision_ids: Iterable[str]) -> Dict[str, TestCaseRevision]:
        ids = list(set(revision_ids))
        if not ids:
            return {}
        rows = self.db.query(TestCaseRevisionModel).filter(TestCaseRevisionModel.id.in_(ids)).all()
        return {row.id: TestCaseRevision.model_validate(row) for row in rows}

    async def get_latest_revision(self, case_id: str) -> Optional[TestCaseRevision]:
        db_revision = (
            self.db.query(TestCaseRevisionModel)
            .filter(TestCaseRevisionModel.case_stable_id == case_id)
            .order_by(TestCaseRevisionModel.rev.desc())
            .first()
        )
        if db_revision:
            return TestCaseRevision.model_validate(db_revision)
        return None

    async def get_revision_history(
        self, case_id: str, skip: int = 0, limit: Optional[int] = None
    ) -> List[TestCaseRevision]:
        query = (
            self.db.query(TestCaseRevisionModel)
            .filter(TestCaseRevisionModel.case_stable_id == case_id)
            .order_by(TestCaseRevisionModel.rev.desc())
            .offset(skip)
        )
        if limit is not None:
            query = query.limit(limit)
        return [TestCaseRevision.model_validate(r) for r in query.all()]
