from typing import List, Optional
from sqlalchemy.orm import Session
from app.repositories.interfaces.test_scenario_repository import ITestScenarioRepository
from app.models.database import (
    TestScenarioItemModel,
    TestScenarioListItemModel,
    TestScenarioListModel,
    TestScenarioListRevisionModel,
    TestScenarioModel,
    TestScenarioRevisionModel,
)
from app.models.schemas import (
    RevisionStatus,
    TestScenarioCreate,
    TestScenarioListCreate,
    TestScenarioListRevision,
    TestScenarioRevision,
)

INITIAL_REVISION_REASON = "Initial version"


class SQLTestScenarioRepository(ITestScenarioRepository):
    """SQLAlchemy implementation of the scenario and scenario list repository"""

    def __init__(self, db: Session):
        self.db = db

    async def create_scenario(self, scenario: TestScenarioCreate) -> TestScenarioRevision:
        db_scenario = TestScenarioModel(project_id=scenario.project_id, created_by=scenario.created_by)
        self.db.add(db_scenario)
        # Assigns the stable id used by the first revision
        self.db.flush()

        db_revision = TestScenarioRevisionModel(
            scenario_stable_id=db_scenario.id,
            rev=1,
            status=RevisionStatus.DRAFT,
            title=scenario.title,
            description=scenario.description,
            reason=scenario.reason or INITIAL_REVISION_REASON,
            created_by=scenario.created_by,
            items=[TestScenarioItemModel(**item.model_dump()) for item in scenario.items],
        )
        self.db.add(db_revision)
        self.db.commit()
        self.db.refresh(db_revision)
        return TestScenarioRevision.model_validate(db_revision)

    async def get_scenario_revision(self, revision_id: str) -> Optional[TestScenarioRevision]:
        db_revision = (
            self.db.query(TestScenarioRevisionModel)
            .filter(TestScenarioRevisionModel.id == revision_id)
            .first()
        )
        if db_revision:
            return TestScenarioRevision.model_validate(db_revision)
        return None

    async def get_scenario_revisions(self, revision_ids: List[str]) -> List[TestScenarioRevision]:
        if not revision_ids:
            return []
        rows = (
            self.db.query(TestScenarioRevisionModel)
            .filter(TestScenarioRevisionModel.id.in_(set(revision_ids)))
            .all()
        )
        return [TestScenarioRevision.model_validate(r) for r in rows]

    async def create_list(self, scenario_list: TestScenarioListCreate) -> TestScenarioListRevision:
        db_list = TestScenarioListModel(
            project_id=scenario_list.project_id, created_by=scenario_list.created_by
        )
        self.db.add(db_list)
        self.db.flush()

        db_revision = TestScenarioListRevisionModel(
            list_stable_id=db_list.id,
            rev=1,
            status=RevisionStatus.DRAFT,
            title=scenario_list.title,
            description=scenario_list.description,
            reason=scenario_list.reason or INITIAL_REVISION_REASON,
            created_by=scenario_list.created_by,
            items=[TestScenarioListItemModel(**item.model_dump()) for item in scenario_list.items],
        )
        self.db.add(db_revision)
        self.db.commit()
        self.db.refresh(db_revision)
        return TestScenarioListRevision.model_validate(db_revision)

    async def get_list_revision(self, revision_id: str) -> Optional[TestScenarioListRevision]:
        db_revision = (
            self.db.query(TestScenarioListRevisionModel)
            .filter(TestScenarioListRevisionModel.id == revision_id)
            .first()
        )
        if db_revision:
            return TestScenarioListRevision.model_validate(db_revision)
        return None
