from typing import Optional
from sqlalchemy.orm import Session
from app.core.errors import RevisionNotFoundError
from app.repositories.interfaces.revision_repository import IRevisionRepository
from app.models.database import (
    TestCaseRevisionModel,
    TestScenarioListRevisionModel,
    TestScenarioRevisionModel,
)
from app.models.schemas import ApprovalObjectType, RevisionRecord, RevisionStatus

# object type -> (ORM model, column holding the stable id of the parent)
_REVISION_MODELS = {
    ApprovalObjectType.CASE_REVISION: (TestCaseRevisionModel, "case_stable_id"),
    ApprovalObjectType.SCENARIO_REVISION: (TestScenarioRevisionModel, "scenario_stable_id"),
    ApprovalObjectType.LIST_REVISION: (TestScenarioListRevisionModel, "list_stable_id"),
}


class SQLRevisionRepository(IRevisionRepository):
    """Reads and updates the review status of case, scenario and list revisions"""

    def __init__(self, db: Session):
        self.db = db

    def supports(self, object_type: ApprovalObjectType) -> bool:
        return object_type in _REVISION_MODELS

    async def get(self, object_type: ApprovalObjectType, revision_id: str) -> Optional[RevisionRecord]:
        row = self._find(object_type, revision_id)
        if row is None:
            return None
        return self._to_record(object_type, row)

    async def update_status(
        self,
        object_type: ApprovalObjectType,
        revision_id: str,
        status: RevisionStatus,
        approved_by: Optional[str] = None,
    ) -> RevisionRecord:
        row = self._find(object_type, revision_id)
        if row is None:
            raise RevisionNotFoundError(revision_id)

        row.status = status
        if approved_by is not None:
            row.approved_by = approved_by
        self.db.commit()
        self.db.refresh(row)
        return self._to_record(object_type, row)

    def _find(self, object_type: ApprovalObjectType, revision_id: str):
        if object_type not in _REVISION_MODELS:
            return None
        model, _ = _REVISION_MODELS[object_type]
        return self.db.query(model).filter(model.id == revision_id).first()

    @staticmethod
    def _to_record(object_type: ApprovalObjectType, row) -> RevisionRecord:
        _, parent_column = _REVISION_MODELS[object_type]
        return RevisionRecord(
            id=row.id,
            object_type=object_type,
            parent_id=getattr(row, parent_column),
            rev=row.rev,
            status=row.status,
            title=row.title,
            created_by=row.created_by,
            approved_by=row.approved_by,
            created_at=row.created_at,
            updated_at=row.updated_at,
        )
