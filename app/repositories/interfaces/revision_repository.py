from abc import ABC, abstractmethod
from typing import Optional
from app.models.schemas import ApprovalObjectType, RevisionRecord, RevisionStatus


class IRevisionRepository(ABC):
    """Status access shared by every revisioned object that goes through review"""

    @abstractmethod
    def supports(self, object_type: ApprovalObjectType) -> bool:
        pass

    @abstractmethod
    async def get(self, object_type: ApprovalObjectType, revision_id: str) -> Optional[RevisionRecord]:
        pass

    @abstractmethod
    async def update_status(
        self,
        object_type: ApprovalObjectType,
        revision_id: str,
        status: RevisionStatus,
        approved_by: Optional[str] = None,
    ) -> RevisionRecord:
        pass
