from abc import ABC, abstractmethod
from typing import List
from app.models.schemas import Approval, ApprovalCreate, ApprovalObjectType


class IApprovalRepository(ABC):
    """Interface for recorded approval decisions"""

    @abstractmethod
    async def create(self, approval: ApprovalCreate) -> Approval:
        """Persist a decision; raises AlreadyApprovedError on a repeated step"""

    @abstractmethod
    async def get_by_object(self, object_type: ApprovalObjectType, object_id: str) -> List[Approval]:
        pass
