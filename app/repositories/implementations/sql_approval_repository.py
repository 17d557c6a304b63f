from typing import List
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from app.core.errors import AlreadyApprovedError
from app.repositories.interfaces.approval_repository import IApprovalRepository
from app.models.database import ApprovalModel
from app.models.schemas import Approval, ApprovalCreate, ApprovalObjectType


class SQLApprovalRepository(IApprovalRepository):
    """SQLAlchemy implementation of the approval repository"""

    def __init__(self, db: Session):
        self.db = db

    async def create(self, approval: ApprovalCreate) -> Approval:
        db_approval = ApprovalModel(
            object_type=approval.object_type,
            object_id=approval.object_id,
            step=approval.step,
            decision=approval.decision,
            approver_id=approval.approver_id,
            comment=approval.comment,
            evidence_links=[link.model_dump() for link in approval.evidence_links],
        )
        self.db.add(db_approval)
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise AlreadyApprovedError(
                approval.object_type.value, approval.object_id, approval.approver_id
            )
        self.db.refresh(db_approval)
        return Approval.model_validate(db_approval)

    async def get_by_object(self, object_type: ApprovalObjectType, object_id: str) -> List[Approval]:
        rows = (
            self.db.query(ApprovalModel)
            .filter(ApprovalModel.object_type == object_type, ApprovalModel.object_id == object_id)
            .order_by(ApprovalModel.step, ApprovalModel.timestamp)
            .all()
        )
        return [Approval.model_validate(r) for r in rows]
