from typing import List, Optional
import structlog
from app.core.errors import (
    ApprovalValidationError,
    InvalidStatusTransitionError,
    NotApprovableError,
    NotRejectableError,
    RevisionImmutableError,
    RevisionNotFoundError,
)
from app.models.schemas import (
    Approval,
    ApprovalAction,
    ApprovalCreate,
    ApprovalDecision,
    ApprovalObjectType,
    ApprovalRequest,
    ApprovalResult,
    EvidenceLink,
    RevisionRecord,
    RevisionStatus,
)
from app.models.status_rules import can_transition_revision, is_approvable, is_editable
from app.repositories.interfaces.approval_repository import IApprovalRepository
from app.repositories.interfaces.revision_repository import IRevisionRepository

logger = structlog.get_logger()


class ApprovalService:
    """Review workflow for case, scenario and list revisions.

    A revision is submitted from DRAFT to IN_REVIEW. A reviewer then approves
    it (APPROVED) or rejects it with a comment (DEPRECATED). Every decision is
    kept as an Approval record.
    """

    def __init__(
        self,
        revision_repository: IRevisionRepository,
        approval_repository: IApprovalRepository,
    ):
        self.revision_repository = revision_repository
        self.approval_repository = approval_repository

    async def _get_revision(self, object_type: ApprovalObjectType, revision_id: str) -> RevisionRecord:
        if not self.revision_repository.supports(object_type):
            raise ApprovalValidationError(
                f"{object_type.value} does not go through revision review",
                details={"object_type": object_type.value},
            )
        revision = await self.revision_repository.get(object_type, revision_id)
        if revision is None:
            raise RevisionNotFoundError(revision_id)
        return revision

    async def submit_for_review(self, object_type: ApprovalObjectType, revision_id: str) -> RevisionRecord:
        revision = await self._get_revision(object_type, revision_id)

        if not is_editable(revision.status):
            raise RevisionImmutableError(revision_id, revision.status.value)
        if not can_transition_revision(revision.status, RevisionStatus.IN_REVIEW):
            raise InvalidStatusTransitionError(revision.status.value, RevisionStatus.IN_REVIEW.value)

        updated = await self.revision_repository.update_status(
            object_type, revision_id, RevisionStatus.IN_REVIEW
        )
        logger.info("Revision submitted for review", object_type=object_type.value, revision_id=revision_id)
        return updated

    async def approve_revision(
        self,
        object_type: ApprovalObjectType,
        revision_id: str,
        approver_id: str,
        step: int = 1,
        comment: Optional[str] = None,
        evidence_links: Optional[List[EvidenceLink]] = None,
    ) -> ApprovalResult:
        revision = await self._get_revision(object_type, revision_id)
        if not is_approvable(revision.status):
            raise NotApprovableError(revision_id, revision.status.value)

        approval = await self.approval_repository.create(
            ApprovalCreate(
                object_type=object_type,
                object_id=revision_id,
                step=step,
                decision=ApprovalDecision.APPROVED,
                approver_id=approver_id,
                comment=comment,
                evidence_links=evidence_links or [],
            )
        )
        updated = await self.revision_repository.update_status(
            object_type, revision_id, RevisionStatus.APPROVED, approved_by=approver_id
        )
        logger.info(
            "Revision approved",
            object_type=object_type.value,
            revision_id=revision_id,
            approver_id=approver_id,
            approval_id=approval.id,
        )
        return ApprovalResult(approval=approval, revision=updated)

    async def reject_revision(
        self,
        object_type: ApprovalObjectType,
        revision_id: str,
        approver_id: str,
        comment: Optional[str],
        step: int = 1,
        evidence_links: Optional[List[EvidenceLink]] = None,
    ) -> ApprovalResult:
        if not comment or not comment.strip():
            raise ApprovalValidationError(
                "A comment is required when rejecting a revision",
                details={"comment": ["required"]},
            )

        revision = await self._get_revision(object_type, revision_id)
        if not is_approvable(revision.status):
            raise NotRejectableError(revision_id, revision.status.value)

        approval = await self.approval_repository.create(
            ApprovalCreate(
                object_type=object_type,
                object_id=revision_id,
                step=step,
                decision=ApprovalDecision.REJECTED,
                approver_id=approver_id,
                comment=comment.strip(),
                evidence_links=evidence_links or [],
            )
        )
        updated = await self.revision_repository.update_status(
            object_type, revision_id, RevisionStatus.DEPRECATED
        )
        logger.info(
            "Revision rejected",
            object_type=object_type.value,
            revision_id=revision_id,
            approver_id=approver_id,
            approval_id=approval.id,
        )
        return ApprovalResult(approval=approval, revision=updated)

    async def handle_request(self, request: ApprovalRequest) -> ApprovalResult:
        """Dispatch an approve or reject request coming from the API"""
        if request.action == ApprovalAction.APPROVE:
            return await self.approve_revision(
                request.object_type,
                request.revision_id,
                request.approver_id,
                step=request.step,
                comment=request.comment,
                evidence_links=request.evidence_links,
            )
        return await self.reject_revision(
            request.object_type,
            request.revision_id,
            request.approver_id,
            request.comment,
            step=request.step,
            evidence_links=request.evidence_links,
        )

    async def list_approvals(self, object_type: ApprovalObjectType, object_id: str) -> List[Approval]:
        return await self.approval_repository.get_by_object(object_type, object_id)
