from fastapi import APIRouter, Depends, status
import structlog

from app.models.schemas import (
    Approval,
    ApprovalObjectType,
    ApprovalRequest,
    ApprovalResult,
    DataResponse,
    ListMeta,
    ListResponse,
    RevisionStatus,
)
from app.services.approval_service import ApprovalService
from app.core.dependencies import get_approval_service
from app.core.security import Principal, get_current_principal

logger = structlog.get_logger()

router = APIRouter(prefix="/approvals", tags=["approvals"])


@router.post("", response_model=DataResponse[ApprovalResult], status_code=status.HTTP_201_CREATED)
async def submit_approval(
    request: ApprovalRequest,
    service: ApprovalService = Depends(get_approval_service),
    principal: Principal = Depends(get_current_principal)
):
    """Approve or reject a revision that is IN_REVIEW"""
    if principal.authenticated and principal.user_id != request.approver_id:
        logger.info(
            "Approval recorded on behalf of another user",
            principal=principal.user_id,
            approver_id=request.approver_id,
        )
    result = await service.handle_request(request)
    message = "Revision approved" if result.revision.status == RevisionStatus.APPROVED else "Revision rejected"
    return DataResponse(data=result, message=message)


@router.get("", response_model=ListResponse[Approval])
async def list_approvals(
    object_type: ApprovalObjectType,
    object_id: str,
    service: ApprovalService = Depends(get_approval_service)
):
    """Decision history of one object, oldest first"""
    approvals = await service.list_approvals(object_type, object_id)
    return ListResponse(data=approvals, meta=ListMeta(count=len(approvals)))
