from fastapi import APIRouter, Depends, Query, status
import structlog

from app.models.schemas import (
    BaselineCreate,
    DataResponse,
    GateEvaluation,
    GateEvaluationRequest,
    ListMeta,
    ListResponse,
    Release,
    ReleaseApproval,
    ReleaseBaseline,
    ReleaseCreate,
    ReleaseStatusUpdate,
    ReleaseSummary,
    Waiver,
    WaiverCreate,
)
from app.services.release_gate_service import ReleaseGateService
from app.services.waiver_service import WaiverService
from app.core.dependencies import get_release_gate_service, get_waiver_service
from app.core.errors import ApprovalValidationError

logger = structlog.get_logger()

router = APIRouter(prefix="/releases", tags=["releases"])


@router.post("", response_model=DataResponse[Release], status_code=status.HTTP_201_CREATED)
async def create_release(
    request: ReleaseCreate,
    service: ReleaseGateService = Depends(get_release_gate_service)
):
    release = await service.create_release(request)
    return DataResponse(data=release, message="Release created")


@router.get("", response_model=ListResponse[Release])
async def list_releases(
    project_id: str = Query(..., min_length=1),
    service: ReleaseGateService = Depends(get_release_gate_service)
):
    """Releases of a project, newest first"""
    releases = await service.list_releases(project_id)
    return ListResponse(data=releases, meta=ListMeta(count=len(releases)))


@router.get("/{release_id}", response_model=DataResponse[ReleaseSummary])
async def get_release(
    release_id: str,
    service: ReleaseGateService = Depends(get_release_gate_service)
):
    summary = await service.get_release_summary(release_id)
    return DataResponse(data=summary)


@router.patch("/{release_id}/status", response_model=DataResponse[Release])
async def update_release_status(
    release_id: str,
    request: ReleaseStatusUpdate,
    service: ReleaseGateService = Depends(get_release_gate_service)
):
    release = await service.update_release_status(release_id, request.status)
    return DataResponse(data=release, message=f"Release moved to {release.status.value}")


@router.post(
    "/{release_id}/baselines",
    response_model=DataResponse[ReleaseBaseline],
    status_code=status.HTTP_201_CREATED,
)
async def set_baseline(
    release_id: str,
    request: BaselineCreate,
    service: ReleaseGateService = Depends(get_release_gate_service)
):
    """Pin a scenario list revision as the release's test baseline"""
    baseline = await service.set_baseline(release_id, request)
    return DataResponse(data=baseline, message="Baseline set")


@router.get("/{release_id}/baselines", response_model=ListResponse[ReleaseBaseline])
async def list_baselines(
    release_id: str,
    service: ReleaseGateService = Depends(get_release_gate_service)
):
    baselines = await service.list_baselines(release_id)
    return ListResponse(data=baselines, meta=ListMeta(count=len(baselines)))


@router.post("/{release_id}/gate-evaluation")
async def gate_evaluation(
    release_id: str,
    request: GateEvaluationRequest,
    service: ReleaseGateService = Depends(get_release_gate_service)
):
    """Evaluate the release gate, or evaluate and approve the release"""
    if request.action == "approve":
        if not request.approver_id:
            raise ApprovalValidationError(
                "approver_id is required to approve a release",
                details={"approver_id": ["required"]},
            )
        logger.info("Release approval requested", release_id=release_id, approver_id=request.approver_id)
        approval = await service.approve_release(
            release_id, request.approver_id, comment=request.comment, conditions=request.conditions
        )
        return DataResponse[ReleaseApproval](data=approval, message="Release approved")

    evaluation = await service.evaluate_gate(release_id, request.conditions)
    message = "Gate passed" if evaluation.passed else "Gate has blocking violations"
    return DataResponse[GateEvaluation](data=evaluation, message=message)


@router.post("/{release_id}/waivers", response_model=DataResponse[Waiver], status_code=status.HTTP_201_CREATED)
async def issue_waiver(
    release_id: str,
    request: WaiverCreate,
    service: WaiverService = Depends(get_waiver_service)
):
    waiver = await service.issue_waiver(release_id, request)
    return DataResponse(data=waiver, message="Waiver issued")


@router.get("/{release_id}/waivers", response_model=ListResponse[Waiver])
async def list_waivers(
    release_id: str,
    service: WaiverService = Depends(get_waiver_service)
):
    waivers = await service.list_waivers(release_id)
    return ListResponse(data=waivers, meta=ListMeta(count=len(waivers)))
