from fastapi import APIRouter, Depends, status

from app.models.schemas import (
    ApprovalObjectType,
    DataResponse,
    RevisionRecord,
    TestScenarioCreate,
    TestScenarioListCreate,
    TestScenarioListRevision,
    TestScenarioRevision,
)
from app.services.approval_service import ApprovalService
from app.services.test_scenario_service import TestScenarioService
from app.core.dependencies import get_approval_service, get_test_scenario_service
from app.core.errors import ListRevisionNotFoundError, ScenarioRevisionNotFoundError

router = APIRouter(prefix="/test-scenarios", tags=["test-scenarios"])
lists_router = APIRouter(prefix="/test-scenario-lists", tags=["test-scenario-lists"])


@router.post("", response_model=DataResponse[TestScenarioRevision], status_code=status.HTTP_201_CREATED)
async def create_scenario(
    request: TestScenarioCreate,
    service: TestScenarioService = Depends(get_test_scenario_service)
):
    """Create a scenario and its first revision from ordered case revisions"""
    revision = await service.create_scenario(request)
    return DataResponse(data=revision, message="Test scenario created")


@router.get("/revisions/{revision_id}", response_model=DataResponse[TestScenarioRevision])
async def get_scenario_revision(
    revision_id: str,
    service: TestScenarioService = Depends(get_test_scenario_service)
):
    revision = await service.get_scenario_revision(revision_id)
    if not revision:
        raise ScenarioRevisionNotFoundError(revision_id)
    return DataResponse(data=revision)


@router.post("/revisions/{revision_id}/submit-for-review", response_model=DataResponse[RevisionRecord])
async def submit_scenario_for_review(
    revision_id: str,
    service: ApprovalService = Depends(get_approval_service)
):
    revision = await service.submit_for_review(ApprovalObjectType.SCENARIO_REVISION, revision_id)
    return DataResponse(data=revision, message="Revision submitted for review")


@lists_router.post("", response_model=DataResponse[TestScenarioListRevision], status_code=status.HTTP_201_CREATED)
async def create_scenario_list(
    request: TestScenarioListCreate,
    service: TestScenarioService = Depends(get_test_scenario_service)
):
    """Create a scenario list and its first revision"""
    revision = await service.create_scenario_list(request)
    return DataResponse(data=revision, message="Test scenario list created")


@lists_router.get("/revisions/{revision_id}", response_model=DataResponse[TestScenarioListRevision])
async def get_list_revision(
    revision_id: str,
    service: TestScenarioService = Depends(get_test_scenario_service)
):
    revision = await service.get_list_revision(revision_id)
    if not revision:
        raise ListRevisionNotFoundError(revision_id)
    return DataResponse(data=revision)


@lists_router.post("/revisions/{revision_id}/submit-for-review", response_model=DataResponse[RevisionRecord])
async def submit_list_for_review(
    revision_id: str,
    service: ApprovalService = Depends(get_approval_service)
):
    revision = await service.submit_for_review(ApprovalObjectType.LIST_REVISION, revision_id)
    return DataResponse(data=revision, message="Revision submitted for review")
