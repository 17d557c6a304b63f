from fastapi import APIRouter, Depends, Query, status

from app.models.schemas import (
    ApprovalObjectType,
    DataResponse,
    ListMeta,
    ListResponse,
    RevisionRecord,
    TestCaseCreate,
    TestCaseRevision,
    TestCaseRevisionCreate,
    TestCaseWithLatestRevision,
)
from app.services.approval_service import ApprovalService
from app.services.test_case_service import TestCaseService
from app.core.dependencies import get_approval_service, get_test_case_service
from app.core.errors import RevisionNotFoundError, TestCaseNotFoundError

router = APIRouter(prefix="/test-cases", tags=["test-cases"])


@router.post("", response_model=DataResponse[TestCaseWithLatestRevision], status_code=status.HTTP_201_CREATED)
async def create_test_case(
    request: TestCaseCreate,
    service: TestCaseService = Depends(get_test_case_service)
):
    """Create a test case together with its first DRAFT revision"""
    created = await service.create_test_case(request)
    return DataResponse(data=created, message="Test case created")


@router.get("", response_model=ListResponse[TestCaseWithLatestRevision])
async def list_test_cases(
    project_id: str = Query(..., min_length=1),
    skip: int = 0,
    limit: int = 100,
    service: TestCaseService = Depends(get_test_case_service)
):
    """Test cases of a project, each with its latest revision"""
    test_cases = await service.list_test_cases(project_id, skip=skip, limit=limit)
    return ListResponse(data=test_cases, meta=ListMeta(count=len(test_cases)))


@router.get("/revisions/{revision_id}", response_model=DataResponse[TestCaseRevision])
async def get_revision(
    revision_id: str,
    service: TestCaseService = Depends(get_test_case_service)
):
    revision = await service.get_revision(revision_id)
    if not revision:
        raise RevisionNotFoundError(revision_id)
    return DataResponse(data=revision)


@router.post("/revisions/{revision_id}/submit-for-review", response_model=DataResponse[RevisionRecord])
async def submit_revision_for_review(
    revision_id: str,
    service: ApprovalService = Depends(get_approval_service)
):
    """Move a DRAFT case revision to IN_REVIEW"""
    revision = await service.submit_for_review(ApprovalObjectType.CASE_REVISION, revision_id)
    return DataResponse(data=revision, message="Revision submitted for review")


@router.get("/{test_case_id}", response_model=DataResponse[TestCaseWithLatestRevision])
async def get_test_case(
    test_case_id: str,
    service: TestCaseService = Depends(get_test_case_service)
):
    """Get a test case by ID"""
    test_case = await service.get_test_case(test_case_id)
    if not test_case:
        raise TestCaseNotFoundError(test_case_id)
    return DataResponse(data=test_case)


@router.post(
    "/{test_case_id}/revisions",
    response_model=DataResponse[TestCaseRevision],
    status_code=status.HTTP_201_CREATED,
)
async def create_revision(
    test_case_id: str,
    request: TestCaseRevisionCreate,
    service: TestCaseService = Depends(get_test_case_service)
):
    revision = await service.create_revision(test_case_id, request)
    return DataResponse(data=revision, message="Revision created")


@router.get("/{test_case_id}/revisions", response_model=ListResponse[TestCaseRevision])
async def get_revision_history(
    test_case_id: str,
    skip: int = 0,
    limit: int = Query(100, ge=1, le=500),
    service: TestCaseService = Depends(get_test_case_service)
):
    """Revision history, newest first"""
    revisions = await service.get_revision_history(test_case_id, skip=skip, limit=limit)
    # latest is the highest rev of the case, not of this page
    latest_revision = await service.get_latest_revision(test_case_id)
    latest = latest_revision.rev if latest_revision else None
    return ListResponse(data=revisions, meta=ListMeta(count=len(revisions), latest=latest))
