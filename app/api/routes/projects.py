from fastapi import APIRouter, Depends, status

from app.models.schemas import (
    DataResponse,
    ListMeta,
    ListResponse,
    Project,
    ProjectCreate,
    Requirement,
    RequirementCreate,
    RequirementMapping,
    RequirementMappingCreate,
)
from app.services.project_service import ProjectService
from app.core.dependencies import get_project_service
from app.core.errors import ProjectNotFoundError

router = APIRouter(prefix="/projects", tags=["projects"])
requirements_router = APIRouter(prefix="/requirements", tags=["requirements"])


@router.post("", response_model=DataResponse[Project], status_code=status.HTTP_201_CREATED)
async def create_project(
    request: ProjectCreate,
    service: ProjectService = Depends(get_project_service)
):
    """Create a project"""
    project = await service.create_project(request)
    return DataResponse(data=project, message="Project created")


@router.get("", response_model=ListResponse[Project])
async def list_projects(
    skip: int = 0,
    limit: int = 100,
    service: ProjectService = Depends(get_project_service)
):
    projects = await service.list_projects(skip=skip, limit=limit)
    return ListResponse(data=projects, meta=ListMeta(count=len(projects)))


@router.get("/{project_id}", response_model=DataResponse[Project])
async def get_project(
    project_id: str,
    service: ProjectService = Depends(get_project_service)
):
    project = await service.get_project(project_id)
    if not project:
        raise ProjectNotFoundError(project_id)
    return DataResponse(data=project)


@router.get("/{project_id}/requirements", response_model=ListResponse[Requirement])
async def list_requirements(
    project_id: str,
    service: ProjectService = Depends(get_project_service)
):
    """Requirements of a project"""
    requirements = await service.list_requirements(project_id)
    return ListResponse(data=requirements, meta=ListMeta(count=len(requirements)))


@requirements_router.post("", response_model=DataResponse[Requirement], status_code=status.HTTP_201_CREATED)
async def create_requirement(
    request: RequirementCreate,
    service: ProjectService = Depends(get_project_service)
):
    requirement = await service.create_requirement(request)
    return DataResponse(data=requirement, message="Requirement created")


@requirements_router.post(
    "/{requirement_id}/mappings",
    response_model=DataResponse[RequirementMapping],
    status_code=status.HTTP_201_CREATED,
)
async def map_requirement(
    requirement_id: str,
    request: RequirementMappingCreate,
    service: ProjectService = Depends(get_project_service)
):
    """Map a requirement to the case revision that covers it"""
    mapping = await service.map_requirement(requirement_id, request)
    return DataResponse(data=mapping, message="Requirement mapped")


@requirements_router.get("/{requirement_id}/mappings", response_model=ListResponse[RequirementMapping])
async def list_requirement_mappings(
    requirement_id: str,
    service: ProjectService = Depends(get_project_service)
):
    mappings = await service.list_requirement_mappings(requirement_id)
    return ListResponse(data=mappings, meta=ListMeta(count=len(mappings)))
