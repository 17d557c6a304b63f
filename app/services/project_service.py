from typing import List, Optional
import structlog
from app.core.errors import ProjectNotFoundError, RequirementNotFoundError, RevisionNotFoundError
from app.models.schemas import (
    Project,
    ProjectCreate,
    Requirement,
    RequirementCreate,
    RequirementMapping,
    RequirementMappingCreate,
)
from app.repositories.interfaces.project_repository import IProjectRepository
from app.repositories.interfaces.test_case_repository import ITestCaseRepository

logger = structlog.get_logger()


class ProjectService:
    """Projects, their requirements and requirement-to-test mappings"""

    def __init__(
        self,
        project_repository: IProjectRepository,
        test_case_repository: ITestCaseRepository,
    ):
        self.project_repository = project_repository
        self.test_case_repository = test_case_repository

    async def create_project(self, project: ProjectCreate) -> Project:
        created = await self.project_repository.create(project)
        logger.info("Project created", project_id=created.id, name=created.name)
        return created

    async def get_project(self, project_id: str) -> Optional[Project]:
        return await self.project_repository.get_by_id(project_id)

    async def list_projects(self, skip: int = 0, limit: int = 100) -> List[Project]:
        return await self.project_repository.get_all(skip=skip, limit=limit)

    async def create_requirement(self, requirement: RequirementCreate) -> Requirement:
        if not await self.project_repository.get_by_id(requirement.project_id):
            raise ProjectNotFoundError(requirement.project_id)
        created = await self.project_repository.create_requirement(requirement)
        logger.info("Requirement created", requirement_id=created.id, project_id=created.project_id)
        return created

    async def list_requirements(self, project_id: str) -> List[Requirement]:
        return await self.project_repository.list_requirements(project_id)

    async def map_requirement(
        self, requirement_id: str, mapping: RequirementMappingCreate
    ) -> RequirementMapping:
        if not await self.project_repository.get_requirement(requirement_id):
            raise RequirementNotFoundError(requirement_id)
        if not await self.test_case_repository.get_revision(mapping.case_revision_id):
            raise RevisionNotFoundError(mapping.case_revision_id)

        created = await self.project_repository.add_requirement_mapping(
            requirement_id, mapping.case_revision_id, mapping.created_by
        )
        logger.info(
            "Requirement mapped",
            requirement_id=requirement_id,
            case_revision_id=mapping.case_revision_id,
        )
        return created

    async def list_requirement_mappings(self, requirement_id: str) -> List[RequirementMapping]:
        if not await self.project_repository.get_requirement(requirement_id):
            raise RequirementNotFoundError(requirement_id)
        return await self.project_repository.list_requirement_mappings(requirement_id)
