from abc import ABC, abstractmethod
from typing import List, Optional
from app.models.schemas import (
    Project,
    ProjectCreate,
    Requirement,
    RequirementCreate,
    RequirementMapping,
)


class IProjectRepository(ABC):
    """Interface for projects and the requirements they track"""

    @abstractmethod
    async def create(self, project: ProjectCreate) -> Project:
        pass

    @abstractmethod
    async def get_by_id(self, project_id: str) -> Optional[Project]:
        pass

    @abstractmethod
    async def get_all(self, skip: int = 0, limit: int = 100) -> List[Project]:
        pass

    @abstractmethod
    async def create_requirement(self, requirement: RequirementCreate) -> Requirement:
        pass

    @abstractmethod
    async def get_requirement(self, requirement_id: str) -> Optional[Requirement]:
        pass

    @abstractmethod
    async def list_requirements(self, project_id: str) -> List[Requirement]:
        pass

    @abstractmethod
    async def add_requirement_mapping(
        self, requirement_id: str, case_revision_id: str, created_by: str
    ) -> RequirementMapping:
        pass

    @abstractmethod
    async def list_requirement_mappings(self, requirement_id: str) -> List[RequirementMapping]:
        pass
