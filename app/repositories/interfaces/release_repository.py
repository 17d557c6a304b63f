from abc import ABC, abstractmethod
from typing import List, Optional
from app.models.schemas import (
    BaselineCreate,
    Release,
    ReleaseBaseline,
    ReleaseCreate,
    ReleaseStatus,
)


class IReleaseRepository(ABC):
    """Interface for releases and their baselines"""

    @abstractmethod
    async def create(self, release: ReleaseCreate) -> Release:
        pass

    @abstractmethod
    async def get_by_id(self, release_id: str) -> Optional[Release]:
        pass

    @abstractmethod
    async def get_by_project(self, project_id: str) -> List[Release]:
        """Releases of a project, newest first"""

    @abstractmethod
    async def update_status(self, release_id: str, status: ReleaseStatus) -> Release:
        pass

    @abstractmethod
    async def add_baseline(self, release_id: str, baseline: BaselineCreate) -> ReleaseBaseline:
        """Raises DuplicateBaselineError when the list revision is already baselined"""

    @abstractmethod
    async def get_baselines(self, release_id: str) -> List[ReleaseBaseline]:
        pass
