from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional
from app.models.schemas import (
    RunGroupStatus,
    TestRun,
    TestRunCreate,
    TestRunGroup,
    TestRunGroupCreate,
    TestRunItem,
    TestRunItemPlan,
    TestRunStatus,
)


class ITestRunRepository(ABC):
    """Interface for run groups, runs and run items"""

    @abstractmethod
    async def create_group(self, group: TestRunGroupCreate) -> TestRunGroup:
        pass

    @abstractmethod
    async def get_group(self, group_id: str) -> Optional[TestRunGroup]:
        pass

    @abstractmethod
    async def get_groups_by_release(self, release_id: str) -> List[TestRunGroup]:
        pass

    @abstractmethod
    async def update_group_status(self, group_id: str, status: RunGroupStatus) -> TestRunGroup:
        pass

    @abstractmethod
    async def create_run(self, run: TestRunCreate, items: List[TestRunItemPlan]) -> TestRun:
        """Write the run and all of its items in a single transaction"""

    @abstractmethod
    async def get_run(self, run_id: str) -> Optional[TestRun]:
        pass

    @abstractmethod
    async def get_runs_by_group(self, group_id: str) -> List[TestRun]:
        pass

    @abstractmethod
    async def update_run_status(
        self,
        run_id: str,
        status: TestRunStatus,
        started_at: Optional[datetime] = None,
        completed_at: Optional[datetime] = None,
    ) -> TestRun:
        pass

    @abstractmethod
    async def get_items(self, run_id: str) -> List[TestRunItem]:
        pass

    @abstractmethod
    async def get_item(self, item_id: str) -> Optional[TestRunItem]:
        pass
