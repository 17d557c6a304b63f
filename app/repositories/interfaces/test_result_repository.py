from abc import ABC, abstractmethod
from typing import Dict, List
from app.models.schemas import TestResult, TestResultCreate


class ITestResultRepository(ABC):
    """Interface for results recorded against run items"""

    @abstractmethod
    async def create(self, run_item_id: str, result: TestResultCreate) -> TestResult:
        pass

    @abstractmethod
    async def get_by_item(self, run_item_id: str) -> List[TestResult]:
        """Every result of an item, newest first"""

    @abstractmethod
    async def get_latest_by_run(self, run_id: str) -> Dict[str, TestResult]:
        """Latest result per run item id"""
