from abc import ABC, abstractmethod
from typing import List, Sequence
from app.models.schemas import GateCondition, GateViolation


class IGateEvaluationService(ABC):
    """Interface for checking release gate conditions against recorded data"""

    @abstractmethod
    async def evaluate(self, release_id: str, conditions: Sequence[GateCondition]) -> List[GateViolation]:
        """Violations of ``conditions``, without waiver information"""

    @abstractmethod
    async def calculate_coverage(self, release_id: str) -> float:
        pass
