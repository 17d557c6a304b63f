from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional
from app.models.schemas import Waiver, WaiverCreate, WaiverTargetType


class IWaiverRepository(ABC):
    """Interface for release waivers"""

    @abstractmethod
    async def create(self, release_id: str, waiver: WaiverCreate) -> Waiver:
        pass

    @abstractmethod
    async def get_by_id(self, waiver_id: str) -> Optional[Waiver]:
        pass

    @abstractmethod
    async def get_by_release(self, release_id: str) -> List[Waiver]:
        """Waivers of a release, newest first"""

    @abstractmethod
    async def find_valid_for_target(
        self,
        release_id: str,
        target_type: WaiverTargetType,
        now: datetime,
        target_id: Optional[str] = None,
    ) -> Optional[Waiver]:
        """Newest waiver of the given type that expires after ``now``.

        ``target_id`` narrows the match to one target; without it any waiver
        of the type counts.
        """

    @abstractmethod
    async def find_expired(self, now: datetime) -> List[Waiver]:
        pass

    @abstractmethod
    async def delete(self, waiver_id: str) -> bool:
        pass
