from datetime import datetime
from typing import List, Optional
import structlog

from app.core.errors import ReleaseNotFoundError, WaiverNotFoundError, WaiverValidationError
from app.core.timeutils import to_naive_utc, utcnow
from app.models.schemas import (
    WAIVER_REASON_MIN_LENGTH,
    Waiver,
    WaiverCreate,
    WaiverExpiryReport,
)
from app.repositories.interfaces.release_repository import IReleaseRepository
from app.repositories.interfaces.waiver_repository import IWaiverRepository

logger = structlog.get_logger()


class WaiverService:
    """Time-limited exceptions that let a release pass a failing gate condition"""

    def __init__(self, waiver_repository: IWaiverRepository, release_repository: IReleaseRepository):
        self.waiver_repository = waiver_repository
        self.release_repository = release_repository

    async def issue_waiver(self, release_id: str, waiver: WaiverCreate) -> Waiver:
        if await self.release_repository.get_by_id(release_id) is None:
            raise ReleaseNotFoundError(release_id)

        reason = waiver.reason.strip()
        if len(reason) < WAIVER_REASON_MIN_LENGTH:
            raise WaiverValidationError(
                f"Waiver reason must be at least {WAIVER_REASON_MIN_LENGTH} characters",
                details={"reason": ["too short"]},
            )

        expires_at = to_naive_utc(waiver.expires_at)
        if expires_at <= utcnow():
            raise WaiverValidationError(
                "Waiver expiry must be in the future",
                details={"expires_at": ["must be in the future"]},
            )

        created = await self.waiver_repository.create(
            release_id, waiver.model_copy(update={"reason": reason, "expires_at": expires_at})
        )
        logger.info(
            "Waiver issued",
            waiver_id=created.id,
            release_id=release_id,
            target_type=waiver.target_type.value,
            issuer_id=waiver.issuer_id,
            expires_at=expires_at.isoformat(),
        )
        return created

    async def list_waivers(self, release_id: str) -> List[Waiver]:
        if await self.release_repository.get_by_id(release_id) is None:
            raise ReleaseNotFoundError(release_id)
        return await self.waiver_repository.get_by_release(release_id)

    async def delete_waiver(self, waiver_id: str) -> Waiver:
        waiver = await self.waiver_repository.get_by_id(waiver_id)
        if waiver is None:
            raise WaiverNotFoundError(waiver_id)
        await self.waiver_repository.delete(waiver_id)
        logger.info("Waiver deleted", waiver_id=waiver_id, release_id=waiver.release_id)
        return waiver

    async def check_expired_waivers(
        self, now: Optional[datetime] = None, auto_delete: bool = False
    ) -> WaiverExpiryReport:
        """Report waivers whose expiry has passed, deleting them when asked"""
        checked_at = to_naive_utc(now) if now else utcnow()
        expired = await self.waiver_repository.find_expired(checked_at)

        deleted = 0
        if auto_delete:
            for waiver in expired:
                if await self.waiver_repository.delete(waiver.id):
                    deleted += 1

        logger.info("Waiver expiry checked", expired=len(expired), deleted=deleted)
        return WaiverExpiryReport(expired_waivers=expired, deleted_count=deleted, checked_at=checked_at)
