from typing import List, Optional, Sequence
import structlog

from app.config.settings import settings
from app.core.errors import (
    GateViolationError,
    InvalidReleaseStatusError,
    ListRevisionNotFoundError,
    ProjectNotFoundError,
    ReleaseNotFoundError,
)
from app.core.timeutils import utcnow
from app.models.schemas import (
    ApprovalCreate,
    ApprovalDecision,
    ApprovalObjectType,
    BaselineCreate,
    GateCondition,
    GateConditionType,
    GateEvaluation,
    GateViolation,
    Release,
    ReleaseApproval,
    ReleaseBaseline,
    ReleaseCreate,
    ReleaseStatus,
    ReleaseSummary,
)
from app.models.status_rules import (
    DEFAULT_GATE_CONDITIONS,
    can_transition_release,
    is_release_approvable,
    is_release_evaluatable,
    waiver_targets_for,
)
from app.repositories.interfaces.approval_repository import IApprovalRepository
from app.repositories.interfaces.gate_evaluation_service import IGateEvaluationService
from app.repositories.interfaces.project_repository import IProjectRepository
from app.repositories.interfaces.release_repository import IReleaseRepository
from app.repositories.interfaces.test_scenario_repository import ITestScenarioRepository
from app.repositories.interfaces.waiver_repository import IWaiverRepository

logger = structlog.get_logger()


def default_gate_conditions() -> List[GateCondition]:
    """The standard gate, with the coverage threshold taken from settings"""
    conditions = []
    for condition in DEFAULT_GATE_CONDITIONS:
        if condition.type == GateConditionType.MIN_TEST_COVERAGE:
            condition = condition.model_copy(
                update={
                    "threshold": settings.gate_min_coverage,
                    "description": f"Requirement coverage is at least {settings.gate_min_coverage:g}%",
                }
            )
        conditions.append(condition)
    return conditions


class ReleaseGateService:
    """Releases, their baselines and the gate a release passes before shipping.

    Gate checks themselves live behind ``IGateEvaluationService``; this
    service decides which conditions apply, attaches waivers to the
    violations and drives the release through GATE_CHECK and approval.
    """

    def __init__(
        self,
        release_repository: IReleaseRepository,
        project_repository: IProjectRepository,
        scenario_repository: ITestScenarioRepository,
        waiver_repository: IWaiverRepository,
        approval_repository: IApprovalRepository,
        gate_evaluation_service: IGateEvaluationService,
    ):
        self.release_repository = release_repository
        self.project_repository = project_repository
        self.scenario_repository = scenario_repository
        self.waiver_repository = waiver_repository
        self.approval_repository = approval_repository
        self.gate_evaluation_service = gate_evaluation_service

    async def create_release(self, release: ReleaseCreate) -> Release:
        if await self.project_repository.get_by_id(release.project_id) is None:
            raise ProjectNotFoundError(release.project_id)

        created = await self.release_repository.create(release)
        logger.info("Release created", release_id=created.id, project_id=release.project_id, name=release.name)
        return created

    async def get_release(self, release_id: str) -> Release:
        release = await self.release_repository.get_by_id(release_id)
        if release is None:
            raise ReleaseNotFoundError(release_id)
        return release

    async def get_release_summary(self, release_id: str) -> ReleaseSummary:
        release = await self.get_release(release_id)
        baselines = await self.release_repository.get_baselines(release_id)
        return ReleaseSummary(release=release, baselines=baselines)

    async def list_releases(self, project_id: str) -> List[Release]:
        return await self.release_repository.get_by_project(project_id)

    async def update_release_status(self, release_id: str, status: ReleaseStatus) -> Release:
        release = await self.get_release(release_id)
        if not can_transition_release(release.status, status):
            raise InvalidReleaseStatusError(
                release_id,
                release.status.value,
                " or ".join(sorted(s.value for s in ReleaseStatus if can_transition_release(release.status, s)))
                or "no further transition",
            )

        updated = await self.release_repository.update_status(release_id, status)
        logger.info("Release status changed", release_id=release_id, old=release.status.value, new=status.value)
        return updated

    async def set_baseline(self, release_id: str, baseline: BaselineCreate) -> ReleaseBaseline:
        release = await self.get_release(release_id)
        if release.status == ReleaseStatus.RELEASED:
            raise InvalidReleaseStatusError(release_id, release.status.value, "a release that is not RELEASED")

        if await self.scenario_repository.get_list_revision(baseline.source_list_revision_id) is None:
            raise ListRevisionNotFoundError(baseline.source_list_revision_id)

        created = await self.release_repository.add_baseline(release_id, baseline)
        if release.status == ReleaseStatus.PLANNING:
            await self.release_repository.update_status(release_id, ReleaseStatus.EXECUTING)

        logger.info(
            "Release baseline set",
            release_id=release_id,
            list_revision_id=baseline.source_list_revision_id,
        )
        return created

    async def list_baselines(self, release_id: str) -> List[ReleaseBaseline]:
        await self.get_release(release_id)
        return await self.release_repository.get_baselines(release_id)

    async def _attach_waivers(self, release_id: str, violations: List[GateViolation]) -> List[GateViolation]:
        now = utcnow()
        for violation in violations:
            for target_type in waiver_targets_for(violation.condition_type):
                waiver = await self.waiver_repository.find_valid_for_target(release_id, target_type, now)
                if waiver is not None:
                    violation.has_waiver = True
                    violation.waiver_id = waiver.id
                    break
        return violations

    async def _evaluate(self, release: Release, conditions: Sequence[GateCondition]) -> GateEvaluation:
        violations = await self.gate_evaluation_service.evaluate(release.id, conditions)
        violations = await self._attach_waivers(release.id, violations)
        passed = not any(v.is_blocking for v in violations)
        return GateEvaluation(
            release_id=release.id,
            conditions=list(conditions),
            violations=violations,
            passed=passed,
            evaluated_at=utcnow(),
        )

    async def evaluate_gate(
        self, release_id: str, conditions: Optional[Sequence[GateCondition]] = None
    ) -> GateEvaluation:
        release = await self.get_release(release_id)
        if not is_release_evaluatable(release.status):
            raise InvalidReleaseStatusError(
                release_id,
                release.status.value,
                f"{ReleaseStatus.EXECUTING.value} or {ReleaseStatus.GATE_CHECK.value}",
            )

        evaluation = await self._evaluate(release, conditions or default_gate_conditions())
        if release.status == ReleaseStatus.EXECUTING:
            await self.release_repository.update_status(release_id, ReleaseStatus.GATE_CHECK)

        logger.info(
            "Release gate evaluated",
            release_id=release_id,
            passed=evaluation.passed,
            violations=len(evaluation.violations),
        )
        return evaluation

    async def approve_release(
        self,
        release_id: str,
        approver_id: str,
        comment: Optional[str] = None,
        conditions: Optional[Sequence[GateCondition]] = None,
    ) -> ReleaseApproval:
        release = await self.get_release(release_id)
        if not is_release_approvable(release.status):
            raise InvalidReleaseStatusError(release_id, release.status.value, ReleaseStatus.GATE_CHECK.value)

        evaluation = await self._evaluate(release, conditions or default_gate_conditions())
        blocking = [v for v in evaluation.violations if v.is_blocking]
        if blocking:
            logger.warning("Release approval blocked by gate", release_id=release_id, blocking=len(blocking))
            raise GateViolationError([v.model_dump(mode="json") for v in blocking])

        approval = await self.approval_repository.create(
            ApprovalCreate(
                object_type=ApprovalObjectType.RELEASE,
                object_id=release_id,
                decision=ApprovalDecision.APPROVED,
                approver_id=approver_id,
                comment=comment,
            )
        )
        approved = await self.release_repository.update_status(release_id, ReleaseStatus.APPROVED_FOR_RELEASE)
        logger.info("Release approved", release_id=release_id, approver_id=approver_id, approval_id=approval.id)
        return ReleaseApproval(release=approved, approval=approval, evaluation=evaluation)
