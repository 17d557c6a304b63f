from typing import Dict, List, Optional, Sequence, Set
import structlog
from sqlalchemy.orm import Session

from app.config.settings import settings
from app.core.errors import ReleaseNotFoundError
from app.repositories.interfaces.gate_evaluation_service import IGateEvaluationService
from app.models.database import (
    ReleaseBaselineModel,
    ReleaseModel,
    RequirementMappingModel,
    RequirementModel,
    TestCaseModel,
    TestCaseRevisionModel,
    TestResultModel,
    TestRunGroupModel,
    TestRunItemModel,
    TestRunModel,
    TestScenarioItemModel,
    TestScenarioListItemModel,
    TestScenarioListModel,
    TestScenarioListRevisionModel,
    TestScenarioModel,
    TestScenarioRevisionModel,
)
from app.models.schemas import (
    BugSeverity,
    GateCondition,
    GateConditionType,
    GateViolation,
    GateViolationDetails,
    ResultStatus,
    RevisionStatus,
    ViolationSeverity,
)

logger = structlog.get_logger()

BLOCKING_BUG_SEVERITIES = {BugSeverity.CRITICAL.value, BugSeverity.HIGH.value}
PENDING_REVISION_STATUSES = (RevisionStatus.IN_REVIEW, RevisionStatus.DEPRECATED)


class SQLGateEvaluationService(IGateEvaluationService):
    """Evaluates release gate conditions with direct queries over the execution data"""

    def __init__(self, db: Session):
        self.db = db

    async def evaluate(self, release_id: str, conditions: Sequence[GateCondition]) -> List[GateViolation]:
        release = self._get_release(release_id)
        violations = []
        for condition in conditions:
            violation = self._check(release, condition)
            if violation is not None:
                violations.append(violation)

        logger.info(
            "Gate conditions evaluated",
            release_id=release_id,
            conditions=len(conditions),
            violations=len(violations),
        )
        return violations

    async def calculate_coverage(self, release_id: str) -> float:
        release = self._get_release(release_id)
        coverage, _ = self._coverage(release)
        return coverage

    def _get_release(self, release_id: str) -> ReleaseModel:
        release = self.db.query(ReleaseModel).filter(ReleaseModel.id == release_id).first()
        if release is None:
            raise ReleaseNotFoundError(release_id)
        return release

    def _check(self, release: ReleaseModel, condition: GateCondition) -> Optional[GateViolation]:
        checks = {
            GateConditionType.MIN_TEST_COVERAGE: self._check_coverage,
            GateConditionType.ALL_TESTS_PASS: self._check_all_tests_pass,
            GateConditionType.NO_CRITICAL_BUGS: self._check_no_critical_bugs,
            GateConditionType.ALL_APPROVALS_COMPLETE: self._check_all_approvals_complete,
            GateConditionType.NO_UNAPPROVED_CHANGES: self._check_no_unapproved_changes,
        }
        return checks[condition.type](release, condition)

    @staticmethod
    def _severity(condition: GateCondition, optional: ViolationSeverity = ViolationSeverity.WARNING):
        return ViolationSeverity.CRITICAL if condition.required else optional

    # Conditions

    def _check_coverage(self, release, condition):
        threshold = condition.threshold if condition.threshold is not None else settings.gate_min_coverage
        coverage, uncovered = self._coverage(release)
        if coverage >= threshold:
            return None
        return GateViolation(
            condition_type=condition.type,
            severity=self._severity(condition),
            message=f"Test coverage is below the threshold ({coverage:.1f}% < {threshold:g}%)",
            details=GateViolationDetails(
                expected=threshold, actual=round(coverage, 1), affected_ids=sorted(uncovered)
            ),
            suggested_action="Map the uncovered requirements to test cases included in the baseline",
        )

    def _check_all_tests_pass(self, release, condition):
        item_ids = self._release_run_item_ids(release.id)
        latest = self._latest_statuses(item_ids)
        failing = [item_id for item_id in item_ids if latest.get(item_id) != ResultStatus.PASS]
        if not failing:
            return None
        return GateViolation(
            condition_type=condition.type,
            severity=self._severity(condition),
            message="Failed or unexecuted test cases exist",
            details=GateViolationDetails(
                expected=ResultStatus.PASS.value,
                actual=f"{len(failing)} of {len(item_ids)} not passed",
                affected_ids=failing,
            ),
            suggested_action="Fix and re-run the failing tests, or issue a waiver",
        )

    def _check_no_critical_bugs(self, release, condition):
        item_ids = self._release_run_item_ids(release.id)
        if not item_ids:
            return None
        results = (
            self.db.query(TestResultModel.id, TestResultModel.bug_links)
            .filter(TestResultModel.run_item_id.in_(item_ids))
            .all()
        )
        affected = [
            result_id
            for result_id, bug_links in results
            if any((link or {}).get("severity") in BLOCKING_BUG_SEVERITIES for link in (bug_links or []))
        ]
        if not affected:
            return None
        return GateViolation(
            condition_type=condition.type,
            severity=self._severity(condition),
            message="Critical or high severity bugs are linked to test results",
            details=GateViolationDetails(expected=0, actual=len(affected), affected_ids=affected),
            suggested_action="Resolve the linked bugs before releasing",
        )

    def _check_all_approvals_complete(self, release, condition):
        rows = (
            self.db.query(TestScenarioListRevisionModel.id, TestScenarioListRevisionModel.status)
            .join(
                ReleaseBaselineModel,
                ReleaseBaselineModel.source_list_revision_id == TestScenarioListRevisionModel.id,
            )
            .filter(ReleaseBaselineModel.release_id == release.id)
            .all()
        )
        unapproved = [revision_id for revision_id, status in rows if status != RevisionStatus.APPROVED]
        if not unapproved:
            return None
        return GateViolation(
            condition_type=condition.type,
            severity=self._severity(condition),
            message="Baselined scenario lists are not approved",
            details=GateViolationDetails(
                expected=RevisionStatus.APPROVED.value,
                actual=f"{len(unapproved)} of {len(rows)} not approved",
                affected_ids=unapproved,
            ),
            suggested_action="Get the scenario list revisions reviewed and approved",
        )

    def _check_no_unapproved_changes(self, release, condition):
        pending = self._pending_revision_ids(release.project_id)
        if not pending:
            return None
        return GateViolation(
            condition_type=condition.type,
            severity=self._severity(condition, optional=ViolationSeverity.INFO),
            message="Revisions awaiting review or rejected exist",
            details=GateViolationDetails(expected=0, actual=len(pending), affected_ids=pending),
            suggested_action="Finish the pending reviews or supersede the rejected revisions",
        )

    # Queries

    def _release_run_item_ids(self, release_id: str) -> List[str]:
        rows = (
            self.db.query(TestRunItemModel.id)
            .join(TestRunModel, TestRunModel.id == TestRunItemModel.run_id)
            .join(TestRunGroupModel, TestRunGroupModel.id == TestRunModel.run_group_id)
            .filter(TestRunGroupModel.release_id == release_id)
            .order_by(TestRunModel.created_at, TestRunItemModel.order)
            .all()
        )
        return [row[0] for row in rows]

    def _latest_statuses(self, item_ids: List[str]) -> Dict[str, ResultStatus]:
        if not item_ids:
            return {}
        rows = (
            self.db.query(TestResultModel.run_item_id, TestResultModel.status)
            .filter(TestResultModel.run_item_id.in_(item_ids))
            .order_by(TestResultModel.executed_at, TestResultModel.attempt)
            .all()
        )
        return {item_id: status for item_id, status in rows}

    def _baseline_case_revision_ids(self, release_id: str) -> Set[str]:
        rows = (
            self.db.query(TestScenarioItemModel.case_revision_id)
            .join(
                TestScenarioListItemModel,
                TestScenarioListItemModel.scenario_revision_id == TestScenarioItemModel.scenario_revision_id,
            )
            .join(
                ReleaseBaselineModel,
                ReleaseBaselineModel.source_list_revision_id == TestScenarioListItemModel.list_revision_id,
            )
            .filter(ReleaseBaselineModel.release_id == release_id)
            .distinct()
            .all()
        )
        return {row[0] for row in rows}

    def _coverage(self, release: ReleaseModel):
        requirement_ids = {
            row[0]
            for row in self.db.query(RequirementModel.id)
            .filter(RequirementModel.project_id == release.project_id)
            .all()
        }
        if not requirement_ids:
            return 100.0, set()

        case_revision_ids = self._baseline_case_revision_ids(release.id)
        covered: Set[str] = set()
        if case_revision_ids:
            covered = {
                row[0]
                for row in self.db.query(RequirementMappingModel.requirement_id)
                .filter(
                    RequirementMappingModel.requirement_id.in_(requirement_ids),
                    RequirementMappingModel.target_type == "CASE_REVISION",
                    RequirementMappingModel.target_revision_id.in_(case_revision_ids),
                )
                .distinct()
                .all()
            }
        coverage = len(covered) / len(requirement_ids) * 100
        return coverage, requirement_ids - covered

    def _pending_revision_ids(self, project_id: str) -> List[str]:
        case_ids = (
            self.db.query(TestCaseRevisionModel.id)
            .join(TestCaseModel, TestCaseModel.id == TestCaseRevisionModel.case_stable_id)
            .filter(
                TestCaseModel.project_id == project_id,
                TestCaseRevisionModel.status.in_(PENDING_REVISION_STATUSES),
            )
            .all()
        )
        scenario_ids = (
            self.db.query(TestScenarioRevisionModel.id)
            .join(TestScenarioModel, TestScenarioModel.id == TestScenarioRevisionModel.scenario_stable_id)
            .filter(
                TestScenarioModel.project_id == project_id,
                TestScenarioRevisionModel.status.in_(PENDING_REVISION_STATUSES),
            )
            .all()
        )
        list_ids = (
            self.db.query(TestScenarioListRevisionModel.id)
            .join(TestScenarioListModel, TestScenarioListModel.id == TestScenarioListRevisionModel.list_stable_id)
            .filter(
                TestScenarioListModel.project_id == project_id,
                TestScenarioListRevisionModel.status.in_(PENDING_REVISION_STATUSES),
            )
            .all()
        )
        return [row[0] for row in case_ids + scenario_ids + list_ids]
