"""Status transition tables and the small domain rules built on them."""
from typing import Dict, FrozenSet, List, Tuple

from app.models.schemas import (
    GateCondition,
    GateConditionType,
    ReleaseStatus,
    ResultStatus,
    RevisionStatus,
    TestCaseContent,
    TestRunStatus,
    WaiverTargetType,
)

MAX_TAGS = 20

REVISION_TRANSITIONS: Dict[RevisionStatus, FrozenSet[RevisionStatus]] = {
    RevisionStatus.DRAFT: frozenset({RevisionStatus.IN_REVIEW, RevisionStatus.APPROVED}),
    RevisionStatus.IN_REVIEW: frozenset({RevisionStatus.APPROVED, RevisionStatus.DRAFT}),
    RevisionStatus.APPROVED: frozenset({RevisionStatus.DEPRECATED}),
    RevisionStatus.DEPRECATED: frozenset(),
}

TEST_RUN_TRANSITIONS: Dict[TestRunStatus, FrozenSet[TestRunStatus]] = {
    TestRunStatus.ASSIGNED: frozenset({TestRunStatus.IN_PROGRESS}),
    TestRunStatus.IN_PROGRESS: frozenset({TestRunStatus.COMPLETED, TestRunStatus.ASSIGNED}),
    TestRunStatus.COMPLETED: frozenset(),
}

RELEASE_TRANSITIONS: Dict[ReleaseStatus, FrozenSet[ReleaseStatus]] = {
    ReleaseStatus.PLANNING: frozenset({ReleaseStatus.EXECUTING, ReleaseStatus.RELEASED}),
    ReleaseStatus.EXECUTING: frozenset({ReleaseStatus.GATE_CHECK, ReleaseStatus.PLANNING}),
    ReleaseStatus.GATE_CHECK: frozenset({ReleaseStatus.APPROVED_FOR_RELEASE, ReleaseStatus.EXECUTING}),
    ReleaseStatus.APPROVED_FOR_RELEASE: frozenset({ReleaseStatus.RELEASED, ReleaseStatus.GATE_CHECK}),
    ReleaseStatus.RELEASED: frozenset(),
}


def can_transition_revision(current: RevisionStatus, target: RevisionStatus) -> bool:
    return target in REVISION_TRANSITIONS[current]


def is_editable(status: RevisionStatus) -> bool:
    return status == RevisionStatus.DRAFT


def is_approvable(status: RevisionStatus) -> bool:
    return status == RevisionStatus.IN_REVIEW


def is_final(status: RevisionStatus) -> bool:
    return status in (RevisionStatus.APPROVED, RevisionStatus.DEPRECATED)


def can_transition_run(current: TestRunStatus, target: TestRunStatus) -> bool:
    return target in TEST_RUN_TRANSITIONS[current]


def can_transition_release(current: ReleaseStatus, target: ReleaseStatus) -> bool:
    return target in RELEASE_TRANSITIONS[current]


def is_release_evaluatable(status: ReleaseStatus) -> bool:
    return status in (ReleaseStatus.EXECUTING, ReleaseStatus.GATE_CHECK)


def is_release_approvable(status: ReleaseStatus) -> bool:
    return status == ReleaseStatus.GATE_CHECK


def validate_test_case_content(content: TestCaseContent) -> List[str]:
    """Collect every structural problem of a test case body"""
    errors = []
    if not content.steps:
        errors.append("At least one step is required")
    for index, step in enumerate(content.steps, start=1):
        if not step.strip():
            errors.append(f"Step {index} must not be empty")
    if not content.expected_result.strip():
        errors.append("Expected result is required")
    if len(content.tags) > MAX_TAGS:
        errors.append(f"No more than {MAX_TAGS} tags are allowed")
    if any(not tag.strip() for tag in content.tags):
        errors.append("Tags must not be empty")
    return errors


def requires_evidence(status: ResultStatus) -> bool:
    return status in (ResultStatus.FAIL, ResultStatus.BLOCKED)


DEFAULT_GATE_CONDITIONS: Tuple[GateCondition, ...] = (
    GateCondition(
        type=GateConditionType.ALL_TESTS_PASS,
        name="All tests pass",
        required=True,
        description="Every test case planned for the release has passed",
    ),
    GateCondition(
        type=GateConditionType.ALL_APPROVALS_COMPLETE,
        name="All approvals complete",
        required=True,
        description="Every baselined scenario list revision is approved",
    ),
    GateCondition(
        type=GateConditionType.MIN_TEST_COVERAGE,
        name="Minimum test coverage",
        required=True,
        threshold=80,
        description="Requirement coverage is at least 80%",
    ),
    GateCondition(
        type=GateConditionType.NO_CRITICAL_BUGS,
        name="No critical bugs",
        required=True,
        description="No CRITICAL or HIGH bug is linked to a result",
    ),
    GateCondition(
        type=GateConditionType.NO_UNAPPROVED_CHANGES,
        name="No unapproved changes",
        required=False,
        description="No revision is waiting for review or was rejected",
    ),
)

# Waiver target types tried in order when looking for a waiver that covers a
# violation; OTHER is always tried last.
CONDITION_WAIVER_TARGETS: Dict[GateConditionType, Tuple[WaiverTargetType, ...]] = {
    GateConditionType.ALL_TESTS_PASS: (WaiverTargetType.FAIL_RESULT, WaiverTargetType.UNEXECUTED_TEST),
    GateConditionType.ALL_APPROVALS_COMPLETE: (WaiverTargetType.UNAPPROVED_REVISION,),
    GateConditionType.NO_UNAPPROVED_CHANGES: (WaiverTargetType.UNAPPROVED_REVISION,),
    GateConditionType.MIN_TEST_COVERAGE: (),
    GateConditionType.NO_CRITICAL_BUGS: (),
}


def waiver_targets_for(condition_type: GateConditionType) -> Tuple[WaiverTargetType, ...]:
    return CONDITION_WAIVER_TARGETS.get(condition_type, ()) + (WaiverTargetType.OTHER,)
