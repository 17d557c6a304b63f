from pydantic import BaseModel, Field, field_validator
from typing import Any, Generic, List, Optional, TypeVar
from datetime import datetime
from enum import Enum

T = TypeVar("T")

WAIVER_REASON_MIN_LENGTH = 10
WAIVER_REASON_MAX_LENGTH = 1000


class RevisionStatus(str, Enum):
    DRAFT = "DRAFT"
    IN_REVIEW = "IN_REVIEW"
    APPROVED = "APPROVED"
    DEPRECATED = "DEPRECATED"


class TestCasePriority(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"


class IncludeRule(str, Enum):
    FULL = "FULL"
    REQUIRED_ONLY = "REQUIRED_ONLY"


class ApprovalObjectType(str, Enum):
    CASE_REVISION = "CASE_REVISION"
    SCENARIO_REVISION = "SCENARIO_REVISION"
    LIST_REVISION = "LIST_REVISION"
    MAPPING_REVISION = "MAPPING_REVISION"
    WORKFLOW_REVISION = "WORKFLOW_REVISION"
    RELEASE = "RELEASE"
    WAIVER = "WAIVER"


class ApprovalDecision(str, Enum):
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class ApprovalAction(str, Enum):
    APPROVE = "approve"
    REJECT = "reject"


class TestRunStatus(str, Enum):
    ASSIGNED = "ASSIGNED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"


class RunGroupStatus(str, Enum):
    NOT_STARTED = "NOT_STARTED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"


class ResultStatus(str, Enum):
    PASS = "PASS"
    FAIL = "FAIL"
    BLOCKED = "BLOCKED"
    SKIPPED = "SKIPPED"


class BugSeverity(str, Enum):
    CRITICAL = "CRITICAL"
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"


class ReleaseStatus(str, Enum):
    PLANNING = "PLANNING"
    EXECUTING = "EXECUTING"
    GATE_CHECK = "GATE_CHECK"
    APPROVED_FOR_RELEASE = "APPROVED_FOR_RELEASE"
    RELEASED = "RELEASED"


class WaiverTargetType(str, Enum):
    FAIL_RESULT = "FAIL_RESULT"
    UNAPPROVED_REVISION = "UNAPPROVED_REVISION"
    UNEXECUTED_TEST = "UNEXECUTED_TEST"
    OTHER = "OTHER"


class GateConditionType(str, Enum):
    MIN_TEST_COVERAGE = "MIN_TEST_COVERAGE"
    ALL_TESTS_PASS = "ALL_TESTS_PASS"
    NO_CRITICAL_BUGS = "NO_CRITICAL_BUGS"
    ALL_APPROVALS_COMPLETE = "ALL_APPROVALS_COMPLETE"
    NO_UNAPPROVED_CHANGES = "NO_UNAPPROVED_CHANGES"


class ViolationSeverity(str, Enum):
    CRITICAL = "CRITICAL"
    WARNING = "WARNING"
    INFO = "INFO"


# Response envelopes

class ListMeta(BaseModel):
    count: int
    latest: Optional[int] = None


class DataResponse(BaseModel, Generic[T]):
    data: T
    message: Optional[str] = None


class ListResponse(BaseModel, Generic[T]):
    data: List[T]
    meta: ListMeta


# Projects and requirements

class ProjectCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=1000)
    organization_id: Optional[str] = None


class Project(ProjectCreate):
    id: str
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class RequirementCreate(BaseModel):
    project_id: str
    title: str = Field(..., min_length=1, max_length=200)
    external_id: Optional[str] = Field(None, max_length=100)
    description: Optional[str] = None


class Requirement(RequirementCreate):
    id: str
    created_at: datetime

    class Config:
        from_attributes = True


class RequirementMappingCreate(BaseModel):
    case_revision_id: str
    created_by: str


class RequirementMapping(BaseModel):
    id: str
    requirement_id: str
    target_type: str
    target_revision_id: str
    created_by: str
    created_at: datetime

    class Config:
        from_attributes = True


# Test cases

class TestCaseContent(BaseModel):
    """Body of a test case revision.

    Structural rules (non-empty steps, expected result) are checked by
    ``validate_test_case_content`` so the service can report every problem
    at once instead of failing on the first one.
    """

    steps: List[str] = Field(default_factory=list)
    expected_result: str = ""
    preconditions: Optional[str] = None
    test_data: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    priority: TestCasePriority = TestCasePriority.MEDIUM
    environment: Optional[str] = Field(None, max_length=200)
    attachments: List[str] = Field(default_factory=list)
    notes: Optional[str] = None


class TestCaseCreate(BaseModel):
    project_id: str
    title: str = Field(..., min_length=1, max_length=200)
    content: TestCaseContent
    created_by: str
    reason: Optional[str] = Field(None, min_length=1, max_length=1000)


class TestCaseRevisionCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    content: TestCaseContent
    reason: str = Field(..., min_length=1, max_length=1000)
    created_by: str


class TestCase(BaseModel):
    id: str
    project_id: str
    created_by: str
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class TestCaseRevision(BaseModel):
    id: str
    case_stable_id: str
    rev: int
    status: RevisionStatus
    title: str
    content: TestCaseContent
    reason: Optional[str] = None
    created_by: str
    approved_by: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class TestCaseWithLatestRevision(BaseModel):
    test_case: TestCase
    latest_revision: Optional[TestCaseRevision] = None


class RevisionRecord(BaseModel):
    """Status view shared by case, scenario and list revisions"""

    id: str
    object_type: ApprovalObjectType
    parent_id: str
    rev: int
    status: RevisionStatus
    title: str
    created_by: str
    approved_by: Optional[str] = None
    created_at: datetime
    updated_at: datetime


# Scenarios and scenario lists

class TestScenarioItemCreate(BaseModel):
    case_revision_id: str
    order: int = Field(..., ge=0)
    optional_flag: bool = False
    note: Optional[str] = None


class TestScenarioItem(TestScenarioItemCreate):
    id: str

    class Config:
        from_attributes = True


class TestScenarioCreate(BaseModel):
    project_id: str
    title: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=1000)
    items: List[TestScenarioItemCreate] = Field(default_factory=list)
    reason: Optional[str] = None
    created_by: str


class TestScenarioRevision(BaseModel):
    id: str
    scenario_stable_id: str
    rev: int
    status: RevisionStatus
    title: str
    description: Optional[str] = None
    reason: Optional[str] = None
    created_by: str
    approved_by: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    items: List[TestScenarioItem] = Field(default_factory=list)

    class Config:
        from_attributes = True


class TestScenarioListItemCreate(BaseModel):
    scenario_revision_id: str
    order: int = Field(..., ge=0)
    include_rule: IncludeRule = IncludeRule.FULL
    note: Optional[str] = None


class TestScenarioListItem(TestScenarioListItemCreate):
    id: str

    class Config:
        from_attributes = True


class TestScenarioListCreate(BaseModel):
    project_id: str
    title: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=1000)
    items: List[TestScenarioListItemCreate] = Field(default_factory=list)
    reason: Optional[str] = None
    created_by: str


class TestScenarioListRevision(BaseModel):
    id: str
    list_stable_id: str
    rev: int
    status: RevisionStatus
    title: str
    description: Optional[str] = None
    reason: Optional[str] = None
    created_by: str
    approved_by: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    items: List[TestScenarioListItem] = Field(default_factory=list)

    class Config:
        from_attributes = True


# Approvals

class EvidenceLink(BaseModel):
    url: str = Field(..., min_length=1)
    title: str = Field(..., min_length=1, max_length=200)


class ApprovalCreate(BaseModel):
    object_type: ApprovalObjectType
    object_id: str
    step: int = 1
    decision: ApprovalDecision
    approver_id: str
    comment: Optional[str] = None
    evidence_links: List[EvidenceLink] = Field(default_factory=list)


class Approval(ApprovalCreate):
    id: str
    timestamp: datetime

    class Config:
        from_attributes = True


class ApprovalRequest(BaseModel):
    action: ApprovalAction
    revision_id: str
    object_type: ApprovalObjectType = ApprovalObjectType.CASE_REVISION
    approver_id: str
    step: int = Field(1, ge=1)
    comment: Optional[str] = Field(None, max_length=2000)
    evidence_links: List[EvidenceLink] = Field(default_factory=list, max_length=10)


class ApprovalResult(BaseModel):
    approval: Approval
    revision: RevisionRecord


# Test execution

class TestRunGroupCreate(BaseModel):
    release_id: str
    name: str = Field(..., min_length=1, max_length=200)
    purpose: Optional[str] = Field(None, max_length=1000)


class TestRunGroup(TestRunGroupCreate):
    id: str
    status: RunGroupStatus
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class TestRunCreate(BaseModel):
    run_group_id: str
    assignee_user_id: str
    source_list_revision_id: str
    build_ref: Optional[str] = Field(None, max_length=100)


class TestRun(TestRunCreate):
    id: str
    status: TestRunStatus
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class TestRunItem(BaseModel):
    id: str
    run_id: str
    case_revision_id: str
    origin_scenario_revision_id: str
    order: int

    class Config:
        from_attributes = True


class TestRunItemPlan(BaseModel):
    """Item of a run that is about to be written"""

    case_revision_id: str
    origin_scenario_revision_id: str
    order: int


class TestRunCreated(BaseModel):
    run: TestRun
    items: List[TestRunItem]
    item_count: int


class Evidence(BaseModel):
    logs: Optional[str] = None
    screenshots: List[str] = Field(default_factory=list)
    links: List[str] = Field(default_factory=list)

    def is_empty(self) -> bool:
        return not ((self.logs or "").strip() or self.screenshots or self.links)


class BugLink(BaseModel):
    url: str = Field(..., min_length=1)
    title: str = Field(..., min_length=1)
    severity: Optional[BugSeverity] = None


class TestResultCreate(BaseModel):
    status: ResultStatus
    evidence: Optional[Evidence] = None
    bug_links: List[BugLink] = Field(default_factory=list)
    executed_by: str


class TestResult(BaseModel):
    id: str
    run_item_id: str
    status: ResultStatus
    evidence: Optional[Evidence] = None
    bug_links: List[BugLink] = Field(default_factory=list)
    executed_by: str
    executed_at: datetime
    attempt: int = 1

    class Config:
        from_attributes = True


class TestRunComplete(BaseModel):
    force: bool = False


class TestRunProgress(BaseModel):
    total: int = 0
    executed: int = 0
    passed: int = 0
    failed: int = 0
    blocked: int = 0
    skipped: int = 0


class TestRunWithProgress(BaseModel):
    run: TestRun
    progress: TestRunProgress


class TestRunCompletion(BaseModel):
    run: TestRun
    summary: TestRunProgress


class TestRunItemDetail(TestRunItem):
    test_case_title: Optional[str] = None
    latest_result: Optional[TestResult] = None


class TestRunDetail(BaseModel):
    run: TestRun
    items: List[TestRunItemDetail]
    summary: TestRunProgress


class RunGroupProgress(BaseModel):
    run_group_id: str
    total_runs: int = 0
    completed_runs: int = 0
    total_tests: int = 0
    executed_tests: int = 0
    passed_tests: int = 0
    failed_tests: int = 0


class CIImportRequest(BaseModel):
    junit_xml: str = Field(..., min_length=1)
    executed_by: str


class CIImportSummary(BaseModel):
    passed: int = 0
    failed: int = 0
    skipped: int = 0


class CIImportResult(BaseModel):
    run_id: str
    total: int
    imported: int
    skipped: int
    unmatched: List[str] = Field(default_factory=list)
    summary: CIImportSummary


# Releases and gates

class ReleaseCreate(BaseModel):
    project_id: str
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=500)
    build_ref: Optional[str] = Field(None, max_length=100)


class Release(ReleaseCreate):
    id: str
    status: ReleaseStatus
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class ReleaseStatusUpdate(BaseModel):
    status: ReleaseStatus


class BaselineCreate(BaseModel):
    source_list_revision_id: str
    created_by: str


class ReleaseBaseline(BaselineCreate):
    id: str
    release_id: str
    created_at: datetime

    class Config:
        from_attributes = True


class GateCondition(BaseModel):
    type: GateConditionType
    name: str
    required: bool = True
    threshold: Optional[float] = None
    description: Optional[str] = None


class GateViolationDetails(BaseModel):
    expected: Optional[Any] = None
    actual: Optional[Any] = None
    affected_ids: List[str] = Field(default_factory=list)


class GateViolation(BaseModel):
    condition_type: GateConditionType
    severity: ViolationSeverity
    message: str
    details: GateViolationDetails = Field(default_factory=GateViolationDetails)
    suggested_action: Optional[str] = None
    has_waiver: bool = False
    waiver_id: Optional[str] = None

    @property
    def is_blocking(self) -> bool:
        return self.severity == ViolationSeverity.CRITICAL and not self.has_waiver


class GateEvaluation(BaseModel):
    release_id: str
    conditions: List[GateCondition]
    violations: List[GateViolation]
    passed: bool
    evaluated_at: datetime


class GateEvaluationRequest(BaseModel):
    action: str = Field("evaluate", pattern="^(evaluate|approve)$")
    approver_id: Optional[str] = None
    comment: Optional[str] = Field(None, max_length=500)
    conditions: Optional[List[GateCondition]] = None


class ReleaseApproval(BaseModel):
    release: Release
    approval: Approval
    evaluation: GateEvaluation


# Waivers

class WaiverCreate(BaseModel):
    target_type: WaiverTargetType
    target_id: Optional[str] = None
    reason: str = Field(..., min_length=WAIVER_REASON_MIN_LENGTH, max_length=WAIVER_REASON_MAX_LENGTH)
    expires_at: datetime
    issuer_id: str

    @field_validator("reason")
    @classmethod
    def reason_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("reason must not be blank")
        return value


class Waiver(BaseModel):
    id: str
    release_id: str
    target_type: WaiverTargetType
    target_id: Optional[str] = None
    reason: str
    expires_at: datetime
    issuer_id: str
    created_at: datetime

    class Config:
        from_attributes = True


class WaiverExpiryCheck(BaseModel):
    auto_delete: bool = False


class WaiverExpiryReport(BaseModel):
    expired_waivers: List[Waiver]
    deleted_count: int
    checked_at: datetime


class ReleaseSummary(BaseModel):
    release: Release
    baselines: List[ReleaseBaseline] = Field(default_factory=list)
