import uuid

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Enum,
    ForeignKey,
    Integer,
    JSON,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from app.core.database import Base
from app.core.timeutils import utcnow
from app.models.schemas import (
    ApprovalDecision,
    ApprovalObjectType,
    IncludeRule,
    ReleaseStatus,
    ResultStatus,
    RevisionStatus,
    RunGroupStatus,
    TestRunStatus,
    WaiverTargetType,
)


def _uuid() -> str:
    return str(uuid.uuid4())


def _id_column():
    return Column(String(36), primary_key=True, default=_uuid)


def _created_at():
    return Column(DateTime, default=utcnow, nullable=False)


def _updated_at():
    return Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)


class ProjectModel(Base):
    __tablename__ = "projects"

    id = _id_column()
    organization_id = Column(String(36), nullable=True, index=True)
    name = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    created_at = _created_at()
    updated_at = _updated_at()


class RequirementModel(Base):
    __tablename__ = "requirements"

    id = _id_column()
    project_id = Column(String(36), ForeignKey("projects.id"), nullable=False, index=True)
    external_id = Column(String(100), nullable=True)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    created_at = _created_at()


class RequirementMappingModel(Base):
    __tablename__ = "requirement_mappings"
    __table_args__ = (
        UniqueConstraint("requirement_id", "target_type", "target_revision_id", name="uq_requirement_target"),
    )

    id = _id_column()
    requirement_id = Column(String(36), ForeignKey("requirements.id"), nullable=False, index=True)
    target_type = Column(String(50), nullable=False, default="CASE_REVISION")
    target_revision_id = Column(String(36), nullable=False, index=True)
    created_by = Column(String(100), nullable=False)
    created_at = _created_at()


class TestCaseModel(Base):
    __tablename__ = "test_cases"

    id = _id_column()
    project_id = Column(String(36), ForeignKey("projects.id"), nullable=False, index=True)
    created_by = Column(String(100), nullable=False)
    created_at = _created_at()
    updated_at = _updated_at()

    revisions = relationship(
        "TestCaseRevisionModel",
        back_populates="test_case",
        cascade="all, delete-orphan",
        order_by="TestCaseRevisionModel.rev",
    )

    def __repr__(self):
        return f"<TestCase(id={self.id}, project_id='{self.project_id}')>"


class TestCaseRevisionModel(Base):
    __tablename__ = "test_case_revisions"
    __table_args__ = (UniqueConstraint("case_stable_id", "rev", name="uq_case_revision"),)

    id = _id_column()
    case_stable_id = Column(String(36), ForeignKey("test_cases.id"), nullable=False, index=True)
    rev = Column(Integer, nullable=False)
    status = Column(Enum(RevisionStatus), default=RevisionStatus.DRAFT, nullable=False)
    title = Column(String(200), nullable=False, index=True)
    content = Column(JSON, nullable=False)
    reason = Column(Text, nullable=True)
    created_by = Column(String(100), nullable=False)
    approved_by = Column(String(100), nullable=True)
    created_at = _created_at()
    updated_at = _updated_at()

    test_case = relationship("TestCaseModel", back_populates="revisions")

    def __repr__(self):
        return f"<TestCaseRevision(id={self.id}, rev={self.rev}, status='{self.status}')>"


class TestScenarioModel(Base):
    __tablename__ = "test_scenarios"

    id = _id_column()
    project_id = Column(String(36), ForeignKey("projects.id"), nullable=False, index=True)
    created_by = Column(String(100), nullable=False)
    created_at = _created_at()
    updated_at = _updated_at()


class TestScenarioRevisionModel(Base):
    __tablename__ = "test_scenario_revisions"
    __table_args__ = (UniqueConstraint("scenario_stable_id", "rev", name="uq_scenario_revision"),)

    id = _id_column()
    scenario_stable_id = Column(String(36), ForeignKey("test_scenarios.id"), nullable=False, index=True)
    rev = Column(Integer, nullable=False)
    status = Column(Enum(RevisionStatus), default=RevisionStatus.DRAFT, nullable=False)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    reason = Column(Text, nullable=True)
    created_by = Column(String(100), nullable=False)
    approved_by = Column(String(100), nullable=True)
    created_at = _created_at()
    updated_at = _updated_at()

    items = relationship(
        "TestScenarioItemModel",
        cascade="all, delete-orphan",
        order_by="TestScenarioItemModel.order",
    )


class TestScenarioItemModel(Base):
    __tablename__ = "test_scenario_items"

    id = _id_column()
    scenario_revision_id = Column(String(36), ForeignKey("test_scenario_revisions.id"), nullable=False, index=True)
    case_revision_id = Column(String(36), ForeignKey("test_case_revisions.id"), nullable=False)
    order = Column(Integer, nullable=False)
    optional_flag = Column(Boolean, default=False, nullable=False)
    note = Column(Text, nullable=True)


class TestScenarioListModel(Base):
    __tablename__ = "test_scenario_lists"

    id = _id_column()
    project_id = Column(String(36), ForeignKey("projects.id"), nullable=False, index=True)
    created_by = Column(String(100), nullable=False)
    created_at = _created_at()
    updated_at = _updated_at()


class TestScenarioListRevisionModel(Base):
    __tablename__ = "test_scenario_list_revisions"
    __table_args__ = (UniqueConstraint("list_stable_id", "rev", name="uq_list_revision"),)

    id = _id_column()
    list_stable_id = Column(String(36), ForeignKey("test_scenario_lists.id"), nullable=False, index=True)
    rev = Column(Integer, nullable=False)
    status = Column(Enum(RevisionStatus), default=RevisionStatus.DRAFT, nullable=False)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    reason = Column(Text, nullable=True)
    created_by = Column(String(100), nullable=False)
    approved_by = Column(String(100), nullable=True)
    created_at = _created_at()
    updated_at = _updated_at()

    items = relationship(
        "TestScenarioListItemModel",
        cascade="all, delete-orphan",
        order_by="TestScenarioListItemModel.order",
    )


class TestScenarioListItemModel(Base):
    __tablename__ = "test_scenario_list_items"

    id = _id_column()
    list_revision_id = Column(String(36), ForeignKey("test_scenario_list_revisions.id"), nullable=False, index=True)
    scenario_revision_id = Column(String(36), ForeignKey("test_scenario_revisions.id"), nullable=False)
    order = Column(Integer, nullable=False)
    include_rule = Column(Enum(IncludeRule), default=IncludeRule.FULL, nullable=False)
    note = Column(Text, nullable=True)


class ReleaseModel(Base):
    __tablename__ = "releases"

    id = _id_column()
    project_id = Column(String(36), ForeignKey("projects.id"), nullable=False, index=True)
    name = Column(String(100), nullable=False)
    description = Column(Text, nullable=True)
    build_ref = Column(String(100), nullable=True)
    status = Column(Enum(ReleaseStatus), default=ReleaseStatus.PLANNING, nullable=False)
    created_at = _created_at()
    updated_at = _updated_at()

    def __repr__(self):
        return f"<Release(id={self.id}, name='{self.name}', status='{self.status}')>"


class ReleaseBaselineModel(Base):
    __tablename__ = "release_baselines"
    __table_args__ = (
        UniqueConstraint("release_id", "source_list_revision_id", name="uq_release_baseline"),
    )

    id = _id_column()
    release_id = Column(String(36), ForeignKey("releases.id"), nullable=False, index=True)
    source_list_revision_id = Column(
        String(36), ForeignKey("test_scenario_list_revisions.id"), nullable=False
    )
    created_by = Column(String(100), nullable=False)
    created_at = _created_at()


class TestRunGroupModel(Base):
    __tablename__ = "test_run_groups"

    id = _id_column()
    release_id = Column(String(36), ForeignKey("releases.id"), nullable=False, index=True)
    name = Column(String(200), nullable=False)
    purpose = Column(Text, nullable=True)
    status = Column(Enum(RunGroupStatus), default=RunGroupStatus.NOT_STARTED, nullable=False)
    created_at = _created_at()
    updated_at = _updated_at()


class TestRunModel(Base):
    __tablename__ = "test_runs"

    id = _id_column()
    run_group_id = Column(String(36), ForeignKey("test_run_groups.id"), nullable=False, index=True)
    assignee_user_id = Column(String(100), nullable=False)
    source_list_revision_id = Column(
        String(36), ForeignKey("test_scenario_list_revisions.id"), nullable=False
    )
    build_ref = Column(String(100), nullable=True)
    status = Column(Enum(TestRunStatus), default=TestRunStatus.ASSIGNED, nullable=False)
    started_at = Column(DateTime, nullable=True)
    completed_at = Column(DateTime, nullable=True)
    created_at = _created_at()
    updated_at = _updated_at()

    items = relationship(
        "TestRunItemModel",
        cascade="all, delete-orphan",
        order_by="TestRunItemModel.order",
    )

    def __repr__(self):
        return f"<TestRun(id={self.id}, status='{self.status}')>"


class TestRunItemModel(Base):
    __tablename__ = "test_run_items"

    id = _id_column()
    run_id = Column(String(36), ForeignKey("test_runs.id"), nullable=False, index=True)
    case_revision_id = Column(String(36), ForeignKey("test_case_revisions.id"), nullable=False)
    origin_scenario_revision_id = Column(
        String(36), ForeignKey("test_scenario_revisions.id"), nullable=False
    )
    order = Column(Integer, nullable=False)


class TestResultModel(Base):
    __tablename__ = "test_results"
    __table_args__ = (UniqueConstraint("run_item_id", "attempt", name="uq_result_attempt"),)

    id = _id_column()
    run_item_id = Column(String(36), ForeignKey("test_run_items.id"), nullable=False, index=True)
    status = Column(Enum(ResultStatus), nullable=False)
    evidence = Column(JSON, nullable=True)
    bug_links = Column(JSON, default=list, nullable=False)
    executed_by = Column(String(100), nullable=False)
    executed_at = Column(DateTime, default=utcnow, nullable=False, index=True)
    # Per-item sequence, orders results that share an executed_at
    attempt = Column(Integer, default=1, nullable=False)


class ApprovalModel(Base):
    __tablename__ = "approvals"
    __table_args__ = (
        UniqueConstraint("object_type", "object_id", "step", "approver_id", name="uq_approval_step"),
    )

    id = _id_column()
    object_type = Column(Enum(ApprovalObjectType), nullable=False)
    object_id = Column(String(36), nullable=False, index=True)
    step = Column(Integer, default=1, nullable=False)
    decision = Column(Enum(ApprovalDecision), nullable=False)
    approver_id = Column(String(100), nullable=False, index=True)
    comment = Column(Text, nullable=True)
    evidence_links = Column(JSON, default=list, nullable=False)
    timestamp = Column(DateTime, default=utcnow, nullable=False)


class WaiverModel(Base):
    __tablename__ = "waivers"

    id = _id_column()
    release_id = Column(String(36), ForeignKey("releases.id"), nullable=False, index=True)
    target_type = Column(Enum(WaiverTargetType), nullable=False)
    target_id = Column(String(36), nullable=True)
    reason = Column(Text, nullable=False)
    expires_at = Column(DateTime, nullable=False, index=True)
    issuer_id = Column(String(100), nullable=False)
    created_at = _created_at()
