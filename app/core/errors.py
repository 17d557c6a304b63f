"""Domain errors raised by the services.

Every error carries a human readable message and optional structured
details. ``main.py`` turns them into JSON responses using ``status_code``.
"""
from typing import Any, Iterable, List, Optional


class DomainError(Exception):
    """Base class for errors that map onto a client-facing response"""

    status_code: int = 400

    def __init__(self, message: str, details: Optional[Any] = None):
        super().__init__(message)
        self.message = message
        self.details = details

    @property
    def code(self) -> str:
        return type(self).__name__


class AuthenticationError(DomainError):
    status_code = 401


# --- Not found ------------------------------------------------------------

class NotFoundError(DomainError):
    status_code = 404
    entity = "Resource"

    def __init__(self, entity_id: str, message: Optional[str] = None):
        super().__init__(message or f"{self.entity} {entity_id} not found")
        self.entity_id = entity_id


class ProjectNotFoundError(NotFoundError):
    entity = "Project"


class RequirementNotFoundError(NotFoundError):
    entity = "Requirement"


class TestCaseNotFoundError(NotFoundError):
    entity = "Test case"


class RevisionNotFoundError(NotFoundError):
    entity = "Revision"


class ScenarioRevisionNotFoundError(NotFoundError):
    entity = "Scenario revision"


class ListRevisionNotFoundError(NotFoundError):
    entity = "Scenario list revision"


class TestRunGroupNotFoundError(NotFoundError):
    entity = "Test run group"


class TestRunNotFoundError(NotFoundError):
    entity = "Test run"


class TestRunItemNotFoundError(NotFoundError):
    entity = "Test run item"


class ReleaseNotFoundError(NotFoundError):
    entity = "Release"


class WaiverNotFoundError(NotFoundError):
    entity = "Waiver"


# --- Validation -----------------------------------------------------------

class RevisionValidationError(DomainError):
    def __init__(self, errors: List[str], message: str = "Test case content is invalid"):
        super().__init__(message, details=list(errors))
        self.errors = list(errors)


class ApprovalValidationError(DomainError):
    pass


class EvidenceRequiredError(DomainError):
    def __init__(self, status: str):
        super().__init__(
            f"Evidence is required when recording a {status} result",
            details={"status": status},
        )


class WaiverValidationError(DomainError):
    pass


class CIResultParseError(DomainError):
    pass


# --- Status rules ---------------------------------------------------------

class InvalidStatusTransitionError(DomainError):
    def __init__(self, from_status: str, to_status: str):
        super().__init__(
            f"Cannot transition from {from_status} to {to_status}",
            details={"from": from_status, "to": to_status},
        )
        self.from_status = from_status
        self.to_status = to_status


class RevisionImmutableError(DomainError):
    def __init__(self, revision_id: str, status: str):
        super().__init__(
            f"Revision {revision_id} can no longer be edited (current: {status})",
            details={"revision_id": revision_id, "status": status},
        )


class NotApprovableError(DomainError):
    def __init__(self, revision_id: str, status: str):
        super().__init__(
            f"Revision {revision_id} is not awaiting review (current: {status})",
            details={"revision_id": revision_id, "status": status},
        )


class NotRejectableError(NotApprovableError):
    pass


class AlreadyApprovedError(DomainError):
    def __init__(self, object_type: str, object_id: str, approver_id: str):
        super().__init__(
            f"{approver_id} has already recorded a decision for {object_type} {object_id}",
            details={"object_type": object_type, "object_id": object_id, "approver_id": approver_id},
        )


class InvalidRunStatusError(DomainError):
    def __init__(self, run_id: str, current: str, expected: str):
        super().__init__(
            f"Test run {run_id} is {current}, expected {expected}",
            details={"run_id": run_id, "current_status": current, "expected_status": expected},
        )
        self.current = current
        self.expected = expected


class UnexecutedItemsError(DomainError):
    def __init__(self, run_id: str, item_ids: Iterable[str]):
        item_ids = list(item_ids)
        super().__init__(
            f"Test run {run_id} has {len(item_ids)} unexecuted item(s)",
            details={"run_id": run_id, "unexecuted_item_ids": item_ids},
        )


class InvalidReleaseStatusError(DomainError):
    def __init__(self, release_id: str, current: str, expected: str):
        super().__init__(
            f"Release {release_id} is {current}, expected {expected}",
            details={"release_id": release_id, "current_status": current, "expected_status": expected},
        )
        self.current = current
        self.expected = expected


class DuplicateBaselineError(DomainError):
    def __init__(self, release_id: str, list_revision_id: str):
        super().__init__(
            f"List revision {list_revision_id} is already a baseline of release {release_id}",
            details={"release_id": release_id, "source_list_revision_id": list_revision_id},
        )


class GateViolationError(DomainError):
    def __init__(self, violations: List[Any]):
        super().__init__(
            f"Release gate has {len(violations)} blocking violation(s)",
            details=violations,
        )
        self.violations = violations
