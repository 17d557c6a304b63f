from fastapi import Depends
from sqlalchemy.orm import Session
from app.repositories.interfaces.approval_repository import IApprovalRepository
from app.repositories.interfaces.gate_evaluation_service import IGateEvaluationService
from app.repositories.interfaces.project_repository import IProjectRepository
from app.repositories.interfaces.release_repository import IReleaseRepository
from app.repositories.interfaces.revision_repository import IRevisionRepository
from app.repositories.interfaces.test_case_repository import ITestCaseRepository
from app.repositories.interfaces.test_result_repository import ITestResultRepository
from app.repositories.interfaces.test_run_repository import ITestRunRepository
from app.repositories.interfaces.test_scenario_repository import ITestScenarioRepository
from app.repositories.interfaces.waiver_repository import IWaiverRepository

from app.repositories.implementations.sql_approval_repository import SQLApprovalRepository
from app.repositories.implementations.sql_gate_evaluation_service import SQLGateEvaluationService
from app.repositories.implementations.sql_project_repository import SQLProjectRepository
from app.repositories.implementations.sql_release_repository import SQLReleaseRepository
from app.repositories.implementations.sql_revision_repository import SQLRevisionRepository
from app.repositories.implementations.sql_test_case_repository import SQLTestCaseRepository
from app.repositories.implementations.sql_test_result_repository import SQLTestResultRepository
from app.repositories.implementations.sql_test_run_repository import SQLTestRunRepository
from app.repositories.implementations.sql_test_scenario_repository import SQLTestScenarioRepository
from app.repositories.implementations.sql_waiver_repository import SQLWaiverRepository

from app.services.approval_service import ApprovalService
from app.services.project_service import ProjectService
from app.services.release_gate_service import ReleaseGateService
from app.services.test_case_service import TestCaseService
from app.services.test_execution_service import TestExecutionService
from app.services.test_scenario_service import TestScenarioService
from app.services.waiver_service import WaiverService
from app.core.database import get_database


class Container:
    """Dependency injection container.

    Repositories are cheap wrappers around the request's session, so every
    call builds fresh instances bound to the session it is given.
    """

    def project_repository(self, db: Session) -> IProjectRepository:
        return SQLProjectRepository(db)

    def test_case_repository(self, db: Session) -> ITestCaseRepository:
        return SQLTestCaseRepository(db)

    def scenario_repository(self, db: Session) -> ITestScenarioRepository:
        return SQLTestScenarioRepository(db)

    def revision_repository(self, db: Session) -> IRevisionRepository:
        return SQLRevisionRepository(db)

    def approval_repository(self, db: Session) -> IApprovalRepository:
        return SQLApprovalRepository(db)

    def test_run_repository(self, db: Session) -> ITestRunRepository:
        return SQLTestRunRepository(db)

    def test_result_repository(self, db: Session) -> ITestResultRepository:
        return SQLTestResultRepository(db)

    def release_repository(self, db: Session) -> IReleaseRepository:
        return SQLReleaseRepository(db)

    def waiver_repository(self, db: Session) -> IWaiverRepository:
        return SQLWaiverRepository(db)

    def gate_evaluation_service(self, db: Session) -> IGateEvaluationService:
        return SQLGateEvaluationService(db)

    def project_service(self, db: Session) -> ProjectService:
        return ProjectService(
            project_repository=self.project_repository(db),
            test_case_repository=self.test_case_repository(db),
        )

    def test_case_service(self, db: Session) -> TestCaseService:
        return TestCaseService(
            test_case_repository=self.test_case_repository(db),
            project_repository=self.project_repository(db),
        )

    def test_scenario_service(self, db: Session) -> TestScenarioService:
        return TestScenarioService(
            scenario_repository=self.scenario_repository(db),
            test_case_repository=self.test_case_repository(db),
            project_repository=self.project_repository(db),
        )

    def approval_service(self, db: Session) -> ApprovalService:
        return ApprovalService(
            revision_repository=self.revision_repository(db),
            approval_repository=self.approval_repository(db),
        )

    def test_execution_service(self, db: Session) -> TestExecutionService:
        return TestExecutionService(
            test_run_repository=self.test_run_repository(db),
            test_result_repository=self.test_result_repository(db),
            scenario_repository=self.scenario_repository(db),
            test_case_repository=self.test_case_repository(db),
            release_repository=self.release_repository(db),
        )

    def release_gate_service(self, db: Session) -> ReleaseGateService:
        return ReleaseGateService(
            release_repository=self.release_repository(db),
            project_repository=self.project_repository(db),
            scenario_repository=self.scenario_repository(db),
            waiver_repository=self.waiver_repository(db),
            approval_repository=self.approval_repository(db),
            gate_evaluation_service=self.gate_evaluation_service(db),
        )

    def waiver_service(self, db: Session) -> WaiverService:
        return WaiverService(
            waiver_repository=self.waiver_repository(db),
            release_repository=self.release_repository(db),
        )


# Global container instance
container = Container()


# Dependency providers for FastAPI
def get_project_service(db: Session = Depends(get_database)) -> ProjectService:
    return container.project_service(db)


def get_test_case_service(db: Session = Depends(get_database)) -> TestCaseService:
    """FastAPI dependency for test case service"""
    return container.test_case_service(db)


def get_test_scenario_service(db: Session = Depends(get_database)) -> TestScenarioService:
    return container.test_scenario_service(db)


def get_approval_service(db: Session = Depends(get_database)) -> ApprovalService:
    return container.approval_service(db)


def get_test_execution_service(db: Session = Depends(get_database)) -> TestExecutionService:
    return container.test_execution_service(db)


def get_release_gate_service(db: Session = Depends(get_database)) -> ReleaseGateService:
    return container.release_gate_service(db)


def get_waiver_service(db: Session = Depends(get_database)) -> WaiverService:
    return container.waiver_service(db)
