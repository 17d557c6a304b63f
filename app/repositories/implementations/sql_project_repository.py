from typing import List, Optional
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from app.repositories.interfaces.project_repository import IProjectRepository
from app.models.database import ProjectModel, RequirementMappingModel, RequirementModel
from app.models.schemas import (
    Project,
    ProjectCreate,
    Requirement,
    RequirementCreate,
    RequirementMapping,
)

CASE_REVISION_TARGET = "CASE_REVISION"


class SQLProjectRepository(IProjectRepository):
    """SQLAlchemy implementation of the project repository"""

    def __init__(self, db: Session):
        self.db = db

    async def create(self, project: ProjectCreate) -> Project:
        db_project = ProjectModel(**project.model_dump())
        self.db.add(db_project)
        self.db.commit()
        self.db.refresh(db_project)
        return Project.model_validate(db_project)

    async def get_by_id(self, project_id: str) -> Optional[Project]:
        db_project = self.db.query(ProjectModel).filter(ProjectModel.id == project_id).first()
        if db_project:
            return Project.model_validate(db_project)
        return None

    async def get_all(self, skip: int = 0, limit: int = 100) -> List[Project]:
        db_projects = (
            self.db.query(ProjectModel)
            .order_by(ProjectModel.created_at.desc())
            .offset(skip)
            .limit(limit)
            .all()
        )
        return [Project.model_validate(p) for p in db_projects]

    async def create_requirement(self, requirement: RequirementCreate) -> Requirement:
        db_requirement = RequirementModel(**requirement.model_dump())
        self.db.add(db_requirement)
        self.db.commit()
        self.db.refresh(db_requirement)
        return Requirement.model_validate(db_requirement)

    async def get_requirement(self, requirement_id: str) -> Optional[Requirement]:
        db_requirement = (
            self.db.query(RequirementModel).filter(RequirementModel.id == requirement_id).first()
        )
        if db_requirement:
            return Requirement.model_validate(db_requirement)
        return None

    async def list_requirements(self, project_id: str) -> List[Requirement]:
        rows = (
            self.db.query(RequirementModel)
            .filter(RequirementModel.project_id == project_id)
            .order_by(RequirementModel.created_at)
            .all()
        )
        return [Requirement.model_validate(r) for r in rows]

    async def add_requirement_mapping(
        self, requirement_id: str, case_revision_id: str, created_by: str
    ) -> RequirementMapping:
        """Map a requirement to a case revision; mapping twice returns the existing row"""
        existing = self._find_mapping(requirement_id, case_revision_id)
        if existing:
            return RequirementMapping.model_validate(existing)

        db_mapping = RequirementMappingModel(
            requirement_id=requirement_id,
            target_type=CASE_REVISION_TARGET,
            target_revision_id=case_revision_id,
            created_by=created_by,
        )
        self.db.add(db_mapping)
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            existing = self._find_mapping(requirement_id, case_revision_id)
            if existing is None:
                raise
            return RequirementMapping.model_validate(existing)
        self.db.refresh(db_mapping)
        return RequirementMapping.model_validate(db_mapping)

    async def list_requirement_mappings(self, requirement_id: str) -> List[RequirementMapping]:
        rows = (
            self.db.query(RequirementMappingModel)
            .filter(RequirementMappingModel.requirement_id == requirement_id)
            .order_by(RequirementMappingModel.created_at)
            .all()
        )
        return [RequirementMapping.model_validate(r) for r in rows]

    def _find_mapping(self, requirement_id: str, case_revision_id: str) -> Optional[RequirementMappingModel]:
        return (
            self.db.query(RequirementMappingModel)
            .filter(
                RequirementMappingModel.requirement_id == requirement_id,
                RequirementMappingModel.target_type == CASE_REVISION_TARGET,
                RequirementMappingModel.target_revision_id == case_revision_id,
            )
            .first()
        )
