"""
Project repository implementation using SQLAlchemy.
"""

from typing import List, Optional

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from timekeep.domain.models.base import EntityNotFoundError
from timekeep.domain.models.project import Project
from timekeep.domain.repositories.project_repository import ProjectRepository as ProjectRepositoryInterface
from timekeep.infrastructure.db.models import ProjectModel
from timekeep.infrastructure.mappers.project_mapper import ProjectMapper
from timekeep.infrastructure.repositories.base import is_valid_id, store_errors


class SQLAlchemyProjectRepository(ProjectRepositoryInterface):
    """SQLAlchemy implementation of project repository."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.mapper = ProjectMapper()

    @store_errors
    async def get(self, project_id: str) -> Optional[Project]:
        """Get project by ID."""
        if not is_valid_id(project_id):
            return None
        model = await self.session.get(ProjectModel, project_id)
        if not model:
            return None
        return self.mapper.model_to_domain(model)

    @store_errors
    async def list_all(self, client_id: Optional[str] = None) -> List[Project]:
        """Get all projects, optionally for one client."""
        query = select(ProjectModel).order_by(ProjectModel.name)
        if client_id is not None:
            if not is_valid_id(client_id):
                return []
            query = query.where(ProjectModel.client_id == client_id)

        result = await self.session.execute(query)
        return [self.mapper.model_to_domain(model) for model in result.scalars().unique()]

    @store_errors
    async def count_by_client(self, client_id: str) -> int:
        """Count projects belonging to a client."""
        if not is_valid_id(client_id):
            return 0
        result = await self.session.execute(
            select(func.count(ProjectModel.id)).where(ProjectModel.client_id == client_id)
        )
        return result.scalar_one()

    @store_errors
    async def add(self, project: Project) -> Project:
        """Insert a new project."""
        model = self.mapper.domain_to_model(project)
        self.session.add(model)
        await self.session.flush()

        project.id = str(model.id)
        return project

    @store_errors
    async def update(self, project: Project) -> Project:
        """Save changes to an existing project."""
        model = await self.session.get(ProjectModel, project.id)
        if not model:
            raise EntityNotFoundError("Project", project.id)

        model.name = project.name
        model.client_id = project.client_id
        model.updated_at = project.updated_at
        await self.session.flush()
        return project

    @store_errors
    async def delete(self, project_id: str) -> bool:
        """Delete project by ID."""
        if not is_valid_id(project_id):
            return False
        result = await self.session.execute(delete(ProjectModel).where(ProjectModel.id == project_id))
        return result.rowcount > 0
