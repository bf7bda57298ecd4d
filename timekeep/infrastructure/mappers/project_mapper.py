"""
Project mapper for converting between domain entities and database models.
"""

from timekeep.domain.models.project import Project
from timekeep.infrastructure.db.models import ProjectModel


class ProjectMapper:
    """Maps between Project domain entity and ProjectModel database model."""

    def domain_to_model(self, project: Project) -> ProjectModel:
        """Convert Project domain entity to ProjectModel."""
        model = ProjectModel(
            name=project.name,
            client_id=project.client_id,
            created_at=project.created_at,
            updated_at=project.updated_at,
        )
        if project.id is not None:
            model.id = project.id
        return model

    def model_to_domain(self, model: ProjectModel) -> Project:
        """Convert ProjectModel to Project domain entity."""
        project = Project(id=str(model.id), name=model.name, client_id=str(model.client_id))
        if model.created_at:
            project.created_at = model.created_at
        if model.updated_at:
            project.updated_at = model.updated_at
        return project
