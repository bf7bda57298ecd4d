"""
Project repository interface.
Defines the contract for project data persistence operations.
"""

from abc import ABC, abstractmethod
from typing import List, Optional

from timekeep.domain.models.project import Project


class ProjectRepository(ABC):
    """
    Repository interface for Project entity.
    """

    @abstractmethod
    async def get(self, project_id: str) -> Optional[Project]:
        """
        Find a project by its ID.
        Returns None if not found.
        """
        pass

    @abstractmethod
    async def list_all(self, client_id: Optional[str] = None) -> List[Project]:
        """
        List projects ordered by name, optionally only those of one client.
        """
        pass

    @abstractmethod
    async def count_by_client(self, client_id: str) -> int:
        """
        Count the projects that belong to a client.
        """
        pass

    @abstractmethod
    async def add(self, project: Project) -> Project:
        """
        Persist a new project.
        """
        pass

    @abstractmethod
    async def update(self, project: Project) -> Project:
        """
        Persist changes to an existing project.
        """
        pass

    @abstractmethod
    async def delete(self, project_id: str) -> bool:
        """
        Delete a project.
        Returns True if deleted, False if not found.
        """
        pass
