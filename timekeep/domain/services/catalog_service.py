"""Catalog service for clients and projects.
Anyone signed in may read the catalog; only admins may change it.
"""

import logging
from typing import List, Optional

from timekeep.domain.models.base import EntityNotFoundError, PermissionDeniedError, ReferentialConflictError
from timekeep.domain.models.client import Client
from timekeep.domain.models.project import Project
from timekeep.domain.models.user import User
from timekeep.domain.repositories.client_repository import ClientRepository
from timekeep.domain.repositories.project_repository import ProjectRepository
from timekeep.domain.repositories.time_entry_repository import TimeEntryFilter, TimeEntryRepository

logger = logging.getLogger(__name__)


class CatalogService:
    """Domain service for client and project maintenance."""

    def __init__(
        self,
        clients: ClientRepository,
        projects: ProjectRepository,
        time_entries: TimeEntryRepository,
    ):
        self.clients = clients
        self.projects = projects
        self.time_entries = time_entries

    # Clients

    async def list_clients(self) -> List[Client]:
        return await self.clients.list_all()

    async def get_client(self, client_id: str) -> Client:
        client = await self.clients.get(client_id)
        if client is None:
            raise EntityNotFoundError("Client", client_id)
        return client

    async def create_client(self, actor: User, name: str) -> Client:
        self._require_admin(actor)
        client = Client(name=name)
        saved = await self.clients.add(client)
        logger.info(f"Client {saved.id} created by {actor.id}")
        return saved

    async def rename_client(self, actor: User, client_id: str, name: str) -> Client:
        self._require_admin(actor)
        client = await self.get_client(client_id)
        client.rename(name)
        return await self.clients.update(client)

    async def delete_client(self, actor: User, client_id: str) -> None:
        """Delete a client that has no projects."""
        self._require_admin(actor)
        await self.get_client(client_id)

        if await self.projects.count_by_client(client_id):
            raise ReferentialConflictError("Cannot delete a client that still has projects")

        await self.clients.delete(client_id)
        logger.info(f"Client {client_id} deleted by {actor.id}")

    # Projects

    async def list_projects(self, client_id: Optional[str] = None) -> List[Project]:
        return await self.projects.list_all(client_id)

    async def get_project(self, project_id: str) -> Project:
        project = await self.projects.get(project_id)
        if project is None:
            raise EntityNotFoundError("Project", project_id)
        return project

    async def create_project(self, actor: User, name: str, client_id: str) -> Project:
        self._require_admin(actor)
        project = Project(name=name, client_id=client_id)
        await self.get_client(client_id)
        saved = await self.projects.add(project)
        logger.info(f"Project {saved.id} created by {actor.id}")
        return saved

    async def update_project(
        self,
        actor: User,
        project_id: str,
        name: Optional[str] = None,
        client_id: Optional[str] = None,
    ) -> Project:
        self._require_admin(actor)
        project = await self.get_project(project_id)

        if name is not None:
            project.rename(name)
        if client_id is not None and client_id != project.client_id:
            await self.get_client(client_id)
            project.move_to_client(client_id)

        return await self.projects.update(project)

    async def delete_project(self, actor: User, project_id: str) -> None:
        """Delete a project that has no time entries."""
        self._require_admin(actor)
        await self.get_project(project_id)

        if await self.time_entries.count(TimeEntryFilter(project_id=project_id)):
            raise ReferentialConflictError("Cannot delete a project that has time entries")

        await self.projects.delete(project_id)
        logger.info(f"Project {project_id} deleted by {actor.id}")

    @staticmethod
    def _require_admin(actor: User) -> None:
        if not actor.is_admin:
            raise PermissionDeniedError()
