"""
Shared fixtures: in-memory repositories and a few users.
"""

import copy
import itertools
from contextlib import asynccontextmanager
from dataclasses import replace
from typing import AsyncIterator, Dict, List, Optional

import pytest

from timekeep.domain.models.base import EntityNotFoundError, InvalidStateError
from timekeep.domain.models.client import Client
from timekeep.domain.models.project import Project
from timekeep.domain.models.time_entry import TimeEntry, TimeEntryView
from timekeep.domain.models.user import User, UserRole
from timekeep.domain.repositories import (
    ClientRepository,
    ProjectRepository,
    TimeEntryFilter,
    TimeEntryRepository,
    UserRepository,
)
from timekeep.infrastructure.validation.validators import InputValidator
from timekeep.infrastructure.web.dependencies import Repositories

_ids = itertools.count(1)


def _next_id(prefix: str) -> str:
    return f"{prefix}-{next(_ids)}"


class InMemoryUserRepository(UserRepository):
    def __init__(self):
        self.users: Dict[str, User] = {}

    async def get(self, user_id: str) -> Optional[User]:
        return self.users.get(user_id)

    async def list_all(self) -> List[User]:
        return sorted(self.users.values(), key=lambda user: user.full_name)

    async def set_role(self, user_id: str, role: UserRole) -> Optional[User]:
        user = self.users.get(user_id)
        if user is None:
            return None
        self.users[user_id] = replace(user, role=role)
        return self.users[user_id]


class InMemoryClientRepository(ClientRepository):
    def __init__(self):
        self.rows: Dict[str, Client] = {}

    async def get(self, client_id: str) -> Optional[Client]:
        row = self.rows.get(client_id)
        return copy.deepcopy(row) if row else None

    async def list_all(self) -> List[Client]:
        return [copy.deepcopy(row) for row in sorted(self.rows.values(), key=lambda c: c.name)]

    async def add(self, client: Client) -> Client:
        client.id = client.id or _next_id("client")
        self.rows[client.id] = copy.deepcopy(client)
        return client

    async def update(self, client: Client) -> Client:
        if client.id not in self.rows:
            raise EntityNotFoundError("Client", client.id)
        self.rows[client.id] = copy.deepcopy(client)
        return client

    async def delete(self, client_id: str) -> bool:
        return self.rows.pop(client_id, None) is not None


class InMemoryProjectRepository(ProjectRepository):
    def __init__(self):
        self.rows: Dict[str, Project] = {}

    async def get(self, project_id: str) -> Optional[Project]:
        row = self.rows.get(project_id)
        return copy.deepcopy(row) if row else None

    async def list_all(self, client_id: Optional[str] = None) -> List[Project]:
        rows = [row for row in self.rows.values() if client_id is None or row.client_id == client_id]
        return [copy.deepcopy(row) for row in sorted(rows, key=lambda p: p.name)]

    async def count_by_client(self, client_id: str) -> int:
        return sum(1 for row in self.rows.values() if row.client_id == client_id)

    async def add(self, project: Project) -> Project:
        project.id = project.id or _next_id("project")
        self.rows[project.id] = copy.deepcopy(project)
        return project

    async def update(self, project: Project) -> Project:
        if project.id not in self.rows:
            raise EntityNotFoundError("Project", project.id)
        self.rows[project.id] = copy.deepcopy(project)
        return project

    async def delete(self, project_id: str) -> bool:
        return self.rows.pop(project_id, None) is not None


class InMemoryTimeEntryRepository(TimeEntryRepository):
    """Stores copies so that callers only see changes they persisted."""

    def __init__(self, projects: InMemoryProjectRepository, clients: InMemoryClientRepository,
                 users: InMemoryUserRepository):
        self.rows: Dict[str, TimeEntry] = {}
        self.projects = projects
        self.savepoints = 0
        self.clients = clients
        self.users = users

    def _client_id(self, entry: TimeEntry) -> Optional[str]:
        project = self.projects.rows.get(entry.project_id)
        return project.client_id if project else None

    def _matching(self, criteria: TimeEntryFilter) -> List[TimeEntry]:
        rows = [row for row in self.rows.values() if criteria.matches(row, self._client_id(row))]
        return sorted(rows, key=lambda row: (row.date, row.created_at))

    async def get(self, entry_id: str) -> Optional[TimeEntry]:
        row = self.rows.get(entry_id)
        return copy.deepcopy(row) if row else None

    async def find(self, criteria: TimeEntryFilter) -> List[TimeEntry]:
        return [copy.deepcopy(row) for row in self._matching(criteria)]

    async def find_views(self, criteria: TimeEntryFilter) -> List[TimeEntryView]:
        views = []
        for row in self._matching(criteria):
            project = self.projects.rows.get(row.project_id)
            client = self.clients.rows.get(project.client_id) if project else None
            user = self.users.users.get(row.user_id)
            views.append(TimeEntryView(
                entry=copy.deepcopy(row),
                project_name=project.name if project else "Unknown project",
                client_id=client.id if client else None,
                client_name=client.name if client else "Unknown client",
                user_full_name=user.display_name if user else "Unknown user",
            ))
        return views

    async def count(self, criteria: TimeEntryFilter) -> int:
        return len(self._matching(criteria))

    async def add(self, entry: TimeEntry) -> TimeEntry:
        entry.id = _next_id("entry")
        stored = copy.deepcopy(entry)
        stored.pull_events()
        self.rows[entry.id] = stored
        return entry

    async def update(self, entry: TimeEntry, expected_version: int) -> TimeEntry:
        stored = self.rows.get(entry.id)
        if stored is None:
            raise EntityNotFoundError("TimeEntry", entry.id)
        if stored.version != expected_version:
            raise InvalidStateError("The entry was changed by someone else. Reload and try again.")
        entry.version = expected_version + 1
        stored = copy.deepcopy(entry)
        stored.pull_events()
        self.rows[entry.id] = stored
        return entry

    async def delete(self, entry_id: str) -> bool:
        return self.rows.pop(entry_id, None) is not None

    @asynccontextmanager
    async def savepoint(self) -> AsyncIterator[None]:
        self.savepoints += 1
        snapshot = copy.deepcopy(self.rows)
        try:
            yield
        except Exception:
            self.rows = snapshot
            raise


class InMemoryStore:
    """All repositories over one shared in-memory data set, plus seeding helpers."""

    def __init__(self):
        self.users = InMemoryUserRepository()
        self.clients = InMemoryClientRepository()
        self.projects = InMemoryProjectRepository()
        self.time_entries = InMemoryTimeEntryRepository(self.projects, self.clients, self.users)

    def repositories(self) -> Repositories:
        return Repositories(
            time_entries=self.time_entries,
            projects=self.projects,
            clients=self.clients,
            users=self.users,
        )

    def add_user(self, user: User) -> User:
        self.users.users[user.id] = user
        return user

    def add_client(self, name: str, client_id: Optional[str] = None) -> Client:
        client = Client(id=client_id or _next_id("client"), name=name)
        self.clients.rows[client.id] = client
        return client

    def add_project(self, name: str, client: Client, project_id: Optional[str] = None) -> Project:
        project = Project(id=project_id or _next_id("project"), name=name, client_id=client.id)
        self.projects.rows[project.id] = project
        return project

    def add_entry(self, **fields) -> TimeEntry:
        entry = TimeEntry(id=_next_id("entry"), **fields)
        self.time_entries.rows[entry.id] = copy.deepcopy(entry)
        return entry

    def stored(self, entry_id: str) -> TimeEntry:
        return self.time_entries.rows[entry_id]


@pytest.fixture
def store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture
def owner(store) -> User:
    return store.add_user(User(id="user-1", email="anna@example.com", full_name="Anna Virtanen"))


@pytest.fixture
def other_user(store) -> User:
    return store.add_user(User(id="user-2", email="erik@example.com", full_name="Erik Lund"))


@pytest.fixture
def admin(store) -> User:
    return store.add_user(User(id="admin-1", email="boss@example.com", full_name="Maria Admin", role=UserRole.ADMIN))


@pytest.fixture
def client_a(store) -> Client:
    return store.add_client("Acme Oy", client_id="client-a")


@pytest.fixture
def project_a(store, client_a) -> Project:
    return store.add_project("Website", client_a, project_id="project-a")


@pytest.fixture
def project_b(store, client_a) -> Project:
    return store.add_project("Mobile app", client_a, project_id="project-b")


@pytest.fixture
def validator() -> InputValidator:
    return InputValidator()
