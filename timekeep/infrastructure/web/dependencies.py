"""
FastAPI dependencies for sessions, repositories and domain services.
"""

from dataclasses import dataclass
from typing import Annotated, AsyncIterator

from fastapi import Depends, Request
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from timekeep.application.use_cases.chat_use_cases import ChatService
from timekeep.domain.models.base import UpstreamError
from timekeep.domain.repositories import ClientRepository, ProjectRepository, TimeEntryRepository, UserRepository
from timekeep.domain.services.approval_service import ApprovalService
from timekeep.domain.services.catalog_service import CatalogService
from timekeep.domain.services.report_service import ReportService
from timekeep.domain.services.time_entry_service import TimeEntryService
from timekeep.domain.services.user_service import UserService
from timekeep.infrastructure.db.database import session_scope
from timekeep.infrastructure.repositories import (
    SQLAlchemyClientRepository,
    SQLAlchemyProjectRepository,
    SQLAlchemyTimeEntryRepository,
    SQLAlchemyUserRepository,
)
from timekeep.infrastructure.web.container import ServiceContainer


@dataclass
class Repositories:
    time_entries: TimeEntryRepository
    projects: ProjectRepository
    clients: ClientRepository
    users: UserRepository


def get_container(request: Request) -> ServiceContainer:
    return request.app.state.container


async def get_session(
    container: Annotated[ServiceContainer, Depends(get_container)],
) -> AsyncIterator[AsyncSession]:
    """One session per request, committed when the endpoint succeeds."""
    if container.session_factory is None:
        raise UpstreamError("Database is not configured", service="database")
    try:
        async with session_scope(container.session_factory) as session:
            yield session
    except SQLAlchemyError as e:
        raise UpstreamError("The data store is unavailable", service="database") from e


def get_repositories(session: Annotated[AsyncSession, Depends(get_session)]) -> Repositories:
    return Repositories(
        time_entries=SQLAlchemyTimeEntryRepository(session),
        projects=SQLAlchemyProjectRepository(session),
        clients=SQLAlchemyClientRepository(session),
        users=SQLAlchemyUserRepository(session),
    )


def get_time_entry_service(
    repositories: Annotated[Repositories, Depends(get_repositories)],
    container: Annotated[ServiceContainer, Depends(get_container)],
) -> TimeEntryService:
    return TimeEntryService(repositories.time_entries, repositories.projects, container.validator)


def get_approval_service(
    repositories: Annotated[Repositories, Depends(get_repositories)],
    container: Annotated[ServiceContainer, Depends(get_container)],
) -> ApprovalService:
    return ApprovalService(repositories.time_entries, container.validator)


def get_catalog_service(repositories: Annotated[Repositories, Depends(get_repositories)]) -> CatalogService:
    return CatalogService(repositories.clients, repositories.projects, repositories.time_entries)


def get_user_service(repositories: Annotated[Repositories, Depends(get_repositories)]) -> UserService:
    return UserService(repositories.users)


def get_report_service(
    repositories: Annotated[Repositories, Depends(get_repositories)],
    container: Annotated[ServiceContainer, Depends(get_container)],
) -> ReportService:
    return ReportService(repositories.time_entries, container.settings.week_start_day)


def get_chat_service(
    container: Annotated[ServiceContainer, Depends(get_container)],
    time_entry_service: Annotated[TimeEntryService, Depends(get_time_entry_service)],
    report_service: Annotated[ReportService, Depends(get_report_service)],
    catalog_service: Annotated[CatalogService, Depends(get_catalog_service)],
) -> ChatService:
    return ChatService(
        validator=container.validator,
        rate_limiters=container.rate_limiters,
        security_log=container.security_log,
        time_entry_service=time_entry_service,
        report_service=report_service,
        catalog_service=catalog_service,
        llm=container.llm_client,
    )
