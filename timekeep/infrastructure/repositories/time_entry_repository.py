"""
Time entry repository implementation using SQLAlchemy.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, List, Optional

from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from timekeep.domain.models.base import EntityNotFoundError, InvalidStateError, UpstreamError
from timekeep.domain.models.time_entry import TimeEntry, TimeEntryView
from timekeep.domain.repositories.time_entry_repository import (
    TimeEntryFilter,
    TimeEntryRepository as TimeEntryRepositoryInterface,
)
from timekeep.infrastructure.db.models import ProjectModel, TimeEntryModel
from timekeep.infrastructure.mappers.time_entry_mapper import TimeEntryMapper
from timekeep.infrastructure.repositories.base import is_valid_id, store_errors

logger = logging.getLogger(__name__)


class SQLAlchemyTimeEntryRepository(TimeEntryRepositoryInterface):
    """SQLAlchemy implementation of time entry repository."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.mapper = TimeEntryMapper()

    @store_errors
    async def get(self, entry_id: str) -> Optional[TimeEntry]:
        """Get time entry by ID."""
        if not is_valid_id(entry_id):
            return None
        model = await self.session.get(TimeEntryModel, entry_id)
        if not model:
            return None
        return self.mapper.model_to_domain(model)

    @store_errors
    async def find(self, criteria: TimeEntryFilter) -> List[TimeEntry]:
        """Get time entries matching the filter, oldest first."""
        models = await self._fetch(criteria)
        return [self.mapper.model_to_domain(model) for model in models]

    @store_errors
    async def find_views(self, criteria: TimeEntryFilter) -> List[TimeEntryView]:
        """Get time entries with project, client and user names."""
        models = await self._fetch(criteria)
        return [self.mapper.model_to_view(model) for model in models]

    @store_errors
    async def count(self, criteria: TimeEntryFilter) -> int:
        """Count time entries matching the filter."""
        query = self._apply_filter(
            select(func.count(TimeEntryModel.id)).select_from(TimeEntryModel),
            criteria,
        )
        result = await self.session.execute(query)
        return result.scalar_one()

    @store_errors
    async def add(self, entry: TimeEntry) -> TimeEntry:
        """Insert a new time entry and assign its ID."""
        model = self.mapper.domain_to_model(entry)
        self.session.add(model)
        await self.session.flush()

        entry.id = str(model.id)
        return entry

    @store_errors
    async def update(self, entry: TimeEntry, expected_version: int) -> TimeEntry:
        """Compare-and-set write on ``version``."""
        values = {
            "project_id": entry.project_id,
            "date": entry.date,
            "hours": entry.hours,
            "description": entry.description,
            "status": entry.status.value,
            "approved_by": entry.approved_by,
            "approved_at": entry.approved_at,
            "rejection_comment": entry.rejection_comment,
            "updated_at": entry.updated_at,
            "version": expected_version + 1,
        }
        result = await self.session.execute(
            update(TimeEntryModel)
            .where(TimeEntryModel.id == entry.id, TimeEntryModel.version == expected_version)
            .values(**values)
        )

        if result.rowcount == 0:
            exists = await self.session.scalar(
                select(func.count(TimeEntryModel.id)).where(TimeEntryModel.id == entry.id)
            )
            if not exists:
                raise EntityNotFoundError("TimeEntry", entry.id)
            raise InvalidStateError("The entry was changed by someone else. Reload and try again.")

        entry.version = expected_version + 1
        return entry

    @store_errors
    async def delete(self, entry_id: str) -> bool:
        """Delete time entry by ID."""
        if not is_valid_id(entry_id):
            return False
        result = await self.session.execute(
            delete(TimeEntryModel).where(TimeEntryModel.id == entry_id)
        )
        return result.rowcount > 0

    @asynccontextmanager
    async def savepoint(self) -> AsyncIterator[None]:
        """SAVEPOINT around the block, so a failed item does not abort the request transaction."""
        try:
            async with self.session.begin_nested():
                yield
        except SQLAlchemyError as e:
            logger.error(f"Savepoint failed: {e}", exc_info=True)
            raise UpstreamError("The data store is unavailable", service="database") from e

    async def _fetch(self, criteria: TimeEntryFilter) -> List[TimeEntryModel]:
        query = self._apply_filter(select(TimeEntryModel), criteria).order_by(
            TimeEntryModel.date, TimeEntryModel.created_at
        )
        result = await self.session.execute(query)
        return list(result.scalars().unique())

    @staticmethod
    def _apply_filter(query, criteria: TimeEntryFilter):
        if criteria.user_id is not None:
            query = query.where(TimeEntryModel.user_id == criteria.user_id)
        if criteria.project_id is not None:
            query = query.where(TimeEntryModel.project_id == criteria.project_id)
        if criteria.client_id is not None:
            query = query.where(
                TimeEntryModel.project_id.in_(
                    select(ProjectModel.id).where(ProjectModel.client_id == criteria.client_id)
                )
            )
        if criteria.statuses is not None:
            query = query.where(TimeEntryModel.status.in_([status.value for status in criteria.statuses]))
        if criteria.date_from is not None:
            query = query.where(TimeEntryModel.date >= criteria.date_from)
        if criteria.date_to is not None:
            query = query.where(TimeEntryModel.date <= criteria.date_to)
        return query
