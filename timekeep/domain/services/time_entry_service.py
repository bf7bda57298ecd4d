"""Time entry service for the owner side of the entry lifecycle.
Handles creating, editing, submitting, deleting and copying entries.
"""

import logging
from dataclasses import replace
from datetime import date, timedelta
from decimal import Decimal
from typing import Any, Callable, List, Optional, Protocol, Union

from timekeep.domain.models.base import (
    DomainException,
    EntityNotFoundError,
    InvalidStateError,
    ValidationError,
)
from timekeep.domain.models.batch import BatchResult
from timekeep.domain.models.time_entry import TimeEntry, TimeEntryStatus, TimeEntryView
from timekeep.domain.models.user import User
from timekeep.domain.repositories.project_repository import ProjectRepository
from timekeep.domain.repositories.time_entry_repository import TimeEntryFilter, TimeEntryRepository
from timekeep.domain.services.audit import record_events

logger = logging.getLogger(__name__)

HoursInput = Union[str, int, float, Decimal]


class TextValidator(Protocol):
    """Anything that can validate and sanitize a description."""

    def validate_description(self, description: Any) -> Any:
        ...


def clean_text(validator: TextValidator, value: Optional[str], field: str = "description") -> Optional[str]:
    """Validate ``value`` as free text and return it trimmed. Escaping is left to output."""
    if value is None:
        return None
    result = validator.validate_description(value)
    if not result.is_valid:
        raise ValidationError(result.error, field)
    return result.value


class TimeEntryService:
    """
    Domain service for owner operations on time entries.

    Every guard (validation, ownership, status) runs before the store is
    asked to change anything.
    """

    def __init__(
        self,
        time_entries: TimeEntryRepository,
        projects: ProjectRepository,
        validator: TextValidator,
        today: Callable[[], date] = date.today,
    ):
        self.time_entries = time_entries
        self.projects = projects
        self.validator = validator
        self.today = today

    async def get_entry(self, entry_id: str) -> TimeEntry:
        entry = await self.time_entries.get(entry_id)
        if entry is None:
            raise EntityNotFoundError("TimeEntry", entry_id)
        return entry

    async def create_entry(
        self,
        actor: User,
        project_id: str,
        entry_date: date,
        hours: HoursInput,
        description: Optional[str] = None,
    ) -> TimeEntry:
        """Create a draft entry for ``actor``."""
        description = clean_text(self.validator, description)
        entry = TimeEntry.create(
            owner=actor,
            project_id=project_id,
            entry_date=entry_date,
            hours=hours,
            description=description,
        )
        await self._require_project(project_id)

        saved = await self.time_entries.add(entry)
        logger.info(f"Time entry {saved.id} created by {actor.id}")
        return saved

    async def update_entry(
        self,
        actor: User,
        entry_id: str,
        *,
        project_id: Optional[str] = None,
        entry_date: Optional[date] = None,
        hours: Optional[HoursInput] = None,
        description: Optional[str] = None,
        expected_version: Optional[int] = None,
    ) -> TimeEntry:
        """
        Edit an entry. Owners may edit their drafts; admins may edit any entry
        but never move an approved entry to another project.
        """
        entry = await self.get_entry(entry_id)
        entry.ensure_can_modify(actor)
        version = self._check_version(entry, expected_version)

        description = clean_text(self.validator, description)
        if project_id is not None and project_id != entry.project_id:
            await self._require_project(project_id)

        entry.update(
            actor,
            project_id=project_id,
            entry_date=entry_date,
            hours=hours,
            description=description,
        )
        return await self.time_entries.update(entry, expected_version=version)

    async def submit_entry(self, actor: User, entry_id: str, expected_version: Optional[int] = None) -> TimeEntry:
        """draft -> pending for one of the actor's own entries."""
        entry = await self.get_entry(entry_id)
        version = self._check_version(entry, expected_version)
        entry.submit(actor)
        saved = await self.time_entries.update(entry, expected_version=version)
        record_events(entry)
        logger.info(f"Time entry {entry_id} submitted by {actor.id}")
        return saved

    async def submit_period(self, actor: User, date_from: date, date_to: date) -> BatchResult:
        """Submit every draft the actor has in ``[date_from, date_to]``."""
        if date_from > date_to:
            raise ValidationError("Start date must be before end date", "date_from")

        drafts = await self.time_entries.find(TimeEntryFilter(
            user_id=actor.id,
            statuses=(TimeEntryStatus.DRAFT,),
            date_from=date_from,
            date_to=date_to,
        ))

        result = BatchResult()
        for entry in drafts:
            try:
                async with self.time_entries.savepoint():
                    version = entry.version
                    entry.submit(actor)
                    await self.time_entries.update(entry, expected_version=version)
                record_events(entry)
                result.record_success(entry.id)
            except DomainException as e:
                logger.warning(f"Could not submit time entry {entry.id}: {e.message}")
                result.record_failure(entry.id, e.message, e.code)

        logger.info(
            f"Submitted {result.succeeded} entries for {actor.id} "
            f"({date_from} - {date_to}), {result.failed} failed"
        )
        return result

    async def delete_entry(self, actor: User, entry_id: str) -> None:
        """Owners delete their own draft or pending entries; admins delete anything."""
        entry = await self.get_entry(entry_id)
        entry.ensure_can_delete(actor)

        deleted = await self.time_entries.delete(entry_id)
        if not deleted:
            raise EntityNotFoundError("TimeEntry", entry_id)
        logger.info(f"Time entry {entry_id} deleted by {actor.id}")

    async def copy_previous_day(self, actor: User, target_date: Optional[date] = None) -> List[TimeEntry]:
        """
        Copy the actor's entries from the day before ``target_date`` onto
        ``target_date`` as new drafts.

        Returns the created entries; an empty list when there was nothing to
        copy. Refuses when the target day already has entries.
        """
        target_date = target_date or self.today()
        previous_date = target_date - timedelta(days=1)

        previous = await self.time_entries.find(TimeEntryFilter(
            user_id=actor.id, date_from=previous_date, date_to=previous_date
        ))
        if not previous:
            return []

        existing = await self.time_entries.count(TimeEntryFilter(
            user_id=actor.id, date_from=target_date, date_to=target_date
        ))
        if existing:
            raise InvalidStateError("There are already entries for this day")

        created = []
        for entry in previous:
            created.append(await self.time_entries.add(entry.copy_to(target_date)))

        logger.info(f"Copied {len(created)} entries for {actor.id} from {previous_date} to {target_date}")
        return created

    async def list_entries(self, actor: User, criteria: TimeEntryFilter) -> List[TimeEntryView]:
        """
        List entries with display names. Non-admins only ever see their own.
        """
        if not actor.is_admin and criteria.user_id != actor.id:
            criteria = replace(criteria, user_id=actor.id)
        return await self.time_entries.find_views(criteria)

    async def _require_project(self, project_id: str) -> None:
        if await self.projects.get(project_id) is None:
            raise EntityNotFoundError("Project", project_id)

    @staticmethod
    def _check_version(entry: TimeEntry, expected_version: Optional[int]) -> int:
        if expected_version is not None and expected_version != entry.version:
            raise InvalidStateError("The entry was changed by someone else. Reload and try again.")
        return entry.version
