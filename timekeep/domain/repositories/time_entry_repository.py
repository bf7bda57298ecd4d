"""
Time Entry repository interface.
Defines the contract for time entry data persistence operations.
"""

from abc import ABC, abstractmethod
from contextlib import asynccontextmanager
from dataclasses import dataclass
from datetime import date
from typing import AsyncIterator, List, Optional

from timekeep.domain.models.time_entry import TimeEntry, TimeEntryStatus, TimeEntryView


@dataclass(frozen=True)
class TimeEntryFilter:
    """Conjunctive filter for time entry queries. Unset fields do not filter."""

    user_id: Optional[str] = None
    project_id: Optional[str] = None
    client_id: Optional[str] = None
    statuses: Optional[tuple[TimeEntryStatus, ...]] = None
    date_from: Optional[date] = None
    date_to: Optional[date] = None

    def matches(self, entry: TimeEntry, client_id: Optional[str] = None) -> bool:
        """Evaluate the filter in memory. ``client_id`` is the entry's project client."""
        if self.user_id is not None and entry.user_id != self.user_id:
            return False
        if self.project_id is not None and entry.project_id != self.project_id:
            return False
        if self.client_id is not None and client_id != self.client_id:
            return False
        if self.statuses is not None and entry.status not in self.statuses:
            return False
        if self.date_from is not None and entry.date < self.date_from:
            return False
        if self.date_to is not None and entry.date > self.date_to:
            return False
        return True


class TimeEntryRepository(ABC):
    """
    Repository interface for TimeEntry entity.
    Defines all operations needed for time entry data persistence.
    """

    @abstractmethod
    async def get(self, entry_id: str) -> Optional[TimeEntry]:
        """
        Find a time entry by its ID.
        Returns None if not found.
        """
        pass

    @abstractmethod
    async def find(self, criteria: TimeEntryFilter) -> List[TimeEntry]:
        """
        Find time entries matching ``criteria``, ordered by date then creation time.
        """
        pass

    @abstractmethod
    async def find_views(self, criteria: TimeEntryFilter) -> List[TimeEntryView]:
        """
        Same as ``find`` but joined with project, client and user names.
        """
        pass

    @abstractmethod
    async def count(self, criteria: TimeEntryFilter) -> int:
        """
        Count time entries matching ``criteria``.
        """
        pass

    @abstractmethod
    async def add(self, entry: TimeEntry) -> TimeEntry:
        """
        Persist a new time entry.
        Returns the entry with its store-assigned ID.
        """
        pass

    @abstractmethod
    async def update(self, entry: TimeEntry, expected_version: int) -> TimeEntry:
        """
        Persist changes to an existing entry.

        The write only applies when the stored version equals
        ``expected_version``; the stored version is then incremented.
        Raises InvalidStateError on a stale version and EntityNotFoundError
        when the entry no longer exists.
        """
        pass

    @abstractmethod
    async def delete(self, entry_id: str) -> bool:
        """
        Delete a time entry.
        Returns True if deleted, False if not found.
        """
        pass

    @asynccontextmanager
    async def savepoint(self) -> AsyncIterator[None]:
        """
        Scope for one item of a batch.

        Writes made inside are undone when the block raises, without
        affecting writes made before or after it. Stores without nested
        transactions need not override this.
        """
        yield
