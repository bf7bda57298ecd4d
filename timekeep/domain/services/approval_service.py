"""Approval service for the admin side of the entry lifecycle.
Handles single and batch approval and returning entries for edit.
"""

import logging
from datetime import date, datetime
from typing import Callable, List, Optional

from timekeep.domain.models.base import (
    DomainException,
    EntityNotFoundError,
    InvalidStateError,
    PermissionDeniedError,
    ValidationError,
    utcnow,
)
from timekeep.domain.models.batch import BatchResult
from timekeep.domain.models.time_entry import TimeEntry, TimeEntryStatus, TimeEntryView
from timekeep.domain.models.user import User
from timekeep.domain.repositories.time_entry_repository import TimeEntryFilter, TimeEntryRepository
from timekeep.domain.services.audit import record_events
from timekeep.domain.services.time_entry_service import TextValidator, clean_text

logger = logging.getLogger(__name__)


class ApprovalService:
    """
    Domain service for approval workflow.

    Batch operations are not transactional as a whole. Each entry is approved
    inside its own savepoint and a failure is recorded without stopping the
    batch, so a batch can simply be run again: only entries still pending are
    picked up.
    """

    def __init__(
        self,
        time_entries: TimeEntryRepository,
        validator: TextValidator,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.time_entries = time_entries
        self.validator = validator
        self.clock = clock

    async def approve_entry(
        self,
        entry_id: str,
        approver: User,
        expected_version: Optional[int] = None,
    ) -> TimeEntry:
        """pending -> approved. Approving anything but a pending entry is an error."""
        self._require_admin(approver)
        entry = await self._get(entry_id)
        if expected_version is not None and expected_version != entry.version:
            raise InvalidStateError("The entry was changed by someone else. Reload and try again.")

        version = entry.version
        entry.approve(approver, at=self.clock())
        saved = await self.time_entries.update(entry, expected_version=version)
        record_events(entry)
        logger.info(f"Time entry {entry_id} approved by {approver.id}")
        return saved

    async def return_entry(self, entry_id: str, approver: User, comment: Optional[str] = None) -> TimeEntry:
        """pending|approved -> draft with an optional comment for the owner."""
        self._require_admin(approver)
        comment = clean_text(self.validator, comment, "comment")
        entry = await self._get(entry_id)

        version = entry.version
        entry.return_to_draft(approver, comment)
        saved = await self.time_entries.update(entry, expected_version=version)
        record_events(entry)
        logger.info(f"Time entry {entry_id} returned to draft by {approver.id}")
        return saved

    async def approve_all_for_user(self, target_user_id: str, approver: User) -> BatchResult:
        """Approve every pending entry owned by ``target_user_id``."""
        self._require_admin(approver)
        pending = await self.time_entries.find(TimeEntryFilter(
            user_id=target_user_id,
            statuses=(TimeEntryStatus.PENDING,),
        ))
        result = await self._approve_each(pending, approver, override=False)
        logger.info(
            f"Bulk approval for user {target_user_id} by {approver.id}: "
            f"{result.succeeded} approved, {result.failed} failed"
        )
        return result

    async def approve_all_pending_in_range(
        self,
        date_from: date,
        date_to: date,
        approver: User,
        include_drafts: bool = False,
        user_id: Optional[str] = None,
    ) -> BatchResult:
        """
        Approve every pending entry dated in ``[date_from, date_to]``.

        With ``include_drafts`` drafts in the range are approved too. This is
        the admin override and the only way a draft skips the pending state.
        """
        self._require_admin(approver)
        if date_from > date_to:
            raise ValidationError("Start date must be before end date", "date_from")

        statuses = (TimeEntryStatus.PENDING, TimeEntryStatus.DRAFT) if include_drafts else (TimeEntryStatus.PENDING,)
        candidates = await self.time_entries.find(TimeEntryFilter(
            user_id=user_id,
            statuses=statuses,
            date_from=date_from,
            date_to=date_to,
        ))
        result = await self._approve_each(candidates, approver, override=include_drafts)
        logger.info(
            f"Bulk approval {date_from} - {date_to} by {approver.id}: "
            f"{result.succeeded} approved, {result.failed} failed"
        )
        return result

    async def list_pending(
        self,
        approver: User,
        user_id: Optional[str] = None,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
    ) -> List[TimeEntryView]:
        """Pending entries with display names, for the approval screen."""
        self._require_admin(approver)
        return await self.time_entries.find_views(TimeEntryFilter(
            user_id=user_id,
            statuses=(TimeEntryStatus.PENDING,),
            date_from=date_from,
            date_to=date_to,
        ))

    async def _approve_each(self, entries: List[TimeEntry], approver: User, override: bool) -> BatchResult:
        result = BatchResult()
        approved_at = self.clock()
        for entry in entries:
            try:
                async with self.time_entries.savepoint():
                    version = entry.version
                    entry.approve(approver, at=approved_at, override=override)
                    await self.time_entries.update(entry, expected_version=version)
                record_events(entry)
                result.record_success(entry.id)
            except DomainException as e:
                logger.warning(f"Could not approve time entry {entry.id}: {e.message}")
                result.record_failure(entry.id, e.message, e.code)
        return result

    async def _get(self, entry_id: str) -> TimeEntry:
        entry = await self.time_entries.get(entry_id)
        if entry is None:
            raise EntityNotFoundError("TimeEntry", entry_id)
        return entry

    @staticmethod
    def _require_admin(actor: User) -> None:
        if not actor.is_admin:
            raise PermissionDeniedError()
