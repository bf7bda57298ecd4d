"""
TimeEntry domain model.
Represents one day's logged hours against one project and its approval lifecycle.

Lifecycle::

    (new) -> draft -> pending -> approved
                ^        |          |
                +--------+----------+   (admin return for edit)

A direct draft -> approved move exists only as the admin bulk override.
"""

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Optional, Union

from timekeep.domain.models.base import (
    BaseEntity,
    DomainEvent,
    InvalidStateError,
    PermissionDeniedError,
    ValidationError,
    utcnow,
)
from timekeep.domain.models.user import User


HOURS_STEP = Decimal("0.25")
MAX_HOURS_PER_ENTRY = Decimal("24")


class TimeEntryStatus(str, Enum):
    """Time entry status."""
    DRAFT = "draft"
    PENDING = "pending"
    APPROVED = "approved"


# Domain Events

class TimeEntrySubmittedEvent(DomainEvent):
    """Event raised when the owner submits an entry for approval."""

    def __init__(self, entry_id: Optional[str], user_id: str):
        super().__init__()
        self.entry_id = entry_id
        self.user_id = user_id

    @property
    def event_name(self) -> str:
        return "time_entry.submitted"


class TimeEntryApprovedEvent(DomainEvent):
    """Event raised when time entry is approved."""

    def __init__(self, entry_id: Optional[str], approved_by: str, approved_hours: Decimal, override: bool):
        super().__init__()
        self.entry_id = entry_id
        self.approved_by = approved_by
        self.approved_hours = approved_hours
        self.override = override

    @property
    def event_name(self) -> str:
        return "time_entry.approved"


class TimeEntryReturnedEvent(DomainEvent):
    """Event raised when an admin returns an entry to draft."""

    def __init__(self, entry_id: Optional[str], returned_by: str, comment: Optional[str]):
        super().__init__()
        self.entry_id = entry_id
        self.returned_by = returned_by
        self.comment = comment

    @property
    def event_name(self) -> str:
        return "time_entry.returned"


def parse_hours(value: Union[str, int, float, Decimal]) -> Decimal:
    """Convert user input to a Decimal hour quantity and enforce the hour rules."""
    if isinstance(value, bool):
        raise ValidationError("Hours must be a number", "hours")
    try:
        hours = value if isinstance(value, Decimal) else Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        raise ValidationError("Hours must be a number", "hours")

    if not hours.is_finite():
        raise ValidationError("Hours must be a number", "hours")
    if hours <= 0:
        raise ValidationError("Hours must be greater than zero", "hours")
    if hours > MAX_HOURS_PER_ENTRY:
        raise ValidationError(f"Hours cannot exceed {MAX_HOURS_PER_ENTRY}", "hours")
    if hours % HOURS_STEP != 0:
        raise ValidationError(f"Hours must be a multiple of {HOURS_STEP}", "hours")
    return hours


@dataclass(kw_only=True)
class TimeEntry(BaseEntity):
    """
    TimeEntry entity.

    Permission checks live on the entity so that every caller gets the same
    error surface whatever access control the store applies on its own.
    """

    user_id: str
    project_id: str
    date: date
    hours: Decimal
    description: Optional[str] = None
    status: TimeEntryStatus = TimeEntryStatus.DRAFT
    approved_by: Optional[str] = None
    approved_at: Optional[datetime] = None
    rejection_comment: Optional[str] = None
    version: int = 1

    def __post_init__(self):
        if not isinstance(self.status, TimeEntryStatus):
            try:
                self.status = TimeEntryStatus(self.status)
            except ValueError:
                raise ValidationError(f"Unknown status: {self.status}", "status")
        self.hours = parse_hours(self.hours)
        self.validate()

    @classmethod
    def create(
        cls,
        owner: User,
        project_id: str,
        entry_date: date,
        hours: Union[str, int, float, Decimal],
        description: Optional[str] = None,
    ) -> "TimeEntry":
        """Create a new draft entry owned by ``owner``."""
        return cls(
            user_id=owner.id,
            project_id=project_id,
            date=entry_date,
            hours=hours,
            description=description or None,
        )

    def validate(self) -> None:
        """Validate time entry state."""
        if not self.user_id:
            raise ValidationError("User ID is required", "user_id")

        if not self.project_id:
            raise ValidationError("Project is required", "project_id")

        if not isinstance(self.date, date):
            raise ValidationError("Date is required", "date")

        approval_fields = (self.approved_by is not None, self.approved_at is not None)
        if self.status == TimeEntryStatus.APPROVED:
            if approval_fields != (True, True):
                raise ValidationError("Approved entries must record approver and time", "approved_by")
        elif any(approval_fields):
            raise ValidationError("Only approved entries carry approval data", "approved_by")

    # Queries

    @property
    def is_draft(self) -> bool:
        return self.status == TimeEntryStatus.DRAFT

    @property
    def is_pending(self) -> bool:
        return self.status == TimeEntryStatus.PENDING

    @property
    def is_approved(self) -> bool:
        return self.status == TimeEntryStatus.APPROVED

    def is_owned_by(self, user: User) -> bool:
        return self.user_id == user.id

    # Guards

    def ensure_can_modify(self, actor: User) -> None:
        """Raise unless ``actor`` may change this entry at all."""
        if actor.is_admin:
            return
        if self.is_approved or not self.is_owned_by(actor):
            raise PermissionDeniedError()

    def ensure_can_delete(self, actor: User) -> None:
        """Owner may delete own draft/pending entries; admins may delete anything."""
        self.ensure_can_modify(actor)

    @staticmethod
    def _require_admin(actor: User) -> None:
        if not actor.is_admin:
            raise PermissionDeniedError()

    # Transitions

    def update(
        self,
        actor: User,
        *,
        project_id: Optional[str] = None,
        entry_date: Optional[date] = None,
        hours: Optional[Union[str, int, float, Decimal]] = None,
        description: Optional[str] = None,
    ) -> None:
        """Edit entry fields. Owners edit drafts only; admins edit any status."""
        self.ensure_can_modify(actor)

        if not actor.is_admin and not self.is_draft:
            raise InvalidStateError("Only draft entries can be edited")

        if project_id is not None and project_id != self.project_id and self.is_approved:
            raise InvalidStateError("The project of an approved entry cannot be changed")

        new_hours = parse_hours(hours) if hours is not None else self.hours

        if project_id is not None:
            self.project_id = project_id
        if entry_date is not None:
            self.date = entry_date
        self.hours = new_hours
        if description is not None:
            self.description = description or None

        self.validate()
        self.mark_as_updated()

    def submit(self, actor: User) -> None:
        """draft -> pending, by the owner."""
        if not self.is_owned_by(actor):
            raise PermissionDeniedError()
        self.ensure_can_modify(actor)
        if not self.is_draft:
            raise InvalidStateError(f"Only draft entries can be submitted (entry is {self.status.value})")

        self.status = TimeEntryStatus.PENDING
        self.rejection_comment = None
        self.mark_as_updated()
        self.add_event(TimeEntrySubmittedEvent(entry_id=self.id, user_id=self.user_id))

    def approve(self, approver: User, at: Optional[datetime] = None, override: bool = False) -> None:
        """
        pending -> approved, by an admin.

        ``override`` is only set by admin bulk actions and also lets a draft
        go straight to approved.
        """
        self._require_admin(approver)
        if self.is_approved:
            raise InvalidStateError("Entry is already approved")
        if self.is_draft and not override:
            raise InvalidStateError("Entry must be submitted before it can be approved")

        self.status = TimeEntryStatus.APPROVED
        self.approved_by = approver.id
        self.approved_at = at or utcnow()
        self.rejection_comment = None
        self.mark_as_updated()
        self.add_event(TimeEntryApprovedEvent(
            entry_id=self.id,
            approved_by=approver.id,
            approved_hours=self.hours,
            override=override,
        ))

    def return_to_draft(self, approver: User, comment: Optional[str] = None) -> None:
        """pending|approved -> draft, by an admin, with an optional comment for the owner."""
        self._require_admin(approver)
        if self.is_draft:
            raise InvalidStateError("Entry is already a draft")

        self.status = TimeEntryStatus.DRAFT
        self.approved_by = None
        self.approved_at = None
        self.rejection_comment = comment or None
        self.mark_as_updated()
        self.add_event(TimeEntryReturnedEvent(
            entry_id=self.id,
            returned_by=approver.id,
            comment=self.rejection_comment,
        ))

    def copy_to(self, entry_date: date) -> "TimeEntry":
        """A fresh draft with the same project, hours and description on another day."""
        return TimeEntry(
            user_id=self.user_id,
            project_id=self.project_id,
            date=entry_date,
            hours=self.hours,
            description=self.description,
        )


@dataclass(frozen=True)
class TimeEntryView:
    """An entry joined with display names. Built by the mappers, never stored."""

    entry: TimeEntry
    project_name: str = "Unknown project"
    client_id: Optional[str] = None
    client_name: str = "Unknown client"
    user_full_name: str = "Unknown user"
