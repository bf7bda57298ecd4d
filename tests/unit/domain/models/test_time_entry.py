"""
Unit tests for TimeEntry domain model.
"""

import pytest
from datetime import date, datetime, timezone
from decimal import Decimal

from timekeep.domain.models.base import InvalidStateError, PermissionDeniedError, ValidationError
from timekeep.domain.models.time_entry import TimeEntry, TimeEntryStatus, parse_hours
from timekeep.domain.models.user import User, UserRole


OWNER = User(id="user-1", full_name="Anna Virtanen")
STRANGER = User(id="user-2", full_name="Erik Lund")
ADMIN = User(id="admin-1", full_name="Maria Admin", role=UserRole.ADMIN)


def make_entry(**overrides) -> TimeEntry:
    fields = dict(id="entry-1", user_id=OWNER.id, project_id="project-a", date=date(2024, 6, 3), hours="7.5")
    fields.update(overrides)
    return TimeEntry(**fields)


class TestParseHours:
    """Test cases for hour parsing."""

    @pytest.mark.parametrize("value, expected", [
        ("7.5", Decimal("7.5")),
        (8, Decimal("8")),
        (0.25, Decimal("0.25")),
        ("24", Decimal("24")),
        (Decimal("1.75"), Decimal("1.75")),
    ])
    def test_valid_hours(self, value, expected):
        """Test that quarter-hour quantities up to 24 are accepted."""
        assert parse_hours(value) == expected

    @pytest.mark.parametrize("value, message", [
        ("0", "greater than zero"),
        ("-1", "greater than zero"),
        ("24.25", "cannot exceed"),
        ("1.1", "multiple of"),
        ("abc", "must be a number"),
        ("NaN", "must be a number"),
        (True, "must be a number"),
    ])
    def test_invalid_hours(self, value, message):
        """Test that out-of-range or malformed hours are rejected."""
        with pytest.raises(ValidationError, match=message):
            parse_hours(value)

    def test_float_input_is_exact(self):
        """Test that float input does not leak binary rounding into the Decimal."""
        assert str(parse_hours(2.5)) == "2.5"


class TestTimeEntryCreation:
    """Test cases for creating time entries."""

    def test_create_is_draft(self):
        """Test that new entries start as drafts without approval data."""
        entry = TimeEntry.create(OWNER, "project-a", date(2024, 6, 3), "2.5", "Planning")

        assert entry.status == TimeEntryStatus.DRAFT
        assert entry.user_id == OWNER.id
        assert entry.hours == Decimal("2.5")
        assert entry.approved_by is None
        assert entry.approved_at is None
        assert entry.version == 1
        assert entry.is_new

    def test_approved_entry_requires_approval_data(self):
        """Test that an approved entry without approver is invalid."""
        with pytest.raises(ValidationError, match="approver"):
            make_entry(status=TimeEntryStatus.APPROVED)

    def test_draft_with_approval_data_is_invalid(self):
        """Test that only approved entries carry approval fields."""
        with pytest.raises(ValidationError, match="Only approved"):
            make_entry(approved_by=ADMIN.id, approved_at=datetime.now(timezone.utc))

    def test_project_required(self):
        """Test that a project is required."""
        with pytest.raises(ValidationError, match="Project is required"):
            make_entry(project_id="")

    def test_status_string_is_converted(self):
        """Test that a stored status string becomes the enum."""
        assert make_entry(status="pending").status == TimeEntryStatus.PENDING


class TestTimeEntryLifecycle:
    """Test cases for the draft -> pending -> approved lifecycle."""

    def test_submit_moves_draft_to_pending(self):
        """Test owner submission."""
        entry = make_entry()
        entry.submit(OWNER)

        assert entry.status == TimeEntryStatus.PENDING
        events = entry.pull_events()
        assert [event.event_name for event in events] == ["time_entry.submitted"]

    def test_submit_by_other_user_is_denied(self):
        """Test that only the owner can submit."""
        with pytest.raises(PermissionDeniedError):
            make_entry().submit(STRANGER)

    def test_admin_cannot_submit_for_owner(self):
        """Test that submission is an owner action even for admins."""
        with pytest.raises(PermissionDeniedError):
            make_entry().submit(ADMIN)

    def test_submit_pending_is_invalid(self):
        """Test that a pending entry cannot be submitted again."""
        entry = make_entry(status=TimeEntryStatus.PENDING)
        with pytest.raises(InvalidStateError):
            entry.submit(OWNER)

    def test_approve_sets_approval_fields(self):
        """Test that approval records approver and time together."""
        entry = make_entry(status=TimeEntryStatus.PENDING)
        at = datetime(2024, 6, 5, 12, 0, tzinfo=timezone.utc)

        entry.approve(ADMIN, at=at)

        assert entry.status == TimeEntryStatus.APPROVED
        assert entry.approved_by == ADMIN.id
        assert entry.approved_at == at

    def test_approve_requires_admin(self):
        """Test that regular users cannot approve."""
        with pytest.raises(PermissionDeniedError):
            make_entry(status=TimeEntryStatus.PENDING).approve(OWNER)

    def test_approve_draft_without_override_is_invalid(self):
        """Test that a draft must be submitted before approval."""
        with pytest.raises(InvalidStateError, match="submitted"):
            make_entry().approve(ADMIN)

    def test_approve_draft_with_override(self):
        """Test that the bulk override approves a draft directly."""
        entry = make_entry()
        entry.approve(ADMIN, override=True)
        assert entry.is_approved

    def test_approve_twice_is_invalid(self):
        """Test that approving an approved entry fails."""
        entry = make_entry(status=TimeEntryStatus.PENDING)
        entry.approve(ADMIN)
        with pytest.raises(InvalidStateError, match="already approved"):
            entry.approve(ADMIN)

    def test_return_to_draft_clears_approval(self):
        """Test that returning an approved entry clears approval data and keeps the comment."""
        entry = make_entry(status=TimeEntryStatus.PENDING)
        entry.approve(ADMIN)

        entry.return_to_draft(ADMIN, "Wrong project")

        assert entry.status == TimeEntryStatus.DRAFT
        assert entry.approved_by is None
        assert entry.approved_at is None
        assert entry.rejection_comment == "Wrong project"

    def test_return_draft_is_invalid(self):
        """Test that a draft cannot be returned."""
        with pytest.raises(InvalidStateError):
            make_entry().return_to_draft(ADMIN)

    def test_submit_clears_previous_comment(self):
        """Test that resubmitting a returned entry drops the old comment."""
        entry = make_entry(status=TimeEntryStatus.PENDING)
        entry.return_to_draft(ADMIN, "Add details")
        entry.submit(OWNER)
        assert entry.rejection_comment is None


class TestTimeEntryEditing:
    """Test cases for edit and delete rules."""

    def test_owner_edits_draft(self):
        """Test that owners can edit their drafts."""
        entry = make_entry()
        entry.update(OWNER, hours="3", description="Review")

        assert entry.hours == Decimal("3")
        assert entry.description == "Review"

    def test_owner_cannot_edit_pending(self):
        """Test that pending entries are locked for their owner."""
        entry = make_entry(status=TimeEntryStatus.PENDING)
        with pytest.raises(InvalidStateError, match="Only draft"):
            entry.update(OWNER, hours="3")

    def test_owner_cannot_touch_approved(self):
        """Test that approved entries deny the owner."""
        entry = make_entry(status=TimeEntryStatus.PENDING)
        entry.approve(ADMIN)
        with pytest.raises(PermissionDeniedError):
            entry.update(OWNER, hours="3")
        with pytest.raises(PermissionDeniedError):
            entry.ensure_can_delete(OWNER)

    def test_admin_edits_approved_hours_but_not_project(self):
        """Test that admins may edit approved entries except for the project."""
        entry = make_entry(status=TimeEntryStatus.PENDING)
        entry.approve(ADMIN)

        entry.update(ADMIN, hours="6")
        assert entry.hours == Decimal("6")

        with pytest.raises(InvalidStateError, match="project"):
            entry.update(ADMIN, project_id="project-b")

    def test_failed_update_leaves_entry_unchanged(self):
        """Test that invalid hours do not partially apply an edit."""
        entry = make_entry()
        with pytest.raises(ValidationError):
            entry.update(OWNER, description="New text", hours="99")
        assert entry.description is None
        assert entry.hours == Decimal("7.5")

    def test_stranger_cannot_delete(self):
        """Test that other users cannot delete someone else's entry."""
        with pytest.raises(PermissionDeniedError):
            make_entry().ensure_can_delete(STRANGER)

    def test_copy_to_creates_fresh_draft(self):
        """Test that a copy is a new draft on the target day."""
        entry = make_entry(status=TimeEntryStatus.PENDING, description="Standup")
        copied = entry.copy_to(date(2024, 6, 4))

        assert copied.id is None
        assert copied.status == TimeEntryStatus.DRAFT
        assert copied.date == date(2024, 6, 4)
        assert copied.hours == entry.hours
        assert copied.description == "Standup"
