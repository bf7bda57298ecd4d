"""
Unit tests for TimeEntryService domain service.
"""

import pytest
from datetime import date
from decimal import Decimal
from unittest.mock import AsyncMock

from timekeep.domain.models.base import (
    EntityNotFoundError,
    InvalidStateError,
    PermissionDeniedError,
    UpstreamError,
    ValidationError,
)
from timekeep.domain.models.time_entry import TimeEntry, TimeEntryStatus
from timekeep.domain.repositories import TimeEntryFilter, TimeEntryRepository
from timekeep.domain.services.time_entry_service import TimeEntryService


class TestTimeEntryService:
    """Test cases for owner operations."""

    @pytest.fixture(autouse=True)
    def setup(self, store, owner, other_user, admin, project_a, project_b, validator):
        """Set up test fixtures."""
        self.store = store
        self.owner = owner
        self.other_user = other_user
        self.admin = admin
        self.service = TimeEntryService(
            store.time_entries, store.projects, validator, today=lambda: date(2024, 6, 4)
        )

    def add_entry(self, user=None, day=date(2024, 6, 3), hours="2", status=TimeEntryStatus.DRAFT, **fields):
        return self.store.add_entry(
            user_id=(user or self.owner).id,
            project_id=fields.pop("project_id", "project-a"),
            date=day,
            hours=hours,
            status=status,
            **fields,
        )

    @pytest.mark.asyncio
    async def test_create_entry(self):
        """Test that a new entry is stored as a draft of the actor."""
        entry = await self.service.create_entry(self.owner, "project-a", date(2024, 6, 3), "1.5", "Design")

        stored = self.store.stored(entry.id)
        assert stored.status == TimeEntryStatus.DRAFT
        assert stored.user_id == self.owner.id
        assert stored.hours == Decimal("1.5")
        assert stored.description == "Design"

    @pytest.mark.asyncio
    async def test_description_is_stored_as_typed(self):
        """Test that descriptions are stored trimmed but not escaped."""
        entry = await self.service.create_entry(self.owner, "project-a", date(2024, 6, 3), "1", "  Tom's fix & test ")
        assert self.store.stored(entry.id).description == "Tom's fix & test"

    @pytest.mark.asyncio
    async def test_saving_the_same_description_leaves_it_unchanged(self):
        """Test that re-saving a description does not alter or lengthen it."""
        text = "R&D " + "x" * 495
        entry = await self.service.create_entry(self.owner, "project-a", date(2024, 6, 3), "1", text)

        updated = await self.service.update_entry(self.owner, entry.id, description=self.store.stored(entry.id).description)

        assert updated.description == text
        assert self.store.stored(entry.id).description == text
        assert len(self.store.stored(entry.id).description) == 499

    @pytest.mark.asyncio
    async def test_create_entry_rejects_script(self):
        """Test that injection signatures in descriptions are refused."""
        with pytest.raises(ValidationError) as exc_info:
            await self.service.create_entry(
                self.owner, "project-a", date(2024, 6, 3), "1", "<script>alert(1)</script>"
            )
        assert exc_info.value.field == "description"
        assert not self.store.time_entries.rows

    @pytest.mark.asyncio
    async def test_create_entry_unknown_project(self):
        """Test that entries must reference an existing project."""
        with pytest.raises(EntityNotFoundError):
            await self.service.create_entry(self.owner, "missing", date(2024, 6, 3), "1")

    @pytest.mark.asyncio
    async def test_create_entry_invalid_hours(self):
        """Test that invalid hours never reach the store."""
        with pytest.raises(ValidationError, match="multiple of"):
            await self.service.create_entry(self.owner, "project-a", date(2024, 6, 3), "1.3")
        assert not self.store.time_entries.rows

    @pytest.mark.asyncio
    async def test_submit_entry_bumps_version(self):
        """Test that submission is persisted with a new version."""
        entry = self.add_entry()

        saved = await self.service.submit_entry(self.owner, entry.id)

        assert saved.status == TimeEntryStatus.PENDING
        assert self.store.stored(entry.id).status == TimeEntryStatus.PENDING
        assert self.store.stored(entry.id).version == 2

    @pytest.mark.asyncio
    async def test_submit_with_stale_version(self):
        """Test that a stale expected version is refused."""
        entry = self.add_entry()
        with pytest.raises(InvalidStateError, match="changed by someone else"):
            await self.service.submit_entry(self.owner, entry.id, expected_version=5)

    @pytest.mark.asyncio
    async def test_update_only_own_drafts(self):
        """Test that another user's entry cannot be edited."""
        entry = self.add_entry()
        with pytest.raises(PermissionDeniedError):
            await self.service.update_entry(self.other_user, entry.id, hours="1")

    @pytest.mark.asyncio
    async def test_update_moves_to_existing_project(self):
        """Test that editing the project checks the new project exists."""
        entry = self.add_entry()

        with pytest.raises(EntityNotFoundError):
            await self.service.update_entry(self.owner, entry.id, project_id="missing")

        saved = await self.service.update_entry(self.owner, entry.id, project_id="project-b", hours="4")
        assert saved.project_id == "project-b"
        assert self.store.stored(entry.id).hours == Decimal("4")

    @pytest.mark.asyncio
    async def test_delete_pending_entry(self):
        """Test that owners can delete their pending entries."""
        entry = self.add_entry(status=TimeEntryStatus.PENDING)
        await self.service.delete_entry(self.owner, entry.id)
        assert entry.id not in self.store.time_entries.rows

    @pytest.mark.asyncio
    async def test_denied_delete_never_reaches_store(self):
        """Test that the store is not asked to delete when permission is denied."""
        entry = TimeEntry(
            id="entry-x", user_id=self.owner.id, project_id="project-a",
            date=date(2024, 6, 3), hours="1", status=TimeEntryStatus.PENDING,
        )
        entry.approve(self.admin)
        repository = AsyncMock(spec=TimeEntryRepository)
        repository.get.return_value = entry
        service = TimeEntryService(repository, self.store.projects, self.service.validator)

        with pytest.raises(PermissionDeniedError):
            await service.delete_entry(self.owner, "entry-x")

        repository.delete.assert_not_called()

    @pytest.mark.asyncio
    async def test_admin_deletes_approved_entry(self):
        """Test that admins may delete anything."""
        entry = self.add_entry(status=TimeEntryStatus.PENDING)
        self.store.stored(entry.id).approve(self.admin)

        await self.service.delete_entry(self.admin, entry.id)
        assert entry.id not in self.store.time_entries.rows

    @pytest.mark.asyncio
    async def test_delete_missing_entry(self):
        """Test that deleting an unknown entry is a not-found error."""
        with pytest.raises(EntityNotFoundError):
            await self.service.delete_entry(self.owner, "nope")

    @pytest.mark.asyncio
    async def test_submit_period_continues_on_error(self):
        """Test that one failing draft does not stop the others."""
        first = self.add_entry(day=date(2024, 6, 3))
        second = self.add_entry(day=date(2024, 6, 4))
        self.add_entry(day=date(2024, 6, 20))
        self.add_entry(user=self.other_user, day=date(2024, 6, 3))

        original_update = self.store.time_entries.update

        async def flaky_update(entry, expected_version):
            if entry.id == first.id:
                raise InvalidStateError("The entry was changed by someone else. Reload and try again.")
            return await original_update(entry, expected_version)

        self.store.time_entries.update = flaky_update

        result = await self.service.submit_period(self.owner, date(2024, 6, 1), date(2024, 6, 7))

        assert result.succeeded == 1
        assert result.failed == 1
        assert result.failures[0].entry_id == first.id
        assert result.failures[0].code == "invalid_state"
        assert self.store.stored(second.id).status == TimeEntryStatus.PENDING
        assert self.store.stored(first.id).status == TimeEntryStatus.DRAFT

    @pytest.mark.asyncio
    async def test_submit_period_undoes_half_written_item(self):
        """Test that a store failure after writing one draft leaves that draft as it was."""
        broken = self.add_entry(day=date(2024, 6, 3))
        fine = self.add_entry(day=date(2024, 6, 4))

        original_update = self.store.time_entries.update

        async def half_written_update(entry, expected_version):
            saved = await original_update(entry, expected_version)
            if entry.id == broken.id:
                raise UpstreamError("The data store is unavailable", service="database")
            return saved

        self.store.time_entries.update = half_written_update

        result = await self.service.submit_period(self.owner, date(2024, 6, 1), date(2024, 6, 7))

        assert result.succeeded_ids == [fine.id]
        assert result.failures[0].code == "upstream_error"
        assert self.store.time_entries.savepoints == 2
        assert self.store.stored(broken.id).status == TimeEntryStatus.DRAFT
        assert self.store.stored(broken.id).version == 1
        assert self.store.stored(fine.id).status == TimeEntryStatus.PENDING

    @pytest.mark.asyncio
    async def test_submit_period_rejects_inverted_range(self):
        """Test that the start date must not be after the end date."""
        with pytest.raises(ValidationError):
            await self.service.submit_period(self.owner, date(2024, 6, 7), date(2024, 6, 1))

    @pytest.mark.asyncio
    async def test_copy_previous_day(self):
        """Test that yesterday's entries are copied to today as drafts."""
        self.add_entry(day=date(2024, 6, 3), hours="3", description="Backend", status=TimeEntryStatus.PENDING)
        self.add_entry(day=date(2024, 6, 3), hours="1.25", project_id="project-b")

        created = await self.service.copy_previous_day(self.owner)

        assert len(created) == 2
        assert all(entry.date == date(2024, 6, 4) for entry in created)
        assert all(entry.status == TimeEntryStatus.DRAFT for entry in created)
        assert sorted(entry.hours for entry in created) == [Decimal("1.25"), Decimal("3")]
        assert await self.store.time_entries.count(TimeEntryFilter(date_from=date(2024, 6, 4))) == 2

    @pytest.mark.asyncio
    async def test_copy_previous_day_nothing_to_copy(self):
        """Test that an empty previous day yields an empty result."""
        assert await self.service.copy_previous_day(self.owner) == []

    @pytest.mark.asyncio
    async def test_copy_previous_day_refuses_when_target_has_entries(self):
        """Test that copying onto a day with entries is refused."""
        self.add_entry(day=date(2024, 6, 3))
        self.add_entry(day=date(2024, 6, 4))

        with pytest.raises(InvalidStateError, match="already entries"):
            await self.service.copy_previous_day(self.owner)

    @pytest.mark.asyncio
    async def test_list_entries_scoped_to_non_admin(self):
        """Test that non-admins only see their own entries."""
        self.add_entry()
        self.add_entry(user=self.other_user)

        views = await self.service.list_entries(self.owner, TimeEntryFilter(user_id=self.other_user.id))

        assert [view.entry.user_id for view in views] == [self.owner.id]
        assert views[0].project_name == "Website"
        assert views[0].client_name == "Acme Oy"

    @pytest.mark.asyncio
    async def test_list_entries_admin_sees_everyone(self):
        """Test that admins can list every user's entries."""
        self.add_entry()
        self.add_entry(user=self.other_user)

        views = await self.service.list_entries(self.admin, TimeEntryFilter())
        assert {view.entry.user_id for view in views} == {self.owner.id, self.other_user.id}
