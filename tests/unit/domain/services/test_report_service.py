"""
Unit tests for report aggregation.
"""

import pytest
from datetime import date
from decimal import Decimal

from timekeep.domain.models.base import ValidationError
from timekeep.domain.models.time_entry import TimeEntry, TimeEntryStatus, TimeEntryView
from timekeep.domain.repositories import TimeEntryFilter
from timekeep.domain.services.report_service import (
    GroupBy,
    ReportService,
    WeekKey,
    aggregate,
    build_export_rows,
    group_pending_by_user,
    total_hours,
    week_bounds,
    week_key,
    weekly_summary,
)


def view(day, hours, project_id, project_name, client_id="client-a", client_name="Acme Oy",
         user_id="user-1", status=TimeEntryStatus.DRAFT, description=None):
    entry = TimeEntry(
        user_id=user_id, project_id=project_id, date=day, hours=hours,
        status=status, description=description,
    )
    return TimeEntryView(
        entry=entry,
        project_name=project_name,
        client_id=client_id,
        client_name=client_name,
        user_full_name="Anna Virtanen" if user_id == "user-1" else "Erik Lund",
    )


@pytest.fixture
def sample_views():
    return [
        view(date(2024, 6, 3), "4", "p-a", "Website"),
        view(date(2024, 6, 3), "2", "p-b", "Mobile app", client_id="client-b", client_name="Beta Ab"),
        view(date(2024, 6, 4), "3", "p-a", "Website"),
    ]


class TestAggregate:
    """Test cases for grouping entries."""

    def test_group_by_day(self, sample_views):
        """Test daily totals in first-seen order."""
        groups = aggregate(sample_views, GroupBy.DAY)

        assert list(groups) == ["2024-06-03", "2024-06-04"]
        assert groups["2024-06-03"].total_hours == Decimal("6")
        assert groups["2024-06-04"].total_hours == Decimal("3")
        assert groups["2024-06-03"].entry_count == 2

    def test_group_by_project(self, sample_views):
        """Test project totals keyed by id with name labels."""
        groups = aggregate(sample_views, "project")

        assert groups["p-a"].total_hours == Decimal("7")
        assert groups["p-a"].label == "Website"
        assert groups["p-b"].total_hours == Decimal("2")

    def test_group_by_client(self, sample_views):
        """Test client totals."""
        groups = aggregate(sample_views, GroupBy.CLIENT)

        assert groups["client-a"].total_hours == Decimal("7")
        assert groups["client-b"].label == "Beta Ab"

    def test_group_totals_add_up(self, sample_views):
        """Test that every grouping sums to the overall total."""
        assert total_hours(sample_views) == Decimal("9")
        for group_by in GroupBy:
            groups = aggregate(sample_views, group_by)
            assert sum((group.total_hours for group in groups.values()), Decimal("0")) == Decimal("9")

    def test_group_by_week(self):
        """Test that week keys carry the ISO week and its bounds."""
        views = [
            view(date(2024, 6, 2), "1", "p-a", "Website"),
            view(date(2024, 6, 3), "2", "p-a", "Website"),
            view(date(2024, 6, 9), "3", "p-a", "Website"),
        ]

        groups = aggregate(views, GroupBy.WEEK)

        keys = list(groups)
        assert keys == [
            WeekKey(week_number=22, week_start=date(2024, 5, 27), week_end=date(2024, 6, 2)),
            WeekKey(week_number=23, week_start=date(2024, 6, 3), week_end=date(2024, 6, 9)),
        ]
        assert groups[keys[1]].total_hours == Decimal("5")
        assert groups[keys[1]].label == "Week 23 (2024-06-03 - 2024-06-09)"

    def test_decimal_sums_are_exact(self):
        """Test that many quarter hours add up without float drift."""
        views = [view(date(2024, 6, 3), "0.25", "p-a", "Website") for _ in range(10)]
        assert aggregate(views, GroupBy.DAY)["2024-06-03"].total_hours == Decimal("2.50")

    def test_bare_entries_are_accepted(self):
        """Test that entries without display names fall back to unknown labels."""
        entry = TimeEntry(user_id="user-1", project_id="p-x", date=date(2024, 6, 3), hours="1")

        groups = aggregate([entry], GroupBy.CLIENT)

        assert groups[None].label == "Unknown client"

    def test_unknown_grouping(self, sample_views):
        """Test that an unknown grouping is a validation error."""
        with pytest.raises(ValidationError, match="Unknown grouping"):
            aggregate(sample_views, "month")

    def test_empty_input(self):
        """Test that no entries give no groups."""
        assert aggregate([], GroupBy.DAY) == {}


class TestWeeks:
    """Test cases for week helpers."""

    def test_week_bounds_monday_start(self):
        """Test Monday-start weeks."""
        assert week_bounds(date(2024, 6, 5)) == (date(2024, 6, 3), date(2024, 6, 9))

    def test_week_bounds_sunday_start(self):
        """Test a configurable week start."""
        assert week_bounds(date(2024, 6, 5), week_start_day=6) == (date(2024, 6, 2), date(2024, 6, 8))

    def test_week_key_across_year_boundary(self):
        """Test that the last days of a year can belong to week 1."""
        key = week_key(date(2024, 12, 31))
        assert key.week_number == 1
        assert key.week_start == date(2024, 12, 30)


class TestSummaries:
    """Test cases for weekly summaries, export rows and pending groups."""

    def test_weekly_summary(self, sample_views):
        """Test the summary used by the chat assistant."""
        summary = weekly_summary(sample_views, date(2024, 6, 3), date(2024, 6, 9))

        assert summary.total_hours == Decimal("9")
        assert summary.project_hours == {"Website": Decimal("7"), "Mobile app": Decimal("2")}
        assert summary.client_hours == {"Acme Oy": Decimal("7"), "Beta Ab": Decimal("2")}
        assert summary.daily_hours == {"2024-06-03": Decimal("6"), "2024-06-04": Decimal("3")}
        assert summary.week_range == "2024-06-03 - 2024-06-09"

    def test_export_rows_sorted_by_date(self, sample_views):
        """Test that export rows are ordered by date."""
        rows = build_export_rows(list(reversed(sample_views)))

        assert [row.date for row in rows] == [date(2024, 6, 3), date(2024, 6, 3), date(2024, 6, 4)]
        assert rows[0].user == "Anna Virtanen"
        assert rows[0].description == ""

    def test_group_pending_by_user(self):
        """Test grouping of pending entries per owner."""
        views = [
            view(date(2024, 6, 3), "2", "p-a", "Website", status=TimeEntryStatus.PENDING),
            view(date(2024, 6, 4), "1.5", "p-a", "Website", status=TimeEntryStatus.PENDING),
            view(date(2024, 6, 4), "8", "p-a", "Website", user_id="user-2", status=TimeEntryStatus.PENDING),
            view(date(2024, 6, 4), "5", "p-a", "Website"),
        ]

        groups = group_pending_by_user(views)

        assert groups["user-1"].total_hours == Decimal("3.5")
        assert len(groups["user-1"].entries) == 2
        assert groups["user-2"].user_name == "Erik Lund"


class TestReportService:
    """Test cases for the report service."""

    @pytest.fixture(autouse=True)
    def setup(self, store, owner, other_user, admin, project_a, project_b):
        """Set up test fixtures."""
        self.store = store
        self.owner = owner
        self.admin = admin
        store.add_entry(user_id=owner.id, project_id="project-a", date=date(2024, 6, 3), hours="4")
        store.add_entry(user_id=owner.id, project_id="project-b", date=date(2024, 6, 4), hours="2")
        store.add_entry(user_id=other_user.id, project_id="project-a", date=date(2024, 6, 4), hours="8")
        self.service = ReportService(store.time_entries)

    @pytest.mark.asyncio
    async def test_non_admin_reports_are_scoped(self):
        """Test that regular users only aggregate their own entries."""
        groups = await self.service.aggregate(self.owner, TimeEntryFilter(), GroupBy.PROJECT)

        assert groups["project-a"].total_hours == Decimal("4")
        assert groups["project-b"].total_hours == Decimal("2")

    @pytest.mark.asyncio
    async def test_admin_reports_cover_everyone(self):
        """Test that admins aggregate all entries."""
        groups = await self.service.aggregate(self.admin, TimeEntryFilter(), GroupBy.PROJECT)
        assert groups["project-a"].total_hours == Decimal("12")

    @pytest.mark.asyncio
    async def test_current_week(self):
        """Test that the weekly summary covers the actor's week only."""
        summary, views = await self.service.current_week(self.owner, today=date(2024, 6, 5))

        assert summary.total_hours == Decimal("6")
        assert summary.week_range == "2024-06-03 - 2024-06-09"
        assert len(views) == 2

    @pytest.mark.asyncio
    async def test_export_rows(self):
        """Test export rows through the service."""
        rows = await self.service.export_rows(self.admin, TimeEntryFilter(project_id="project-a"))
        assert [row.hours for row in rows] == [Decimal("4"), Decimal("8")]
