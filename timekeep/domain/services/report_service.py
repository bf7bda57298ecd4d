"""Report service for grouping and summing logged hours.
All sums are exact: hours are Decimal throughout.
"""

from dataclasses import dataclass, field, replace
from datetime import date, timedelta
from decimal import Decimal
from enum import Enum
from typing import Dict, Hashable, Iterable, List, Optional, Union

from timekeep.domain.models.base import ValidationError
from timekeep.domain.models.time_entry import TimeEntry, TimeEntryStatus, TimeEntryView
from timekeep.domain.models.user import User
from timekeep.domain.repositories.time_entry_repository import TimeEntryFilter, TimeEntryRepository

UNKNOWN_PROJECT = "Unknown project"
UNKNOWN_CLIENT = "Unknown client"

EntryLike = Union[TimeEntry, TimeEntryView]


class GroupBy(str, Enum):
    DAY = "day"
    WEEK = "week"
    PROJECT = "project"
    CLIENT = "client"


@dataclass(frozen=True)
class WeekKey:
    week_number: int
    week_start: date
    week_end: date

    def __str__(self) -> str:
        return f"{self.week_start.isoformat()}/{self.week_number}"


@dataclass
class GroupTotals:
    label: str
    total_hours: Decimal = Decimal("0")
    entry_count: int = 0
    entries: List[TimeEntryView] = field(default_factory=list)

    def add(self, view: TimeEntryView) -> None:
        self.total_hours += view.entry.hours
        self.entry_count += 1
        self.entries.append(view)


@dataclass(frozen=True)
class WeeklySummary:
    total_hours: Decimal
    project_hours: Dict[str, Decimal]
    client_hours: Dict[str, Decimal]
    daily_hours: Dict[str, Decimal]
    week_range: str

    def to_dict(self) -> dict:
        return {
            "total_hours": self.total_hours,
            "project_hours": dict(self.project_hours),
            "client_hours": dict(self.client_hours),
            "daily_hours": dict(self.daily_hours),
            "week_range": self.week_range,
        }


@dataclass(frozen=True)
class ExportRow:
    date: date
    client: str
    project: str
    description: str
    hours: Decimal
    status: TimeEntryStatus
    user: str


@dataclass
class PendingGroup:
    user_id: str
    user_name: str
    total_hours: Decimal = Decimal("0")
    entries: List[TimeEntryView] = field(default_factory=list)


def as_view(item: EntryLike) -> TimeEntryView:
    """Wrap a bare entry so every report helper works on views."""
    if isinstance(item, TimeEntryView):
        return item
    return TimeEntryView(entry=item)


def week_bounds(day: date, week_start_day: int = 0) -> tuple[date, date]:
    """First and last day of the week containing ``day``. 0 = Monday."""
    start = day - timedelta(days=(day.weekday() - week_start_day) % 7)
    return start, start + timedelta(days=6)


def week_key(day: date, week_start_day: int = 0) -> WeekKey:
    """
    Week key of ``day``. The number is the ISO week of the week's Thursday,
    which is exactly the ISO week number when weeks start on Monday.
    """
    start, end = week_bounds(day, week_start_day)
    return WeekKey(
        week_number=(start + timedelta(days=3)).isocalendar()[1],
        week_start=start,
        week_end=end,
    )


def _key_and_label(view: TimeEntryView, group_by: GroupBy, week_start_day: int) -> tuple[Hashable, str]:
    entry = view.entry
    if group_by == GroupBy.DAY:
        key = entry.date.isoformat()
        return key, key
    if group_by == GroupBy.WEEK:
        key = week_key(entry.date, week_start_day)
        return key, f"Week {key.week_number} ({key.week_start.isoformat()} - {key.week_end.isoformat()})"
    if group_by == GroupBy.PROJECT:
        return entry.project_id, view.project_name or UNKNOWN_PROJECT
    return view.client_id, view.client_name or UNKNOWN_CLIENT


def aggregate(
    entries: Iterable[EntryLike],
    group_by: Union[GroupBy, str],
    week_start_day: int = 0,
) -> Dict[Hashable, GroupTotals]:
    """
    Group entries in one pass. Keys keep first-seen order.

    Keys: ISO date string for ``day``, ``WeekKey`` for ``week``, project id
    for ``project`` and client id (None when unknown) for ``client``.
    """
    try:
        group_by = GroupBy(group_by)
    except ValueError:
        raise ValidationError(f"Unknown grouping: {group_by}", "group_by")

    groups: Dict[Hashable, GroupTotals] = {}
    for item in entries:
        view = as_view(item)
        key, label = _key_and_label(view, group_by, week_start_day)
        group = groups.get(key)
        if group is None:
            group = groups[key] = GroupTotals(label=label)
        group.add(view)
    return groups


def total_hours(entries: Iterable[EntryLike]) -> Decimal:
    return sum((as_view(item).entry.hours for item in entries), Decimal("0"))


def weekly_summary(entries: Iterable[EntryLike], week_start: date, week_end: date) -> WeeklySummary:
    """Totals for one week, keyed by project name, client name and day."""
    total = Decimal("0")
    project_hours: Dict[str, Decimal] = {}
    client_hours: Dict[str, Decimal] = {}
    daily_hours: Dict[str, Decimal] = {}

    for item in entries:
        view = as_view(item)
        hours = view.entry.hours
        total += hours

        project = view.project_name or UNKNOWN_PROJECT
        project_hours[project] = project_hours.get(project, Decimal("0")) + hours

        client = view.client_name or UNKNOWN_CLIENT
        client_hours[client] = client_hours.get(client, Decimal("0")) + hours

        day = view.entry.date.isoformat()
        daily_hours[day] = daily_hours.get(day, Decimal("0")) + hours

    return WeeklySummary(
        total_hours=total,
        project_hours=project_hours,
        client_hours=client_hours,
        daily_hours=daily_hours,
        week_range=f"{week_start.isoformat()} - {week_end.isoformat()}",
    )


def build_export_rows(entries: Iterable[EntryLike]) -> List[ExportRow]:
    """Rows for CSV/XLSX/PDF exports, ordered by date."""
    views = sorted((as_view(item) for item in entries), key=lambda view: view.entry.date)
    return [
        ExportRow(
            date=view.entry.date,
            client=view.client_name or UNKNOWN_CLIENT,
            project=view.project_name or UNKNOWN_PROJECT,
            description=view.entry.description or "",
            hours=view.entry.hours,
            status=view.entry.status,
            user=view.user_full_name,
        )
        for view in views
    ]


def group_pending_by_user(entries: Iterable[EntryLike]) -> Dict[str, PendingGroup]:
    """Pending entries per owner, for the approval screen."""
    groups: Dict[str, PendingGroup] = {}
    for item in entries:
        view = as_view(item)
        if not view.entry.is_pending:
            continue
        group = groups.get(view.entry.user_id)
        if group is None:
            group = groups[view.entry.user_id] = PendingGroup(
                user_id=view.entry.user_id,
                user_name=view.user_full_name,
            )
        group.total_hours += view.entry.hours
        group.entries.append(view)
    return groups


class ReportService:
    """Loads entries for reports and applies the aggregation helpers."""

    def __init__(self, time_entries: TimeEntryRepository, week_start_day: int = 0):
        self.time_entries = time_entries
        self.week_start_day = week_start_day

    async def aggregate(self, actor: User, criteria: TimeEntryFilter, group_by: Union[GroupBy, str]) -> Dict[Hashable, GroupTotals]:
        views = await self._load(actor, criteria)
        return aggregate(views, group_by, self.week_start_day)

    async def export_rows(self, actor: User, criteria: TimeEntryFilter) -> List[ExportRow]:
        return build_export_rows(await self._load(actor, criteria))

    async def current_week(self, actor: User, today: Optional[date] = None) -> tuple[WeeklySummary, List[TimeEntryView]]:
        """The actor's own entries in the week containing ``today`` and their summary."""
        start, end = week_bounds(today or date.today(), self.week_start_day)
        views = await self.time_entries.find_views(TimeEntryFilter(
            user_id=actor.id, date_from=start, date_to=end
        ))
        return weekly_summary(views, start, end), views

    async def current_week_summary(self, actor: User, today: Optional[date] = None) -> WeeklySummary:
        summary, _ = await self.current_week(actor, today)
        return summary

    async def _load(self, actor: User, criteria: TimeEntryFilter) -> List[TimeEntryView]:
        if not actor.is_admin:
            criteria = replace(criteria, user_id=actor.id)
        return await self.time_entries.find_views(criteria)
