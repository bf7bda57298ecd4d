"""
Report DTOs for the application layer.
"""

from datetime import date
from decimal import Decimal
from typing import Dict, Hashable, List, Optional

from pydantic import Field

from timekeep.domain.models.time_entry import TimeEntryStatus
from timekeep.domain.services.report_service import ExportRow, GroupBy, GroupTotals, WeekKey, WeeklySummary

from .base_dto import BaseDTO
from .time_entry_dto import TimeEntryResponseDTO


class GroupTotalsResponseDTO(BaseDTO):
    """One bucket of an aggregation."""

    key: Optional[str] = Field(description="Day, week start, project ID or client ID")
    label: str
    total_hours: Decimal
    entry_count: int
    week_number: Optional[int] = None
    week_start: Optional[date] = None
    week_end: Optional[date] = None
    entries: List[TimeEntryResponseDTO] = Field(default_factory=list)

    @classmethod
    def from_group(cls, key: Hashable, group: GroupTotals, include_entries: bool = False) -> "GroupTotalsResponseDTO":
        dto = cls(
            key=None if key is None else str(key),
            label=group.label,
            total_hours=group.total_hours,
            entry_count=group.entry_count,
        )
        if isinstance(key, WeekKey):
            dto.key = key.week_start.isoformat()
            dto.week_number = key.week_number
            dto.week_start = key.week_start
            dto.week_end = key.week_end
        if include_entries:
            dto.entries = [TimeEntryResponseDTO.from_view(view) for view in group.entries]
        return dto


class AggregateResponseDTO(BaseDTO):
    """Aggregated hours in first-seen group order."""

    group_by: GroupBy
    total_hours: Decimal
    groups: List[GroupTotalsResponseDTO]

    @classmethod
    def from_groups(
        cls,
        group_by: GroupBy,
        groups: Dict[Hashable, GroupTotals],
        include_entries: bool = False,
    ) -> "AggregateResponseDTO":
        return cls(
            group_by=group_by,
            total_hours=sum((group.total_hours for group in groups.values()), Decimal("0")),
            groups=[GroupTotalsResponseDTO.from_group(key, group, include_entries) for key, group in groups.items()],
        )


class ExportRowDTO(BaseDTO):
    date: date
    client: str
    project: str
    description: str
    hours: Decimal
    status: TimeEntryStatus
    user: str

    @classmethod
    def from_row(cls, row: ExportRow) -> "ExportRowDTO":
        return cls(
            date=row.date,
            client=row.client,
            project=row.project,
            description=row.description,
            hours=row.hours,
            status=row.status,
            user=row.user,
        )


class WeeklySummaryDTO(BaseDTO):
    total_hours: Decimal
    project_hours: Dict[str, Decimal]
    client_hours: Dict[str, Decimal]
    daily_hours: Dict[str, Decimal]
    week_range: str

    @classmethod
    def from_summary(cls, summary: WeeklySummary) -> "WeeklySummaryDTO":
        return cls(**summary.to_dict())
