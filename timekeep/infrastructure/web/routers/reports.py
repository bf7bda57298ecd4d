"""
Reports router.
Aggregated hours and export rows.
"""

from datetime import date
from typing import Annotated, List, Optional

from fastapi import APIRouter, Depends, Query

from timekeep.application.dto.report_dto import AggregateResponseDTO, ExportRowDTO, WeeklySummaryDTO
from timekeep.domain.models.time_entry import TimeEntryStatus
from timekeep.domain.repositories.time_entry_repository import TimeEntryFilter
from timekeep.domain.services.report_service import GroupBy, ReportService
from timekeep.infrastructure.auth.dependencies import CurrentUser
from timekeep.infrastructure.rate_limiting.dependencies import api_rate_limit
from timekeep.infrastructure.web.dependencies import get_report_service

router = APIRouter(dependencies=[Depends(api_rate_limit)])

Service = Annotated[ReportService, Depends(get_report_service)]


class ReportFilters:
    """Query parameters shared by the report endpoints."""

    def __init__(
        self,
        user_id: Optional[str] = Query(None, description="Filter by owner (admins only)"),
        project_id: Optional[str] = Query(None, description="Filter by project ID"),
        client_id: Optional[str] = Query(None, description="Filter by client ID"),
        statuses: Optional[List[TimeEntryStatus]] = Query(None, alias="status", description="Filter by status"),
        date_from: Optional[date] = Query(None, description="Filter from date"),
        date_to: Optional[date] = Query(None, description="Filter to date"),
    ):
        self.criteria = TimeEntryFilter(
            user_id=user_id,
            project_id=project_id,
            client_id=client_id,
            statuses=tuple(statuses) if statuses else None,
            date_from=date_from,
            date_to=date_to,
        )


Filters = Annotated[ReportFilters, Depends()]


@router.get("/aggregate", response_model=AggregateResponseDTO)
async def aggregate(
    user: CurrentUser,
    service: Service,
    filters: Filters,
    group_by: GroupBy = Query(GroupBy.DAY, description="day, week, project or client"),
    include_entries: bool = Query(False, description="Include the entries of each group"),
):
    """
    Sum hours per group.

    Groups keep the order in which they first appear, with entries ordered
    by date. Non-admins only see their own entries.
    """
    groups = await service.aggregate(user, filters.criteria, group_by)
    return AggregateResponseDTO.from_groups(group_by, groups, include_entries)


@router.get("/export-rows", response_model=List[ExportRowDTO])
async def export_rows(user: CurrentUser, service: Service, filters: Filters):
    """Flat rows for CSV, XLSX and PDF exports, ordered by date."""
    rows = await service.export_rows(user, filters.criteria)
    return [ExportRowDTO.from_row(row) for row in rows]


@router.get("/current-week", response_model=WeeklySummaryDTO)
async def current_week(user: CurrentUser, service: Service):
    """The current user's hours this week by project, client and day."""
    summary = await service.current_week_summary(user)
    return WeeklySummaryDTO.from_summary(summary)
