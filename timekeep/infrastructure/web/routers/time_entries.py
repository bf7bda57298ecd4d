"""
Time tracking router.
Handles the owner side of time entries: logging, editing, submitting and copying.
"""

from datetime import date
from typing import Annotated, List, Optional

from fastapi import APIRouter, Depends, Query, status

from timekeep.application.dto.base_dto import BatchResultResponseDTO
from timekeep.application.dto.time_entry_dto import (
    CopyPreviousDayRequestDTO,
    CreateTimeEntryRequestDTO,
    SubmitPeriodRequestDTO,
    SubmitTimeEntryRequestDTO,
    TimeEntryResponseDTO,
    UpdateTimeEntryRequestDTO,
)
from timekeep.domain.models.time_entry import TimeEntryStatus
from timekeep.domain.repositories.time_entry_repository import TimeEntryFilter
from timekeep.domain.services.time_entry_service import TimeEntryService
from timekeep.infrastructure.auth.dependencies import CurrentUser
from timekeep.infrastructure.rate_limiting.dependencies import api_rate_limit
from timekeep.infrastructure.web.dependencies import get_time_entry_service

router = APIRouter(dependencies=[Depends(api_rate_limit)])

Service = Annotated[TimeEntryService, Depends(get_time_entry_service)]


@router.post("", status_code=status.HTTP_201_CREATED, response_model=TimeEntryResponseDTO)
async def create_time_entry(request: CreateTimeEntryRequestDTO, user: CurrentUser, service: Service):
    """
    Log hours as a new draft entry.

    - **project_id**: Project the hours are logged against
    - **date**: Day the work was done
    - **hours**: Positive, at most 24, in steps of 0.25
    - **description**: Optional, at most 500 characters
    """
    entry = await service.create_entry(
        user,
        project_id=request.project_id,
        entry_date=request.date,
        hours=request.hours,
        description=request.description,
    )
    return TimeEntryResponseDTO.from_entity(entry)


@router.get("", response_model=List[TimeEntryResponseDTO])
async def list_time_entries(
    user: CurrentUser,
    service: Service,
    user_id: Optional[str] = Query(None, description="Filter by owner (admins only)"),
    project_id: Optional[str] = Query(None, description="Filter by project ID"),
    client_id: Optional[str] = Query(None, description="Filter by client ID"),
    statuses: Optional[List[TimeEntryStatus]] = Query(None, alias="status", description="Filter by status"),
    date_from: Optional[date] = Query(None, description="Filter from date"),
    date_to: Optional[date] = Query(None, description="Filter to date"),
):
    """
    List time entries with project, client and user names.
    Non-admins always get their own entries only.
    """
    criteria = TimeEntryFilter(
        user_id=user_id,
        project_id=project_id,
        client_id=client_id,
        statuses=tuple(statuses) if statuses else None,
        date_from=date_from,
        date_to=date_to,
    )
    views = await service.list_entries(user, criteria)
    return [TimeEntryResponseDTO.from_view(view) for view in views]


@router.post("/submit-period", response_model=BatchResultResponseDTO)
async def submit_period(request: SubmitPeriodRequestDTO, user: CurrentUser, service: Service):
    """Submit every draft of the current user in the date range."""
    result = await service.submit_period(user, request.date_from, request.date_to)
    return BatchResultResponseDTO.from_result(result)


@router.post("/copy-previous-day", status_code=status.HTTP_201_CREATED, response_model=List[TimeEntryResponseDTO])
async def copy_previous_day(user: CurrentUser, service: Service, request: Optional[CopyPreviousDayRequestDTO] = None):
    """
    Copy the previous day's entries as drafts.

    - **target_date**: Day to copy onto, defaults to today
    """
    target_date = request.target_date if request else None
    created = await service.copy_previous_day(user, target_date)
    return [TimeEntryResponseDTO.from_entity(entry) for entry in created]


@router.patch("/{entry_id}", response_model=TimeEntryResponseDTO)
async def update_time_entry(entry_id: str, request: UpdateTimeEntryRequestDTO, user: CurrentUser, service: Service):
    """
    Edit an entry.

    Owners edit their drafts. Admins edit any entry but cannot move an
    approved entry to another project.
    """
    entry = await service.update_entry(
        user,
        entry_id,
        project_id=request.project_id,
        entry_date=request.date,
        hours=request.hours,
        description=request.description,
        expected_version=request.expected_version,
    )
    return TimeEntryResponseDTO.from_entity(entry)


@router.delete("/{entry_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_time_entry(entry_id: str, user: CurrentUser, service: Service):
    """Delete an entry. Approved entries can only be deleted by admins."""
    await service.delete_entry(user, entry_id)


@router.post("/{entry_id}/submit", response_model=TimeEntryResponseDTO)
async def submit_time_entry(
    entry_id: str,
    user: CurrentUser,
    service: Service,
    request: Optional[SubmitTimeEntryRequestDTO] = None,
):
    """Submit a draft for approval."""
    entry = await service.submit_entry(user, entry_id, request.expected_version if request else None)
    return TimeEntryResponseDTO.from_entity(entry)
