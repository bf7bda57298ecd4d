"""
Approval router.
Admin-only endpoints for approving entries and returning them for edits.
"""

from datetime import date
from typing import Annotated, List, Optional

from fastapi import APIRouter, Depends, Query

from timekeep.application.dto.approval_dto import (
    ApproveRangeRequestDTO,
    ApproveTimeEntryRequestDTO,
    ReturnTimeEntryRequestDTO,
)
from timekeep.application.dto.base_dto import BatchResultResponseDTO
from timekeep.application.dto.time_entry_dto import TimeEntryResponseDTO
from timekeep.domain.services.approval_service import ApprovalService
from timekeep.infrastructure.auth.dependencies import AdminUser
from timekeep.infrastructure.rate_limiting.dependencies import api_rate_limit
from timekeep.infrastructure.web.dependencies import get_approval_service

router = APIRouter(dependencies=[Depends(api_rate_limit)])

Service = Annotated[ApprovalService, Depends(get_approval_service)]


@router.get("/pending", response_model=List[TimeEntryResponseDTO])
async def list_pending(
    admin: AdminUser,
    service: Service,
    user_id: Optional[str] = Query(None, description="Filter by owner"),
    date_from: Optional[date] = Query(None, description="Filter from date"),
    date_to: Optional[date] = Query(None, description="Filter to date"),
):
    """Entries waiting for approval."""
    views = await service.list_pending(admin, user_id=user_id, date_from=date_from, date_to=date_to)
    return [TimeEntryResponseDTO.from_view(view) for view in views]


@router.post("/approve-range", response_model=BatchResultResponseDTO)
async def approve_range(request: ApproveRangeRequestDTO, admin: AdminUser, service: Service):
    """
    Approve every pending entry in a date range.

    - **include_drafts**: Approve drafts in the range as well
    - **user_id**: Limit to one user's entries

    Entries that cannot be approved are reported in ``failures``; the rest
    are approved. Running the same request again is safe.
    """
    result = await service.approve_all_pending_in_range(
        request.date_from,
        request.date_to,
        admin,
        include_drafts=request.include_drafts,
        user_id=request.user_id,
    )
    return BatchResultResponseDTO.from_result(result)


@router.post("/users/{user_id}/approve-all", response_model=BatchResultResponseDTO)
async def approve_all_for_user(user_id: str, admin: AdminUser, service: Service):
    """Approve every pending entry of one user."""
    result = await service.approve_all_for_user(user_id, admin)
    return BatchResultResponseDTO.from_result(result)


@router.post("/{entry_id}/approve", response_model=TimeEntryResponseDTO)
async def approve_entry(
    entry_id: str,
    admin: AdminUser,
    service: Service,
    request: Optional[ApproveTimeEntryRequestDTO] = None,
):
    """Approve one pending entry."""
    entry = await service.approve_entry(entry_id, admin, request.expected_version if request else None)
    return TimeEntryResponseDTO.from_entity(entry)


@router.post("/{entry_id}/return", response_model=TimeEntryResponseDTO)
async def return_entry(
    entry_id: str,
    admin: AdminUser,
    service: Service,
    request: Optional[ReturnTimeEntryRequestDTO] = None,
):
    """
    Return a pending or approved entry to its owner as a draft.

    - **comment**: Shown to the owner, at most 500 characters
    """
    entry = await service.return_entry(entry_id, admin, request.comment if request else None)
    return TimeEntryResponseDTO.from_entity(entry)
