"""
Security diagnostics router.
"""

from typing import Annotated, List

from fastapi import APIRouter, Depends, Query

from timekeep.application.dto.chat_dto import SecurityEventDTO
from timekeep.infrastructure.auth.dependencies import AdminUser
from timekeep.infrastructure.web.container import ServiceContainer
from timekeep.infrastructure.web.dependencies import get_container

router = APIRouter()


@router.get("/events", response_model=List[SecurityEventDTO])
async def recent_events(
    admin: AdminUser,
    container: Annotated[ServiceContainer, Depends(get_container)],
    limit: int = Query(50, ge=1, le=1000, description="Number of events to return"),
):
    """Most recent security events, oldest first."""
    return [SecurityEventDTO.from_event(event) for event in container.security_log.get_recent_events(limit)]
