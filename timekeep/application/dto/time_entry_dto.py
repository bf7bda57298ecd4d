"""
Time Entry DTOs for the application layer.
Data Transfer Objects for time tracking operations.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Optional, Union

from pydantic import Field

from timekeep.domain.models.time_entry import TimeEntry, TimeEntryStatus, TimeEntryView

from .base_dto import DateRangeRequestDTO, RequestDTO, ResponseDTO

HoursField = Union[Decimal, str]
DateField = date


# Request DTOs
class CreateTimeEntryRequestDTO(RequestDTO):
    """DTO for manual time entry creation."""

    project_id: str = Field(description="Project ID")
    date: DateField = Field(description="Day the work was done")
    hours: HoursField = Field(description="Hours in quarter-hour steps, at most 24")
    description: Optional[str] = Field(default=None, description="Work description")


class UpdateTimeEntryRequestDTO(RequestDTO):
    """DTO for time entry update requests. Unset fields are left unchanged."""

    project_id: Optional[str] = Field(default=None, description="Project ID")
    date: Optional[DateField] = Field(default=None, description="Day the work was done")
    hours: Optional[HoursField] = Field(default=None, description="Hours")
    description: Optional[str] = Field(default=None, description="Work description")
    expected_version: Optional[int] = Field(default=None, ge=1, description="Version the client last saw")


class SubmitTimeEntryRequestDTO(RequestDTO):
    """DTO for submitting one entry for approval."""

    expected_version: Optional[int] = Field(default=None, ge=1, description="Version the client last saw")


class SubmitPeriodRequestDTO(DateRangeRequestDTO):
    """DTO for submitting every draft in a period."""
    pass


class CopyPreviousDayRequestDTO(RequestDTO):
    """DTO for copying the previous day's entries."""

    target_date: Optional[date] = Field(default=None, description="Day to copy onto, defaults to today")


# Response DTOs
class TimeEntryResponseDTO(ResponseDTO):
    """DTO for time entry responses."""

    user_id: str
    project_id: str
    date: date
    hours: Decimal
    description: Optional[str] = None
    status: TimeEntryStatus
    approved_by: Optional[str] = None
    approved_at: Optional[datetime] = None
    rejection_comment: Optional[str] = None
    version: int

    # Display names, present on list responses
    project_name: Optional[str] = None
    client_id: Optional[str] = None
    client_name: Optional[str] = None
    user_full_name: Optional[str] = None

    @classmethod
    def from_entity(cls, entry: TimeEntry) -> "TimeEntryResponseDTO":
        return cls(
            id=entry.id,
            created_at=entry.created_at,
            updated_at=entry.updated_at,
            user_id=entry.user_id,
            project_id=entry.project_id,
            date=entry.date,
            hours=entry.hours,
            description=entry.description,
            status=entry.status,
            approved_by=entry.approved_by,
            approved_at=entry.approved_at,
            rejection_comment=entry.rejection_comment,
            version=entry.version,
        )

    @classmethod
    def from_view(cls, view: TimeEntryView) -> "TimeEntryResponseDTO":
        dto = cls.from_entity(view.entry)
        dto.project_name = view.project_name
        dto.client_id = view.client_id
        dto.client_name = view.client_name
        dto.user_full_name = view.user_full_name
        return dto
