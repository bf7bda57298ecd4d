"""
Approval DTOs for the application layer.
"""

from typing import Optional

from pydantic import Field

from .base_dto import DateRangeRequestDTO, RequestDTO


class ApproveTimeEntryRequestDTO(RequestDTO):
    """DTO for approving one entry."""

    expected_version: Optional[int] = Field(default=None, ge=1, description="Version the approver last saw")


class ReturnTimeEntryRequestDTO(RequestDTO):
    """DTO for returning an entry to its owner for edits."""

    comment: Optional[str] = Field(default=None, description="Why the entry was returned")


class ApproveRangeRequestDTO(DateRangeRequestDTO):
    """DTO for bulk approval of a date range."""

    include_drafts: bool = Field(default=False, description="Approve drafts too, skipping submission")
    user_id: Optional[str] = Field(default=None, description="Only this user's entries")
