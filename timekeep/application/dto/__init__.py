"""
Application layer DTOs.
Data Transfer Objects for API requests and responses.
"""

from .base_dto import *
from .time_entry_dto import *
from .approval_dto import *
from .report_dto import *
from .catalog_dto import *
from .user_dto import *
from .chat_dto import *

__all__ = [
    # Base DTOs
    "BaseDTO",
    "RequestDTO",
    "ResponseDTO",
    "DateRangeRequestDTO",
    "BatchFailureDTO",
    "BatchResultResponseDTO",
    "HealthCheckResponseDTO",
    "ErrorResponseDTO",

    # Time entry DTOs
    "CreateTimeEntryRequestDTO",
    "UpdateTimeEntryRequestDTO",
    "SubmitTimeEntryRequestDTO",
    "SubmitPeriodRequestDTO",
    "CopyPreviousDayRequestDTO",
    "TimeEntryResponseDTO",

    # Approval DTOs
    "ApproveTimeEntryRequestDTO",
    "ReturnTimeEntryRequestDTO",
    "ApproveRangeRequestDTO",

    # Report DTOs
    "GroupTotalsResponseDTO",
    "AggregateResponseDTO",
    "ExportRowDTO",
    "WeeklySummaryDTO",

    # Catalog DTOs
    "CreateClientRequestDTO",
    "UpdateClientRequestDTO",
    "ClientResponseDTO",
    "CreateProjectRequestDTO",
    "UpdateProjectRequestDTO",
    "ProjectResponseDTO",

    # User DTOs
    "UpdateUserRoleRequestDTO",
    "UserResponseDTO",

    # Chat DTOs
    "ChatRequestDTO",
    "UICommandDTO",
    "ChatResponseDTO",
    "SecurityEventDTO",
]
