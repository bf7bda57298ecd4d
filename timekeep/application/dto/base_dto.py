"""
Base DTOs for the application layer.
Provides common patterns for request/response data transfer objects.
"""

from datetime import date, datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from timekeep.domain.models.batch import BatchResult


class BaseDTO(BaseModel):
    """Base DTO with common configuration."""

    model_config = ConfigDict(
        # Allow population by field name or alias
        populate_by_name=True,
        # Convert enum values to their values
        use_enum_values=True,
        # Validate assignment
        validate_assignment=True,
        extra="forbid",
    )


class RequestDTO(BaseDTO):
    """Base class for request DTOs."""
    pass


class ResponseDTO(BaseDTO):
    """Base class for response DTOs."""

    id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class DateRangeRequestDTO(RequestDTO):
    """Inclusive date range."""

    date_from: date = Field(description="First day of the range")
    date_to: date = Field(description="Last day of the range")

    @model_validator(mode="after")
    def validate_date_range(self):
        """Validate that date_to is not before date_from."""
        if self.date_to < self.date_from:
            raise ValueError("date_to must not be before date_from")
        return self


class BatchFailureDTO(BaseDTO):
    id: Optional[str] = None
    reason: str
    code: str


class BatchResultResponseDTO(BaseDTO):
    """Outcome of a bulk operation. Failed items do not stop the batch."""

    succeeded: int = Field(description="Number of items processed")
    failed: int = Field(description="Number of items that failed")
    failures: List[BatchFailureDTO] = Field(default_factory=list, description="Why each item failed")

    @classmethod
    def from_result(cls, result: BatchResult) -> "BatchResultResponseDTO":
        return cls(**result.to_dict())


class HealthCheckResponseDTO(BaseDTO):
    """Health check response DTO."""

    status: str = Field(description="Service status")
    timestamp: datetime = Field(description="Check timestamp")
    version: Optional[str] = Field(default=None, description="Application version")
    environment: Optional[str] = Field(default=None)


class ErrorResponseDTO(BaseDTO):
    """Error response DTO."""

    error: str = Field(description="Error code")
    message: str = Field(description="Error message")
    details: Optional[Dict[str, Any]] = Field(default=None, description="Additional error details")
