"""
Domain models for the time tracking service.
This module exports all domain entities and domain exceptions.
"""

# Base classes
from .base import (
    BaseEntity,
    DomainEvent,
    DomainException,
    ValidationError,
    PermissionDeniedError,
    InvalidStateError,
    EntityNotFoundError,
    ReferentialConflictError,
    RateLimitExceeded,
    UpstreamError,
)

# Batch results
from .batch import BatchFailure, BatchResult

# Domain entities
from .user import User, UserRole
from .client import Client
from .project import Project

from .time_entry import (
    TimeEntry,
    TimeEntryStatus,
    TimeEntryView,
    TimeEntrySubmittedEvent,
    TimeEntryApprovedEvent,
    TimeEntryReturnedEvent,
    parse_hours,
)

__all__ = [
    # Base classes
    "BaseEntity",
    "DomainEvent",
    "DomainException",
    "ValidationError",
    "PermissionDeniedError",
    "InvalidStateError",
    "EntityNotFoundError",
    "ReferentialConflictError",
    "RateLimitExceeded",
    "UpstreamError",

    # Batch results
    "BatchFailure",
    "BatchResult",

    # Catalog
    "User",
    "UserRole",
    "Client",
    "Project",

    # TimeEntry
    "TimeEntry",
    "TimeEntryStatus",
    "TimeEntryView",
    "TimeEntrySubmittedEvent",
    "TimeEntryApprovedEvent",
    "TimeEntryReturnedEvent",
    "parse_hours",
]
