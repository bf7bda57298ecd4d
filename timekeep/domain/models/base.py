"""
Base entity and exception classes for the domain layer.
This module contains the foundational classes for all domain entities.
"""

from datetime import datetime, timezone
from typing import Optional, Any, Dict
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
import uuid


def utcnow() -> datetime:
    """Timezone-aware current UTC time."""
    return datetime.now(timezone.utc)


class DomainEvent(ABC):
    """Base class for domain events."""

    def __init__(self):
        self.occurred_at = utcnow()
        self.event_id = str(uuid.uuid4())

    @property
    @abstractmethod
    def event_name(self) -> str:
        """Return the name of the event."""
        pass

    def to_dict(self) -> Dict[str, Any]:
        """Convert event to dictionary."""
        return {
            "event_id": self.event_id,
            "event_name": self.event_name,
            "occurred_at": self.occurred_at.isoformat(),
            "data": {
                key: value for key, value in self.__dict__.items()
                if key not in ("event_id", "occurred_at")
            }
        }


@dataclass
class BaseEntity(ABC):
    """
    Base class for all domain entities.
    Provides common attributes and behavior for all entities.
    """

    id: Optional[str] = None
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    # Domain events
    _events: list[DomainEvent] = field(default_factory=list, init=False, repr=False, compare=False)

    def __eq__(self, other: Any) -> bool:
        """Entities are equal if they have the same ID and are of the same type."""
        if not isinstance(other, self.__class__):
            return False
        if self.id is None or other.id is None:
            return self is other
        return self.id == other.id

    def __hash__(self) -> int:
        """Hash based on entity ID."""
        if self.id is None:
            return hash(id(self))
        return hash((self.__class__.__name__, self.id))

    def mark_as_updated(self) -> None:
        """Update the updated_at timestamp."""
        self.updated_at = utcnow()

    def add_event(self, event: DomainEvent) -> None:
        """Add a domain event."""
        self._events.append(event)

    def pull_events(self) -> list[DomainEvent]:
        """Get and clear all domain events."""
        events = self._events.copy()
        self._events.clear()
        return events

    @property
    def is_new(self) -> bool:
        """Check if entity is new (not persisted)."""
        return self.id is None

    def validate(self) -> None:
        """
        Validate the entity's state.
        Raises ValidationError if the entity is in an invalid state.
        """
        pass


class DomainException(Exception):
    """Base exception for domain errors."""

    code = "domain_error"

    def __init__(self, message: str, code: Optional[str] = None):
        self.message = message
        if code:
            self.code = code
        super().__init__(self.message)


class ValidationError(DomainException):
    """Malformed or out-of-bounds input. The message is safe to show to the user."""

    code = "validation_error"

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field


class PermissionDeniedError(DomainException):
    """The actor lacks the role or ownership required for the action."""

    code = "permission_denied"

    def __init__(self, message: str = "You are not allowed to perform this action"):
        super().__init__(message)


class InvalidStateError(DomainException):
    """The requested transition is not valid from the entity's current state."""

    code = "invalid_state"


class EntityNotFoundError(DomainException):
    """Exception raised when an entity is not found."""

    code = "not_found"

    def __init__(self, entity_type: str, entity_id: Any):
        message = f"{entity_type} with id {entity_id} not found"
        super().__init__(message)
        self.entity_type = entity_type
        self.entity_id = entity_id


class ReferentialConflictError(DomainException):
    """A delete is blocked by dependent records."""

    code = "referential_conflict"


class RateLimitExceeded(DomainException):
    """The caller exceeded its request budget."""

    code = "rate_limited"

    def __init__(self, reset_time: int, limit: int, retry_after_seconds: int):
        super().__init__(f"Too many requests. Try again in {retry_after_seconds} seconds.")
        self.reset_time = reset_time
        self.limit = limit
        self.retry_after_seconds = retry_after_seconds


class UpstreamError(DomainException):
    """The store or the language model failed. Details are for logs only."""

    code = "upstream_error"

    def __init__(self, message: str, service: str = "upstream"):
        super().__init__(message)
        self.service = service
