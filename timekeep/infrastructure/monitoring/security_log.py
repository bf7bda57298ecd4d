"""
In-process security event log.

Keeps the most recent events in a bounded ring buffer for diagnostics and
mirrors each event to the ``timekeep.security`` logger.
"""

import logging
import threading
import time
from collections import deque
from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Deque, Dict, List, Optional

logger = logging.getLogger("timekeep.security")

DEFAULT_MAX_EVENTS = 1000


class SecurityEventType(str, Enum):
    """Kinds of security-relevant events."""
    RATE_LIMIT = "rate_limit"
    INVALID_INPUT = "invalid_input"
    AUTH_FAILURE = "auth_failure"
    PERMISSION_DENIED = "permission_denied"
    SUSPICIOUS_ACTIVITY = "suspicious_activity"


@dataclass(frozen=True)
class SecurityEvent:
    type: SecurityEventType
    details: str
    user_id: Optional[str] = None
    ip: Optional[str] = None
    user_agent: Optional[str] = None
    timestamp: int = field(default_factory=lambda: int(time.time() * 1000))

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["type"] = self.type.value
        return data


class SecurityEventLog:
    """
    Bounded, thread-safe event buffer. The oldest event is dropped first.

    ``log_event`` never raises; a failure while recording is reported through
    ``logging`` and otherwise ignored so that callers on an error path are not
    disturbed.
    """

    def __init__(self, max_events: int = DEFAULT_MAX_EVENTS):
        self.max_events = max_events
        self._events: Deque[SecurityEvent] = deque(maxlen=max_events)
        self._lock = threading.Lock()

    def log_event(
        self,
        event_type: SecurityEventType,
        details: str,
        user_id: Optional[str] = None,
        ip: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> None:
        try:
            event = SecurityEvent(
                type=SecurityEventType(event_type),
                details=str(details),
                user_id=user_id,
                ip=ip,
                user_agent=user_agent,
            )
            with self._lock:
                self._events.append(event)
            logger.warning("Security event %s: %s (user=%s)", event.type.value, event.details, user_id)
        except Exception:
            logger.error("Failed to record security event", exc_info=True)

    def get_recent_events(self, limit: int = 50) -> List[SecurityEvent]:
        """Most recent ``limit`` events, oldest first."""
        if limit <= 0:
            return []
        with self._lock:
            events = list(self._events)
        return events[-limit:]

    def clear(self) -> None:
        with self._lock:
            self._events.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._events)
