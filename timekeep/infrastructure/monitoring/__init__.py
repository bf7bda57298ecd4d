"""
Security monitoring.
"""

from .security_log import SecurityEvent, SecurityEventLog, SecurityEventType

__all__ = [
    "SecurityEvent",
    "SecurityEventLog",
    "SecurityEventType",
]
