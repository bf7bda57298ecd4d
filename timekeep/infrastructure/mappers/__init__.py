"""
Infrastructure mappers module.
Contains mappers for converting between domain entities and database models.
"""

from .user_mapper import UserMapper
from .client_mapper import ClientMapper
from .project_mapper import ProjectMapper
from .time_entry_mapper import TimeEntryMapper

__all__ = [
    "UserMapper",
    "ClientMapper",
    "ProjectMapper",
    "TimeEntryMapper",
]
