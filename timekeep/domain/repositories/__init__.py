"""
Repository interfaces for the domain layer.
This module exports all repository interfaces (ports) for dependency injection.
"""

from .client_repository import ClientRepository
from .project_repository import ProjectRepository
from .time_entry_repository import TimeEntryFilter, TimeEntryRepository
from .user_repository import UserRepository

__all__ = [
    "ClientRepository",
    "ProjectRepository",
    "TimeEntryFilter",
    "TimeEntryRepository",
    "UserRepository",
]
