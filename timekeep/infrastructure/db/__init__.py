"""
Database infrastructure for the timekeep service.
"""

from .database import Base, create_engine_from_settings, create_session_factory, session_scope
from .models import (
    UserProfileModel,
    UserRoleModel,
    ClientModel,
    ProjectModel,
    TimeEntryModel,
    create_all_tables,
    drop_all_tables,
)

__all__ = [
    "Base",
    "create_engine_from_settings",
    "create_session_factory",
    "session_scope",
    "UserProfileModel",
    "UserRoleModel",
    "ClientModel",
    "ProjectModel",
    "TimeEntryModel",
    "create_all_tables",
    "drop_all_tables",
]
