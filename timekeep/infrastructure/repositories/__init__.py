"""
Infrastructure repositories module.
Contains SQLAlchemy implementations of domain repositories.
"""

from .user_repository import SQLAlchemyUserRepository
from .client_repository import SQLAlchemyClientRepository
from .project_repository import SQLAlchemyProjectRepository
from .time_entry_repository import SQLAlchemyTimeEntryRepository

__all__ = [
    "SQLAlchemyUserRepository",
    "SQLAlchemyClientRepository",
    "SQLAlchemyProjectRepository",
    "SQLAlchemyTimeEntryRepository",
]
