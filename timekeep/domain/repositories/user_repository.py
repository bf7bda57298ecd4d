"""
User repository interface.
Defines the contract for reading profiles and role assignments.
"""

from abc import ABC, abstractmethod
from typing import List, Optional

from timekeep.domain.models.user import User, UserRole


class UserRepository(ABC):
    """
    Repository interface for User.
    Users are created by the identity provider; this service reads them and
    maintains their role assignments.
    """

    @abstractmethod
    async def get(self, user_id: str) -> Optional[User]:
        """
        Find a user by ID, with the role resolved from role assignments.
        Returns None if no profile exists.
        """
        pass

    @abstractmethod
    async def list_all(self) -> List[User]:
        """
        List all users ordered by full name.
        """
        pass

    @abstractmethod
    async def set_role(self, user_id: str, role: UserRole) -> Optional[User]:
        """
        Replace the user's role assignments with ``role``.
        Returns the updated user, or None if no profile exists.
        """
        pass
