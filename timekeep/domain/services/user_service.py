"""User administration service.
Lists profiles with their roles and changes roles. Admin only.
"""

import logging
from typing import List

from timekeep.domain.models.base import EntityNotFoundError, InvalidStateError, PermissionDeniedError
from timekeep.domain.models.user import User, UserRole
from timekeep.domain.repositories.user_repository import UserRepository

logger = logging.getLogger(__name__)


class UserService:
    """Domain service for the user list in settings."""

    def __init__(self, users: UserRepository):
        self.users = users

    async def list_users(self, actor: User) -> List[User]:
        self._require_admin(actor)
        return await self.users.list_all()

    async def get_user(self, actor: User, user_id: str) -> User:
        self._require_admin(actor)
        user = await self.users.get(user_id)
        if user is None:
            raise EntityNotFoundError("User", user_id)
        return user

    async def change_role(self, actor: User, user_id: str, role: UserRole) -> User:
        """
        Give ``user_id`` the ``role``.

        Admins cannot demote themselves, so there is always someone left who
        can approve.
        """
        self._require_admin(actor)
        if user_id == actor.id and role != UserRole.ADMIN:
            raise InvalidStateError("You cannot remove your own admin role")

        updated = await self.users.set_role(user_id, role)
        if updated is None:
            raise EntityNotFoundError("User", user_id)
        logger.info(f"Role of user {user_id} set to {role.value} by {actor.id}")
        return updated

    @staticmethod
    def _require_admin(actor: User) -> None:
        if not actor.is_admin:
            raise PermissionDeniedError()
