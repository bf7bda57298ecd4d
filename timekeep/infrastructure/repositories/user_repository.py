"""
User repository implementation using SQLAlchemy.
Users are created by Supabase Auth; this side reads profiles and keeps the
role rows in ``user_roles``.
"""

from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from timekeep.domain.models.user import User, UserRole
from timekeep.domain.repositories.user_repository import UserRepository as UserRepositoryInterface
from timekeep.infrastructure.db.models import UserProfileModel, UserRoleModel
from timekeep.infrastructure.mappers.user_mapper import UserMapper
from timekeep.infrastructure.repositories.base import is_valid_id, store_errors


class SQLAlchemyUserRepository(UserRepositoryInterface):
    """SQLAlchemy implementation of user repository."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.mapper = UserMapper()

    @store_errors
    async def get(self, user_id: str) -> Optional[User]:
        """Get user by ID with roles."""
        if not is_valid_id(user_id):
            return None
        model = await self.session.get(UserProfileModel, user_id)
        if not model:
            return None
        return self.mapper.model_to_domain(model)

    @store_errors
    async def list_all(self) -> List[User]:
        """Get all users ordered by name."""
        result = await self.session.execute(select(UserProfileModel).order_by(UserProfileModel.full_name))
        return [self.mapper.model_to_domain(model) for model in result.scalars()]

    @store_errors
    async def set_role(self, user_id: str, role: UserRole) -> Optional[User]:
        """Leave exactly one role row for the user. Orphaned rows are deleted on flush."""
        if not is_valid_id(user_id):
            return None
        model = await self.session.get(UserProfileModel, user_id)
        if not model:
            return None

        kept = [row for row in model.roles if row.role == role.value][:1]
        model.roles = kept or [UserRoleModel(role=role.value)]
        await self.session.flush()
        return self.mapper.model_to_domain(model)
