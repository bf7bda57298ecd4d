"""
User mapper for converting profile rows into domain users.
"""

from timekeep.domain.models.user import User, UserRole
from timekeep.infrastructure.db.models import UserProfileModel


class UserMapper:
    """Maps UserProfileModel and its role rows to the User domain object."""

    def model_to_domain(self, model: UserProfileModel) -> User:
        """Convert UserProfileModel to User. Any 'admin' role row makes the user an admin."""
        roles = {role.role for role in (model.roles or [])}
        return User(
            id=str(model.id),
            email=model.email or "",
            full_name=model.full_name or "",
            role=UserRole.ADMIN if UserRole.ADMIN.value in roles else UserRole.USER,
        )
