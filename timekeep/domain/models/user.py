"""
User domain model.
Represents an authenticated person and the role that decides transition rights.
"""

from dataclasses import dataclass
from enum import Enum

from timekeep.domain.models.base import ValidationError


class UserRole(str, Enum):
    """System-wide user roles."""
    USER = "user"
    ADMIN = "admin"


@dataclass(frozen=True)
class User:
    """An actor resolved from an access token and the profile/role tables."""

    id: str
    email: str = ""
    full_name: str = ""
    role: UserRole = UserRole.USER

    def __post_init__(self):
        if not self.id or not str(self.id).strip():
            raise ValidationError("User ID is required", "id")
        if not isinstance(self.role, UserRole):
            object.__setattr__(self, "role", UserRole(self.role))

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    @property
    def display_name(self) -> str:
        return self.full_name or self.email or self.id
