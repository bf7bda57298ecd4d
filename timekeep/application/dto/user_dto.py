"""
User DTOs for the application layer.
"""

from pydantic import Field

from timekeep.domain.models.user import User, UserRole

from .base_dto import BaseDTO, RequestDTO


class UpdateUserRoleRequestDTO(RequestDTO):
    role: UserRole = Field(description="New role for the user")


class UserResponseDTO(BaseDTO):
    """A profile with its resolved role."""

    id: str
    email: str
    full_name: str
    display_name: str
    role: UserRole
    is_admin: bool

    @classmethod
    def from_entity(cls, user: User) -> "UserResponseDTO":
        return cls(
            id=user.id,
            email=user.email,
            full_name=user.full_name,
            display_name=user.display_name,
            role=user.role,
            is_admin=user.is_admin,
        )
