"""
Users router.
Signed-in users can read their own profile; listing users and changing
roles is for admins.
"""

from typing import Annotated, List

from fastapi import APIRouter, Depends

from timekeep.application.dto.user_dto import UpdateUserRoleRequestDTO, UserResponseDTO
from timekeep.domain.models.user import UserRole
from timekeep.domain.services.user_service import UserService
from timekeep.infrastructure.auth.dependencies import AdminUser, CurrentUser
from timekeep.infrastructure.rate_limiting.dependencies import api_rate_limit
from timekeep.infrastructure.web.dependencies import get_user_service

router = APIRouter(dependencies=[Depends(api_rate_limit)])

Service = Annotated[UserService, Depends(get_user_service)]


@router.get("/me", response_model=UserResponseDTO)
async def get_me(user: CurrentUser):
    """The caller's profile and role."""
    return UserResponseDTO.from_entity(user)


@router.get("", response_model=List[UserResponseDTO])
async def list_users(admin: AdminUser, service: Service):
    """List every profile with its role."""
    return [UserResponseDTO.from_entity(user) for user in await service.list_users(admin)]


@router.get("/{user_id}", response_model=UserResponseDTO)
async def get_user(user_id: str, admin: AdminUser, service: Service):
    return UserResponseDTO.from_entity(await service.get_user(admin, user_id))


@router.patch("/{user_id}/role", response_model=UserResponseDTO)
async def change_role(user_id: str, request: UpdateUserRoleRequestDTO, admin: AdminUser, service: Service):
    """Make a user an admin or a regular user. Admins cannot demote themselves."""
    updated = await service.change_role(admin, user_id, UserRole(request.role))
    return UserResponseDTO.from_entity(updated)
