"""
Authentication dependencies for FastAPI.
Resolves the acting user from the bearer token and the profile tables.
"""

import logging
from typing import Annotated, Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from starlette.concurrency import run_in_threadpool

from timekeep.domain.models.base import PermissionDeniedError, ValidationError
from timekeep.domain.models.user import User
from timekeep.infrastructure.monitoring.security_log import SecurityEventType
from timekeep.infrastructure.web.container import ServiceContainer
from timekeep.infrastructure.web.dependencies import Repositories, get_container, get_repositories

logger = logging.getLogger(__name__)

# Security scheme
security = HTTPBearer(auto_error=False)


def client_ip(request: Request) -> Optional[str]:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else None


def _auth_error(
    container: ServiceContainer,
    request: Request,
    detail: str,
    user_id: Optional[str] = None,
) -> HTTPException:
    container.security_log.log_event(
        SecurityEventType.AUTH_FAILURE,
        f"{detail} ({request.method} {request.url.path})",
        user_id=user_id,
        ip=client_ip(request),
        user_agent=request.headers.get("user-agent"),
    )
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def resolve_user_id(container: ServiceContainer, token: str) -> str:
    """
    Verify the token locally, asking Supabase Auth when the shared secret
    cannot verify it.

    Raises:
        ValidationError: If neither accepts the token
    """
    try:
        return container.jwt_handler.get_user_id(token)
    except ValidationError as e:
        if container.auth_service is None:
            raise
        logger.debug(f"Local token check failed, asking Supabase: {e.message}")
        return await run_in_threadpool(container.auth_service.get_user_id, token)


async def get_current_user(
    request: Request,
    credentials: Annotated[Optional[HTTPAuthorizationCredentials], Depends(security)],
    container: Annotated[ServiceContainer, Depends(get_container)],
    repositories: Annotated[Repositories, Depends(get_repositories)],
) -> User:
    """
    FastAPI dependency returning the authenticated user with their role.

    Raises:
        HTTPException: 401 if the token is missing or invalid, or no profile exists
    """
    if credentials is None or not credentials.credentials:
        raise _auth_error(container, request, "Missing authorization header")

    try:
        user_id = await resolve_user_id(container, credentials.credentials)
    except ValidationError as e:
        raise _auth_error(container, request, e.message)

    user = await repositories.users.get(user_id)
    if user is None:
        raise _auth_error(container, request, "User profile not found", user_id=user_id)

    request.state.user_id = user.id
    return user


async def require_admin(user: Annotated[User, Depends(get_current_user)]) -> User:
    """FastAPI dependency that only lets administrators through."""
    if not user.is_admin:
        raise PermissionDeniedError()
    return user


CurrentUser = Annotated[User, Depends(get_current_user)]
AdminUser = Annotated[User, Depends(require_admin)]
