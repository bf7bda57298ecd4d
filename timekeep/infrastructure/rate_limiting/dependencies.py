"""
Rate limiting FastAPI dependencies.
"""

from typing import Annotated, Callable

from fastapi import Depends, Request, Response

from timekeep.domain.models.base import RateLimitExceeded
from timekeep.domain.models.user import User
from timekeep.infrastructure.auth.dependencies import client_ip, get_current_user
from timekeep.infrastructure.monitoring.security_log import SecurityEventType
from timekeep.infrastructure.rate_limiting.limiter import RateLimitStatus
from timekeep.infrastructure.web.container import ServiceContainer
from timekeep.infrastructure.web.dependencies import get_container


def create_rate_limit_dependency(limit_name: str = "api") -> Callable:
    """
    Create a FastAPI dependency counting each request of the current user
    against the named limit.

    Usage:
        api_rate_limit = create_rate_limit_dependency('api')

        router = APIRouter(dependencies=[Depends(api_rate_limit)])
    """

    async def rate_limit_dependency(
        request: Request,
        response: Response,
        user: Annotated[User, Depends(get_current_user)],
        container: Annotated[ServiceContainer, Depends(get_container)],
    ) -> RateLimitStatus:
        status_result = container.rate_limiters.check_limit(limit_name, user.id)

        if not status_result.allowed:
            container.security_log.log_event(
                SecurityEventType.RATE_LIMIT,
                f"Rate limit '{limit_name}' exceeded on {request.method} {request.url.path}",
                user_id=user.id,
                ip=client_ip(request),
                user_agent=request.headers.get("user-agent"),
            )
            raise RateLimitExceeded(
                reset_time=status_result.reset_time,
                limit=status_result.limit,
                retry_after_seconds=status_result.retry_after_seconds(),
            )

        response.headers.update(status_result.to_headers())
        return status_result

    return rate_limit_dependency


api_rate_limit = create_rate_limit_dependency("api")
