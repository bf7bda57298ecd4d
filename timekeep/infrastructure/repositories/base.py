"""
Shared helpers for the SQLAlchemy repositories.
"""

import functools
import logging
import uuid
from typing import Any, Awaitable, Callable, TypeVar

from sqlalchemy.exc import SQLAlchemyError

from timekeep.domain.models.base import UpstreamError

logger = logging.getLogger(__name__)

T = TypeVar("T")


def store_errors(func: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
    """Turn database driver errors into UpstreamError. Domain errors pass through."""

    @functools.wraps(func)
    async def wrapper(*args: Any, **kwargs: Any) -> T:
        try:
            return await func(*args, **kwargs)
        except SQLAlchemyError as e:
            logger.error(f"Database error in {func.__qualname__}: {e}", exc_info=True)
            raise UpstreamError("The data store is unavailable", service="database") from e

    return wrapper


def is_valid_id(value: Any) -> bool:
    """Row ids are UUIDs; anything else can never match a row."""
    try:
        uuid.UUID(str(value))
    except ValueError:
        return False
    return True
