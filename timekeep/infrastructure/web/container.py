"""
Process-wide services, built once at startup and kept on ``app.state``.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from timekeep.config import Settings
from timekeep.infrastructure.auth.jwt_handler import JWTHandler
from timekeep.infrastructure.auth.supabase_auth import SupabaseAuthService
from timekeep.infrastructure.db.database import create_engine_from_settings, create_session_factory
from timekeep.infrastructure.llm.openai_client import OpenAIChatClient
from timekeep.infrastructure.monitoring.security_log import SecurityEventLog
from timekeep.infrastructure.rate_limiting.limiter import RateLimit, RateLimiterRegistry
from timekeep.infrastructure.validation.validators import InputValidator

logger = logging.getLogger(__name__)


@dataclass
class ServiceContainer:
    settings: Settings
    validator: InputValidator
    security_log: SecurityEventLog
    rate_limiters: RateLimiterRegistry
    jwt_handler: JWTHandler
    auth_service: Optional[SupabaseAuthService] = None
    llm_client: Optional[OpenAIChatClient] = None
    engine: Optional[AsyncEngine] = None
    session_factory: Optional[async_sessionmaker[AsyncSession]] = None

    @classmethod
    def from_settings(cls, settings: Settings) -> "ServiceContainer":
        """Wire every long-lived collaborator from configuration."""
        engine = create_engine_from_settings(settings)
        if engine is None:
            logger.warning("DATABASE_URL is not set; data endpoints will fail")

        llm_client = None
        if settings.openai_api_key:
            llm_client = OpenAIChatClient(
                api_key=settings.openai_api_key,
                base_url=settings.openai_base_url,
                model=settings.openai_model,
                temperature=settings.openai_temperature,
                max_tokens=settings.openai_max_tokens,
                timeout_seconds=settings.llm_timeout_seconds,
            )
        else:
            logger.warning("OPENAI_API_KEY is not set; chat answers locally only")

        return cls(
            settings=settings,
            validator=InputValidator(
                max_message_length=settings.chat_message_max_length,
                max_description_length=settings.description_max_length,
                max_messages=settings.chat_max_messages,
            ),
            security_log=SecurityEventLog(max_events=settings.security_log_max_events),
            rate_limiters=RateLimiterRegistry(
                limits={
                    "chat": RateLimit(settings.chat_rate_limit_requests, settings.chat_rate_limit_window_ms),
                    "api": RateLimit(settings.api_rate_limit_requests, settings.api_rate_limit_window_ms),
                },
                redis_url=settings.rate_limit_redis_url,
                enabled=settings.rate_limit_enabled,
            ),
            jwt_handler=JWTHandler(settings.supabase_jwt_secret),
            auth_service=SupabaseAuthService(settings.supabase_url, settings.supabase_anon_key),
            llm_client=llm_client,
            engine=engine,
            session_factory=create_session_factory(engine) if engine is not None else None,
        )

    async def aclose(self) -> None:
        if self.llm_client is not None:
            await self.llm_client.aclose()
        if self.engine is not None:
            await self.engine.dispose()
