"""
Chat and security diagnostics DTOs.
"""

from datetime import datetime, timezone
from typing import Any, List, Optional

from pydantic import Field

from timekeep.application.use_cases.chat_use_cases import ChatReply
from timekeep.domain.services.intent_classifier import IntentKind
from timekeep.infrastructure.monitoring.security_log import SecurityEvent, SecurityEventType

from .base_dto import BaseDTO, RequestDTO
from .report_dto import WeeklySummaryDTO
from .time_entry_dto import TimeEntryResponseDTO


class ChatRequestDTO(RequestDTO):
    """
    The conversation so far, oldest first.

    Message shape is checked by the chat service so that rejected input
    reaches the security log.
    """

    messages: Any = Field(description="List of {role, content} messages")


class UICommandDTO(BaseDTO):
    kind: IntentKind
    argument: Optional[str] = None


class ChatResponseDTO(BaseDTO):
    reply: str
    intent: IntentKind
    commands: List[UICommandDTO] = Field(default_factory=list)
    has_time_entry_data: bool = False
    summary: Optional[WeeklySummaryDTO] = None
    entries: List[TimeEntryResponseDTO] = Field(default_factory=list)

    @classmethod
    def from_reply(cls, reply: ChatReply) -> "ChatResponseDTO":
        return cls(
            reply=reply.reply,
            intent=reply.intent,
            commands=[UICommandDTO(kind=command.kind, argument=command.argument) for command in reply.commands],
            has_time_entry_data=reply.has_time_entry_data,
            summary=WeeklySummaryDTO.from_summary(reply.summary) if reply.summary else None,
            entries=[TimeEntryResponseDTO.from_view(view) for view in reply.entries],
        )


class SecurityEventDTO(BaseDTO):
    type: SecurityEventType
    details: str
    user_id: Optional[str] = None
    ip: Optional[str] = None
    user_agent: Optional[str] = None
    timestamp: int = Field(description="Epoch milliseconds")
    occurred_at: datetime

    @classmethod
    def from_event(cls, event: SecurityEvent) -> "SecurityEventDTO":
        return cls(
            type=event.type,
            details=event.details,
            user_id=event.user_id,
            ip=event.ip,
            user_agent=event.user_agent,
            timestamp=event.timestamp,
            occurred_at=datetime.fromtimestamp(event.timestamp / 1000, tz=timezone.utc),
        )
