"""
Chat assistant router.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Request

from timekeep.application.dto.chat_dto import ChatRequestDTO, ChatResponseDTO
from timekeep.application.use_cases.chat_use_cases import ChatService
from timekeep.infrastructure.auth.dependencies import CurrentUser, client_ip
from timekeep.infrastructure.web.dependencies import get_chat_service

router = APIRouter()


@router.post("", response_model=ChatResponseDTO)
async def chat(
    body: ChatRequestDTO,
    request: Request,
    user: CurrentUser,
    service: Annotated[ChatService, Depends(get_chat_service)],
):
    """
    Send the conversation and get the assistant's answer.

    Limited to 10 messages per minute per user. UI changes requested by the
    assistant come back in ``commands``, already stripped from ``reply``.
    """
    reply = await service.handle_message(
        user,
        body.messages,
        ip=client_ip(request),
        user_agent=request.headers.get("user-agent"),
    )
    return ChatResponseDTO.from_reply(reply)
