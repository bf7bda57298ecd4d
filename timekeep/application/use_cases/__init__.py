"""
Application layer use cases.
"""

from .chat_use_cases import ChatReply, ChatService

__all__ = [
    "ChatReply",
    "ChatService",
]
