"""
Input validation package.
"""

from .validators import (
    InputValidator, ValidationResult, ConversationResult,
    validate_chat_message, validate_description, validate_chat_messages,
    sanitize_assistant_reply, contains_suspicious_content, sanitize_text,
)
from .middleware import RequestSizeMiddleware, SecurityHeadersMiddleware

__all__ = [
    # Validators
    'InputValidator',
    'ValidationResult',
    'ConversationResult',
    'validate_chat_message',
    'validate_description',
    'validate_chat_messages',
    'sanitize_assistant_reply',
    'contains_suspicious_content',
    'sanitize_text',

    # Middleware
    'RequestSizeMiddleware',
    'SecurityHeadersMiddleware',
]
