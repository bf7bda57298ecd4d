"""
Input validation utilities.
Bounds-checks and sanitizes free text (chat messages, entry descriptions)
before it reaches the database or the language model.
"""

import html
import re
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import bleach

# Security configurations
ALLOWED_HTML_TAGS = ['br', 'p', 'strong', 'em']
ALLOWED_HTML_ATTRIBUTES: Dict[str, List[str]] = {}

ALLOWED_MESSAGE_ROLES = ('user', 'assistant', 'system')

MAX_MESSAGE_LENGTH = 2000
MAX_DESCRIPTION_LENGTH = 500
MAX_CONVERSATION_MESSAGES = 50

# Injection signatures. A deny-list scan, not a parser.
SUSPICIOUS_PATTERNS = [
    re.compile(r'<script\b[^<]*(?:(?!</script>)<[^<]*)*</script>', re.IGNORECASE),
    re.compile(r'javascript:', re.IGNORECASE),
    re.compile(r'on\w+\s*=', re.IGNORECASE),
    re.compile(r'data:text/html', re.IGNORECASE),
    re.compile(r'vbscript:', re.IGNORECASE),
]

# Extra signatures applied to conversations sent to the language model.
CONVERSATION_PATTERNS = SUSPICIOUS_PATTERNS + [
    re.compile(r'eval\s*\(', re.IGNORECASE),
    re.compile(r'expression\s*\(', re.IGNORECASE),
]


@dataclass(frozen=True)
class ValidationResult:
    """
    Outcome of validating one piece of text.

    ``value`` is the accepted text trimmed but otherwise as typed, which is
    what gets stored. ``sanitized`` is the HTML-escaped form for output.
    """

    is_valid: bool
    error: Optional[str] = None
    sanitized: Optional[str] = None
    value: Optional[str] = None

    @classmethod
    def ok(cls, value: str) -> "ValidationResult":
        return cls(is_valid=True, sanitized=sanitize_text(value), value=value)

    @classmethod
    def fail(cls, error: str) -> "ValidationResult":
        return cls(is_valid=False, error=error)


@dataclass(frozen=True)
class ConversationResult:
    """Outcome of validating a whole conversation."""

    is_valid: bool
    error: Optional[str] = None
    messages: Optional[List[Dict[str, str]]] = None


def contains_suspicious_content(value: str, patterns=SUSPICIOUS_PATTERNS) -> bool:
    """Check for injection signatures."""
    return any(pattern.search(value) for pattern in patterns)


def sanitize_text(value: str) -> str:
    """Trim and HTML-escape ``< > " ' &``."""
    return html.escape(value.strip(), quote=True)


class InputValidator:
    """
    Validators for user supplied free text.

    All methods are pure. Bounds default to the production limits and can be
    overridden from settings.
    """

    def __init__(
        self,
        max_message_length: int = MAX_MESSAGE_LENGTH,
        max_description_length: int = MAX_DESCRIPTION_LENGTH,
        max_messages: int = MAX_CONVERSATION_MESSAGES,
    ):
        self.max_message_length = max_message_length
        self.max_description_length = max_description_length
        self.max_messages = max_messages

    def validate_chat_message(self, message: Any) -> ValidationResult:
        """Validate one chat message typed by a user."""
        if not message or not isinstance(message, str):
            return ValidationResult.fail('Message is required')

        trimmed = message.strip()
        if not trimmed:
            return ValidationResult.fail('Message cannot be empty')

        if len(trimmed) > self.max_message_length:
            return ValidationResult.fail(f'Message too long (max {self.max_message_length} characters)')

        if contains_suspicious_content(trimmed):
            return ValidationResult.fail('Message contains invalid content')

        return ValidationResult.ok(trimmed)

    def validate_description(self, description: Any) -> ValidationResult:
        """Validate a time entry description. A missing description is valid."""
        if description is None or description == '':
            return ValidationResult.ok('')

        if not isinstance(description, str):
            return ValidationResult.fail('Description must be text')

        trimmed = description.strip()
        if len(trimmed) > self.max_description_length:
            return ValidationResult.fail(
                f'Description too long (max {self.max_description_length} characters)'
            )

        if contains_suspicious_content(trimmed):
            return ValidationResult.fail('Description contains invalid content')

        return ValidationResult.ok(trimmed)

    def validate_chat_messages(self, messages: Any) -> ConversationResult:
        """
        Validate a conversation bound for the language model.

        Every message needs a known role and non-empty string content within
        the chat length bound. Content is sanitized on success.
        """
        if not isinstance(messages, list):
            return ConversationResult(False, 'Messages must be an array')

        if not messages:
            return ConversationResult(False, 'Messages array cannot be empty')

        if len(messages) > self.max_messages:
            return ConversationResult(False, 'Too many messages in conversation')

        sanitized = []
        for message in messages:
            if not isinstance(message, dict):
                return ConversationResult(False, 'Invalid message format')

            role = message.get('role')
            if role not in ALLOWED_MESSAGE_ROLES:
                return ConversationResult(False, 'Invalid message role')

            content = message.get('content')
            if not content or not isinstance(content, str):
                return ConversationResult(False, 'Invalid message content')

            if len(content) > self.max_message_length:
                return ConversationResult(False, 'Message content too long')

            if contains_suspicious_content(content, CONVERSATION_PATTERNS):
                return ConversationResult(False, 'Message contains invalid content')

            sanitized.append({'role': role, 'content': sanitize_text(content)})

        return ConversationResult(True, messages=sanitized)

    @staticmethod
    def sanitize_assistant_reply(value: str) -> str:
        """Strip everything but a few formatting tags from model output."""
        if not isinstance(value, str):
            return ''

        return bleach.clean(
            value,
            tags=ALLOWED_HTML_TAGS,
            attributes=ALLOWED_HTML_ATTRIBUTES,
            strip=True,
        ).strip()


_default_validator = InputValidator()


def validate_chat_message(message: Any) -> ValidationResult:
    return _default_validator.validate_chat_message(message)


def validate_description(description: Any) -> ValidationResult:
    return _default_validator.validate_description(description)


def validate_chat_messages(messages: Any) -> ConversationResult:
    return _default_validator.validate_chat_messages(messages)


def sanitize_assistant_reply(value: str) -> str:
    return InputValidator.sanitize_assistant_reply(value)
