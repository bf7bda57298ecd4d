"""
JWT token handler for Supabase authentication.
Validates access tokens signed with the project's JWT secret.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict

from jose import JWTError, jwt as jose_jwt

from timekeep.domain.models.base import ValidationError

logger = logging.getLogger(__name__)

INVALID_TOKEN_MESSAGE = "Invalid or expired token"


class JWTHandler:
    """Handles JWT token validation and user extraction."""

    def __init__(self, jwt_secret: str, jwt_algorithm: str = "HS256"):
        self.jwt_secret = jwt_secret
        self.jwt_algorithm = jwt_algorithm

    def verify_token(self, token: str) -> Dict[str, Any]:
        """
        Verify and decode a Supabase JWT token.

        Args:
            token: JWT token string, with or without the ``Bearer`` prefix

        Returns:
            Dict containing token payload

        Raises:
            ValidationError: If token is invalid or expired
        """
        if token.startswith("Bearer "):
            token = token[7:]

        try:
            payload = jose_jwt.decode(
                token,
                self.jwt_secret,
                algorithms=[self.jwt_algorithm],
                options={"verify_exp": True, "verify_aud": False},
            )
        except JWTError as e:
            logger.info(f"Rejected access token: {e}")
            raise ValidationError(INVALID_TOKEN_MESSAGE, "token")

        if not payload.get("sub"):
            raise ValidationError("Token missing user ID (sub claim)", "token")
        if "exp" not in payload:
            raise ValidationError("Token missing expiration (exp claim)", "token")

        return payload

    def get_user_id(self, token: str) -> str:
        """Extract user ID from JWT token."""
        return self.verify_token(token)["sub"]

    def generate_test_token(self, user_id: str, email: str = "test@example.com", expires_minutes: int = 60) -> str:
        """
        Generate a token signed with the configured secret.
        Used by tests and local development.
        """
        now = datetime.now(timezone.utc)
        payload = {
            "sub": user_id,
            "email": email,
            "role": "authenticated",
            "iat": int(now.timestamp()),
            "exp": int((now + timedelta(minutes=expires_minutes)).timestamp()),
            "aud": "authenticated",
            "iss": "supabase",
        }
        return jose_jwt.encode(payload, self.jwt_secret, algorithm=self.jwt_algorithm)
