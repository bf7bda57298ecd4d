"""
Unit tests for JWT validation.
"""

import pytest
from datetime import datetime, timedelta, timezone

from jose import jwt as jose_jwt

from timekeep.domain.models.base import ValidationError
from timekeep.infrastructure.auth.jwt_handler import JWTHandler

SECRET = "test-secret"


class TestJWTHandler:
    """Test cases for JWTHandler."""

    def setup_method(self):
        """Set up test fixtures."""
        self.handler = JWTHandler(SECRET)

    def test_round_trip_with_bearer_prefix(self):
        """Test that a generated token is accepted with or without the prefix."""
        token = self.handler.generate_test_token("user-1", "anna@example.com")

        assert self.handler.get_user_id(token) == "user-1"
        assert self.handler.verify_token(f"Bearer {token}")["email"] == "anna@example.com"

    def test_expired_token(self):
        """Test that expired tokens are rejected."""
        token = self.handler.generate_test_token("user-1", expires_minutes=-5)

        with pytest.raises(ValidationError) as exc_info:
            self.handler.verify_token(token)
        assert exc_info.value.field == "token"
        assert exc_info.value.message == "Invalid or expired token"

    def test_wrong_secret(self):
        """Test that tokens signed with another secret are rejected."""
        token = JWTHandler("other-secret").generate_test_token("user-1")
        with pytest.raises(ValidationError, match="Invalid or expired token"):
            self.handler.verify_token(token)

    def test_missing_sub(self):
        """Test that a token without a subject is rejected."""
        exp = int((datetime.now(timezone.utc) + timedelta(minutes=5)).timestamp())
        token = jose_jwt.encode({"exp": exp}, SECRET, algorithm="HS256")

        with pytest.raises(ValidationError, match="sub claim"):
            self.handler.verify_token(token)

    def test_missing_exp(self):
        """Test that a token without expiry is rejected."""
        token = jose_jwt.encode({"sub": "user-1"}, SECRET, algorithm="HS256")

        with pytest.raises(ValidationError, match="exp claim"):
            self.handler.verify_token(token)

    def test_garbage(self):
        """Test that a malformed token is rejected."""
        with pytest.raises(ValidationError):
            self.handler.verify_token("not-a-jwt")
