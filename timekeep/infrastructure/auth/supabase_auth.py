"""
Supabase authentication service.
Asks Supabase Auth about tokens the local JWT check cannot verify.
"""

import logging
from typing import Optional

from supabase import Client, create_client

from timekeep.domain.models.base import ValidationError

logger = logging.getLogger(__name__)


class SupabaseAuthService:
    """Service for Supabase authentication operations."""

    def __init__(self, supabase_url: str, supabase_anon_key: str):
        self.supabase_url = supabase_url
        self.supabase_anon_key = supabase_anon_key
        self._client: Optional[Client] = None

    @property
    def supabase(self) -> Client:
        if self._client is None:
            self._client = create_client(self.supabase_url, self.supabase_anon_key)
        return self._client

    def get_user_id(self, access_token: str) -> str:
        """
        Resolve the user ID behind an access token.

        Blocking; call it from a worker thread.

        Raises:
            ValidationError: If Supabase does not accept the token
        """
        try:
            response = self.supabase.auth.get_user(access_token)
        except Exception as e:
            logger.warning(f"Supabase rejected access token: {e}")
            raise ValidationError("Invalid or expired token", "token")

        if response is None or response.user is None:
            raise ValidationError("Invalid or expired token", "token")

        return str(response.user.id)
