"""
Authentication infrastructure module.
Handles JWT validation, user authentication, and authorization.
"""

from .jwt_handler import JWTHandler
from .supabase_auth import SupabaseAuthService

__all__ = [
    "JWTHandler",
    "SupabaseAuthService",
]
