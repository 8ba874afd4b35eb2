"""Authentication for the Rate My Portfolio API."""

from .context import AuthContext
from .middleware import get_auth_context
from .passwords import hash_password, verify_password
from .tokens import TokenVerificationError, decode_token, sign_token

__all__ = [
    "AuthContext",
    "get_auth_context",
    "hash_password",
    "verify_password",
    "sign_token",
    "decode_token",
    "TokenVerificationError",
]
