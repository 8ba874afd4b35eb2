"""Signing and verification of self-issued JWT bearer tokens."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING, Any, NotRequired, TypedDict

import jwt
from jwt.exceptions import InvalidTokenError

from ..config import settings
from ..logging import get_logger

if TYPE_CHECKING:
    from ..dbmodels import Users

logger = get_logger(__name__)


class TokenVerificationError(Exception):
    """Raised when a bearer token cannot be verified."""


class TokenClaims(TypedDict):
    """Identity claims carried by an issued token."""

    sub: str  # user id
    username: str
    email: NotRequired[str]
    exp: NotRequired[int]


def sign_token(user: Users, expires_in: timedelta | None = None) -> str:
    """Issue a signed token for a user."""
    now = datetime.now(UTC)
    lifetime = expires_in or timedelta(hours=settings.token_expiry_hours)

    payload: dict[str, Any] = {
        "iss": settings.jwt_issuer,
        "aud": settings.jwt_audience,
        "iat": now,
        "nbf": now,
        "exp": now + lifetime,
        "sub": str(user.id),
        "username": user.username,
        "email": user.email,
    }

    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_token(token: str) -> TokenClaims:
    """Verify a token's signature, audience and lifetime and return its claims."""
    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[settings.jwt_algorithm],
            issuer=settings.jwt_issuer,
            audience=settings.jwt_audience,
            options={
                "verify_exp": True,
                "verify_nbf": True,
                "verify_iat": True,
            },
        )
    except InvalidTokenError as e:
        logger.debug("JWT token validation failed", error=str(e))
        raise TokenVerificationError("Invalid token") from e

    if not payload.get("sub") or not payload.get("username"):
        raise TokenVerificationError("Missing identity claims in token")

    claims = TokenClaims(sub=payload["sub"], username=payload["username"])
    if email := payload.get("email"):
        claims["email"] = email
    if exp := payload.get("exp"):
        claims["exp"] = exp
    return claims
