"""Authentication context for request handling."""

from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID


@dataclass
class AuthContext:
    """Runtime identity of the caller of a request."""

    user_id: UUID | None
    username: str | None
    token: str | None

    @property
    def is_authenticated(self) -> bool:
        """Check if the request is authenticated."""
        return self.user_id is not None and self.username is not None

    @classmethod
    def anonymous(cls) -> AuthContext:
        return cls(user_id=None, username=None, token=None)
