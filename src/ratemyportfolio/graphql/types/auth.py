"""
Auth payload GraphQL type
"""

import strawberry

from .user import User


@strawberry.type
class Auth:
    """Signed token plus the user it was issued for."""

    token: str
    user: User
