"""
Typed failures raised by resolvers.

Each error exposes an ``extensions`` dict; graphql-core copies it onto the
GraphQL error so clients can branch on ``extensions.code``.
"""


class APIError(Exception):
    """Base class for failures reported to API clients."""

    code = "INTERNAL_SERVER_ERROR"
    default_message = "Internal server error"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message
        self.extensions = {"code": self.code}


class AuthenticationError(APIError):
    """The caller is not logged in, or presented bad credentials."""

    code = "UNAUTHENTICATED"
    default_message = "You need to be logged in"


class ForbiddenError(AuthenticationError):
    """The caller is logged in but may not perform the operation."""

    code = "FORBIDDEN"
    default_message = "You are not allowed to do this"


class ValidationError(APIError):
    code = "BAD_USER_INPUT"
    default_message = "Invalid input"


class NotFoundError(APIError):
    code = "NOT_FOUND"
    default_message = "Not found"
