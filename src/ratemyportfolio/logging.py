"""
Centralized logging configuration using structlog

Every event carries the request id, the caller's user id and the GraphQL
operation name when they are known, and never carries credentials.
"""

import base64
import logging
import secrets
import sys
import time
from contextvars import ContextVar
from typing import Any

import structlog
from fastapi import Request

request_id_ctx: ContextVar[str | None] = ContextVar("request_id", default=None)
user_id_ctx: ContextVar[str | None] = ContextVar("user_id", default=None)
operation_ctx: ContextVar[str | None] = ContextVar("graphql_operation", default=None)

# Event keys whose values must never reach a log sink
REDACTED_KEYS = frozenset({"password", "password_hash", "token", "authorization", "jwt_secret"})

# Libraries that log every statement or request at INFO
NOISY_LOGGERS = ("sqlalchemy.engine", "aiosqlite", "asyncio")


class RequestContextFilter:
    """Add request context to the event dict."""

    def __call__(self, logger: Any, method_name: str, event_dict: dict[str, Any]) -> dict[str, Any]:
        _ = logger, method_name

        for key, var in (
            ("request_id", request_id_ctx),
            ("user_id", user_id_ctx),
            ("graphql_operation", operation_ctx),
        ):
            value = var.get()
            if value and key not in event_dict:
                event_dict[key] = value

        return event_dict


def redact_credentials(logger: Any, method_name: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    """Mask credential values passed as event keys."""
    _ = logger, method_name
    for key in REDACTED_KEYS.intersection(event_dict):
        event_dict[key] = "[REDACTED]"
    return event_dict


def configure_logging(debug: bool = False, level: str | None = None) -> None:
    """Configure structlog on top of stdlib logging.

    Args:
        debug: Human-readable console output at DEBUG level instead of JSON.
        level: Explicit level name (e.g. "warning"); defaults to the
            ``RMP_LOG_LEVEL`` setting.
    """
    from .config import settings

    if debug:
        log_level = logging.DEBUG
    else:
        log_level = logging.getLevelName((level or settings.log_level).upper())
        if not isinstance(log_level, int):
            log_level = logging.INFO

    logging.basicConfig(
        level=log_level,
        stream=sys.stdout,
        format="%(message)s",
        force=True,
    )
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(
            logging.INFO if settings.sql_echo and name == "sqlalchemy.engine" else logging.WARNING
        )

    processors: list[Any] = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        RequestContextFilter(),
        redact_credentials,
        structlog.processors.TimeStamper(fmt="ISO", utc=True),
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]
    processors.append(
        structlog.dev.ConsoleRenderer(colors=True) if debug else structlog.processors.JSONRenderer()
    )

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        context_class=dict,
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.BoundLogger:
    return structlog.get_logger(name)


def generate_request_id() -> str:
    """Return a 14-character URL-safe id: microsecond timestamp plus 2 random bytes."""
    stamp = int(time.time() * 1_000_000).to_bytes(8, byteorder="big")
    return base64.urlsafe_b64encode(stamp + secrets.token_bytes(2)).decode("ascii").rstrip("=")


def set_request_context(
    request_id: str | None = None,
    user_id: str | None = None,
    operation: str | None = None,
) -> None:
    """Bind the current request's identifiers to the logging context.

    A request id is generated when none is given.
    """
    request_id_ctx.set(request_id or generate_request_id())
    if user_id is not None:
        user_id_ctx.set(user_id)
    if operation is not None:
        operation_ctx.set(operation)


def clear_request_context() -> None:
    request_id_ctx.set(None)
    user_id_ctx.set(None)
    operation_ctx.set(None)


def get_request_id() -> str | None:
    return request_id_ctx.get()


def extract_user_id_from_request(request: Request) -> str | None:
    """Extract the user ID from the bearer token of a request, without a database lookup.

    Only used to tag log lines; authorization always goes through the
    auth context, which re-checks the user against the store.
    """
    auth_header = request.headers.get("authorization")
    if not auth_header or not auth_header.startswith("Bearer "):
        return None

    from .auth.tokens import TokenVerificationError, decode_token

    try:
        return decode_token(auth_header[7:].strip()).get("sub")
    except TokenVerificationError:
        return None
