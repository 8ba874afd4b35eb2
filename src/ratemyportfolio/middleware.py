"""
Middleware for request context and logging
"""

import json
import re
import time
from collections.abc import Callable
from typing import Any

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from .logging import (
    clear_request_context,
    extract_user_id_from_request,
    get_logger,
    set_request_context,
)

logger = get_logger(__name__)

SENSITIVE_KEYS = {
    "password",
    "token",
    "secret",
    "auth",
    "authorization",
    "access_token",
    "jwt",
    "session",
    "cookie",
    "credentials",
}

_OPERATION_RE = re.compile(r"\b(query|mutation)\s+(\w+)")
GRAPHQL_PAYLOAD_PARAMS = ("query", "variables", "extensions")


def sanitize_query_params(params: dict[str, Any]) -> dict[str, Any]:
    """Remove sensitive query parameters from logging."""
    return {
        key: "[REDACTED]" if any(s in key.lower() for s in SENSITIVE_KEYS) else value
        for key, value in params.items()
    }


def operation_name_from_document(query: str) -> str:
    if "__schema" in query or "IntrospectionQuery" in query:
        return "__introspection"
    match = _OPERATION_RE.search(query)
    if match:
        kind = "mutation:" if match.group(1) == "mutation" else ""
        return f"{kind}{match.group(2)}"
    return "unnamed_operation"


async def extract_graphql_operation_name(request: Request) -> str | None:
    """Best-effort operation name of a /graphql request, for log lines."""
    if request.url.path != "/graphql":
        return None

    if request.method == "GET":
        data: Any = dict(request.query_params)
    elif request.method == "POST":
        try:
            body = await request.body()
            data = json.loads(body) if body else None
        except (json.JSONDecodeError, UnicodeDecodeError):
            return None
    else:
        return None

    if not isinstance(data, dict):
        return None

    op = data.get("operationName")
    if isinstance(op, str) and op:
        return op

    query = data.get("query")
    if not isinstance(query, str) or not query:
        return None
    return operation_name_from_document(query)


class LoggingContextMiddleware(BaseHTTPMiddleware):
    """Bind request id, caller and GraphQL operation to every log line of a request."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        set_request_context(
            user_id=extract_user_id_from_request(request),
            operation=await extract_graphql_operation_name(request),
        )
        started = time.perf_counter()

        try:
            query_params = None
            if request.query_params:
                query_params = sanitize_query_params(dict(request.query_params))
                # GET /graphql carries the whole operation in the query string
                if request.url.path == "/graphql":
                    query_params = {
                        k: "[REDACTED]" if k in GRAPHQL_PAYLOAD_PARAMS else v
                        for k, v in query_params.items()
                    }

            logger.info(
                "Request started",
                method=request.method,
                path=request.url.path,
                query_params=query_params,
                user_agent=request.headers.get("user-agent"),
                remote_addr=request.client.host if request.client else None,
            )

            response = await call_next(request)

            logger.info(
                "Request completed",
                status_code=response.status_code,
                method=request.method,
                path=request.url.path,
                duration_ms=round((time.perf_counter() - started) * 1000, 1),
            )
            return response

        except Exception as e:
            logger.error(
                "Request failed",
                method=request.method,
                path=request.url.path,
                error=str(e),
            )
            raise

        finally:
            clear_request_context()
