"""
Shared pytest fixtures and configuration for all tests.
"""

import os
from collections.abc import AsyncGenerator, Awaitable, Callable, Generator
from pathlib import Path
from typing import Any
from unittest.mock import MagicMock

import pytest
import pytest_asyncio
import strawberry

from ratemyportfolio.auth.context import AuthContext


@pytest_asyncio.fixture(scope="function")
async def database(tmp_path: Path) -> AsyncGenerator[str, None]:
    """Point the shared engine at a fresh SQLite file with the schema created."""
    from ratemyportfolio.database.connection import (
        create_schema,
        drop_schema,
        get_async_engine,
        init_database,
        reset_database,
    )

    dsn = f"sqlite+aiosqlite:///{tmp_path / 'test.db'}"
    os.environ["RMP_DATABASE_URL"] = dsn

    reset_database()
    init_database(dsn, force_reinit=True)
    await create_schema()

    yield dsn

    await drop_schema()
    await get_async_engine().dispose()
    reset_database()


def build_info(auth: AuthContext | None = None) -> Any:
    """Create a mock GraphQL info object carrying a resolved auth context."""
    info = MagicMock(spec=strawberry.Info)
    info.context = {"auth": auth or AuthContext.anonymous()}
    return info


@pytest.fixture
def make_info() -> Callable[..., Any]:
    return build_info


@pytest.fixture
def register(database: str) -> Callable[..., Awaitable[AuthContext]]:
    """Factory that signs up a user and returns its authenticated context."""
    from ratemyportfolio.graphql.resolvers.account import add_user

    async def _register(
        username: str, email: str | None = None, password: str = "secret123"
    ) -> AuthContext:
        auth = await add_user(build_info(), username, email or f"{username}@example.com", password)
        return AuthContext(user_id=auth.user.id, username=auth.user.username, token=auth.token)

    return _register


@pytest.fixture(autouse=True)
def reset_environment() -> Generator[None, None, None]:
    """Reset environment variables for each test."""
    original_env = os.environ.copy()
    yield
    os.environ.clear()
    os.environ.update(original_env)


# Test markers
def pytest_configure(config: Any) -> None:
    """Register custom markers."""
    config.addinivalue_line("markers", "requires_db: mark test as requiring database connection")
    config.addinivalue_line("markers", "integration: mark test as integration test")
    config.addinivalue_line("markers", "unit: mark test as unit test")
