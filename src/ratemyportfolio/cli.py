#!/usr/bin/env python3
"""
Main CLI entry point for the Rate My Portfolio backend.
"""

import asyncio
import os
import sys
from pathlib import Path

import click
import uvicorn

from ratemyportfolio import __version__
from ratemyportfolio.config import settings
from ratemyportfolio.logging import configure_logging, get_logger

logger = get_logger(__name__)


def get_alembic_config():
    """Load alembic.ini from the project root."""
    from alembic.config import Config

    alembic_ini = Path(__file__).resolve().parents[2] / "alembic.ini"
    if not alembic_ini.exists():
        raise FileNotFoundError(f"alembic.ini not found at {alembic_ini}")

    config = Config(str(alembic_ini))
    config.set_main_option("script_location", str(alembic_ini.parent / "alembic"))
    return config


@click.group()
@click.version_option(version=__version__, prog_name="ratemyportfolio")
def cli() -> None:
    """Rate My Portfolio CLI - run the API server and manage the database."""
    pass


@cli.command()
@click.option(
    "--host",
    default=lambda: settings.api_host,
    show_default="RMP_API_HOST",
    help="Host to bind to",
)
@click.option(
    "--port",
    default=lambda: settings.api_port,
    type=int,
    show_default="RMP_API_PORT",
    help="Port to bind to",
)
@click.option(
    "--reload/--no-reload",
    default=lambda: settings.api_reload,
    show_default="RMP_API_RELOAD",
    help="Enable auto-reload for development",
)
@click.option(
    "--log-level",
    default="info",
    type=click.Choice(["debug", "info", "warning", "error"]),
    help="Log level (default: info)",
)
def serve(host: str, port: int, reload: bool, log_level: str) -> None:
    """Start the API server."""
    configure_logging(debug=(log_level == "debug"), level=log_level)

    logger.info("Starting API server", host=host, port=port, reload=reload, log_level=log_level)

    # The app reads these when it is imported by uvicorn
    if log_level == "debug":
        os.environ["RMP_DEBUG"] = "true"
        os.environ["RMP_LOG_LEVEL"] = "debug"
    else:
        os.environ.setdefault("RMP_DEBUG", "false")
        os.environ.setdefault("RMP_LOG_LEVEL", log_level)

    try:
        uvicorn.run(
            "ratemyportfolio.api.app:app",
            host=host,
            port=port,
            reload=reload,
            log_level=log_level,
            access_log=True,
        )
    except KeyboardInterrupt:
        logger.info("Server shutdown requested by user")
    except Exception as e:
        logger.error("Server startup failed", error=str(e))
        sys.exit(1)


@cli.group()
def db() -> None:
    """Manage the database schema."""
    pass


@db.command()
@click.argument("revision", default="head")
def upgrade(revision: str) -> None:
    """Upgrade database to a revision (default: head)."""
    from alembic import command

    configure_logging()
    try:
        logger.info("Upgrading database", revision=revision)
        command.upgrade(get_alembic_config(), revision)
        logger.info("Database upgrade completed successfully")
    except Exception as e:
        logger.error("Database upgrade failed", error=str(e))
        sys.exit(1)


@db.command()
@click.argument("revision", default="-1")
def downgrade(revision: str) -> None:
    """Downgrade database to a revision (default: -1)."""
    from alembic import command

    configure_logging()
    try:
        logger.info("Downgrading database", revision=revision)
        command.downgrade(get_alembic_config(), revision)
        logger.info("Database downgrade completed successfully")
    except Exception as e:
        logger.error("Database downgrade failed", error=str(e))
        sys.exit(1)


@db.command("create-all")
def create_all() -> None:
    """Create tables straight from the models, bypassing migrations (local SQLite)."""
    from ratemyportfolio.database.connection import create_schema, init_database

    configure_logging()
    init_database()
    asyncio.run(create_schema())
    click.echo("✓ Tables created")


if __name__ == "__main__":
    cli()
