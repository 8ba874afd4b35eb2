"""
Main FastAPI application for the Rate My Portfolio backend
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .. import __version__
from ..config import DEFAULT_JWT_SECRET, is_production, settings
from ..database import init_database
from ..database.connection import test_database_connection
from ..graphql.schema import create_graphql_router, validate_schema
from ..logging import configure_logging, get_logger
from ..middleware import LoggingContextMiddleware

# Configure logging before creating logger
configure_logging(debug=settings.debug)
logger = get_logger(__name__)


def check_startup_configuration() -> None:
    """Refuse to start a production deployment with development secrets."""
    if settings.jwt_secret == DEFAULT_JWT_SECRET:
        if is_production():
            raise RuntimeError(
                "RMP_JWT_SECRET must be set in production; refusing to sign tokens "
                "with the development secret."
            )
        logger.warning("Using the development JWT secret; set RMP_JWT_SECRET")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    logger.info("Starting Rate My Portfolio API...")
    check_startup_configuration()
    init_database()

    ok, error = await test_database_connection()
    if ok:
        logger.info("Database connection verified")
    else:
        logger.error("Database connection check failed", error=error)

    yield

    logger.info("Shutting down Rate My Portfolio API...")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""

    app = FastAPI(
        title="Rate My Portfolio API",
        description="Publish portfolios, rate and review them, follow other users",
        version=__version__,
        lifespan=lifespan,
        debug=settings.debug,
    )

    app.add_middleware(LoggingContextMiddleware)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/health")
    async def health_check():  # pyright: ignore [reportUnusedFunction]
        """Health check endpoint."""
        return {"status": "healthy", "version": __version__}

    # Validate the schema before mounting so a broken schema stops startup
    validate_schema()
    app.include_router(create_graphql_router(), prefix="")
    logger.info("GraphQL endpoint initialized", endpoint="/graphql")

    return app


# Create the main application instance
app = create_app()
