"""FastAPI application entry point."""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger

from inboxstream.infrastructure import get_postgres_client, get_settings


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup/shutdown."""
    settings = get_settings()
    logger.info(f"Starting {settings.app_name} v{settings.app_version}")
    logger.info(f"Environment: {settings.environment}")

    postgres = get_postgres_client()
    try:
        await postgres.connect()
        await postgres.setup_schema()
        logger.info("PostgreSQL connection established and schema ready")
    except Exception as e:
        logger.warning(f"PostgreSQL connection failed (non-fatal): {e}")

    yield

    # Cleanup on shutdown
    logger.info("Shutting down...")
    await postgres.disconnect()
    logger.info("Shutdown complete")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Streaming chat replies and background mailbox ingestion",
        lifespan=lifespan,
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # Configure appropriately for production
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Register routes
    from inboxstream.api.routes import router
    from inboxstream.infrastructure.http.chat import router as chat_router
    from inboxstream.infrastructure.http.email_sync import router as email_router

    app.include_router(router)
    app.include_router(chat_router)
    app.include_router(email_router)

    return app


# Create app instance
app = create_app()
