"""
Application lifespan handler.
Manages startup and shutdown events for the FastAPI application.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI

from shared.infrastructure.db import engine
from shared.config.settings import settings
from shared.config.logging import setup_logging, pos_api_logger as logger
from shared.infrastructure.events import close_redis_sync_client
from pos_api.models import Base


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.
    Runs on startup and shutdown.
    """
    setup_logging()

    config_errors = settings.validate_production_settings()
    if config_errors:
        for error in config_errors:
            logger.error("Configuration error: %s", error)
        if settings.environment == "production":
            raise RuntimeError(
                f"Production configuration errors: {'; '.join(config_errors)}. "
                "Server will not start with insecure configuration."
            )
        logger.warning("Running with insecure defaults (acceptable for development only)")

    logger.info("Starting POS API", port=settings.api_port, env=settings.environment)

    Base.metadata.create_all(bind=engine)
    logger.info("Database tables created/verified")

    yield

    logger.info("Shutting down POS API")
    close_redis_sync_client()
