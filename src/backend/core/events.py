"""
Application lifecycle event handlers.

Manages startup and shutdown of the Cosmos DB client.
"""

from typing import Callable

import structlog
from fastapi import FastAPI

from core.config import settings
from db import close_cosmos, init_cosmos

logger = structlog.get_logger(__name__)


def create_start_app_handler(app: FastAPI) -> Callable:
    """Create startup event handler."""

    async def start_app() -> None:
        logger.info("Starting TeamVote API...", env=settings.APP_ENV)

        if settings.cosmos_configured:
            await init_cosmos()
            logger.info("Cosmos DB initialized", database=settings.AZURE_COSMOS_DATABASE)
        else:
            logger.warning("Cosmos DB not configured; data endpoints will fail")

        logger.info("TeamVote API started successfully")

    return start_app


def create_stop_app_handler(app: FastAPI) -> Callable:
    """Create shutdown event handler."""

    async def stop_app() -> None:
        logger.info("Shutting down TeamVote API...")

        await close_cosmos()

        logger.info("TeamVote API shutdown complete")

    return stop_app
