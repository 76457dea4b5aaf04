from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from kendo_grid.api.dependencies import shutdown_database
from kendo_grid.config import get_settings

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Pin the paging settings for the app's lifetime and dispose the engine on shutdown."""
    settings = get_settings()
    app.state.settings = settings
    logger.info("Serving grids with take default %d, max %d", settings.default_take, settings.max_take)
    try:
        yield
    finally:
        await shutdown_database()
        logger.debug("Grid database engine disposed")
