from __future__ import annotations

import logging

from fastapi import APIRouter, FastAPI

from kendo_grid.api.lifespan import lifespan
from kendo_grid.api.routes.health import router as health_router

logger = logging.getLogger(__name__)


def create_app(*routers: APIRouter, title: str = "Kendo Grid API") -> FastAPI:
    app = FastAPI(
        title=title,
        description="Kendo UI grid read endpoints with soft delete, text filtering, sorting and paging.",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.include_router(health_router, include_in_schema=False)
    for router in routers:
        app.include_router(router)

    logger.info("Created %s with %d grid router(s)", title, len(routers))
    return app
