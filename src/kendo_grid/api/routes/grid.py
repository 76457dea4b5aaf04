from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel

from kendo_grid.api.params import grid_request, normalize_body
from kendo_grid.core.errors import UnknownFieldError
from kendo_grid.core.grid import grid_result
from kendo_grid.core.ports.collection import GridCollection
from kendo_grid.models import GridRequest, GridResult

logger = logging.getLogger(__name__)


def grid_router(
    path: str,
    source: Callable[..., Any],
    schema: type[BaseModel],
    *,
    tags: Sequence[str] | None = None,
) -> APIRouter:
    """Expose ``GET`` and ``POST`` grid read endpoints for one record collection.

    ``source`` is a FastAPI dependency returning the ``GridCollection`` to read;
    records are serialised through ``schema``.
    """
    router = APIRouter(tags=list(tags) if tags else [path.strip("/") or "grid"])

    async def respond(collection: GridCollection[Any], grid: GridRequest) -> GridResult[dict[str, Any]]:
        try:
            result = await grid_result(collection, grid)
        except UnknownFieldError as exc:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
        records = [schema.model_validate(r, from_attributes=True).model_dump(mode="json") for r in result.records]
        return GridResult[dict[str, Any]](result=result.result, count=result.count, records=records)

    @router.get(path, response_model=GridResult[dict[str, Any]])
    async def read_grid(
        grid: GridRequest = Depends(grid_request),
        collection: Any = Depends(source),
    ) -> GridResult[dict[str, Any]]:
        return await respond(collection, grid)

    @router.post(path, response_model=GridResult[dict[str, Any]])
    async def read_grid_body(
        grid: GridRequest,
        collection: Any = Depends(source),
    ) -> GridResult[dict[str, Any]]:
        return await respond(collection, normalize_body(grid))

    return router
