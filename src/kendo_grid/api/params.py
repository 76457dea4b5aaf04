"""Decoding of Kendo data source read requests.

The Kendo data source sends paging and sorting as query parameters::

    ?take=20&skip=40&page=3&pageSize=20&sort[0][field]=Name&sort[0][dir]=desc&textFilter=og

Parameter names are matched case-insensitively. ``take`` falls back to the
configured default and is clamped to the configured maximum.
"""

from __future__ import annotations

import re

from fastapi import HTTPException, status
from pydantic import ValidationError
from starlette.requests import Request

from kendo_grid.config import get_settings
from kendo_grid.models import GridRequest, SortSpec

_SORT_PARAM = re.compile(r"^sort\[(\d+)\]\[(field|dir)\]$", re.IGNORECASE)


def _int_param(raw: str | None, default: int) -> int:
    if raw is None:
        return default
    try:
        return max(0, int(raw))
    except (ValueError, TypeError):
        return default


def clamp_take(take: int) -> int:
    return max(0, min(take, get_settings().max_take))


def parse_grid_request(request: Request) -> GridRequest:
    params = {key.lower(): value for key, value in request.query_params.items()}

    sorts: dict[int, dict[str, str]] = {}
    for key, value in request.query_params.multi_items():
        match = _SORT_PARAM.match(key)
        if match:
            sorts.setdefault(int(match.group(1)), {})[match.group(2).lower()] = value

    try:
        sort = [
            SortSpec(field=s["field"], dir=s.get("dir") or "asc") for _, s in sorted(sorts.items()) if s.get("field")
        ]
        page = params.get("page")
        page_size = params.get("pagesize")
        return GridRequest(
            text_filter=params.get("textfilter"),
            sort=sort or None,
            skip=_int_param(params.get("skip"), 0),
            take=clamp_take(_int_param(params.get("take"), get_settings().default_take)),
            page=_int_param(page, 0) if page is not None else None,
            page_size=_int_param(page_size, 0) if page_size is not None else None,
        )
    except ValidationError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=exc.errors(include_url=False)) from exc


async def grid_request(request: Request) -> GridRequest:
    """FastAPI dependency: the grid request encoded in the query string."""
    return parse_grid_request(request)


def normalize_body(grid: GridRequest) -> GridRequest:
    """Apply the default and maximum ``take`` to a JSON request body."""
    take = grid.take if "take" in grid.model_fields_set else get_settings().default_take
    return grid.model_copy(update={"take": clamp_take(take)})
