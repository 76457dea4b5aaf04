from __future__ import annotations

from collections.abc import AsyncIterator, Callable
from typing import Any

from fastapi import Depends
from sqlalchemy import Select
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from kendo_grid.db.engine import get_engine, get_sessionmaker
from kendo_grid.db.sql import SelectCollection

_engine: AsyncEngine | None = None
_sessionmaker: async_sessionmaker[AsyncSession] | None = None


async def get_session() -> AsyncIterator[AsyncSession]:
    """Yield an ``AsyncSession``, creating the engine lazily on first call."""
    global _engine, _sessionmaker  # noqa: PLW0603
    if _sessionmaker is None:
        _engine = get_engine()
        _sessionmaker = get_sessionmaker(_engine)
    async with _sessionmaker() as session:
        yield session


async def shutdown_database() -> None:
    global _engine, _sessionmaker  # noqa: PLW0603
    if _engine is not None:
        await _engine.dispose()
    _engine = None
    _sessionmaker = None


def select_source(entity: type[Any] | Select[Any]) -> Callable[..., SelectCollection[Any]]:
    """Build a dependency yielding a ``SelectCollection`` over ``entity`` for the request's session."""

    def source(session: AsyncSession = Depends(get_session)) -> SelectCollection[Any]:
        return SelectCollection(session, entity)

    return source
