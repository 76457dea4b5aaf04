from kendo_grid.db.engine import get_engine, get_sessionmaker
from kendo_grid.db.memory import InMemoryCollection
from kendo_grid.db.sql import SelectCollection, resolve_contains_operator

__all__ = [
    "InMemoryCollection",
    "SelectCollection",
    "get_engine",
    "get_sessionmaker",
    "resolve_contains_operator",
]
