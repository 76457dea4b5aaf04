"""Field markers controlling which text fields the grid text filter searches.

Markers are attached with ``typing.Annotated`` on dataclasses, pydantic models
and annotated classes::

    @dataclass
    class Animal:
        Id: int
        Name: Annotated[str, Filter()]
        Notes: Annotated[str, IgnoreFilter()]

and through the column ``info`` dictionary on SQLAlchemy mapped classes::

    Name: Mapped[str] = mapped_column(info=grid_info(Filter()))
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

INFO_KEY = "kendo_grid"


@dataclass(frozen=True)
class Filter:
    """Search this field. When any field carries it, only marked fields are searched."""


@dataclass(frozen=True)
class IgnoreFilter:
    """Never search this field in the fallback (unmarked) field set."""


@dataclass(frozen=True)
class NotMapped:
    """The field is not persisted, so it can never be searched."""


Marker = Filter | IgnoreFilter | NotMapped


def grid_info(*markers: Marker) -> dict[str, Any]:
    """Build a SQLAlchemy column ``info`` dict carrying the given markers."""
    return {INFO_KEY: tuple(markers)}


def collect_markers(values: Any) -> tuple[Marker, ...]:
    return tuple(v for v in values if isinstance(v, (Filter, IgnoreFilter, NotMapped)))
