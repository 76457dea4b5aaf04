"""Kendo grid support: soft delete, text filtering, sorting and the paged result envelope.

Works on any ``GridCollection``; plain iterables are wrapped in an
``InMemoryCollection``.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from functools import cache, reduce
from typing import Any, TypeVar

from kendo_grid.core.errors import GridConfigurationError
from kendo_grid.core.ports.collection import ContainsOperator, GridCollection
from kendo_grid.db.memory import InMemoryCollection
from kendo_grid.models import GridRequest, GridResult, SortSpec

logger = logging.getLogger(__name__)

T = TypeVar("T")


class GridQueryAdapter:
    """Builds grid views over collections of one substrate kind.

    The substring capability is resolved when the adapter is built and held
    for its lifetime; a substrate without one cannot be adapted at all.
    """

    def __init__(self, contains: ContainsOperator | None) -> None:
        if contains is None:
            raise GridConfigurationError("Collection substrate provides no case-insensitive contains operator")
        self.contains = contains

    @classmethod
    def for_collection(cls, collection: GridCollection[Any]) -> GridQueryAdapter:
        return _adapter_for(type(collection))

    def apply(self, collection: GridCollection[T], request: GridRequest) -> GridCollection[T]:
        collection = self.exclude_soft_deleted(collection)
        collection = self.text_filter(collection, request.text_filter)
        return self.sort(collection, request.sort)

    def exclude_soft_deleted(self, collection: GridCollection[T]) -> GridCollection[T]:
        soft_delete = collection.schema.soft_delete
        if soft_delete is None:
            return collection
        logger.debug("Excluding soft deleted %s records", collection.schema.record_type.__name__)
        return collection.where(collection.not_true(collection.field(soft_delete.name)))

    def text_filter(self, collection: GridCollection[T], search: str | None) -> GridCollection[T]:
        if search is None or not search.strip():
            return collection

        term = search.strip().lower()
        fields = collection.schema.candidate_text_fields()
        clauses = [self.contains(collection.field(f.name), term) for f in fields]
        logger.debug("Text filter %r over fields %s", term, [f.name for f in fields])

        # No searchable text fields leaves the collection unfiltered.
        if not clauses:
            return collection
        return collection.where(reduce(collection.either, clauses))

    def sort(self, collection: GridCollection[T], specs: Sequence[SortSpec] | None) -> GridCollection[T]:
        if not specs:
            return collection
        # Always ascending; the secondary key repeats the first field.
        name = specs[0].field
        logger.debug("Sorting by %s", name)
        collection = collection.order_by(name)
        if len(specs) > 1:
            collection = collection.then_by(name)
        return collection


@cache
def _adapter_for(collection_type: type[GridCollection[Any]]) -> GridQueryAdapter:
    return GridQueryAdapter(collection_type.contains_operator())


def as_collection(source: GridCollection[T] | Iterable[T]) -> GridCollection[T]:
    if hasattr(source, "to_list") and hasattr(source, "schema"):
        return source  # type: ignore[return-value]
    return InMemoryCollection(list(source))  # type: ignore[arg-type]


def apply_grid_view(source: GridCollection[T] | Iterable[T], request: GridRequest) -> GridCollection[T]:
    """Return the soft-delete excluded, text filtered and sorted view of ``source``."""
    collection = as_collection(source)
    return GridQueryAdapter.for_collection(collection).apply(collection, request)


def exclude_soft_deleted(source: GridCollection[T] | Iterable[T]) -> GridCollection[T]:
    collection = as_collection(source)
    return GridQueryAdapter.for_collection(collection).exclude_soft_deleted(collection)


def text_filter(source: GridCollection[T] | Iterable[T], search: str | None) -> GridCollection[T]:
    collection = as_collection(source)
    return GridQueryAdapter.for_collection(collection).text_filter(collection, search)


def sort(source: GridCollection[T] | Iterable[T], specs: Sequence[SortSpec] | None) -> GridCollection[T]:
    collection = as_collection(source)
    return GridQueryAdapter.for_collection(collection).sort(collection, specs)


async def build_envelope(source: GridCollection[T] | Iterable[T], request: GridRequest) -> GridResult[T]:
    """Execute ``source`` and page it into the grid envelope.

    ``Count`` is the size of the whole executed collection; the view is not
    re-applied here, see ``grid_result`` for the composed operation.
    """
    items = await as_collection(source).to_list()
    count = len(items)
    page = items[request.skip : request.skip + request.take]
    logger.debug("Envelope: %d of %d records (skip=%d, take=%d)", len(page), count, request.skip, request.take)
    return GridResult(result="OK", count=count, records=page)


async def grid_result(source: GridCollection[T] | Iterable[T], request: GridRequest) -> GridResult[T]:
    """Apply the grid view to ``source`` and return its paged envelope."""
    return await build_envelope(apply_grid_view(source, request), request)
