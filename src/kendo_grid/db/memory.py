import copy
from collections.abc import Callable, Iterable, Iterator
from typing import Any, Generic, TypeVar

from kendo_grid.core.fields import RecordSchema, schema_for
from kendo_grid.core.ports.collection import ContainsOperator

T = TypeVar("T")

Predicate = Callable[[Any], bool]


class InMemoryCollection(Generic[T]):
    """Grid collection over records held in memory.

    Filters and orderings are recorded and only run when the collection is
    materialised, so building a view never touches the records.
    """

    def __init__(
        self,
        records: Iterable[T],
        record_type: type | None = None,
        schema: RecordSchema | None = None,
    ) -> None:
        self.records: list[T] = list(records)
        if schema is None:
            if record_type is None:
                record_type = type(self.records[0]) if self.records else object
            schema = schema_for(record_type)
            if schema.is_mapping and not schema.fields:
                schema = RecordSchema.from_rows(self.records, record_type=record_type)
        self._schema = schema
        self._predicates: tuple[Predicate, ...] = ()
        self._sort_keys: tuple[str, ...] = ()

    @property
    def schema(self) -> RecordSchema:
        return self._schema

    @classmethod
    def contains_operator(cls) -> ContainsOperator:
        return _contains

    def field(self, name: str) -> Callable[[Any], Any]:
        return self._schema.getter(self._schema.resolve(name))

    def not_true(self, field: Callable[[Any], Any]) -> Predicate:
        return lambda record: not field(record)

    def either(self, left: Predicate, right: Predicate) -> Predicate:
        return lambda record: left(record) or right(record)

    def where(self, clause: Predicate) -> "InMemoryCollection[T]":
        return self._derive(predicates=(*self._predicates, clause))

    def order_by(self, name: str) -> "InMemoryCollection[T]":
        return self._derive(sort_keys=(self._schema.resolve(name),))

    def then_by(self, name: str) -> "InMemoryCollection[T]":
        return self._derive(sort_keys=(*self._sort_keys, self._schema.resolve(name)))

    def all(self) -> list[T]:
        items = [r for r in self.records if all(p(r) for p in self._predicates)]
        if self._sort_keys:
            getters = [self._schema.getter(k) for k in self._sort_keys]
            items.sort(key=lambda r: tuple(_none_first(g(r)) for g in getters))
        return items

    async def to_list(self) -> list[T]:
        return self.all()

    def __iter__(self) -> Iterator[T]:
        return iter(self.all())

    def _derive(
        self,
        predicates: tuple[Predicate, ...] | None = None,
        sort_keys: tuple[str, ...] | None = None,
    ) -> "InMemoryCollection[T]":
        clone = copy.copy(self)
        if predicates is not None:
            clone._predicates = predicates
        if sort_keys is not None:
            clone._sort_keys = sort_keys
        return clone


def _contains(field: Callable[[Any], Any], term: str) -> Predicate:
    def predicate(record: Any) -> bool:
        value = field(record)
        return isinstance(value, str) and term in value.lower()

    return predicate


def _none_first(value: Any) -> tuple[bool, Any]:
    return (value is not None, value)
