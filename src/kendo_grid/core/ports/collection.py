from collections.abc import Callable
from typing import Any, Protocol, TypeVar

from kendo_grid.core.fields import RecordSchema

T = TypeVar("T")
C = TypeVar("C", bound="GridCollection[Any]")

# (field expression, lower-cased search term) -> clause
ContainsOperator = Callable[[Any, str], Any]


class GridCollection(Protocol[T]):
    @property
    def schema(self) -> RecordSchema: ...

    @classmethod
    def contains_operator(cls) -> ContainsOperator | None: ...

    def field(self, name: str) -> Any: ...

    def not_true(self, field: Any) -> Any: ...

    def either(self, left: Any, right: Any) -> Any: ...

    def where(self: C, clause: Any) -> C: ...

    def order_by(self: C, name: str) -> C: ...

    def then_by(self: C, name: str) -> C: ...

    async def to_list(self) -> list[T]: ...
