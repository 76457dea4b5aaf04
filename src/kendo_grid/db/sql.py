import copy
from typing import Any, Generic, TypeVar

from sqlalchemy import ColumnElement, Select, false, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql.operators import ColumnOperators

from kendo_grid.core.fields import RecordSchema, schema_for
from kendo_grid.core.ports.collection import ContainsOperator

T = TypeVar("T")


def resolve_contains_operator() -> ContainsOperator | None:
    """Locate SQLAlchemy's case-insensitive ``contains``, available from SQLAlchemy 2.0."""
    if getattr(ColumnOperators, "icontains", None) is None:
        return None

    def contains(column: Any, term: str) -> ColumnElement[bool]:
        return column.icontains(term, autoescape=True)

    return contains


class SelectCollection(Generic[T]):
    """Grid collection over a SQLAlchemy ``select()`` of one mapped entity."""

    def __init__(self, session: AsyncSession, statement: "Select[Any] | type[T]") -> None:
        if not isinstance(statement, Select):
            statement = select(statement)
        self.session = session
        self.statement: Select[Any] = statement
        self._schema = schema_for(statement.column_descriptions[0]["entity"])

    @property
    def schema(self) -> RecordSchema:
        return self._schema

    @classmethod
    def contains_operator(cls) -> ContainsOperator | None:
        return resolve_contains_operator()

    def field(self, name: str) -> Any:
        return getattr(self._schema.record_type, self._schema.resolve(name))

    def not_true(self, field: Any) -> ColumnElement[bool]:
        return or_(field.is_(None), field == false())

    def either(self, left: ColumnElement[bool], right: ColumnElement[bool]) -> ColumnElement[bool]:
        return or_(left, right)

    def where(self, clause: ColumnElement[bool]) -> "SelectCollection[T]":
        return self._derive(self.statement.where(clause))

    def order_by(self, name: str) -> "SelectCollection[T]":
        return self._derive(self.statement.order_by(None).order_by(self.field(name)))

    def then_by(self, name: str) -> "SelectCollection[T]":
        return self._derive(self.statement.order_by(self.field(name)))

    async def to_list(self) -> list[T]:
        result = await self.session.scalars(self.statement)
        return list(result.all())

    def _derive(self, statement: Select[Any]) -> "SelectCollection[T]":
        clone = copy.copy(self)
        clone.statement = statement
        return clone
