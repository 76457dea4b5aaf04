"""Record field metadata used by the grid text filter, soft delete and sorting.

A ``RecordSchema`` describes the static shape of a record type: its field
names, which of them hold text or booleans, and the filter markers attached to
them. Schemas are either declared explicitly with ``RecordSchema.builder`` and
``register_schema``, or derived once per type from SQLAlchemy mappings,
pydantic models, dataclasses or annotated classes.
"""

from __future__ import annotations

import dataclasses
import inspect
import operator
import sys
import types
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from enum import Enum
from functools import cache
from typing import Annotated, Any, ClassVar, Union, get_args, get_origin, get_type_hints

from sqlalchemy import Boolean, String
from sqlalchemy import Enum as SqlEnum
from sqlalchemy import inspect as sa_inspect
from sqlalchemy.orm import Mapper

from kendo_grid.core.errors import UnknownFieldError
from kendo_grid.core.markers import INFO_KEY, Filter, IgnoreFilter, Marker, NotMapped, collect_markers

SOFT_DELETE_FIELD = "SoftDelete"


class FieldKind(str, Enum):
    TEXT = "text"
    BOOLEAN = "boolean"
    OTHER = "other"


# Annotations kept as source text when they cannot be evaluated, spaces removed.
_STRING_ANNOTATION_KINDS = {
    "str": FieldKind.TEXT,
    "str|None": FieldKind.TEXT,
    "None|str": FieldKind.TEXT,
    "Optional[str]": FieldKind.TEXT,
    "bool": FieldKind.BOOLEAN,
}


@dataclass(frozen=True)
class FieldInfo:
    name: str
    kind: FieldKind = FieldKind.OTHER
    include: bool = False
    ignore: bool = False
    not_mapped: bool = False

    @classmethod
    def from_markers(cls, name: str, kind: FieldKind, markers: Iterable[Marker]) -> FieldInfo:
        markers = tuple(markers)
        return cls(
            name=name,
            kind=kind,
            include=any(isinstance(m, Filter) for m in markers),
            ignore=any(isinstance(m, IgnoreFilter) for m in markers),
            not_mapped=any(isinstance(m, NotMapped) for m in markers),
        )


@dataclass(frozen=True)
class RecordSchema:
    record_type: type
    fields: tuple[FieldInfo, ...] = ()

    @property
    def is_mapping(self) -> bool:
        return isinstance(self.record_type, type) and issubclass(self.record_type, Mapping)

    @property
    def text_fields(self) -> tuple[FieldInfo, ...]:
        return tuple(f for f in self.fields if f.kind is FieldKind.TEXT)

    @property
    def soft_delete(self) -> FieldInfo | None:
        for f in self.fields:
            if f.name == SOFT_DELETE_FIELD and f.kind is FieldKind.BOOLEAN:
                return f
        return None

    def candidate_text_fields(self) -> tuple[FieldInfo, ...]:
        """Text fields searched by the text filter.

        Fields marked ``Filter`` win exclusively; without any, every text field
        not marked ``NotMapped`` or ``IgnoreFilter`` is searched.
        """
        included = tuple(f for f in self.text_fields if f.include and not f.not_mapped)
        if included:
            return included
        return tuple(f for f in self.text_fields if not f.not_mapped and not f.ignore)

    def resolve(self, name: str) -> str:
        """Resolve a client-supplied field name, falling back to a case-insensitive match."""
        if not self.fields:
            return name
        names = [f.name for f in self.fields]
        if name in names:
            return name
        folded = name.casefold()
        for candidate in names:
            if candidate.casefold() == folded:
                return candidate
        raise UnknownFieldError(self.record_type, name)

    def getter(self, name: str) -> Callable[[Any], Any]:
        if self.is_mapping:
            return lambda record: record.get(name)
        return operator.attrgetter(name)

    @classmethod
    def builder(cls, record_type: type) -> RecordSchemaBuilder:
        return RecordSchemaBuilder(record_type)

    @classmethod
    def from_rows(
        cls,
        rows: Iterable[Mapping[str, Any]],
        *,
        include: Iterable[str] = (),
        ignore: Iterable[str] = (),
        record_type: type = dict,
    ) -> RecordSchema:
        """Infer a schema from mapping rows: ``str`` values are text, ``bool`` values boolean."""
        kinds: dict[str, FieldKind] = {}
        for row in rows:
            for key, value in row.items():
                if kinds.get(key, FieldKind.OTHER) is FieldKind.OTHER:
                    kinds[key] = _value_kind(value)

        include_set, ignore_set = set(include), set(ignore)
        builder = cls.builder(record_type)
        for key, kind in kinds.items():
            if kind is FieldKind.TEXT:
                builder.text(key, include=key in include_set, ignore=key in ignore_set)
            elif kind is FieldKind.BOOLEAN:
                builder.boolean(key)
            else:
                builder.field(key)
        return builder.build()


class RecordSchemaBuilder:
    """Explicit declaration of a record type's fields."""

    def __init__(self, record_type: type) -> None:
        self._record_type = record_type
        self._fields: dict[str, FieldInfo] = {}

    def text(
        self, name: str, *, include: bool = False, ignore: bool = False, not_mapped: bool = False
    ) -> RecordSchemaBuilder:
        self._fields[name] = FieldInfo(name, FieldKind.TEXT, include=include, ignore=ignore, not_mapped=not_mapped)
        return self

    def boolean(self, name: str) -> RecordSchemaBuilder:
        self._fields[name] = FieldInfo(name, FieldKind.BOOLEAN)
        return self

    def field(self, name: str) -> RecordSchemaBuilder:
        self._fields[name] = FieldInfo(name, FieldKind.OTHER)
        return self

    def build(self) -> RecordSchema:
        return RecordSchema(self._record_type, tuple(self._fields.values()))


_registry: dict[type, RecordSchema] = {}


def register_schema(schema: RecordSchema) -> RecordSchema:
    """Declare the schema of a record type, taking precedence over derived metadata."""
    _registry[schema.record_type] = schema
    return schema


def unregister_schema(record_type: type) -> None:
    _registry.pop(record_type, None)


def schema_for(record_type: type) -> RecordSchema:
    explicit = _registry.get(record_type)
    if explicit is not None:
        return explicit
    return _derive_schema(record_type)


@cache
def _derive_schema(record_type: type) -> RecordSchema:
    if not isinstance(record_type, type) or issubclass(record_type, Mapping):
        return RecordSchema(record_type)

    mapper = sa_inspect(record_type, raiseerr=False)
    if isinstance(mapper, Mapper):
        return RecordSchema(record_type, tuple(_mapper_fields(mapper)))

    model_fields = getattr(record_type, "model_fields", None)
    if isinstance(model_fields, dict):
        return RecordSchema(
            record_type,
            tuple(
                FieldInfo.from_markers(name, _annotation_kind(info.annotation), collect_markers(info.metadata))
                for name, info in model_fields.items()
            ),
        )

    try:
        hints = get_type_hints(record_type, include_extras=True)
    except NameError:
        hints = _annotations_by_name(record_type)
    if dataclasses.is_dataclass(record_type):
        names = [f.name for f in dataclasses.fields(record_type)]
    else:
        names = [n for n, hint in hints.items() if not n.startswith("_") and not _is_class_var(hint)]

    fields: list[FieldInfo] = []
    for name in names:
        hint = hints.get(name, Any)
        markers: tuple[Marker, ...] = ()
        if get_origin(hint) is Annotated:
            hint, *metadata = get_args(hint)
            markers = collect_markers(metadata)
        fields.append(FieldInfo.from_markers(name, _annotation_kind(hint), markers))
    return RecordSchema(record_type, tuple(fields))


def _mapper_fields(mapper: Mapper[Any]) -> Iterable[FieldInfo]:
    for prop in mapper.column_attrs:
        column = prop.columns[0]
        column_type = getattr(column, "type", None)
        if isinstance(column_type, String) and not isinstance(column_type, SqlEnum):
            kind = FieldKind.TEXT
        elif isinstance(column_type, Boolean):
            kind = FieldKind.BOOLEAN
        else:
            kind = FieldKind.OTHER
        info = getattr(column, "info", {}) or {}
        yield FieldInfo.from_markers(prop.key, kind, collect_markers(info.get(INFO_KEY, ())))


def _annotations_by_name(record_type: type) -> dict[str, Any]:
    """Annotations of ``record_type`` evaluated one at a time.

    Used when ``get_type_hints`` fails because some annotation names a type
    imported only for type checking; those stay as their source string.
    """
    module = sys.modules.get(record_type.__module__)
    globalns = dict(vars(module)) if module is not None else {}
    hints: dict[str, Any] = {}
    for klass in reversed(record_type.__mro__):
        localns = dict(vars(klass))
        for name, annotation in inspect.get_annotations(klass).items():
            if isinstance(annotation, str):
                try:
                    annotation = eval(annotation, globalns, localns)  # noqa: S307
                except (NameError, AttributeError, SyntaxError, TypeError):
                    pass
            hints[name] = annotation
    return hints


def _is_class_var(hint: Any) -> bool:
    if isinstance(hint, str):
        return hint.replace("typing.", "").startswith("ClassVar")
    return get_origin(hint) is ClassVar


def _annotation_kind(hint: Any) -> FieldKind:
    if isinstance(hint, str):
        return _STRING_ANNOTATION_KINDS.get(hint.replace(" ", "").replace("typing.", ""), FieldKind.OTHER)
    if hint is str:
        return FieldKind.TEXT
    if hint is bool:
        return FieldKind.BOOLEAN
    if get_origin(hint) in (Union, types.UnionType):
        args = [a for a in get_args(hint) if a is not type(None)]
        if len(args) == 1 and args[0] is str:
            return FieldKind.TEXT
    return FieldKind.OTHER


def _value_kind(value: Any) -> FieldKind:
    if isinstance(value, bool):
        return FieldKind.BOOLEAN
    if isinstance(value, str):
        return FieldKind.TEXT
    return FieldKind.OTHER

