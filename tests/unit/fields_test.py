"""Tests for record field metadata: derivation, markers, registry and name resolution."""

from collections.abc import Iterator
from dataclasses import dataclass
from typing import Annotated, ClassVar

import pytest
from pydantic import BaseModel
from sqlalchemy import String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from kendo_grid.core.errors import UnknownFieldError
from kendo_grid.core.fields import (
    FieldKind,
    RecordSchema,
    register_schema,
    schema_for,
    unregister_schema,
)
from kendo_grid.core.markers import Filter, IgnoreFilter, NotMapped, grid_info


class Base(DeclarativeBase):
    pass


class Customer(Base):
    __tablename__ = "customers"

    Id: Mapped[int] = mapped_column(primary_key=True)
    Name: Mapped[str] = mapped_column(String(50), info=grid_info(Filter()))
    Email: Mapped[str] = mapped_column(String(100))
    Notes: Mapped[str | None] = mapped_column(String(200), info=grid_info(IgnoreFilter()))
    SoftDelete: Mapped[bool] = mapped_column(default=False)


class Product(BaseModel):
    Sku: str
    Name: Annotated[str, Filter()]
    Description: str | None = None
    Price: float = 0.0
    SoftDelete: bool = False


class Plain:
    Name: str
    Secret: Annotated[str, NotMapped()]
    Tags: list[str]
    _cache: str
    instances: ClassVar[int] = 0


@dataclass
class Flagged:
    Name: str
    SoftDelete: bool | None = None


@dataclass
class Misnamed:
    Name: str
    SoftDelete: str = ""


@dataclass
class Registered:
    Name: str
    Code: str


@pytest.fixture
def registered_schema() -> Iterator[RecordSchema]:
    schema = register_schema(RecordSchema.builder(Registered).text("Code").field("Name").build())
    yield schema
    unregister_schema(Registered)


def _names(fields: tuple) -> list[str]:
    return [f.name for f in fields]


class TestDerivedSchemas:
    def test_sqlalchemy_mapping(self) -> None:
        schema = schema_for(Customer)

        assert _names(schema.fields) == ["Id", "Name", "Email", "Notes", "SoftDelete"]
        assert _names(schema.text_fields) == ["Name", "Email", "Notes"]
        assert _names(schema.candidate_text_fields()) == ["Name"]
        assert schema.soft_delete is not None and schema.soft_delete.name == "SoftDelete"

    def test_pydantic_model(self) -> None:
        schema = schema_for(Product)

        assert _names(schema.text_fields) == ["Sku", "Name", "Description"]
        assert _names(schema.candidate_text_fields()) == ["Name"]
        assert schema.soft_delete is not None

    def test_annotated_class_skips_private_and_class_vars(self) -> None:
        schema = schema_for(Plain)

        assert _names(schema.fields) == ["Name", "Secret", "Tags"]
        assert _names(schema.candidate_text_fields()) == ["Name"]
        assert schema.soft_delete is None

    def test_soft_delete_requires_plain_bool(self) -> None:
        assert schema_for(Flagged).soft_delete is None
        assert schema_for(Misnamed).soft_delete is None
        assert _names(schema_for(Misnamed).candidate_text_fields()) == ["Name", "SoftDelete"]

    def test_schema_is_derived_once_per_type(self) -> None:
        assert schema_for(Product) is schema_for(Product)

    def test_mappings_have_no_declared_fields(self) -> None:
        assert schema_for(dict).fields == ()


class TestCandidateFields:
    def test_filter_marker_wins_over_ignore_in_included_set(self) -> None:
        schema = RecordSchema.builder(dict).text("A", include=True, ignore=True).text("B").build()
        assert _names(schema.candidate_text_fields()) == ["A"]

    def test_not_mapped_is_never_searched(self) -> None:
        schema = RecordSchema.builder(dict).text("A", include=True, not_mapped=True).text("B").build()
        assert _names(schema.candidate_text_fields()) == ["B"]

    def test_fallback_excludes_ignored_and_not_mapped(self) -> None:
        schema = (
            RecordSchema.builder(dict)
            .text("A", ignore=True)
            .text("B", not_mapped=True)
            .text("C")
            .boolean("SoftDelete")
            .field("Id")
            .build()
        )
        assert _names(schema.candidate_text_fields()) == ["C"]
        assert schema.soft_delete is not None


class TestRegistry:
    def test_registered_schema_wins(self, registered_schema: RecordSchema) -> None:
        assert schema_for(Registered) is registered_schema
        assert _names(schema_for(Registered).candidate_text_fields()) == ["Code"]

    def test_unregister_restores_derived_schema(self, registered_schema: RecordSchema) -> None:
        unregister_schema(Registered)
        assert _names(schema_for(Registered).candidate_text_fields()) == ["Name", "Code"]


class TestFromRows:
    def test_infers_kinds_from_first_typed_value(self) -> None:
        rows = [{"Id": 1, "Name": None, "SoftDelete": False}, {"Id": 2, "Name": "Dog", "Extra": "x"}]
        schema = RecordSchema.from_rows(rows, ignore=["Extra"])

        kinds = {f.name: f.kind for f in schema.fields}
        assert kinds == {
            "Id": FieldKind.OTHER,
            "Name": FieldKind.TEXT,
            "SoftDelete": FieldKind.BOOLEAN,
            "Extra": FieldKind.TEXT,
        }
        assert _names(schema.candidate_text_fields()) == ["Name"]

    def test_include_limits_search(self) -> None:
        schema = RecordSchema.from_rows([{"Name": "Cat", "Colour": "black"}], include=["Colour"])
        assert _names(schema.candidate_text_fields()) == ["Colour"]

    def test_mapping_getter(self) -> None:
        schema = RecordSchema.from_rows([{"Name": "Cat"}])
        assert schema.getter("Name")({"Name": "Cat"}) == "Cat"
        assert schema.getter("Name")({}) is None


class TestResolve:
    def test_exact_and_case_insensitive(self) -> None:
        schema = schema_for(Product)
        assert schema.resolve("Name") == "Name"
        assert schema.resolve("sku") == "Sku"
        assert schema.resolve("SOFTDELETE") == "SoftDelete"

    def test_unknown_field(self) -> None:
        with pytest.raises(UnknownFieldError) as excinfo:
            schema_for(Product).resolve("Colour")
        assert isinstance(excinfo.value, AttributeError)
        assert excinfo.value.field_name == "Colour"

    def test_opaque_schema_passes_names_through(self) -> None:
        assert schema_for(dict).resolve("anything") == "anything"
