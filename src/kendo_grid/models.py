from enum import Enum
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field, NonNegativeInt, field_validator
from pydantic.alias_generators import to_camel

T = TypeVar("T")


class SortDirection(str, Enum):
    ASC = "asc"
    DESC = "desc"


class SortSpec(BaseModel):
    field: str
    dir: SortDirection = SortDirection.ASC

    @field_validator("dir", mode="before")
    @classmethod
    def _lower_dir(cls, value: Any) -> Any:
        return value.lower() if isinstance(value, str) else value


class GridRequest(BaseModel):
    """A Kendo data source read request."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    text_filter: str | None = None
    sort: list[SortSpec] | None = None
    skip: NonNegativeInt = 0
    take: NonNegativeInt = 0
    page: int | None = None
    page_size: int | None = None


class GridResult(BaseModel, Generic[T]):
    """Response envelope expected by the Kendo grid: ``{"Result", "Count", "Records"}``."""

    model_config = ConfigDict(populate_by_name=True)

    result: str = Field(default="OK", alias="Result")
    count: int = Field(alias="Count")
    records: list[T] = Field(alias="Records")

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)
