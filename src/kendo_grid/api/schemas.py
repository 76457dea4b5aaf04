from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class HealthResponse(BaseModel):
    status: str = "ok"


class RowSchema(BaseModel):
    """Pass-through record schema for mapping rows."""

    model_config = ConfigDict(extra="allow")
