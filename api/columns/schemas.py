"""
Pydantic schemas for column endpoints.
"""

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator

from core.validation import reject_null


class ColumnCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    frameId: str = Field(..., min_length=1)
    tickets: list[str] = Field(default_factory=list)


class ColumnUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=255)
    frameId: str | None = Field(default=None, min_length=1)
    tickets: list[str] | None = None

    not_null = field_validator("name", "frameId", "tickets", mode="before")(reject_null)
