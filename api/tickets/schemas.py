"""
Pydantic schemas for ticket endpoints.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field, field_validator

from core.validation import reject_null

Priority = Literal["low", "medium", "high"]


class TicketCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: str | None = Field(default=None, max_length=10_000)
    columnId: str | None = Field(default=None, min_length=1)
    priority: Priority | None = None


class TicketUpdate(BaseModel):
    title: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = Field(default=None, max_length=10_000)
    columnId: str | None = Field(default=None, min_length=1)
    priority: Priority | None = None

    not_null = field_validator("title", mode="before")(reject_null)


class TicketAssignmentRequest(BaseModel):
    user_id: str = Field(..., min_length=1)


class AssigneeSummary(BaseModel):
    id: str
    first_name: str | None = None
    last_name: str | None = None
    email: str
