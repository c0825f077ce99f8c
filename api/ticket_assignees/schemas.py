"""
Pydantic schemas for ticket-assignee endpoints.
"""

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator

from core.validation import reject_null


class TicketAssigneeCreate(BaseModel):
    ticket_id: str = Field(..., min_length=1)
    user_id: str = Field(..., min_length=1)


class TicketAssigneeUpdate(BaseModel):
    ticket_id: str | None = Field(default=None, min_length=1)
    user_id: str | None = Field(default=None, min_length=1)

    not_null = field_validator("ticket_id", "user_id", mode="before")(reject_null)
