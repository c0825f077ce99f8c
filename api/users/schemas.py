"""
Pydantic schemas for user endpoints.

`password` is write-only: it is routed to the identity subsystem and never
stored in, or returned from, the `users` table.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, field_validator

from core.validation import reject_null

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+$"


def normalize_email(value: Any) -> Any:
    # Same form the identity store keeps, so profile and session agree.
    if isinstance(value, str):
        return value.strip().lower()
    return value


class UserCreate(BaseModel):
    email: str = Field(..., min_length=3, max_length=320, pattern=EMAIL_PATTERN)
    name: str | None = Field(default=None, max_length=200)
    first_name: str | None = Field(default=None, max_length=100)
    last_name: str | None = Field(default=None, max_length=100)
    password: str | None = Field(default=None, min_length=8, max_length=128)

    lower_email = field_validator("email", mode="before")(normalize_email)


class UserUpdate(BaseModel):
    email: str | None = Field(default=None, min_length=3, max_length=320, pattern=EMAIL_PATTERN)
    name: str | None = Field(default=None, max_length=200)
    first_name: str | None = Field(default=None, max_length=100)
    last_name: str | None = Field(default=None, max_length=100)
    password: str | None = Field(default=None, min_length=8, max_length=128)

    not_null = field_validator("email", mode="before")(reject_null)
    lower_email = field_validator("email", mode="before")(normalize_email)
