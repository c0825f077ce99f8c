"""
Identity API schemas (request/response models).
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


class LoginRequest(BaseModel):
    email: str = Field(..., min_length=3, max_length=320)
    password: str = Field(..., min_length=1, max_length=128)


class PasswordUpdate(BaseModel):
    password: str = Field(..., min_length=8, max_length=128)


class SessionUser(BaseModel):
    id: str
    email: str
    name: str | None = None
    created_at: datetime | None = None


class SessionResponse(BaseModel):
    user: SessionUser | None


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
