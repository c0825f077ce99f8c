"""
Identity API endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from . import dependencies, schemas, service

router = APIRouter(prefix="/auth")


@router.post("/login", response_model=schemas.TokenResponse)
async def login(payload: schemas.LoginRequest) -> schemas.TokenResponse:
    return await service.login(payload)


@router.get("/session", response_model=schemas.SessionResponse)
async def current_session(
    session: dict | None = Depends(dependencies.get_optional_session),
) -> schemas.SessionResponse:
    """
    The signed-in user, or `{"user": null}` when there is no usable session.
    """
    if session is None:
        return schemas.SessionResponse(user=None)
    return schemas.SessionResponse(user=service.to_session_user(session))
