"""
Session dependencies for FastAPI routes.
"""

from __future__ import annotations

from fastapi import Depends, Header, HTTPException, status

from . import service


def _extract_bearer_token(authorization: str | None) -> str | None:
    raw = (authorization or "").strip()
    if not raw:
        return None

    parts = raw.split(" ", 1)
    if len(parts) != 2:
        return None

    scheme, token = parts[0].strip().lower(), parts[1].strip()
    if scheme != "bearer" or not token:
        return None
    return token


async def get_bearer_token(authorization: str | None = Header(default=None)) -> str | None:
    return _extract_bearer_token(authorization)


async def get_optional_session(access_token: str | None = Depends(get_bearer_token)) -> dict | None:
    return await service.get_current_session(access_token)


async def require_session(session: dict | None = Depends(get_optional_session)) -> dict:
    if session is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="A valid bearer token is required.",
        )
    return session
