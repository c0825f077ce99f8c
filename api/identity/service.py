"""
Identity business logic.

The identity subsystem is a separate store from the `users` table: user
operations call into it to provision, mirror and remove credentials. Every
failure on that path surfaces as IdentityFailure.
"""

from __future__ import annotations

import logging

import asyncpg
from fastapi import HTTPException, status

from core import db
from core.errors import IdentityFailure
from core.records import utc_now

from . import repository, schemas, security

logger = logging.getLogger(__name__)

_IDENTITY_ERRORS = (
    asyncpg.PostgresError,
    asyncpg.InterfaceError,
    OSError,
    db.DatabaseNotReady,
    security.IdentitySecurityError,
)


def _identity_failure(op: str, user_id: str, exc: BaseException) -> IdentityFailure:
    logger.exception("identity_failure op=%s user_id=%s", op, user_id)
    return IdentityFailure(str(exc) or f"Identity {op} failed.")


def to_session_user(identity_row: dict) -> schemas.SessionUser:
    return schemas.SessionUser(
        id=str(identity_row["user_id"]),
        email=str(identity_row["email"]),
        name=identity_row.get("name"),
        created_at=identity_row.get("created_at"),
    )


async def register_identity(
    user_id: str,
    *,
    email: str,
    name: str | None = None,
    password: str | None = None,
) -> dict:
    try:
        password_hash = security.hash_password(password) if password else None
        return await repository.create_identity(
            user_id=user_id,
            email=email,
            name=name,
            password_hash=password_hash,
            now=utc_now(),
        )
    except _IDENTITY_ERRORS as exc:
        raise _identity_failure("register", user_id, exc) from exc


async def update_credentials(
    user_id: str,
    *,
    email: str | None = None,
    name: str | None = None,
    clear_name: bool = False,
    password: str | None = None,
) -> dict:
    try:
        password_hash = security.hash_password(password) if password else None
        row = await repository.update_identity(
            user_id,
            email=email,
            name=name,
            clear_name=clear_name,
            password_hash=password_hash,
            now=utc_now(),
        )
    except _IDENTITY_ERRORS as exc:
        raise _identity_failure("update", user_id, exc) from exc

    if row is None:
        logger.warning("identity_missing user_id=%s", user_id)
        raise IdentityFailure("No identity record for this user.")
    return row


async def remove_identity(user_id: str) -> bool:
    try:
        return await repository.delete_identity(user_id)
    except _IDENTITY_ERRORS as exc:
        raise _identity_failure("remove", user_id, exc) from exc


async def get_current_session(access_token: str | None) -> dict | None:
    """
    Resolve a bearer token to its identity record.

    Never raises: an unusable token or an unreachable store is logged and
    reported as "no session".
    """
    if not (access_token or "").strip():
        return None
    try:
        claims = security.decode_access_token(access_token or "")
        row = await repository.get_identity_by_id(str(claims["sub"]).strip())
    except _IDENTITY_ERRORS as exc:
        logger.warning("session_lookup_failed reason=%s", exc)
        return None

    if row is None:
        logger.warning("session_lookup_failed reason=unknown_subject")
    return row


async def login(payload: schemas.LoginRequest) -> schemas.TokenResponse:
    try:
        row = await repository.get_identity_by_email(payload.email)
    except _IDENTITY_ERRORS as exc:
        raise _identity_failure("login", payload.email, exc) from exc

    if row is None or not security.verify_password(payload.password, str(row.get("password_hash") or "")):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password.",
        )

    token = security.build_access_token(user_id=str(row["user_id"]), email=str(row["email"]))
    return schemas.TokenResponse(access_token=token)
