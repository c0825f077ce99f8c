"""
Identity persistence helpers.

Identity records live in their own table, apart from the `users` profile
table. Email and display name are mirrored here from user updates.
"""

from __future__ import annotations

from datetime import datetime

from core import db

_COLUMNS = "user_id, email, name, password_hash, created_at, updated_at"


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


async def create_identity(
    *,
    user_id: str,
    email: str,
    name: str | None,
    password_hash: str | None,
    now: datetime,
) -> dict:
    row = await db.fetch_one(
        f"""
        INSERT INTO identities (user_id, email, name, password_hash, created_at, updated_at)
        VALUES ($1, $2, $3, $4, $5, $5)
        RETURNING {_COLUMNS}
        """,
        user_id,
        normalize_email(email),
        name,
        password_hash,
        now,
    )
    if row is None:
        raise RuntimeError("Failed to create identity.")
    return row


async def get_identity_by_id(user_id: str) -> dict | None:
    return await db.fetch_one(
        f"""
        SELECT {_COLUMNS}
        FROM identities
        WHERE user_id = $1
        """,
        user_id,
    )


async def get_identity_by_email(email: str) -> dict | None:
    return await db.fetch_one(
        f"""
        SELECT {_COLUMNS}
        FROM identities
        WHERE lower(email) = lower($1)
        """,
        normalize_email(email),
    )


async def update_identity(
    user_id: str,
    *,
    email: str | None = None,
    name: str | None = None,
    clear_name: bool = False,
    password_hash: str | None = None,
    now: datetime,
) -> dict | None:
    """
    Patch the given credentials; None leaves a column unchanged.

    `name` is nullable on the profile, so clearing it takes `clear_name=True`.
    """
    return await db.fetch_one(
        f"""
        UPDATE identities
        SET email = COALESCE($2, email),
            name = CASE WHEN $6 THEN NULL ELSE COALESCE($3, name) END,
            password_hash = COALESCE($4, password_hash),
            updated_at = $5
        WHERE user_id = $1
        RETURNING {_COLUMNS}
        """,
        user_id,
        normalize_email(email) if email is not None else None,
        name,
        password_hash,
        now,
        clear_name,
    )


async def delete_identity(user_id: str) -> bool:
    row = await db.fetch_one(
        """
        DELETE FROM identities
        WHERE user_id = $1
        RETURNING user_id
        """,
        user_id,
    )
    return row is not None
