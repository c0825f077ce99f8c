"""
Row helpers: server-assigned ids and timestamps.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Any


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def new_id() -> str:
    return str(uuid.uuid4())


def stamp_new(
    fields: dict[str, Any],
    *,
    created_key: str = "createdAt",
    updated_key: str = "updatedAt",
) -> dict[str, Any]:
    """
    Return a new row with a fresh id and equal created/updated timestamps.
    """
    now = utc_now()
    return {"id": new_id(), **fields, created_key: now, updated_key: now}


def stamp_update(fields: dict[str, Any], *, updated_key: str = "updatedAt") -> dict[str, Any]:
    return {**fields, updated_key: utc_now()}
