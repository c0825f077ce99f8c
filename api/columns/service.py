"""
Column operations.
"""

from __future__ import annotations

import logging
from typing import Any

from core import gateway
from core.errors import NotFound
from core.records import stamp_new, stamp_update
from core.validation import require_id, validate

from . import schemas

logger = logging.getLogger(__name__)

TABLE = "columns"


async def list_columns() -> list[dict[str, Any]]:
    return await gateway.select_all(TABLE, order_by="createdAt")


async def get_column(column_id: str | None) -> dict[str, Any]:
    column_id = require_id(column_id)
    row = await gateway.select_one(TABLE, where=[gateway.eq("id", column_id)])
    if row is None:
        raise NotFound("Column not found")
    return row


async def create_column(payload: Any) -> dict[str, Any]:
    parsed = validate(schemas.ColumnCreate, payload)
    row = await gateway.insert(TABLE, stamp_new(parsed.model_dump()))
    logger.info("column_created column_id=%s frame_id=%s", row["id"], row.get("frameId"))
    return row


async def update_column(column_id: str | None, payload: Any) -> dict[str, Any]:
    column_id = require_id(column_id)
    parsed = validate(schemas.ColumnUpdate, payload)
    row = await gateway.update(
        TABLE,
        where=[gateway.eq("id", column_id)],
        patch=stamp_update(parsed.model_dump(exclude_unset=True)),
    )
    if row is None:
        raise NotFound("Column not found")
    return row


async def delete_column(column_id: str | None) -> None:
    column_id = require_id(column_id)
    deleted = await gateway.delete(TABLE, where=[gateway.eq("id", column_id)])
    if not deleted:
        raise NotFound("Column not found")
    logger.info("column_deleted column_id=%s", column_id)
