"""
User operations.

Users span two stores: the `users` profile table and the identity
subsystem. The table is written first; when the identity call that follows
fails, the table write is undone (delete on create, restore of the previous
values on update) and the operation fails with IdentityFailure.
"""

from __future__ import annotations

import logging
from typing import Any

from core import gateway
from core.errors import IdentityFailure, NotFound
from core.records import stamp_new, stamp_update
from core.validation import require_id, validate
from identity import schemas as identity_schemas
from identity import service as identity_service

from . import schemas

logger = logging.getLogger(__name__)

TABLE = "users"
COLLABORATORS_TABLE = "frame_collaborators"

CREATED_KEY = "created_at"
UPDATED_KEY = "updated_at"

# Profile fields mirrored into the identity record.
IDENTITY_FIELDS = ("email", "name")


async def list_users() -> list[dict[str, Any]]:
    return await gateway.select_all(TABLE, order_by=CREATED_KEY)


async def get_user(user_id: str | None) -> dict[str, Any]:
    user_id = require_id(user_id)
    row = await gateway.select_one(TABLE, where=[gateway.eq("id", user_id)])
    if row is None:
        raise NotFound("User not found")
    return row


async def create_user(payload: Any) -> dict[str, Any]:
    parsed = validate(schemas.UserCreate, payload)
    fields = parsed.model_dump(exclude={"password"})
    row = await gateway.insert(
        TABLE,
        stamp_new(fields, created_key=CREATED_KEY, updated_key=UPDATED_KEY),
    )

    try:
        await identity_service.register_identity(
            str(row["id"]),
            email=parsed.email,
            name=parsed.name,
            password=parsed.password,
        )
    except IdentityFailure:
        await gateway.delete(TABLE, where=[gateway.eq("id", row["id"])])
        logger.warning("user_create_rolled_back user_id=%s", row["id"])
        raise

    logger.info("user_created user_id=%s", row["id"])
    return row


async def update_user(user_id: str | None, payload: Any) -> dict[str, Any]:
    user_id = require_id(user_id)
    parsed = validate(schemas.UserUpdate, payload)
    fields = parsed.model_dump(exclude_unset=True)
    password = fields.pop("password", None)
    where = [gateway.eq("id", user_id)]

    previous = await gateway.select_one(TABLE, where=where)
    if previous is None:
        raise NotFound("User not found")

    row = await gateway.update(
        TABLE,
        where=where,
        patch=stamp_update(fields, updated_key=UPDATED_KEY),
    )
    if row is None:
        raise NotFound("User not found")

    credentials: dict[str, Any] = {
        key: fields[key] for key in IDENTITY_FIELDS if fields.get(key) is not None
    }
    if "name" in fields and fields["name"] is None:
        credentials["clear_name"] = True
    if password:
        credentials["password"] = password
    if not credentials:
        return row

    try:
        await identity_service.update_credentials(user_id, **credentials)
    except IdentityFailure:
        restore = {key: previous.get(key) for key in fields}
        restore[UPDATED_KEY] = previous.get(UPDATED_KEY)
        await gateway.update(TABLE, where=where, patch=restore)
        logger.warning("user_update_rolled_back user_id=%s", user_id)
        raise
    return row


async def update_user_password(user_id: str | None, payload: Any) -> dict[str, str]:
    user_id = require_id(user_id)
    parsed = validate(identity_schemas.PasswordUpdate, payload)
    await identity_service.update_credentials(user_id, password=parsed.password)
    return {"message": "Password updated successfully"}


async def delete_user(user_id: str | None) -> None:
    user_id = require_id(user_id)
    deleted = await gateway.delete(TABLE, where=[gateway.eq("id", user_id)])
    if not deleted:
        raise NotFound("User not found")
    await identity_service.remove_identity(user_id)
    logger.info("user_deleted user_id=%s", user_id)


async def _collaborator_ids(frame_id: str) -> list[str]:
    rows = await gateway.select_all(
        COLLABORATORS_TABLE,
        where=[gateway.eq("frame_id", frame_id)],
    )
    return [str(row["user_id"]) for row in rows]


async def list_collaborator_users(frame_id: str | None) -> list[dict[str, Any]]:
    frame_id = require_id(frame_id, "frame_id")
    user_ids = await _collaborator_ids(frame_id)
    return await gateway.select_all(
        TABLE,
        where=[gateway.in_("id", user_ids)],
        order_by=CREATED_KEY,
    )


async def list_non_collaborator_users(frame_id: str | None) -> list[dict[str, Any]]:
    frame_id = require_id(frame_id, "frame_id")
    user_ids = await _collaborator_ids(frame_id)
    return await gateway.select_all(
        TABLE,
        where=[gateway.not_in("id", user_ids)],
        order_by=CREATED_KEY,
    )
