"""
Ticket operations.

Reads attach `assignees`: the users linked to each ticket through
`ticket_assignees`, projected to a short summary.
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

TABLE = "tickets"
ASSIGNEES_TABLE = "ticket_assignees"
USERS_TABLE = "users"

ASSIGNEES = gateway.Embed(
    name="assignees",
    link_table=ASSIGNEES_TABLE,
    link_key="ticket_id",
    target_table=USERS_TABLE,
    target_key="user_id",
    columns=tuple(schemas.AssigneeSummary.model_fields),
)


async def list_tickets() -> list[dict[str, Any]]:
    return await gateway.select_all(TABLE, embed=ASSIGNEES, order_by="createdAt")


async def get_ticket(ticket_id: str | None) -> dict[str, Any]:
    ticket_id = require_id(ticket_id)
    row = await gateway.select_one(TABLE, where=[gateway.eq("id", ticket_id)], embed=ASSIGNEES)
    if row is None:
        raise NotFound("Ticket not found")
    return row


async def create_ticket(payload: Any) -> dict[str, Any]:
    parsed = validate(schemas.TicketCreate, payload)
    row = await gateway.insert(TABLE, stamp_new(parsed.model_dump()))
    logger.info("ticket_created ticket_id=%s", row["id"])
    return row


async def update_ticket(ticket_id: str | None, payload: Any) -> dict[str, Any]:
    ticket_id = require_id(ticket_id)
    parsed = validate(schemas.TicketUpdate, payload)
    row = await gateway.update(
        TABLE,
        where=[gateway.eq("id", ticket_id)],
        patch=stamp_update(parsed.model_dump(exclude_unset=True)),
    )
    if row is None:
        raise NotFound("Ticket not found")
    return row


async def delete_ticket(ticket_id: str | None) -> None:
    ticket_id = require_id(ticket_id)
    deleted = await gateway.delete(TABLE, where=[gateway.eq("id", ticket_id)])
    if not deleted:
        raise NotFound("Ticket not found")
    logger.info("ticket_deleted ticket_id=%s", ticket_id)


async def assign_user_to_ticket(ticket_id: str | None, user_id: str | None) -> dict[str, Any]:
    """
    Link a user to a ticket. Both must exist; duplicate links are left to
    the store's unique constraint.
    """
    ticket_id = require_id(ticket_id, "ticket_id")
    user_id = require_id(user_id, "user_id")

    ticket = await gateway.select_one(TABLE, where=[gateway.eq("id", ticket_id)])
    if ticket is None:
        raise NotFound("Ticket not found")
    user = await gateway.select_one(USERS_TABLE, where=[gateway.eq("id", user_id)])
    if user is None:
        raise NotFound("User not found")

    row = await gateway.insert(
        ASSIGNEES_TABLE,
        stamp_new({"ticket_id": ticket_id, "user_id": user_id}),
    )
    logger.info("ticket_assigned ticket_id=%s user_id=%s", ticket_id, user_id)
    return row
