"""
Ticket-assignee (ticket <-> user link) operations.
"""

from __future__ import annotations

from typing import Any

from core import gateway
from core.errors import NotFound
from core.records import stamp_new, stamp_update
from core.validation import require_id, validate

from . import schemas

TABLE = "ticket_assignees"


async def list_ticket_assignees(*, ticket_id: str | None = None) -> list[dict[str, Any]]:
    where = [gateway.eq("ticket_id", ticket_id)] if ticket_id else []
    return await gateway.select_all(TABLE, where=where, order_by="createdAt")


async def get_ticket_assignee(assignee_id: str | None) -> dict[str, Any]:
    assignee_id = require_id(assignee_id)
    row = await gateway.select_one(TABLE, where=[gateway.eq("id", assignee_id)])
    if row is None:
        raise NotFound("TicketAssignee not found")
    return row


async def create_ticket_assignee(payload: Any) -> dict[str, Any]:
    parsed = validate(schemas.TicketAssigneeCreate, payload)
    return await gateway.insert(TABLE, stamp_new(parsed.model_dump()))


async def update_ticket_assignee(assignee_id: str | None, payload: Any) -> dict[str, Any]:
    assignee_id = require_id(assignee_id)
    parsed = validate(schemas.TicketAssigneeUpdate, payload)
    row = await gateway.update(
        TABLE,
        where=[gateway.eq("id", assignee_id)],
        patch=stamp_update(parsed.model_dump(exclude_unset=True)),
    )
    if row is None:
        raise NotFound("TicketAssignee not found")
    return row


async def delete_ticket_assignee(assignee_id: str | None) -> None:
    assignee_id = require_id(assignee_id)
    deleted = await gateway.delete(TABLE, where=[gateway.eq("id", assignee_id)])
    if not deleted:
        raise NotFound("TicketAssignee not found")
