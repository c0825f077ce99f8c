"""
Ticket-assignee API endpoints.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body, Query, Response, status

from . import service

router = APIRouter(prefix="/ticket_assignees")


@router.get("")
async def list_ticket_assignees(
    ticket_id: str | None = Query(default=None, min_length=1),
) -> list[dict]:
    """
    All links, or only those of one ticket when `ticket_id` is given.
    """
    return await service.list_ticket_assignees(ticket_id=ticket_id)


@router.get("/{assignee_id}")
async def get_ticket_assignee(assignee_id: str) -> dict:
    return await service.get_ticket_assignee(assignee_id)


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_ticket_assignee(payload: Any = Body(default=None)) -> dict:
    return await service.create_ticket_assignee(payload)


@router.patch("/{assignee_id}")
async def update_ticket_assignee(assignee_id: str, payload: Any = Body(default=None)) -> dict:
    return await service.update_ticket_assignee(assignee_id, payload)


@router.delete("/{assignee_id}", status_code=status.HTTP_204_NO_CONTENT, response_class=Response)
async def delete_ticket_assignee(assignee_id: str) -> Response:
    await service.delete_ticket_assignee(assignee_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
