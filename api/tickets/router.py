"""
Ticket API endpoints.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body, Response, status

from core.validation import validate

from . import schemas, service

router = APIRouter(prefix="/tickets")


@router.get("")
async def list_tickets() -> list[dict]:
    return await service.list_tickets()


@router.get("/{ticket_id}")
async def get_ticket(ticket_id: str) -> dict:
    return await service.get_ticket(ticket_id)


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_ticket(payload: Any = Body(default=None)) -> dict:
    return await service.create_ticket(payload)


@router.patch("/{ticket_id}")
async def update_ticket(ticket_id: str, payload: Any = Body(default=None)) -> dict:
    return await service.update_ticket(ticket_id, payload)


@router.delete("/{ticket_id}", status_code=status.HTTP_204_NO_CONTENT, response_class=Response)
async def delete_ticket(ticket_id: str) -> Response:
    await service.delete_ticket(ticket_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{ticket_id}/assignees", status_code=status.HTTP_201_CREATED)
async def assign_user(ticket_id: str, payload: Any = Body(default=None)) -> dict:
    request = validate(schemas.TicketAssignmentRequest, payload)
    return await service.assign_user_to_ticket(ticket_id, request.user_id)
