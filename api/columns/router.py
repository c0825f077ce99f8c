"""
Column API endpoints.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body, Response, status

from . import service

router = APIRouter(prefix="/columns")


@router.get("")
async def list_columns() -> list[dict]:
    return await service.list_columns()


@router.get("/{column_id}")
async def get_column(column_id: str) -> dict:
    return await service.get_column(column_id)


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_column(payload: Any = Body(default=None)) -> dict:
    return await service.create_column(payload)


@router.patch("/{column_id}")
async def update_column(column_id: str, payload: Any = Body(default=None)) -> dict:
    return await service.update_column(column_id, payload)


@router.delete("/{column_id}", status_code=status.HTTP_204_NO_CONTENT, response_class=Response)
async def delete_column(column_id: str) -> Response:
    await service.delete_column(column_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
