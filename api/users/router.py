"""
User API endpoints, including the per-frame collaborator listings.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException, Response, status

from identity import dependencies as identity_dependencies

from . import service

router = APIRouter()


@router.get("/users")
async def list_users() -> list[dict]:
    return await service.list_users()


@router.get("/users/{user_id}")
async def get_user(user_id: str) -> dict:
    return await service.get_user(user_id)


@router.post("/users", status_code=status.HTTP_201_CREATED)
async def create_user(payload: Any = Body(default=None)) -> dict:
    return await service.create_user(payload)


@router.patch("/users/{user_id}")
async def update_user(user_id: str, payload: Any = Body(default=None)) -> dict:
    return await service.update_user(user_id, payload)


@router.patch("/users/{user_id}/password")
async def update_user_password(
    user_id: str,
    payload: Any = Body(default=None),
    session: dict = Depends(identity_dependencies.require_session),
) -> dict:
    """
    Change the signed-in user's own password.
    """
    if str(session.get("user_id")) != user_id.strip():
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Cannot change another user's password.",
        )
    return await service.update_user_password(user_id, payload)


@router.delete("/users/{user_id}", status_code=status.HTTP_204_NO_CONTENT, response_class=Response)
async def delete_user(user_id: str) -> Response:
    await service.delete_user(user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/frames/{frame_id}/collaborators")
async def list_collaborator_users(frame_id: str) -> list[dict]:
    return await service.list_collaborator_users(frame_id)


@router.get("/frames/{frame_id}/non-collaborators")
async def list_non_collaborator_users(frame_id: str) -> list[dict]:
    return await service.list_non_collaborator_users(frame_id)
