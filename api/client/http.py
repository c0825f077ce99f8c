"""
HTTP client for the frameboard API.

Every call maps one-to-one onto an endpoint. Non-2xx responses raise
ApiError carrying the status code and the server's `{"error", "details"}`
body; a 204 returns None.
"""

from __future__ import annotations

from typing import Any

import httpx

from core import settings


class ApiError(RuntimeError):
    def __init__(self, status_code: int, error: str, details: list[dict] | None = None) -> None:
        super().__init__(f"{status_code}: {error}")
        self.status_code = status_code
        self.error = error
        self.details = list(details or [])


def api_base_url() -> str:
    return settings.env_str("FRAMEBOARD_API_URL", "http://localhost:8000").rstrip("/")


def _error_from_response(resp: httpx.Response) -> ApiError:
    try:
        body = resp.json()
    except ValueError:
        # Avoid dumping huge bodies; include a small snippet.
        return ApiError(resp.status_code, resp.text[:500] or resp.reason_phrase)
    if not isinstance(body, dict):
        return ApiError(resp.status_code, str(body)[:500])
    return ApiError(
        resp.status_code,
        str(body.get("error") or resp.reason_phrase),
        body.get("details") if isinstance(body.get("details"), list) else None,
    )


class ApiClient:
    def __init__(
        self,
        base_url: str | None = None,
        *,
        access_token: str | None = None,
        timeout_s: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = (base_url or api_base_url()).rstrip("/")
        self.access_token = access_token
        self.timeout_s = timeout_s
        self._transport = transport

    def _headers(self) -> dict[str, str]:
        if not self.access_token:
            return {}
        return {"Authorization": f"Bearer {self.access_token}"}

    async def request(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        params: dict[str, Any] | None = None,
    ) -> Any:
        async with httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout_s,
            headers=self._headers(),
            transport=self._transport,
        ) as client:
            resp = await client.request(method, path, json=json, params=params)

        if resp.status_code >= 400:
            raise _error_from_response(resp)
        if resp.status_code == 204 or not resp.content:
            return None
        return resp.json()

    # --- generic entity calls ---

    async def list_all(self, entity: str, **params: Any) -> list[dict]:
        query = {k: v for k, v in params.items() if v is not None}
        return await self.request("GET", f"/api/{entity}", params=query or None)

    async def get(self, entity: str, entity_id: str) -> dict:
        return await self.request("GET", f"/api/{entity}/{entity_id}")

    async def create(self, entity: str, payload: dict) -> dict:
        return await self.request("POST", f"/api/{entity}", json=payload)

    async def update(self, entity: str, entity_id: str, payload: dict) -> dict:
        return await self.request("PATCH", f"/api/{entity}/{entity_id}", json=payload)

    async def delete(self, entity: str, entity_id: str) -> None:
        await self.request("DELETE", f"/api/{entity}/{entity_id}")

    # --- entity-specific calls ---

    async def assign_user_to_ticket(self, ticket_id: str, user_id: str) -> dict:
        return await self.request(
            "POST",
            f"/api/tickets/{ticket_id}/assignees",
            json={"user_id": user_id},
        )

    async def collaborator_users(self, frame_id: str) -> list[dict]:
        return await self.request("GET", f"/api/frames/{frame_id}/collaborators")

    async def non_collaborator_users(self, frame_id: str) -> list[dict]:
        return await self.request("GET", f"/api/frames/{frame_id}/non-collaborators")

    async def update_user_password(self, user_id: str, password: str) -> dict:
        return await self.request(
            "PATCH",
            f"/api/users/{user_id}/password",
            json={"password": password},
        )

    async def login(self, email: str, password: str) -> str:
        data = await self.request("POST", "/api/auth/login", json={"email": email, "password": password})
        self.access_token = str(data["access_token"])
        return self.access_token

    async def session_user(self) -> dict | None:
        data = await self.request("GET", "/api/auth/session")
        return data.get("user") if isinstance(data, dict) else None
