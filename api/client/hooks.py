"""
Query/mutation hooks over the API client.

A Query reads through the process-wide cache under a key built from the
entity name (and id). A Mutation runs a write and, only when it succeeds,
invalidates every cached read under the entity names it affects.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable

from .cache import QueryKey, query_client
from .http import ApiClient

COLUMNS = "columns"
TICKETS = "tickets"
TICKET_ASSIGNEES = "ticket_assignees"
USERS = "users"
SESSION = "session"


@dataclass
class Query:
    key: QueryKey
    fn: Callable[[], Awaitable[Any]]
    enabled: bool = True

    async def fetch(self) -> Any:
        if not self.enabled:
            return None
        return await query_client().fetch(self.key, self.fn)

    async def refetch(self) -> Any:
        if not self.enabled:
            return None
        query_client().invalidate(self.key)
        return await self.fetch()


@dataclass
class Mutation:
    fn: Callable[..., Awaitable[Any]]
    invalidates: tuple[str, ...] = field(default_factory=tuple)

    async def mutate(self, *args: Any, **kwargs: Any) -> Any:
        result = await self.fn(*args, **kwargs)
        cache = query_client()
        for entity in self.invalidates:
            cache.invalidate((entity,))
        return result


def _list_query(api: ApiClient, entity: str) -> Query:
    return Query(key=(entity,), fn=lambda: api.list_all(entity))


def _by_id_query(api: ApiClient, entity: str, entity_id: str | None) -> Query:
    entity_id = (entity_id or "").strip()
    return Query(
        key=(entity, entity_id),
        fn=lambda: api.get(entity, entity_id),
        enabled=bool(entity_id),
    )


def _create_mutation(api: ApiClient, entity: str, *invalidates: str) -> Mutation:
    async def run(payload: dict) -> dict:
        return await api.create(entity, payload)

    return Mutation(fn=run, invalidates=(entity, *invalidates))


def _update_mutation(api: ApiClient, entity: str, *invalidates: str) -> Mutation:
    async def run(entity_id: str, payload: dict) -> dict:
        return await api.update(entity, entity_id, payload)

    return Mutation(fn=run, invalidates=(entity, *invalidates))


def _delete_mutation(api: ApiClient, entity: str, *invalidates: str) -> Mutation:
    async def run(entity_id: str) -> None:
        await api.delete(entity, entity_id)

    return Mutation(fn=run, invalidates=(entity, *invalidates))


# --- columns ---

def use_get_all_columns(api: ApiClient) -> Query:
    return _list_query(api, COLUMNS)


def use_get_column_by_id(api: ApiClient, column_id: str | None) -> Query:
    return _by_id_query(api, COLUMNS, column_id)


def use_create_column(api: ApiClient) -> Mutation:
    return _create_mutation(api, COLUMNS)


def use_update_column(api: ApiClient) -> Mutation:
    return _update_mutation(api, COLUMNS)


def use_delete_column(api: ApiClient) -> Mutation:
    return _delete_mutation(api, COLUMNS)


# --- tickets ---

def use_get_all_tickets(api: ApiClient) -> Query:
    return _list_query(api, TICKETS)


def use_get_ticket_by_id(api: ApiClient, ticket_id: str | None) -> Query:
    return _by_id_query(api, TICKETS, ticket_id)


def use_create_ticket(api: ApiClient) -> Mutation:
    return _create_mutation(api, TICKETS)


def use_update_ticket(api: ApiClient) -> Mutation:
    return _update_mutation(api, TICKETS)


def use_delete_ticket(api: ApiClient) -> Mutation:
    # Deleting a ticket cascades its assignee links in the store.
    return _delete_mutation(api, TICKETS, TICKET_ASSIGNEES)


def use_assign_user_to_ticket(api: ApiClient) -> Mutation:
    async def run(ticket_id: str, user_id: str) -> dict:
        return await api.assign_user_to_ticket(ticket_id, user_id)

    return Mutation(fn=run, invalidates=(TICKETS, TICKET_ASSIGNEES))


# --- ticket assignees ---

def use_get_all_ticket_assignees(api: ApiClient, ticket_id: str | None = None) -> Query:
    if not ticket_id:
        return _list_query(api, TICKET_ASSIGNEES)
    return Query(
        key=(TICKET_ASSIGNEES, "ticket", ticket_id),
        fn=lambda: api.list_all(TICKET_ASSIGNEES, ticket_id=ticket_id),
    )


def use_get_ticket_assignee_by_id(api: ApiClient, assignee_id: str | None) -> Query:
    return _by_id_query(api, TICKET_ASSIGNEES, assignee_id)


def use_create_ticket_assignee(api: ApiClient) -> Mutation:
    return _create_mutation(api, TICKET_ASSIGNEES, TICKETS)


def use_update_ticket_assignee(api: ApiClient) -> Mutation:
    return _update_mutation(api, TICKET_ASSIGNEES, TICKETS)


def use_delete_ticket_assignee(api: ApiClient) -> Mutation:
    return _delete_mutation(api, TICKET_ASSIGNEES, TICKETS)


# --- users ---

def use_get_logged_user(api: ApiClient) -> Query:
    return Query(key=(SESSION,), fn=api.session_user)


def use_get_all_users(api: ApiClient) -> Query:
    return _list_query(api, USERS)


def use_get_user_by_id(api: ApiClient, user_id: str | None) -> Query:
    return _by_id_query(api, USERS, user_id)


def use_get_collaborator_users(api: ApiClient, frame_id: str | None) -> Query:
    frame_id = (frame_id or "").strip()
    return Query(
        key=(USERS, "collaborators", frame_id),
        fn=lambda: api.collaborator_users(frame_id),
        enabled=bool(frame_id),
    )


def use_get_non_collaborator_users(api: ApiClient, frame_id: str | None) -> Query:
    frame_id = (frame_id or "").strip()
    return Query(
        key=(USERS, "non-collaborators", frame_id),
        fn=lambda: api.non_collaborator_users(frame_id),
        enabled=bool(frame_id),
    )


def use_create_user(api: ApiClient) -> Mutation:
    return _create_mutation(api, USERS)


def use_update_user(api: ApiClient) -> Mutation:
    # Ticket reads embed user summaries; the session mirrors email/name.
    return _update_mutation(api, USERS, TICKETS, SESSION)


def use_update_user_password(api: ApiClient) -> Mutation:
    async def run(user_id: str, password: str) -> dict:
        return await api.update_user_password(user_id, password)

    return Mutation(fn=run, invalidates=(USERS,))


def use_delete_user(api: ApiClient) -> Mutation:
    return _delete_mutation(api, USERS, TICKETS, TICKET_ASSIGNEES)
