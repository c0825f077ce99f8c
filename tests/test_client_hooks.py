"""
Query/mutation hooks driven through the real app over an in-process transport.
"""

import httpx
import pytest

from client import hooks
from client.http import ApiClient, ApiError


@pytest.fixture
def api(app, query_cache):
    return ApiClient("http://testserver", transport=httpx.ASGITransport(app=app))


def _select_count(store, table):
    return sum(1 for call in store.calls if call == (table, "select"))


@pytest.mark.asyncio
async def test_mutation_invalidates_cached_list(api, store):
    columns = hooks.use_get_all_columns(api)
    create = hooks.use_create_column(api)

    await create.mutate({"name": "Todo", "frameId": "f1"})
    assert [c["name"] for c in await columns.fetch()] == ["Todo"]

    await columns.fetch()
    assert _select_count(store, "columns") == 1

    await create.mutate({"name": "Done", "frameId": "f1"})
    assert [c["name"] for c in await columns.fetch()] == ["Todo", "Done"]
    assert _select_count(store, "columns") == 2


@pytest.mark.asyncio
async def test_by_id_query_is_disabled_without_id(api, store):
    query = hooks.use_get_ticket_by_id(api, "")
    assert query.enabled is False
    assert await query.fetch() is None
    assert store.calls == []


@pytest.mark.asyncio
async def test_update_invalidates_by_id_entry(api):
    created = await hooks.use_create_ticket(api).mutate({"title": "Draft"})
    ticket = hooks.use_get_ticket_by_id(api, created["id"])
    assert (await ticket.fetch())["title"] == "Draft"

    await hooks.use_update_ticket(api).mutate(created["id"], {"title": "Final"})
    assert (await ticket.fetch())["title"] == "Final"


@pytest.mark.asyncio
async def test_failed_mutation_raises_and_keeps_cache(api, query_cache):
    columns = hooks.use_get_all_columns(api)
    await columns.fetch()

    with pytest.raises(ApiError) as exc_info:
        await hooks.use_create_column(api).mutate({"frameId": "f1"})

    assert exc_info.value.status_code == 400
    assert exc_info.value.details[0]["field"] == "name"
    assert query_cache.get(("columns",)).stale is False


@pytest.mark.asyncio
async def test_assign_user_refreshes_ticket(api):
    user = await hooks.use_create_user(api).mutate({"email": "a@x.com", "first_name": "Ada"})
    ticket = await hooks.use_create_ticket(api).mutate({"title": "Pair"})
    query = hooks.use_get_ticket_by_id(api, ticket["id"])
    assert (await query.fetch())["assignees"] == []

    await hooks.use_assign_user_to_ticket(api).mutate(ticket["id"], user["id"])
    assignees = (await query.fetch())["assignees"]
    assert [a["first_name"] for a in assignees] == ["Ada"]


@pytest.mark.asyncio
async def test_delete_returns_none_and_missing_row_raises_404(api):
    created = await hooks.use_create_column(api).mutate({"name": "Tmp", "frameId": "f1"})
    delete = hooks.use_delete_column(api)

    assert await delete.mutate(created["id"]) is None
    with pytest.raises(ApiError) as exc_info:
        await delete.mutate(created["id"])
    assert exc_info.value.status_code == 404
    assert exc_info.value.error == "Column not found"


@pytest.mark.asyncio
async def test_non_collaborator_query(api, store):
    user = await hooks.use_create_user(api).mutate({"email": "a@x.com"})
    query = hooks.use_get_non_collaborator_users(api, "f1")
    assert [u["id"] for u in await query.fetch()] == [user["id"]]

    store.seed("frame_collaborators", {"frame_id": "f1", "user_id": user["id"]})
    assert [u["id"] for u in await query.refetch()] == []


@pytest.mark.asyncio
async def test_logged_user_query(api):
    await hooks.use_create_user(api).mutate({"email": "a@x.com", "password": "correct-horse"})
    assert await hooks.use_get_logged_user(api).fetch() is None

    await api.login("a@x.com", "correct-horse")
    session = hooks.use_get_logged_user(api)
    assert (await session.refetch())["email"] == "a@x.com"
