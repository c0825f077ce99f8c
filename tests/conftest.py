"""
Test configuration: in-memory stand-ins for the persistence gateway and the
identity repository, so API tests run without a Postgres instance.
"""

from __future__ import annotations

import copy
from typing import Any, Sequence

import pytest
from fastapi.testclient import TestClient

from client import cache as client_cache
from core import gateway
from core.errors import StoreFailure
from identity import repository as identity_repository


def _matches(condition: gateway.Condition, row: dict[str, Any]) -> bool:
    value = row.get(condition.column)
    if condition.op == "eq":
        return value == condition.value
    if condition.op == "in":
        return value in condition.value
    if condition.op == "not_in":
        return value not in condition.value
    raise ValueError(condition.op)


class InMemoryGateway:
    """
    Same call surface as `core.gateway`, backed by dicts.
    """

    def __init__(self) -> None:
        self.tables: dict[str, list[dict[str, Any]]] = {}
        self.failures: dict[tuple[str, str], str] = {}
        self.calls: list[tuple[str, str]] = []

    def rows(self, table: str) -> list[dict[str, Any]]:
        return self.tables.setdefault(table, [])

    def seed(self, table: str, *rows: dict[str, Any]) -> None:
        self.rows(table).extend(copy.deepcopy(list(rows)))

    def fail(self, table: str, op: str, message: str = "connection refused") -> None:
        self.failures[(table, op)] = message

    def _check(self, table: str, op: str) -> None:
        self.calls.append((table, op))
        message = self.failures.get((table, op))
        if message is not None:
            raise StoreFailure(message)

    def _filter(self, table: str, where: Sequence[gateway.Condition]) -> list[dict[str, Any]]:
        return [row for row in self.rows(table) if all(_matches(c, row) for c in where)]

    def _embed(self, row: dict[str, Any], embed: gateway.Embed | None) -> dict[str, Any]:
        row = copy.deepcopy(row)
        if embed is None:
            return row
        related = []
        for link in self.rows(embed.link_table):
            if link.get(embed.link_key) != row.get(embed.source_key):
                continue
            for target in self.rows(embed.target_table):
                if target.get(embed.target_id) == link.get(embed.target_key):
                    related.append({col: target.get(col) for col in embed.columns})
        row[embed.name] = related
        return row

    async def select_all(self, table, *, where=(), embed=None, order_by=None):
        self._check(table, "select")
        rows = [self._embed(row, embed) for row in self._filter(table, where)]
        if order_by:
            rows.sort(key=lambda r: r.get(order_by))
        return rows

    async def select_one(self, table, *, where, embed=None):
        self._check(table, "select")
        rows = self._filter(table, where)
        return self._embed(rows[0], embed) if rows else None

    async def insert(self, table, row):
        self._check(table, "insert")
        self.rows(table).append(copy.deepcopy(row))
        return copy.deepcopy(row)

    async def update(self, table, *, where, patch):
        self._check(table, "update")
        rows = self._filter(table, where)
        if not rows:
            return None
        for row in rows:
            row.update(copy.deepcopy(patch))
        return copy.deepcopy(rows[0])

    async def delete(self, table, *, where):
        self._check(table, "delete")
        doomed = self._filter(table, where)
        self.tables[table] = [row for row in self.rows(table) if row not in doomed]
        return bool(doomed)


class FakeIdentityRepository:
    """
    Same call surface as `identity.repository`.
    """

    def __init__(self) -> None:
        self.records: dict[str, dict[str, Any]] = {}
        self.unavailable = False

    def _check(self) -> None:
        if self.unavailable:
            raise OSError("identity service unavailable")

    async def create_identity(self, *, user_id, email, name, password_hash, now):
        self._check()
        row = {
            "user_id": user_id,
            "email": identity_repository.normalize_email(email),
            "name": name,
            "password_hash": password_hash,
            "created_at": now,
            "updated_at": now,
        }
        self.records[user_id] = row
        return dict(row)

    async def get_identity_by_id(self, user_id):
        self._check()
        row = self.records.get(user_id)
        return dict(row) if row else None

    async def get_identity_by_email(self, email):
        self._check()
        wanted = identity_repository.normalize_email(email)
        for row in self.records.values():
            if row["email"] == wanted:
                return dict(row)
        return None

    async def update_identity(self, user_id, *, email=None, name=None, clear_name=False, password_hash=None, now):
        self._check()
        row = self.records.get(user_id)
        if row is None:
            return None
        if email is not None:
            row["email"] = identity_repository.normalize_email(email)
        if clear_name:
            row["name"] = None
        elif name is not None:
            row["name"] = name
        if password_hash is not None:
            row["password_hash"] = password_hash
        row["updated_at"] = now
        return dict(row)

    async def delete_identity(self, user_id):
        self._check()
        return self.records.pop(user_id, None) is not None


@pytest.fixture
def store(monkeypatch) -> InMemoryGateway:
    fake = InMemoryGateway()
    for name in ("select_all", "select_one", "insert", "update", "delete"):
        monkeypatch.setattr(gateway, name, getattr(fake, name))
    return fake


@pytest.fixture
def identities(monkeypatch) -> FakeIdentityRepository:
    fake = FakeIdentityRepository()
    for name in (
        "create_identity",
        "get_identity_by_id",
        "get_identity_by_email",
        "update_identity",
        "delete_identity",
    ):
        monkeypatch.setattr(identity_repository, name, getattr(fake, name))
    return fake


@pytest.fixture
def app(store, identities):
    from main import app

    return app


@pytest.fixture
def client(app) -> TestClient:
    # No context manager: the lifespan (real DB pool) is not started.
    return TestClient(app)


@pytest.fixture
def query_cache():
    cache = client_cache.init_query_client()
    yield cache
    client_cache.close_query_client()
