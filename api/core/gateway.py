"""
Persistence gateway: single-table select/insert/update/delete over asyncpg.

Entity services never write SQL for plain CRUD; they describe the table, the
filter and (for reads) an optional embedded relation, and this module builds
the parameterized statement.

Identifiers are validated and double-quoted because several tables use
camelCase columns ("frameId", "createdAt").
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from typing import Any, Iterable, Sequence

import asyncpg

from . import db
from .errors import StoreFailure

logger = logging.getLogger(__name__)

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

BASE_ALIAS = "t"


def quote(name: str) -> str:
    if not _IDENTIFIER.match(name or ""):
        raise ValueError(f"Invalid SQL identifier: {name!r}")
    return f'"{name}"'


@dataclass(frozen=True)
class Condition:
    column: str
    op: str
    value: Any

    def sql(self, alias: str, placeholder: str) -> str:
        column = f"{alias}.{quote(self.column)}"
        if self.op == "eq":
            return f"{column} = {placeholder}"
        if self.op == "in":
            return f"{column} = ANY({placeholder})"
        if self.op == "not_in":
            return f"{column} <> ALL({placeholder})"
        raise ValueError(f"Unsupported condition operator: {self.op!r}")


def eq(column: str, value: Any) -> Condition:
    return Condition(column, "eq", value)


def in_(column: str, values: Iterable[Any]) -> Condition:
    return Condition(column, "in", list(values))


def not_in(column: str, values: Iterable[Any]) -> Condition:
    return Condition(column, "not_in", list(values))


@dataclass(frozen=True)
class Embed:
    """
    Attach related rows reached through a link table as a JSON list.

    Example: tickets -> ticket_assignees(ticket_id, user_id) -> users.
    """

    name: str
    link_table: str
    link_key: str
    target_table: str
    target_key: str
    columns: tuple[str, ...]
    source_key: str = "id"
    target_id: str = "id"

    def sql(self, alias: str) -> str:
        fields = ", ".join(f"'{col}', e.{quote(col)}" for col in self.columns)
        return (
            "COALESCE(("
            f"SELECT json_agg(json_build_object({fields})) "
            f"FROM {quote(self.link_table)} l "
            f"JOIN {quote(self.target_table)} e ON e.{quote(self.target_id)} = l.{quote(self.target_key)} "
            f"WHERE l.{quote(self.link_key)} = {alias}.{quote(self.source_key)}"
            f"), '[]'::json) AS {quote(self.name)}"
        )

    def decode(self, row: dict[str, Any]) -> dict[str, Any]:
        raw = row.get(self.name)
        if isinstance(raw, str):
            row[self.name] = json.loads(raw)
        elif raw is None:
            row[self.name] = []
        return row


def _where(conditions: Sequence[Condition], args: list[Any], alias: str = BASE_ALIAS) -> str:
    if not conditions:
        return ""
    parts = []
    for condition in conditions:
        args.append(condition.value)
        parts.append(condition.sql(alias, f"${len(args)}"))
    return " WHERE " + " AND ".join(parts)


def build_select(
    table: str,
    *,
    where: Sequence[Condition] = (),
    embed: Embed | None = None,
    order_by: str | None = None,
    limit: int | None = None,
) -> tuple[str, list[Any]]:
    args: list[Any] = []
    projection = f"{BASE_ALIAS}.*"
    if embed is not None:
        projection += ", " + embed.sql(BASE_ALIAS)
    sql = f"SELECT {projection} FROM {quote(table)} {BASE_ALIAS}"
    sql += _where(where, args)
    if order_by:
        sql += f" ORDER BY {BASE_ALIAS}.{quote(order_by)}"
    if limit is not None:
        sql += f" LIMIT {int(limit)}"
    return sql, args


def build_insert(table: str, row: dict[str, Any]) -> tuple[str, list[Any]]:
    if not row:
        raise ValueError("Cannot insert an empty row.")
    columns = ", ".join(quote(col) for col in row)
    placeholders = ", ".join(f"${i}" for i in range(1, len(row) + 1))
    sql = f"INSERT INTO {quote(table)} ({columns}) VALUES ({placeholders}) RETURNING *"
    return sql, list(row.values())


def build_update(
    table: str,
    *,
    where: Sequence[Condition],
    patch: dict[str, Any],
) -> tuple[str, list[Any]]:
    if not patch:
        raise ValueError("Cannot update with an empty patch.")
    if not where:
        raise ValueError("Refusing to update without a filter.")
    args = list(patch.values())
    assignments = ", ".join(f"{quote(col)} = ${i}" for i, col in enumerate(patch, start=1))
    sql = f"UPDATE {quote(table)} {BASE_ALIAS} SET {assignments}"
    sql += _where(where, args)
    sql += " RETURNING *"
    return sql, args


def build_delete(table: str, *, where: Sequence[Condition]) -> tuple[str, list[Any]]:
    if not where:
        raise ValueError("Refusing to delete without a filter.")
    args: list[Any] = []
    sql = f"DELETE FROM {quote(table)} {BASE_ALIAS}" + _where(where, args)
    return sql, args


def _store_failure(table: str, op: str, exc: BaseException) -> StoreFailure:
    logger.exception("store_failure table=%s op=%s", table, op)
    return StoreFailure(str(exc) or f"{op} on {table} failed.")


_STORE_ERRORS = (asyncpg.PostgresError, asyncpg.InterfaceError, OSError, db.DatabaseNotReady)


async def select_all(
    table: str,
    *,
    where: Sequence[Condition] = (),
    embed: Embed | None = None,
    order_by: str | None = None,
) -> list[dict[str, Any]]:
    sql, args = build_select(table, where=where, embed=embed, order_by=order_by)
    try:
        rows = await db.fetch_all(sql, *args)
    except _STORE_ERRORS as exc:
        raise _store_failure(table, "select", exc) from exc
    if embed is not None:
        rows = [embed.decode(row) for row in rows]
    return rows


async def select_one(
    table: str,
    *,
    where: Sequence[Condition],
    embed: Embed | None = None,
) -> dict[str, Any] | None:
    sql, args = build_select(table, where=where, embed=embed, limit=1)
    try:
        row = await db.fetch_one(sql, *args)
    except _STORE_ERRORS as exc:
        raise _store_failure(table, "select", exc) from exc
    if row is not None and embed is not None:
        row = embed.decode(row)
    return row


async def insert(table: str, row: dict[str, Any]) -> dict[str, Any]:
    sql, args = build_insert(table, row)
    try:
        inserted = await db.fetch_one(sql, *args)
    except _STORE_ERRORS as exc:
        raise _store_failure(table, "insert", exc) from exc
    if inserted is None:
        raise StoreFailure(f"Insert into {table} returned no row.")
    return inserted


async def update(
    table: str,
    *,
    where: Sequence[Condition],
    patch: dict[str, Any],
) -> dict[str, Any] | None:
    sql, args = build_update(table, where=where, patch=patch)
    try:
        return await db.fetch_one(sql, *args)
    except _STORE_ERRORS as exc:
        raise _store_failure(table, "update", exc) from exc


async def delete(table: str, *, where: Sequence[Condition]) -> bool:
    """
    Delete matching rows. Returns False when nothing matched.
    """
    sql, args = build_delete(table, where=where)
    try:
        status_tag = await db.execute(sql, *args)
    except _STORE_ERRORS as exc:
        raise _store_failure(table, "delete", exc) from exc
    # asyncpg returns e.g. "DELETE 1"
    try:
        return int(str(status_tag).rsplit(" ", 1)[-1]) > 0
    except ValueError:
        return False
