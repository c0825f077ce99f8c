"""
asyncpg pool ownership and raw-SQL helpers.

`main.lifespan` opens the pool on startup and closes it on shutdown; every
store access in between goes through `fetch_one`, `fetch_all` or `execute`
with `$n` positional placeholders. Rows come back as plain dicts.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

import asyncpg

from . import settings

# libpq-style DSN options that asyncpg.create_pool rejects or handles itself.
UNSUPPORTED_DSN_PARAMS = frozenset({"sslmode"})

_pool: asyncpg.Pool | None = None


class DatabaseNotReady(RuntimeError):
    pass


def strip_dsn_params(url: str, names: frozenset[str] = UNSUPPORTED_DSN_PARAMS) -> str:
    parts = urlsplit(url)
    if not parts.query:
        return url
    kept = [
        (key, value)
        for key, value in parse_qsl(parts.query, keep_blank_values=True)
        if key not in names
    ]
    return urlunsplit(parts._replace(query=urlencode(kept)))


@dataclass(frozen=True)
class PoolConfig:
    dsn: str
    min_size: int = 1
    max_size: int = 5
    command_timeout_s: int = 30

    @classmethod
    def from_env(cls) -> PoolConfig:
        dsn = settings.env_str("DATABASE_URL")
        if not dsn:
            raise DatabaseNotReady("DATABASE_URL is not set.")
        return cls(
            dsn=strip_dsn_params(dsn),
            min_size=settings.env_int("DB_POOL_MIN_SIZE", cls.min_size),
            max_size=settings.env_int("DB_POOL_MAX_SIZE", cls.max_size),
            command_timeout_s=settings.env_int("DB_COMMAND_TIMEOUT_S", cls.command_timeout_s),
        )


async def init_pool(config: PoolConfig | None = None) -> None:
    global _pool
    if _pool is not None:
        return None
    config = config or PoolConfig.from_env()
    _pool = await asyncpg.create_pool(
        dsn=config.dsn,
        min_size=config.min_size,
        max_size=config.max_size,
        command_timeout=config.command_timeout_s,
    )


async def close_pool() -> None:
    global _pool
    if _pool is None:
        return None
    pool_, _pool = _pool, None
    await pool_.close()


def pool() -> asyncpg.Pool:
    if _pool is None:
        raise DatabaseNotReady("DB pool is not initialized. Call init_pool() on startup.")
    return _pool


async def fetch_one(sql: str, *args: Any) -> dict[str, Any] | None:
    row = await pool().fetchrow(sql, *args)
    return None if row is None else dict(row)


async def fetch_all(sql: str, *args: Any) -> list[dict[str, Any]]:
    return [dict(row) for row in await pool().fetch(sql, *args)]


async def execute(sql: str, *args: Any) -> str:
    """
    Run a statement and return asyncpg's status tag, e.g. "DELETE 1".
    """
    return await pool().execute(sql, *args)
