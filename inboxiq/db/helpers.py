# inboxiq/db/helpers.py
"""
Thin query helpers shared by the lead repositories.

Each helper takes an optional keyword-only ``connection``. Passing the
connection yielded by ``db_pool.transaction()`` keeps several statements
in one transaction (lead detection does this per thread); leaving it out
borrows a pooled connection for that single statement.

Every ``psycopg.Error`` is re-raised as ``DatabaseError`` so routes can map
storage failures to a 500 without importing psycopg.
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

import psycopg

from inboxiq.db.pool import get_db_connection
from inboxiq.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)


class DatabaseError(Exception):
    """Storage failure surfaced by a repository call."""

    def __init__(self, message: str, operation: str = "unknown", recoverable: bool = True):
        super().__init__(message)
        self.operation = operation
        self.recoverable = recoverable


@asynccontextmanager
async def _use_connection(
    connection: psycopg.AsyncConnection | None,
) -> AsyncGenerator[psycopg.AsyncConnection, None]:
    if connection is not None:
        yield connection
        return
    async with await get_db_connection() as conn:
        yield conn


def _wrap(operation: str, query: str, error: psycopg.Error) -> DatabaseError:
    logger.error(
        "Database query failed",
        operation=operation,
        query=" ".join(query.split())[:100],
        error=str(error),
        error_type=type(error).__name__,
    )
    return DatabaseError(f"Query failed: {error}", operation=operation)


async def fetch_one(
    query: str, params: tuple = (), *, connection: psycopg.AsyncConnection | None = None
) -> dict[str, Any] | None:
    """Run ``query`` and return the first row (dict_row) or None."""
    try:
        async with _use_connection(connection) as conn:
            async with conn.cursor() as cur:
                await cur.execute(query, params)
                return await cur.fetchone()
    except psycopg.Error as e:
        raise _wrap("fetch_one", query, e) from e


async def fetch_all(
    query: str, params: tuple = (), *, connection: psycopg.AsyncConnection | None = None
) -> list[dict[str, Any]]:
    try:
        async with _use_connection(connection) as conn:
            async with conn.cursor() as cur:
                await cur.execute(query, params)
                return await cur.fetchall()
    except psycopg.Error as e:
        raise _wrap("fetch_all", query, e) from e


async def execute_query(
    query: str, params: tuple = (), *, connection: psycopg.AsyncConnection | None = None
) -> int:
    """Run a write statement and return the affected row count."""
    try:
        async with _use_connection(connection) as conn:
            cursor = await conn.execute(query, params)
            return cursor.rowcount
    except psycopg.Error as e:
        raise _wrap("execute", query, e) from e
