"""
Tests for the database pool and query helpers.
"""

from contextlib import asynccontextmanager
from datetime import UTC, datetime
from unittest.mock import AsyncMock, MagicMock, patch

import psycopg
import pytest

from inboxiq.db.helpers import DatabaseError, execute_query, fetch_one
from inboxiq.db.pool import DatabasePoolManager
from inboxiq.features.leads.domain import ContactRecency
from inboxiq.features.leads.repository import LeadRepository, MessageRepository


def _connection_with_cursor(cursor):
    conn = MagicMock()
    conn.cursor.return_value.__aenter__.return_value = cursor
    return conn


class TestPoolManager:
    """Tests for the pool lifecycle guards."""

    @pytest.mark.asyncio
    async def test_health_check_before_initialize(self):
        health = await DatabasePoolManager().health_check()

        assert health["healthy"] is False
        assert health["error"] == "Pool not initialized"

    @pytest.mark.asyncio
    async def test_connection_requires_initialize(self):
        with pytest.raises(RuntimeError, match="not initialized"):
            async with DatabasePoolManager().connection():
                pass

    @pytest.mark.asyncio
    async def test_close_is_noop_when_never_opened(self):
        manager = DatabasePoolManager()

        await manager.close()

        assert manager.is_initialized is False


class _TrackedContext:
    """Records how an async context manager was left."""

    def __init__(self, value=None):
        self.value = value
        self.entered = False
        self.exited_with = "not exited"

    @asynccontextmanager
    async def __call__(self):
        self.entered = True
        try:
            yield self.value
        except BaseException as e:
            self.exited_with = e
            raise
        else:
            self.exited_with = None


def _initialized_manager():
    conn = MagicMock()
    conn.transaction = _TrackedContext()
    pool = MagicMock()
    pool.connection = _TrackedContext(conn)

    manager = DatabasePoolManager()
    manager.pool = pool
    manager._initialized = True
    return manager, pool, conn


class TestPoolScopes:
    """Connections borrowed through connection() / transaction() always go back."""

    @pytest.mark.asyncio
    async def test_transaction_commits_and_releases(self):
        manager, pool, conn = _initialized_manager()

        async with manager.transaction() as borrowed:
            assert borrowed is conn

        assert conn.transaction.entered is True
        assert conn.transaction.exited_with is None
        assert pool.connection.exited_with is None

    @pytest.mark.asyncio
    async def test_transaction_rolls_back_and_releases_on_error(self):
        manager, pool, conn = _initialized_manager()
        failure = RuntimeError("link failed")

        with pytest.raises(RuntimeError, match="link failed"):
            async with manager.transaction():
                raise failure

        # psycopg rolls back when the transaction block exits with an exception
        assert conn.transaction.exited_with is failure
        assert pool.connection.exited_with is failure

    @pytest.mark.asyncio
    async def test_connection_released_when_query_fails(self):
        manager, pool, conn = _initialized_manager()

        with pytest.raises(psycopg.OperationalError):
            async with manager.connection():
                raise psycopg.OperationalError("server closed the connection")

        assert pool.connection.entered is True
        assert isinstance(pool.connection.exited_with, psycopg.OperationalError)
        assert conn.transaction.entered is False


class TestQueryHelpers:
    """Tests for helper error mapping on an existing connection."""

    @pytest.mark.asyncio
    async def test_fetch_one_returns_row(self):
        cursor = AsyncMock()
        cursor.fetchone.return_value = {"id": "lead-1"}

        row = await fetch_one("SELECT 1", (), connection=_connection_with_cursor(cursor))

        assert row == {"id": "lead-1"}
        cursor.execute.assert_awaited_once_with("SELECT 1", ())

    @pytest.mark.asyncio
    async def test_fetch_one_wraps_psycopg_errors(self):
        cursor = AsyncMock()
        cursor.execute.side_effect = psycopg.OperationalError("server closed the connection")

        with pytest.raises(DatabaseError) as exc_info:
            await fetch_one("SELECT 1", (), connection=_connection_with_cursor(cursor))

        assert exc_info.value.operation == "fetch_one"

    @pytest.mark.asyncio
    async def test_execute_query_returns_rowcount(self):
        conn = MagicMock()
        conn.execute = AsyncMock(return_value=MagicMock(rowcount=3))

        assert await execute_query("UPDATE x SET y = 1", (), connection=conn) == 3


class TestRepositoryQueries:
    """Parameters handed to the helpers by the repositories."""

    @pytest.mark.asyncio
    async def test_update_contact_recency_params(self):
        last = datetime(2024, 6, 10, tzinfo=UTC)
        with patch(
            "inboxiq.features.leads.repository.lead_repository.execute_query",
            AsyncMock(return_value=1),
        ) as mock_execute:
            await LeadRepository.update_contact_recency(
                "lead-1", "user-1", ContactRecency(days_since_contact=5, last_contact_at=last)
            )

        args, kwargs = mock_execute.await_args
        assert args[1] == (5, last, "lead-1", "user-1")
        assert kwargs["connection"] is None

    @pytest.mark.asyncio
    async def test_fetch_lead_id_by_email_scopes_to_user(self):
        with patch(
            "inboxiq.features.leads.repository.lead_repository.fetch_one",
            AsyncMock(return_value={"id": 42}),
        ) as mock_fetch:
            lead_id = await LeadRepository.fetch_lead_id_by_email("user-1", "bob@other.com")

        assert lead_id == "42"
        assert mock_fetch.await_args.args[1] == ("user-1", "bob@other.com")

    @pytest.mark.asyncio
    async def test_messages_for_no_threads_skips_query(self):
        with patch(
            "inboxiq.features.leads.repository.message_repository.fetch_all", AsyncMock()
        ) as mock_fetch:
            assert await MessageRepository.fetch_messages_for_threads([], "user-1") == []

        mock_fetch.assert_not_awaited()
