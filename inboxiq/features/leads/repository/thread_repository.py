"""
Repository helpers for email_threads.

Threads are created by the Gmail sync job; the leads pipeline only reads
them and sets ``lead_id``.
"""

import psycopg

from inboxiq.db.helpers import execute_query, fetch_all, fetch_one
from inboxiq.features.leads.domain import ThreadRecord

_THREAD_COLUMNS = """
    id,
    user_id,
    subject,
    thread_identifier,
    lead_id,
    status,
    updated_at
"""


def _to_thread(row: dict) -> ThreadRecord:
    return ThreadRecord(
        id=str(row["id"]),
        user_id=str(row["user_id"]),
        subject=row.get("subject"),
        thread_identifier=row.get("thread_identifier"),
        lead_id=str(row["lead_id"]) if row.get("lead_id") else None,
        status=row.get("status") or "active",
        updated_at=row.get("updated_at"),
    )


class ThreadRepository:
    """Raw SQL helpers for email threads."""

    @classmethod
    async def fetch_unlinked_active_threads(
        cls, user_id: str, *, connection: psycopg.AsyncConnection | None = None
    ) -> list[ThreadRecord]:
        query = f"""
            SELECT {_THREAD_COLUMNS}
            FROM public.email_threads
            WHERE user_id = %s
              AND lead_id IS NULL
              AND status = 'active'
            ORDER BY updated_at DESC
        """

        rows = await fetch_all(query, (user_id,), connection=connection)
        return [_to_thread(row) for row in rows]

    @classmethod
    async def fetch_thread_ids_for_lead(
        cls, lead_id: str, user_id: str, *, connection: psycopg.AsyncConnection | None = None
    ) -> list[str]:
        query = """
            SELECT id
            FROM public.email_threads
            WHERE lead_id = %s
              AND user_id = %s
        """

        rows = await fetch_all(query, (lead_id, user_id), connection=connection)
        return [str(row["id"]) for row in rows]

    @classmethod
    async def fetch_latest_thread_for_lead(
        cls, lead_id: str, user_id: str, *, connection: psycopg.AsyncConnection | None = None
    ) -> ThreadRecord | None:
        query = f"""
            SELECT {_THREAD_COLUMNS}
            FROM public.email_threads
            WHERE lead_id = %s
              AND user_id = %s
            ORDER BY updated_at DESC
            LIMIT 1
        """

        row = await fetch_one(query, (lead_id, user_id), connection=connection)
        return _to_thread(row) if row else None

    @classmethod
    async def link_thread_to_lead(
        cls,
        thread_id: str,
        lead_id: str,
        user_id: str,
        *,
        connection: psycopg.AsyncConnection | None = None,
    ) -> int:
        """Set lead_id on a thread. Re-linking to the same lead is a harmless rewrite."""
        query = """
            UPDATE public.email_threads
            SET lead_id = %s,
                updated_at = NOW()
            WHERE id = %s
              AND user_id = %s
        """

        return await execute_query(query, (lead_id, thread_id, user_id), connection=connection)
