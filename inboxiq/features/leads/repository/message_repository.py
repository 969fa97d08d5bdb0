"""
Repository helpers for the emails table.

Reads map rows through ``MessageRecord.from_row`` so direction spellings
are normalized before any pipeline code sees them.
"""

import psycopg

from inboxiq.db.helpers import fetch_all, fetch_one
from inboxiq.features.leads.domain import MessageDirection, MessageRecord
from inboxiq.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)

_MESSAGE_COLUMNS = """
    id,
    thread_id,
    direction,
    from_email,
    to_email,
    subject,
    body_text,
    body_html,
    snippet,
    received_at,
    sent_at,
    created_at
"""


class MessageRepository:
    """Raw SQL helpers for stored email messages."""

    @classmethod
    async def fetch_latest_message(
        cls, thread_id: str, user_id: str, *, connection: psycopg.AsyncConnection | None = None
    ) -> MessageRecord | None:
        query = f"""
            SELECT {_MESSAGE_COLUMNS}
            FROM public.emails
            WHERE thread_id = %s
              AND user_id = %s
            ORDER BY COALESCE(received_at, sent_at, created_at) DESC
            LIMIT 1
        """

        row = await fetch_one(query, (thread_id, user_id), connection=connection)
        return MessageRecord.from_row(row) if row else None

    @classmethod
    async def fetch_thread_messages(
        cls, thread_id: str, user_id: str, *, connection: psycopg.AsyncConnection | None = None
    ) -> list[MessageRecord]:
        """All messages of one thread, newest first."""
        query = """
            SELECT id, thread_id, direction, from_email, received_at, sent_at, created_at
            FROM public.emails
            WHERE thread_id = %s
              AND user_id = %s
            ORDER BY COALESCE(received_at, sent_at, created_at) DESC
        """

        rows = await fetch_all(query, (thread_id, user_id), connection=connection)
        return [MessageRecord.from_row(row) for row in rows]

    @classmethod
    async def fetch_messages_for_threads(
        cls,
        thread_ids: list[str],
        user_id: str,
        *,
        connection: psycopg.AsyncConnection | None = None,
    ) -> list[MessageRecord]:
        if not thread_ids:
            return []

        query = """
            SELECT id, thread_id, direction, from_email, received_at, sent_at, created_at
            FROM public.emails
            WHERE thread_id = ANY(%s::uuid[])
              AND user_id = %s
        """

        rows = await fetch_all(query, (list(thread_ids), user_id), connection=connection)
        return [MessageRecord.from_row(row) for row in rows]

    @classmethod
    async def insert_draft(
        cls,
        *,
        user_id: str,
        lead_id: str,
        to_email: str,
        subject: str,
        body_text: str,
        body_html: str,
        tone: str,
        ai_reason: str,
        connection: psycopg.AsyncConnection | None = None,
    ) -> str:
        """Store an AI draft as an outgoing emails row and return its id."""
        query = """
            INSERT INTO public.emails (
                user_id, lead_id, direction, from_email, to_email, subject,
                body_text, body_html, status, is_ai_draft, tone, ai_reason,
                created_at, updated_at
            )
            VALUES (%s, %s, %s, %s, %s, %s, %s, %s, 'draft', true, %s, %s, NOW(), NOW())
            RETURNING id
        """

        # from_email is filled in by the sending service
        row = await fetch_one(
            query,
            (
                user_id,
                lead_id,
                MessageDirection.OUTBOUND.value,
                "",
                to_email,
                subject,
                body_text,
                body_html,
                tone,
                ai_reason,
            ),
            connection=connection,
        )
        if not row:
            raise RuntimeError("Draft insert returned no id")

        logger.debug("Draft email stored", user_id=user_id, lead_id=lead_id, draft_id=str(row["id"]))
        return str(row["id"])
