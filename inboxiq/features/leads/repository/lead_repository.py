"""
Repository helpers for the leads table.

``(user_id, email)`` is the natural key; the detector looks it up before
inserting. The lookup and insert are separate statements, so two detection
runs for the same user racing on one sender can still produce duplicates.
"""

import psycopg
from psycopg.types.json import Jsonb

from inboxiq.db.helpers import execute_query, fetch_all, fetch_one
from inboxiq.features.leads.domain import ContactRecency, LeadRecord, NewLead


class LeadRepository:
    """Raw SQL helpers for lead records."""

    @classmethod
    async def fetch_lead(
        cls, lead_id: str, user_id: str, *, connection: psycopg.AsyncConnection | None = None
    ) -> LeadRecord | None:
        query = """
            SELECT
                id,
                user_id,
                email,
                contact_name,
                company,
                status,
                last_contact_at,
                days_since_contact,
                metadata
            FROM public.leads
            WHERE id = %s
              AND user_id = %s
            LIMIT 1
        """

        row = await fetch_one(query, (lead_id, user_id), connection=connection)
        return LeadRecord.from_row(row) if row else None

    @classmethod
    async def fetch_lead_id_by_email(
        cls, user_id: str, email: str, *, connection: psycopg.AsyncConnection | None = None
    ) -> str | None:
        query = """
            SELECT id
            FROM public.leads
            WHERE user_id = %s
              AND email = %s
            LIMIT 1
        """

        row = await fetch_one(query, (user_id, email), connection=connection)
        return str(row["id"]) if row else None

    @classmethod
    async def insert_lead(
        cls, lead: NewLead, *, connection: psycopg.AsyncConnection | None = None
    ) -> str:
        query = """
            INSERT INTO public.leads (
                user_id, email, contact_name, company, status,
                last_contact_at, days_since_contact, metadata, created_at, updated_at
            )
            VALUES (%s, %s, %s, %s, %s, NULL, 0, %s, NOW(), NOW())
            RETURNING id
        """

        row = await fetch_one(
            query,
            (
                lead.user_id,
                lead.email,
                lead.contact_name,
                lead.company,
                lead.status.value,
                Jsonb({"follow_up_due_at": lead.follow_up_due_at.isoformat()}),
            ),
            connection=connection,
        )
        if not row:
            raise RuntimeError(f"Lead insert for {lead.email} returned no id")
        return str(row["id"])

    @classmethod
    async def update_contact_recency(
        cls,
        lead_id: str,
        user_id: str,
        recency: ContactRecency,
        *,
        connection: psycopg.AsyncConnection | None = None,
    ) -> int:
        query = """
            UPDATE public.leads
            SET days_since_contact = %s,
                last_contact_at = %s,
                updated_at = NOW()
            WHERE id = %s
              AND user_id = %s
        """

        return await execute_query(
            query,
            (recency.days_since_contact, recency.last_contact_at, lead_id, user_id),
            connection=connection,
        )

    @classmethod
    async def fetch_lead_ids(cls, user_id: str) -> list[str]:
        rows = await fetch_all("SELECT id FROM public.leads WHERE user_id = %s", (user_id,))
        return [str(row["id"]) for row in rows]

    @classmethod
    async def fetch_user_ids_with_leads(cls) -> list[str]:
        rows = await fetch_all("SELECT DISTINCT user_id FROM public.leads ORDER BY user_id")
        return [str(row["user_id"]) for row in rows]
