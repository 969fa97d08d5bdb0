"""
Contact recency service.

Computes "days since contact" for a lead from the messages in its linked
threads:

1. The latest outgoing message wins: the user made contact.
2. With no outgoing message, the clock starts at the earliest incoming
   message so untouched leads keep aging.
3. With neither (or no linked threads) the lead has no contact yet.

``compute_recency`` is a pure read; ``refresh_*`` persist the result.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import UTC, datetime

import psycopg

from inboxiq.features.leads.domain import ContactRecency, MessageDirection, MessageRecord
from inboxiq.features.leads.domain.models import NO_CONTACT, as_utc
from inboxiq.features.leads.repository import LeadRepository, MessageRepository, ThreadRepository
from inboxiq.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)

SECONDS_PER_DAY = 86_400


def whole_days_between(earlier: datetime, now: datetime) -> int:
    """Floor of elapsed days, never negative."""
    elapsed = (as_utc(now) - as_utc(earlier)).total_seconds()
    return max(0, int(elapsed // SECONDS_PER_DAY))


def recency_from_messages(messages: Iterable[MessageRecord], now: datetime) -> ContactRecency:
    latest_outbound: datetime | None = None
    earliest_inbound: datetime | None = None

    for message in messages:
        timestamp = message.effective_at
        if message.direction is MessageDirection.OUTBOUND:
            if latest_outbound is None or timestamp > latest_outbound:
                latest_outbound = timestamp
        elif message.direction is MessageDirection.INBOUND:
            if earliest_inbound is None or timestamp < earliest_inbound:
                earliest_inbound = timestamp

    last_contact_at = latest_outbound or earliest_inbound
    if last_contact_at is None:
        return NO_CONTACT

    return ContactRecency(
        days_since_contact=whole_days_between(last_contact_at, now),
        last_contact_at=last_contact_at,
    )


class ContactRecencyService:
    async def compute_recency(
        self,
        lead_id: str,
        user_id: str,
        *,
        now: datetime | None = None,
        connection: psycopg.AsyncConnection | None = None,
    ) -> ContactRecency:
        """Read-only recency for one lead. Storage errors propagate."""
        thread_ids = await ThreadRepository.fetch_thread_ids_for_lead(
            lead_id, user_id, connection=connection
        )
        if not thread_ids:
            return NO_CONTACT

        messages = await MessageRepository.fetch_messages_for_threads(
            thread_ids, user_id, connection=connection
        )
        return recency_from_messages(messages, now or datetime.now(UTC))

    async def refresh_lead_recency(
        self,
        lead_id: str,
        user_id: str,
        *,
        now: datetime | None = None,
        connection: psycopg.AsyncConnection | None = None,
    ) -> ContactRecency:
        recency = await self.compute_recency(lead_id, user_id, now=now, connection=connection)
        await LeadRepository.update_contact_recency(
            lead_id, user_id, recency, connection=connection
        )

        logger.debug(
            "Lead contact recency updated",
            user_id=user_id,
            lead_id=lead_id,
            days_since_contact=recency.days_since_contact,
        )
        return recency

    async def refresh_all_leads(self, user_id: str, *, now: datetime | None = None) -> int:
        """
        Recompute recency for every lead the user owns.

        One failing lead is logged and skipped so the rest still age
        correctly. Returns how many leads were updated.
        """
        lead_ids = await LeadRepository.fetch_lead_ids(user_id)
        now = now or datetime.now(UTC)
        updated = 0

        for lead_id in lead_ids:
            try:
                await self.refresh_lead_recency(lead_id, user_id, now=now)
                updated += 1
            except Exception as e:
                logger.warning(
                    "Failed to refresh lead recency",
                    user_id=user_id,
                    lead_id=lead_id,
                    error=str(e),
                    error_type=type(e).__name__,
                )

        logger.info(
            "Lead contact info refreshed",
            user_id=user_id,
            lead_count=len(lead_ids),
            updated_count=updated,
        )
        return updated


contact_recency_service = ContactRecencyService()


async def compute_recency(lead_id: str, user_id: str) -> ContactRecency:
    return await contact_recency_service.compute_recency(lead_id, user_id)


async def refresh_all_leads(user_id: str) -> int:
    return await contact_recency_service.refresh_all_leads(user_id)
