"""
Lead detection service.

Turns synced email threads into lead records. A thread becomes a lead when:

- it has no lead yet and is active,
- its latest message comes from outside the user's own domain,
- the user never replied, or last replied more than the reply window
  (3 days by default) ago.

Each qualifying thread is resolved to a lead (reused by sender email or
created), linked, and the lead's recency recomputed, all inside one
transaction per thread. A failing thread is recorded in the run's error
list and the run moves on to the next one.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from email.utils import parseaddr

import psycopg

from inboxiq.config import settings
from inboxiq.db.pool import db_pool
from inboxiq.features.leads.domain import (
    ContactRecency,
    InvalidInputError,
    LeadDetectionResult,
    MessageDirection,
    MessageRecord,
    NewLead,
    ThreadRecord,
)
from inboxiq.features.leads.domain.models import as_utc
from inboxiq.features.leads.pipeline.recency.service import (
    ContactRecencyService,
    contact_recency_service,
)
from inboxiq.features.leads.repository import LeadRepository, MessageRepository, ThreadRepository
from inboxiq.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)

_NAME_SEPARATORS = re.compile(r"[._]")
_WORD_START = re.compile(r"\b\w")


def extract_domain(address: str | None) -> str:
    """Lowercased part after '@', or '' when there is none."""
    if not address or "@" not in address:
        return ""
    return address.split("@")[1].strip().lower()


def normalize_sender(from_email: str | None) -> str:
    """Bare lowercased address from a From value ("Bob <bob@x.com>" -> "bob@x.com")."""
    _, address = parseaddr(from_email or "")
    return (address or from_email or "").strip().lower()


def contact_name_from_email(address: str) -> str:
    """
    Display name guessed from the local part.

    >>> contact_name_from_email("jane.doe_smith@example.com")
    'Jane Doe Smith'
    """
    local_part = address.split("@")[0]
    spaced = _NAME_SEPARATORS.sub(" ", local_part)
    return _WORD_START.sub(lambda match: match.group(0).upper(), spaced)


def latest_message(messages: Iterable[MessageRecord], direction: MessageDirection) -> MessageRecord | None:
    latest = None
    for message in messages:
        if message.direction is not direction:
            continue
        if latest is None or message.effective_at > latest.effective_at:
            latest = message
    return latest


def needs_follow_up(
    messages: Iterable[MessageRecord], now: datetime, reply_window: timedelta
) -> bool:
    """True when the user never replied or the last reply is older than the window."""
    last_outgoing = latest_message(messages, MessageDirection.OUTBOUND)
    if last_outgoing is None:
        return True
    return last_outgoing.effective_at < as_utc(now) - reply_window


@dataclass(slots=True)
class _LinkedThread:
    lead_id: str
    lead_created: bool
    recency: ContactRecency


class LeadDetectionService:
    def __init__(
        self,
        recency_service: ContactRecencyService | None = None,
        reply_window_days: int | None = None,
        follow_up_due_days: int | None = None,
    ):
        self._recency = recency_service or contact_recency_service
        if reply_window_days is None:
            reply_window_days = settings.LEAD_REPLY_WINDOW_DAYS
        if follow_up_due_days is None:
            follow_up_due_days = settings.LEAD_FOLLOW_UP_DUE_DAYS
        self.reply_window = timedelta(days=reply_window_days)
        self.follow_up_due = timedelta(days=follow_up_due_days)

    async def detect_leads(
        self, user_id: str, user_email: str, *, now: datetime | None = None
    ) -> LeadDetectionResult:
        user_domain = extract_domain(user_email)
        if not user_domain:
            raise InvalidInputError("Invalid user email format")

        now = as_utc(now or datetime.now(UTC))
        threads = await ThreadRepository.fetch_unlinked_active_threads(user_id)
        logger.info("Starting lead detection", user_id=user_id, thread_count=len(threads))

        result = LeadDetectionResult()

        # Serial on purpose: one writer per sender email within a run
        for thread in threads:
            try:
                linked = await self._process_thread(thread, user_id, user_domain, now)
            except Exception as e:
                error_msg = f"Error processing thread {thread.id}: {e}"
                logger.error(
                    "Lead detection failed for thread",
                    user_id=user_id,
                    thread_id=thread.id,
                    error=str(e),
                    error_type=type(e).__name__,
                )
                result.errors.append(error_msg)
                continue

            if linked is None:
                continue

            if linked.lead_created:
                result.leads_created += 1
            result.threads_updated += 1

            logger.info(
                "Thread linked to lead",
                user_id=user_id,
                thread_id=thread.id,
                lead_id=linked.lead_id,
                lead_created=linked.lead_created,
                days_since_contact=linked.recency.days_since_contact,
            )

        logger.info(
            "Lead detection completed",
            user_id=user_id,
            leads_created=result.leads_created,
            threads_updated=result.threads_updated,
            error_count=len(result.errors),
        )
        return result

    async def _process_thread(
        self, thread: ThreadRecord, user_id: str, user_domain: str, now: datetime
    ) -> _LinkedThread | None:
        async with db_pool.transaction() as conn:
            latest = await MessageRepository.fetch_latest_message(
                thread.id, user_id, connection=conn
            )
            if latest is None:
                return None

            sender_email = normalize_sender(latest.from_email)
            sender_domain = extract_domain(sender_email)
            if not sender_domain or sender_domain == user_domain:
                return None

            messages = await MessageRepository.fetch_thread_messages(
                thread.id, user_id, connection=conn
            )
            if not needs_follow_up(messages, now, self.reply_window):
                return None

            lead_id = await LeadRepository.fetch_lead_id_by_email(
                user_id, sender_email, connection=conn
            )
            lead_created = lead_id is None

            if lead_created:
                lead_id = await LeadRepository.insert_lead(
                    NewLead(
                        user_id=user_id,
                        email=sender_email,
                        contact_name=contact_name_from_email(sender_email),
                        company=sender_domain,
                        follow_up_due_at=now + self.follow_up_due,
                    ),
                    connection=conn,
                )
                # Recency only sees threads already linked to the lead
                await self._link_and_refresh(thread.id, lead_id, user_id, now, conn)

            # Existing leads pick up the newly linked thread here
            recency = await self._link_and_refresh(thread.id, lead_id, user_id, now, conn)

        return _LinkedThread(
            lead_id=lead_id,
            lead_created=lead_created,
            recency=recency,
        )

    async def _link_and_refresh(
        self,
        thread_id: str,
        lead_id: str,
        user_id: str,
        now: datetime,
        conn: psycopg.AsyncConnection,
    ) -> ContactRecency:
        await ThreadRepository.link_thread_to_lead(thread_id, lead_id, user_id, connection=conn)
        return await self._recency.refresh_lead_recency(
            lead_id, user_id, now=now, connection=conn
        )


lead_detection_service = LeadDetectionService()


async def detect_leads(user_id: str, user_email: str) -> LeadDetectionResult:
    """Run lead detection for one user (typically right after a sync)."""
    return await lead_detection_service.detect_leads(user_id, user_email)
