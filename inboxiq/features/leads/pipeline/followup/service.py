"""
Follow-up draft service.

Builds context from a lead's latest thread, asks the text generator for a
follow-up, and stores the result as an AI draft. Generation problems of any
kind degrade to a deterministic fallback email; a missing lead or a failed
draft insert is a real error and propagates.
"""

from __future__ import annotations

from datetime import UTC, datetime

from inboxiq.db.pool import db_pool
from inboxiq.features.leads.domain import (
    FollowUpContext,
    FollowUpDraft,
    LeadNotFoundError,
    LeadRecord,
)
from inboxiq.features.leads.pipeline.recency.service import whole_days_between
from inboxiq.features.leads.repository import LeadRepository, MessageRepository, ThreadRepository
from inboxiq.features.leads.services.text_generation import TextGenerator, get_text_generator
from inboxiq.infrastructure.observability.logging import get_logger

from .prompts import build_fallback_email, parse_generated_email, render_prompt, to_html

logger = get_logger(__name__)

DEFAULT_SUBJECT = "our conversation"
SNIPPET_LIMIT = 200
DRAFT_TONE = "professional"


class FollowUpService:
    def __init__(self, generator: TextGenerator | None = None):
        self._generator = generator

    @property
    def generator(self) -> TextGenerator:
        return self._generator or get_text_generator()

    async def generate_follow_up(
        self, lead_id: str, user_id: str, *, now: datetime | None = None
    ) -> FollowUpDraft:
        now = now or datetime.now(UTC)

        # Reads share one borrowed connection; it goes back to the pool
        # before the (slow) generation call.
        async with db_pool.connection() as conn:
            lead = await LeadRepository.fetch_lead(lead_id, user_id, connection=conn)
            if lead is None:
                raise LeadNotFoundError(lead_id, user_id)
            context = await self._build_context(lead, user_id, now, conn)

        logger.info(
            "Generating follow-up for lead",
            user_id=user_id,
            lead_id=lead_id,
            days_since_last_reply=context.days_since_last_reply,
        )
        subject, body = await self._compose(context)

        draft_id = await MessageRepository.insert_draft(
            user_id=user_id,
            lead_id=lead_id,
            to_email=lead.email,
            subject=subject,
            body_text=body,
            body_html=to_html(body),
            tone=DRAFT_TONE,
            ai_reason=(
                "AI-generated follow-up based on last contact "
                f"{context.days_since_last_reply} days ago"
            ),
        )

        logger.info("Follow-up draft created", user_id=user_id, lead_id=lead_id, draft_id=draft_id)
        return FollowUpDraft(draft_id=draft_id, subject=subject, body=body)

    async def _build_context(
        self, lead: LeadRecord, user_id: str, now: datetime, conn
    ) -> FollowUpContext:
        last_subject = DEFAULT_SUBJECT
        last_snippet = ""
        days_since_last_reply = lead.days_since_contact or 0

        thread = await ThreadRepository.fetch_latest_thread_for_lead(
            lead.id, user_id, connection=conn
        )
        if thread is not None:
            last_subject = thread.subject or DEFAULT_SUBJECT
            message = await MessageRepository.fetch_latest_message(
                thread.id, user_id, connection=conn
            )
            if message is not None:
                last_snippet = message.preview_text
                days_since_last_reply = whole_days_between(message.effective_at, now)

        return FollowUpContext(
            recipient_name=lead.contact_name,
            recipient_email=lead.email,
            last_subject=last_subject,
            last_snippet=last_snippet[:SNIPPET_LIMIT],
            days_since_last_reply=days_since_last_reply,
        )

    async def _compose(self, context: FollowUpContext) -> tuple[str, str]:
        prompt = render_prompt(context)

        try:
            raw = await self.generator.generate(prompt)
        except Exception as e:
            logger.warning(
                "Text generation unavailable, using fallback follow-up",
                error=str(e),
                error_type=type(e).__name__,
            )
            return build_fallback_email(context)

        parsed = parse_generated_email(raw, context.last_subject)
        if parsed is None:
            logger.warning("Generated follow-up had no body, using fallback", response_length=len(raw or ""))
            return build_fallback_email(context)
        return parsed


follow_up_service = FollowUpService()


async def generate_follow_up(lead_id: str, user_id: str) -> FollowUpDraft:
    return await follow_up_service.generate_follow_up(lead_id, user_id)
