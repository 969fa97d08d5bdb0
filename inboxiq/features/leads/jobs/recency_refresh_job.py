"""
Lead recency refresh job.

Days-since-contact is stored, not derived on read, so it goes stale as
time passes. This job walks every user that owns leads and recomputes the
value for all of them. Users are processed one after another; a failure
for one user is logged and does not stop the others.
"""

from dataclasses import dataclass, field

from inboxiq.features.leads.pipeline.recency import contact_recency_service
from inboxiq.features.leads.repository import LeadRepository
from inboxiq.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)


@dataclass(slots=True)
class RecencyRefreshSummary:
    users_processed: int = 0
    leads_updated: int = 0
    failed_users: list[str] = field(default_factory=list)


async def run_lead_recency_refresh() -> RecencyRefreshSummary:
    summary = RecencyRefreshSummary()
    user_ids = await LeadRepository.fetch_user_ids_with_leads()

    if not user_ids:
        logger.info("Lead recency refresh skipped - no users with leads")
        return summary

    for user_id in user_ids:
        try:
            summary.leads_updated += await contact_recency_service.refresh_all_leads(user_id)
            summary.users_processed += 1
        except Exception as e:
            logger.error(
                "Lead recency refresh failed for user",
                user_id=user_id,
                error=str(e),
                error_type=type(e).__name__,
            )
            summary.failed_users.append(user_id)

    logger.info(
        "Lead recency refresh completed",
        users_processed=summary.users_processed,
        leads_updated=summary.leads_updated,
        failed_users=len(summary.failed_users),
    )
    return summary
