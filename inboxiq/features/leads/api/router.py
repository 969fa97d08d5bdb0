"""
Leads routes.

Thin HTTP wrappers around the lead pipeline: detection, recency refresh
and follow-up drafts. The caller's identity comes from the verified
bearer token (``sub`` for the user id, ``email`` for the mailbox).
"""

from fastapi import APIRouter, Depends, HTTPException, status
from structlog.contextvars import bind_contextvars

from inboxiq.auth.verify import auth_dependency
from inboxiq.db.helpers import DatabaseError
from inboxiq.features.leads.domain import InvalidInputError, LeadNotFoundError
from inboxiq.features.leads.pipeline.detection import lead_detection_service
from inboxiq.features.leads.pipeline.followup import follow_up_service
from inboxiq.features.leads.pipeline.recency import contact_recency_service
from inboxiq.infrastructure.observability.logging import get_logger

from .schemas import (
    ContactInfoUpdateResponse,
    FollowUpDraftBody,
    FollowUpResponse,
    LeadDetectionResponse,
)

logger = get_logger(__name__)

router = APIRouter(prefix="/leads", tags=["leads"])


def _require_user_id(claims: dict) -> str:
    user_id = claims.get("sub")
    if not user_id:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")
    bind_contextvars(user_id=user_id)
    return user_id


@router.post("/detect", response_model=LeadDetectionResponse)
async def detect_leads(claims: dict = Depends(auth_dependency)):
    """Scan unlinked threads and create/link leads for the authenticated user."""
    user_id = _require_user_id(claims)
    user_email = claims.get("email")
    if not user_email:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="User email is required for lead detection",
        )

    try:
        result = await lead_detection_service.detect_leads(user_id, user_email)
    except InvalidInputError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e
    except DatabaseError as e:
        logger.error("Lead detection failed", user_id=user_id, error=str(e))
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Lead detection failed"
        ) from e

    return LeadDetectionResponse(
        message=(
            f"Lead detection completed: {result.leads_created} leads created, "
            f"{result.threads_updated} threads updated"
        ),
        **result.as_dict(),
    )


@router.post("/update-contact-info", response_model=ContactInfoUpdateResponse)
async def update_contact_info(claims: dict = Depends(auth_dependency)):
    """Recompute days-since-contact for every lead of the authenticated user."""
    user_id = _require_user_id(claims)

    try:
        updated = await contact_recency_service.refresh_all_leads(user_id)
    except DatabaseError as e:
        logger.error("Lead contact info update failed", user_id=user_id, error=str(e))
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Update failed"
        ) from e

    return ContactInfoUpdateResponse(
        message=f"Lead contact info updated successfully for {updated} leads",
        leads_updated=updated,
    )


@router.post("/{lead_id}/generate-followup", response_model=FollowUpResponse)
async def generate_followup(lead_id: str, claims: dict = Depends(auth_dependency)):
    """Generate and store an AI follow-up draft for one lead."""
    user_id = _require_user_id(claims)

    try:
        draft = await follow_up_service.generate_follow_up(lead_id, user_id)
    except LeadNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e
    except DatabaseError as e:
        logger.error("Follow-up generation failed", user_id=user_id, lead_id=lead_id, error=str(e))
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Follow-up generation failed",
        ) from e

    return FollowUpResponse(
        message="Follow-up draft generated successfully",
        draft=FollowUpDraftBody(id=draft.draft_id, subject=draft.subject, body=draft.body),
    )
