"""
Domain subpackage for the leads feature.
"""

from .errors import InvalidInputError, LeadNotFoundError, LeadPipelineError
from .models import (
    ContactRecency,
    FollowUpContext,
    FollowUpDraft,
    LeadDetectionResult,
    LeadRecord,
    LeadStatus,
    MessageDirection,
    MessageRecord,
    NewLead,
    ThreadRecord,
)

__all__ = [
    "ContactRecency",
    "FollowUpContext",
    "FollowUpDraft",
    "InvalidInputError",
    "LeadDetectionResult",
    "LeadNotFoundError",
    "LeadPipelineError",
    "LeadRecord",
    "LeadStatus",
    "MessageDirection",
    "MessageRecord",
    "NewLead",
    "ThreadRecord",
]
