"""
Follow-up draft package.

Generates AI-assisted follow-up drafts for existing leads.
"""

from .service import FollowUpService, follow_up_service

__all__ = ["FollowUpService", "follow_up_service"]
