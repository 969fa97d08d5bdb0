"""
Contact recency package.

Derives days-since-contact for leads from the messages in their threads.
"""

from .service import ContactRecencyService, contact_recency_service

__all__ = ["ContactRecencyService", "contact_recency_service"]
