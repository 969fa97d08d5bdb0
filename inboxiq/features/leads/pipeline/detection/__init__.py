"""
Lead detection package.

Scans unlinked email threads and turns external, unanswered conversations
into lead records.
"""

from .service import LeadDetectionService, lead_detection_service

__all__ = ["LeadDetectionService", "lead_detection_service"]
