"""
Persistence layer for the leads feature.
"""

from .lead_repository import LeadRepository
from .message_repository import MessageRepository
from .thread_repository import ThreadRepository

__all__ = ["LeadRepository", "MessageRepository", "ThreadRepository"]
