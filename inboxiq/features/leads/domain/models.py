"""
Domain models for the leads feature.

Rows coming back from ``email_threads``, ``emails`` and ``leads`` are
mapped onto these dataclasses at the repository boundary. Message
direction is normalized there too, so pipeline code compares enum members
instead of the several spellings the sync job writes.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any


class MessageDirection(str, Enum):
    INBOUND = "incoming"
    OUTBOUND = "outgoing"

    @classmethod
    def normalize(cls, raw: str | None) -> MessageDirection | None:
        """Map any stored spelling onto the enum; unknown values give None."""
        if not raw:
            return None
        return _DIRECTION_ALIASES.get(raw.strip().lower())


_DIRECTION_ALIASES: dict[str, MessageDirection] = {
    "incoming": MessageDirection.INBOUND,
    "inbound": MessageDirection.INBOUND,
    "received": MessageDirection.INBOUND,
    "outgoing": MessageDirection.OUTBOUND,
    "outbound": MessageDirection.OUTBOUND,
    "sent": MessageDirection.OUTBOUND,
}


class LeadStatus(str, Enum):
    HOT = "hot"
    WARM = "warm"
    COLD = "cold"


def as_utc(value: datetime) -> datetime:
    """Treat naive timestamps as UTC (the pool sets timezone = 'UTC')."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


@dataclass(slots=True)
class ThreadRecord:
    """Represents an email_threads row."""

    id: str
    user_id: str
    subject: str | None
    thread_identifier: str | None
    lead_id: str | None
    status: str
    updated_at: datetime | None


@dataclass(slots=True)
class MessageRecord:
    """Represents an emails row, reduced to what the pipeline reads."""

    id: str
    thread_id: str | None
    direction: MessageDirection | None
    from_email: str | None
    created_at: datetime
    received_at: datetime | None = None
    sent_at: datetime | None = None
    to_email: str | None = None
    subject: str | None = None
    body_text: str | None = None
    body_html: str | None = None
    snippet: str | None = None

    @property
    def effective_at(self) -> datetime:
        """First non-null of received_at, sent_at, created_at."""
        return as_utc(self.received_at or self.sent_at or self.created_at)

    @property
    def preview_text(self) -> str:
        return self.body_text or self.body_html or self.snippet or ""

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> MessageRecord:
        return cls(
            id=str(row["id"]),
            thread_id=str(row["thread_id"]) if row.get("thread_id") else None,
            direction=MessageDirection.normalize(row.get("direction")),
            from_email=row.get("from_email"),
            created_at=row["created_at"],
            received_at=row.get("received_at"),
            sent_at=row.get("sent_at"),
            to_email=row.get("to_email"),
            subject=row.get("subject"),
            body_text=row.get("body_text"),
            body_html=row.get("body_html"),
            snippet=row.get("snippet"),
        )


@dataclass(slots=True)
class LeadRecord:
    """Represents a leads row."""

    id: str
    user_id: str
    email: str
    contact_name: str | None
    company: str | None
    status: LeadStatus
    last_contact_at: datetime | None
    days_since_contact: int
    metadata: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> LeadRecord:
        return cls(
            id=str(row["id"]),
            user_id=str(row["user_id"]),
            email=row["email"],
            contact_name=row.get("contact_name"),
            company=row.get("company"),
            status=LeadStatus(row.get("status") or LeadStatus.WARM.value),
            last_contact_at=row.get("last_contact_at"),
            days_since_contact=row.get("days_since_contact") or 0,
            metadata=row.get("metadata") or {},
        )


@dataclass(slots=True)
class NewLead:
    """Values for a lead the detector is about to insert."""

    user_id: str
    email: str
    contact_name: str
    company: str
    follow_up_due_at: datetime
    status: LeadStatus = LeadStatus.WARM


@dataclass(frozen=True, slots=True)
class ContactRecency:
    days_since_contact: int
    last_contact_at: datetime | None


NO_CONTACT = ContactRecency(days_since_contact=0, last_contact_at=None)


@dataclass(slots=True)
class LeadDetectionResult:
    """Best-effort summary of one detection run."""

    leads_created: int = 0
    threads_updated: int = 0
    errors: list[str] = field(default_factory=list)

    def as_dict(self) -> dict[str, Any]:
        return {
            "leads_created": self.leads_created,
            "threads_updated": self.threads_updated,
            "errors": list(self.errors),
        }


@dataclass(frozen=True, slots=True)
class FollowUpContext:
    recipient_name: str | None
    recipient_email: str
    last_subject: str
    last_snippet: str
    days_since_last_reply: int


@dataclass(frozen=True, slots=True)
class FollowUpDraft:
    draft_id: str
    subject: str
    body: str
