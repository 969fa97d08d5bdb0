"""
Exceptions raised by the leads pipeline.

Storage failures surface as ``inboxiq.db.helpers.DatabaseError`` and text
generation failures as ``TextGenerationError``; only the two below are
raised by the pipeline's own validation.
"""


class LeadPipelineError(Exception):
    """Base exception for lead pipeline errors."""

    def __init__(self, message: str, recoverable: bool = False):
        super().__init__(message)
        self.recoverable = recoverable


class InvalidInputError(LeadPipelineError):
    """Raised when a caller passes malformed input (e.g. user email without '@')."""


class LeadNotFoundError(LeadPipelineError):
    """Raised when a lead does not exist for the given user."""

    def __init__(self, lead_id: str, user_id: str):
        super().__init__(f"Lead {lead_id} not found")
        self.lead_id = lead_id
        self.user_id = user_id
