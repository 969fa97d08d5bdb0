"""
Leads API response models.
"""

from pydantic import BaseModel, Field


class LeadDetectionResponse(BaseModel):
    success: bool = Field(True, description="Whether the run completed")
    message: str = Field(..., description="Human-readable summary")
    leads_created: int = Field(..., description="New lead records created")
    threads_updated: int = Field(..., description="Threads linked to a lead")
    errors: list[str] = Field(default_factory=list, description="Per-thread failures")


class ContactInfoUpdateResponse(BaseModel):
    success: bool = Field(True, description="Whether the refresh completed")
    message: str = Field(..., description="Human-readable summary")
    leads_updated: int = Field(..., description="Leads whose recency was recomputed")


class FollowUpDraftBody(BaseModel):
    id: str = Field(..., description="Stored draft email id")
    subject: str = Field(..., description="Draft subject line")
    body: str = Field(..., description="Draft plain-text body")


class FollowUpResponse(BaseModel):
    success: bool = Field(True, description="Whether the draft was stored")
    message: str = Field(..., description="Human-readable summary")
    draft: FollowUpDraftBody
