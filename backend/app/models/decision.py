from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field, field_validator

from app.models.manuscript import ManuscriptStatus
from app.models.notification import NotificationTone


class Decision(str, Enum):
    """Editor verdicts the portal knows by name."""

    ACCEPT = "Accept"
    REJECT = "Reject"
    DESK_REJECT = "Desk Reject"
    MINOR_REVISION = "Minor Revision"
    MAJOR_REVISION = "Major Revision"
    REQUEST_FINAL_SUBMISSION = "Request Final Submission"
    SEND_TO_PUBLISHER = "Send to Publisher"
    # Written by the revision manager when the camera-ready version arrives.
    FINAL_SUBMITTED = "final_submitted"


class DecisionOutcome(BaseModel):
    """Result of mapping a verdict; persistence and dispatch are the caller's job."""

    decision: str
    status: ManuscriptStatus
    title: str
    message: str
    tone: NotificationTone


class DecisionRequest(BaseModel):
    decision: str = Field(..., max_length=200)
    reason: str | None = Field(None, max_length=5000)
    comments: str | None = Field(None, max_length=20000)

    @field_validator("decision")
    @classmethod
    def validate_decision(cls, value: str) -> str:
        trimmed = value.strip()
        if not trimmed:
            raise ValueError("decision must not be blank")
        return trimmed


class DeskRejectRequest(BaseModel):
    reason: str | None = Field(None, max_length=5000)
