from __future__ import annotations

from datetime import date, datetime, time, timezone
from typing import Literal

from pydantic import BaseModel, Field, field_validator

from app.models.reviews import ReviewScores


InvitationAction = Literal["accept", "decline"]


class InviteReviewerRequest(BaseModel):
    manuscript_id: str = Field(..., min_length=1)
    reviewer_id: str = Field(..., min_length=1)
    reviewer_name: str = Field("", max_length=255)
    due_date: datetime

    @field_validator("due_date", mode="before")
    @classmethod
    def coerce_due_date(cls, value):
        # 前端日期选择器只给 "YYYY-MM-DD"，按当天结束（UTC）处理
        if isinstance(value, date) and not isinstance(value, datetime):
            return datetime.combine(value, time(23, 59, 59), tzinfo=timezone.utc)
        if isinstance(value, str) and len(value.strip()) == 10:
            parsed = date.fromisoformat(value.strip())
            return datetime.combine(parsed, time(23, 59, 59), tzinfo=timezone.utc)
        return value

    @field_validator("due_date")
    @classmethod
    def ensure_aware(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value


class InvitationResponsePayload(BaseModel):
    action: InvitationAction
    reason: str | None = Field(None, max_length=1000)

    @field_validator("action", mode="before")
    @classmethod
    def normalize_action(cls, value):
        # 兼容旧客户端传 "accepted" / "declined"
        raw = str(value or "").strip().lower()
        return {"accepted": "accept", "declined": "decline"}.get(raw, raw)


class ReviewSubmission(BaseModel):
    scores: ReviewScores = Field(default_factory=ReviewScores)
    recommendation: str = Field(..., min_length=1, max_length=100)
    comments_to_author: str = Field("", max_length=20000)
    confidential_comments: str = Field("", max_length=20000)

    @field_validator("recommendation")
    @classmethod
    def strip_recommendation(cls, value: str) -> str:
        trimmed = value.strip()
        if not trimmed:
            raise ValueError("recommendation must not be blank")
        return trimmed


class InviteReviewerResponse(BaseModel):
    success: bool = True
    message: str = "Reviewer invited successfully"
    review_id: str
