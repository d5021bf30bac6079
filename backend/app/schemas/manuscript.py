from __future__ import annotations

from pydantic import BaseModel, Field, field_validator


class AssignEditorRequest(BaseModel):
    editor_id: str = Field(..., min_length=1)
    editor_name: str = Field("", max_length=255)


class AssignIssueRequest(BaseModel):
    issue_id: str

    @field_validator("issue_id")
    @classmethod
    def validate_issue_id(cls, value: str) -> str:
        trimmed = value.strip()
        if not trimmed:
            raise ValueError("Issue ID is required")
        return trimmed


class LinkCoAuthorRequest(BaseModel):
    user_id: str = Field(..., min_length=1)
    email: str = Field(..., min_length=3, max_length=320)
