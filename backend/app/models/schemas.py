from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator
from pydantic.config import ConfigDict

from app.models.manuscript import ManuscriptStatus
from app.models.reviews import RosterEntry
from app.models.revision import ArchivedVersion

# === 核心业务实体模型 (Pydantic v2) ===


class FileRef(BaseModel):
    """Reference to bytes held by the blob store; the core never sees file contents."""

    url: str = Field(..., min_length=1, max_length=2000)
    original_name: str = Field("", max_length=255)
    mime_type: Optional[str] = Field(None, max_length=255)


class CoAuthor(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    email: str = Field(..., min_length=3, max_length=320)
    affiliation: str = Field("", max_length=500)
    linked_user_id: Optional[str] = None
    is_registered: bool = False

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str) -> str:
        trimmed = value.strip().lower()
        if "@" not in trimmed:
            raise ValueError("co-author email is invalid")
        return trimmed


class ManuscriptBase(BaseModel):
    """稿件基础模型"""

    title: str = Field(..., min_length=1, max_length=500, description="稿件标题")
    abstract: str = Field(..., min_length=1, max_length=5000, description="稿件摘要")
    keywords: list[str] = Field(default_factory=list)
    department: str = Field("", max_length=255)
    journal_id: Optional[str] = Field(None, description="Catalog journal id")
    journal_name: Optional[str] = Field(None, max_length=500)
    article_type: str = Field("Research Article", max_length=100)

    @field_validator("title", "abstract")
    @classmethod
    def validate_required_text(cls, value: str) -> str:
        # 中文注释: 标题/摘要必须有内容，纯空白视为缺失
        trimmed = value.strip()
        if not trimmed:
            raise ValueError("must not be blank")
        return trimmed

    @field_validator("keywords", mode="before")
    @classmethod
    def normalize_keywords(cls, value: Any) -> list[str]:
        # 保持顺序去重、去空白
        if value is None:
            return []
        if isinstance(value, str):
            value = value.split(",")
        out: list[str] = []
        for item in value:
            kw = str(item or "").strip()
            if kw and kw not in out:
                out.append(kw)
        return out


class ManuscriptSubmission(ManuscriptBase):
    """投稿输入（作者身份由调用方注入）"""

    author_id: str = Field(..., min_length=1)
    author_name: str = Field(..., min_length=1, max_length=255)
    co_authors: list[CoAuthor] = Field(default_factory=list)


class Manuscript(ManuscriptBase):
    """数据库中的完整稿件模型"""

    id: str
    display_id: str
    author_id: str
    author_name: str
    co_authors: list[CoAuthor] = Field(default_factory=list)
    version: int = Field(1, ge=1)
    previous_versions: list[ArchivedVersion] = Field(default_factory=list)
    files: list[FileRef] = Field(default_factory=list)
    cover_letter: Optional[FileRef] = None
    response_to_reviewers: Optional[FileRef] = None
    status: ManuscriptStatus = ManuscriptStatus.SUBMITTED
    decision: Optional[str] = None
    decision_reason: Optional[str] = None
    decision_comments: Optional[str] = None
    editor_id: Optional[str] = None
    editor_name: Optional[str] = None
    reviewers: list[RosterEntry] = Field(default_factory=list)
    submitted_at: datetime
    last_updated_at: datetime
    decision_at: Optional[datetime] = None
    published_at: Optional[datetime] = None
    issue_id: Optional[str] = None
    lock_version: int = 0

    model_config = ConfigDict(from_attributes=True)

    @property
    def file_ref(self) -> Optional[FileRef]:
        """Primary manuscript file (the first upload)."""
        return self.files[0] if self.files else None


class SubmissionResult(BaseModel):
    manuscript_id: str
    display_id: str


class ManuscriptListFilters(BaseModel):
    author_id: Optional[str] = None
    status: Optional[ManuscriptStatus] = None
    journal_ids: list[str] = Field(default_factory=list)
    editor_id: Optional[str] = None
