"""
Revision models

中文注释: 修订循环的归档结构。previous_versions 只追加、不修改。
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class ArchivedVersion(BaseModel):
    """被新版本取代前的稿件快照"""

    version: int = Field(..., ge=1, description="被归档的版本号")
    file_ref: Optional[dict] = Field(None, description="归档时的主文件引用")
    files: list[dict] = Field(default_factory=list, description="归档时的全部文件引用")
    submitted_at: Optional[datetime] = None
    decision: Optional[str] = None
    decision_reason: Optional[str] = None
    decision_comments: Optional[str] = None
    archived_at: Optional[datetime] = None


class RevisionSubmitResponse(BaseModel):
    """提交修订稿后的响应"""

    success: bool = True
    message: str = "Revision submitted successfully"
    new_version: int
    status: str
