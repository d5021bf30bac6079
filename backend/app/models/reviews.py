from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field
from pydantic.config import ConfigDict


class ReviewStatus(str, Enum):
    INVITED = "invited"
    ACCEPTED = "accepted"
    DECLINED = "declined"
    COMPLETED = "completed"

    @classmethod
    def active(cls) -> set["ReviewStatus"]:
        # 未完成、未拒绝的邀请都算“在审”
        return {cls.INVITED, cls.ACCEPTED}

    @classmethod
    def submittable(cls) -> set["ReviewStatus"]:
        return {cls.INVITED, cls.ACCEPTED}


class RosterStatus(str, Enum):
    INVITED = "invited"
    ACCEPTED = "accepted"
    DECLINED = "declined"
    COMPLETED = "completed"
    # Legacy rows written before reviews were versioned.
    PENDING = "pending"


class ReviewScores(BaseModel):
    """审稿评分（0 表示尚未提交）"""

    originality: float = Field(0, ge=0, le=10)
    methodology: float = Field(0, ge=0, le=10)
    technical: float = Field(0, ge=0, le=10)
    clarity: float = Field(0, ge=0, le=10)
    references: float = Field(0, ge=0, le=10)


class Review(BaseModel):
    """审稿记录：一次 (稿件版本, 审稿人) 指派"""

    id: str
    manuscript_id: str
    manuscript_version: int = Field(1, ge=1)
    reviewer_id: str
    reviewer_name: str = ""
    status: ReviewStatus = ReviewStatus.INVITED
    assigned_at: datetime
    due_at: datetime
    responded_at: Optional[datetime] = None
    decline_reason: Optional[str] = None
    scores: ReviewScores = Field(default_factory=ReviewScores)
    recommendation: Optional[str] = None
    comments_to_author: str = ""
    confidential_comments: str = ""
    completed_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

    @property
    def is_active(self) -> bool:
        return self.status in ReviewStatus.active()


class RosterEntry(BaseModel):
    """稿件上内嵌的审稿人摘要（由审稿记录投影而来）"""

    reviewer_id: str
    name: str = ""
    status: RosterStatus
    review_id: str
    version: int = 1
