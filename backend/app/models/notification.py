from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field
from pydantic.config import ConfigDict


class NotificationTone(str, Enum):
    """通知严重程度（决定前端展示样式）"""

    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


class Notification(BaseModel):
    """
    通知实体（用于 API 返回）
    """

    id: str
    user_id: str
    related_id: Optional[str] = None
    tone: NotificationTone = NotificationTone.INFO
    title: str = Field(..., max_length=255)
    message: str = Field(..., max_length=4000)
    is_read: bool = False
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class MarkReadRequest(BaseModel):
    notification_ids: list[str] = Field(..., min_length=1)
