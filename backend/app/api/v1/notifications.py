from typing import Optional

from fastapi import APIRouter, Depends

from app.api.v1.workflow_common import get_notification_service
from app.core.auth_utils import get_current_user
from app.models.notification import MarkReadRequest
from app.services.notification_service import NotificationService

router = APIRouter(prefix="/notifications", tags=["Notifications"])


@router.get("")
async def list_notifications(
    limit: Optional[int] = None,
    current_user: dict = Depends(get_current_user),
    service: NotificationService = Depends(get_notification_service),
):
    """
    获取当前用户的通知列表（新的在前，默认 50 条）
    """
    page = max(1, min(int(limit), 200)) if limit else None
    rows = service.list_for_user(current_user["id"], limit=page)
    return {"success": True, "data": rows}


@router.get("/unread-count")
async def unread_count(
    current_user: dict = Depends(get_current_user),
    service: NotificationService = Depends(get_notification_service),
):
    return {"success": True, "data": {"count": service.unread_count(current_user["id"])}}


@router.put("/read")
async def mark_read(
    payload: MarkReadRequest,
    current_user: dict = Depends(get_current_user),
    service: NotificationService = Depends(get_notification_service),
):
    # 中文注释: 只会更新属于当前用户的记录，别人的 id 静默忽略
    updated = service.mark_read(current_user["id"], payload.notification_ids)
    return {"success": True, "data": {"updated": updated}}


@router.put("/read-all")
async def mark_all_read(
    current_user: dict = Depends(get_current_user),
    service: NotificationService = Depends(get_notification_service),
):
    updated = service.mark_all_read(current_user["id"])
    return {"success": True, "data": {"updated": updated}}
