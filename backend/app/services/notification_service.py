from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
from uuid import uuid4

from app.core.config import WorkflowConfig
from app.core.mail import EmailService, email_service
from app.lib.api_client import extract_rows, supabase_admin
from app.models.notification import NotificationTone

logger = logging.getLogger("reviewportal.notifications")


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class NotificationService:
    """
    通知网关：站内信 + 尽力而为的邮件

    中文注释:
    1) 先写站内通知（notifications 表，按收件人可查询，新的在前）。
    2) 再尝试发邮件；邮件失败只记日志，不抛异常，站内通知仍然存在。
    3) 没有重试队列：失败的邮件只留下一行日志。
    """

    TABLE = "notifications"

    def __init__(
        self,
        *,
        client: Any = None,
        email: EmailService | None = None,
        config: WorkflowConfig | None = None,
    ) -> None:
        self.client = client if client is not None else supabase_admin
        self.email = email if email is not None else email_service
        self.config = config or WorkflowConfig.from_env()

    def create_notification(
        self,
        *,
        user_id: str,
        title: str,
        message: str,
        tone: NotificationTone | str = NotificationTone.INFO,
        related_id: Optional[str] = None,
    ) -> Optional[Dict[str, Any]]:
        payload = {
            "id": str(uuid4()),
            "user_id": str(user_id),
            "title": title,
            "message": message,
            "tone": NotificationTone(tone).value,
            "related_id": str(related_id) if related_id else None,
            "is_read": False,
            "created_at": _utc_now_iso(),
        }
        try:
            rows = extract_rows(self.client.table(self.TABLE).insert(payload).execute())
            return rows[0] if rows else payload
        except Exception as e:
            logger.error("[Notifications] create for user=%s failed: %s", user_id, e)
            return None

    async def notify(
        self,
        *,
        user_id: str,
        email: Optional[str],
        name: Optional[str],
        title: str,
        message: str,
        tone: NotificationTone | str = NotificationTone.INFO,
        related_id: Optional[str] = None,
    ) -> None:
        self.create_notification(
            user_id=user_id,
            title=title,
            message=message,
            tone=tone,
            related_id=related_id,
        )

        if not email:
            return
        try:
            sent = await asyncio.to_thread(
                self.email.send_template_email,
                to_email=email,
                subject=title,
                template_name="notification.txt",
                context={
                    "name": name,
                    "message": message,
                    "portal_name": self.config.portal_name,
                },
            )
            if sent:
                logger.info("[Notification Email] sent to %s: %s", email, title)
        except Exception as e:
            logger.warning("[Notification Email] send to %s failed: %s", email, e)

    def list_for_user(self, user_id: str, *, limit: Optional[int] = None) -> List[Dict[str, Any]]:
        page = limit or self.config.notification_page_size
        resp = (
            self.client.table(self.TABLE)
            .select("*")
            .eq("user_id", str(user_id))
            .order("created_at", desc=True)
            .limit(page)
            .execute()
        )
        return extract_rows(resp)

    def unread_count(self, user_id: str) -> int:
        resp = (
            self.client.table(self.TABLE)
            .select("id")
            .eq("user_id", str(user_id))
            .eq("is_read", False)
            .execute()
        )
        return len(extract_rows(resp))

    def mark_read(self, user_id: str, notification_ids: List[str]) -> int:
        ids = [str(x) for x in notification_ids if str(x).strip()]
        if not ids:
            return 0
        # user_id 过滤保证只能标记自己的通知
        resp = (
            self.client.table(self.TABLE)
            .update({"is_read": True})
            .eq("user_id", str(user_id))
            .in_("id", ids)
            .execute()
        )
        return len(extract_rows(resp))

    def mark_all_read(self, user_id: str) -> int:
        resp = (
            self.client.table(self.TABLE)
            .update({"is_read": True})
            .eq("user_id", str(user_id))
            .eq("is_read", False)
            .execute()
        )
        return len(extract_rows(resp))
