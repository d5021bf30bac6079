from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from app.lib.api_client import extract_rows, supabase_admin

logger = logging.getLogger("reviewportal.users")


def display_name(user: Dict[str, Any] | None, fallback: str = "") -> str:
    if not user:
        return fallback
    for key in ("full_name", "name", "email"):
        value = str(user.get(key) or "").strip()
        if value:
            return value
    return fallback


class UserDirectory:
    """
    只读访问 user_profiles（账号由身份服务维护）。

    中文注释:
    - 这里的查询全部是“尽力而为”的补全步骤：查不到或查询失败都返回空，
      调用方据此跳过通知等附加步骤，绝不阻塞稿件状态流转。
    """

    TABLE = "user_profiles"

    def __init__(self, client: Any = None) -> None:
        self.client = client if client is not None else supabase_admin

    def get_user(self, user_id: Optional[str]) -> Optional[Dict[str, Any]]:
        uid = str(user_id or "").strip()
        if not uid:
            return None
        try:
            resp = (
                self.client.table(self.TABLE)
                .select("id,email,full_name,roles")
                .eq("id", uid)
                .limit(1)
                .execute()
            )
        except Exception as e:
            logger.warning("[UserDirectory] load user %s failed (ignored): %s", uid, e)
            return None
        rows = extract_rows(resp)
        return rows[0] if rows else None

    def find_by_email(self, email: Optional[str]) -> Optional[Dict[str, Any]]:
        normalized = str(email or "").strip().lower()
        if not normalized:
            return None
        try:
            resp = (
                self.client.table(self.TABLE)
                .select("id,email,full_name,roles")
                .eq("email", normalized)
                .limit(1)
                .execute()
            )
        except Exception as e:
            logger.warning("[UserDirectory] lookup by email failed (ignored): %s", e)
            return None
        rows = extract_rows(resp)
        return rows[0] if rows else None

    def list_by_role(self, role: str) -> List[Dict[str, Any]]:
        role_key = str(role or "").strip().lower()
        if not role_key:
            return []
        try:
            resp = (
                self.client.table(self.TABLE)
                .select("id,email,full_name,roles")
                .contains("roles", [role_key])
                .execute()
            )
        except Exception as e:
            logger.warning("[UserDirectory] list role=%s failed (ignored): %s", role_key, e)
            return []
        return extract_rows(resp)
