import logging
import os
from typing import Any, Callable, Dict, Iterable, List, Set

from fastapi import Depends, HTTPException

from app.core.auth_utils import get_current_user
from app.lib.api_client import supabase

logger = logging.getLogger("reviewportal.auth")

# 可以操作任意稿件编辑流程的角色
EDITORIAL_ROLES = {"editor", "editor_in_chief", "admin"}
# 可以把稿件排进期刊卷期（发表）的角色
PUBLISHING_ROLES = {"publisher", "editor_in_chief", "admin"}

DEFAULT_ROLES = ["author"]
BOOTSTRAP_ADMIN_ROLES = ["admin", "editor", "reviewer", "author"]


def _admin_emails() -> Set[str]:
    return {e.strip().lower() for e in os.environ.get("ADMIN_EMAILS", "").split(",") if e.strip()}


def _roles_for_new_user(email: Any) -> List[str]:
    if email and str(email).strip().lower() in _admin_emails():
        return list(BOOTSTRAP_ADMIN_ROLES)
    return list(DEFAULT_ROLES)


def profile_roles(profile: Dict[str, Any]) -> Set[str]:
    return {str(r).strip().lower() for r in (profile.get("roles") or []) if str(r).strip()}


def _merge_bootstrap_roles(user_id: str, profile: Dict[str, Any], wanted: List[str]) -> Dict[str, Any]:
    current = list(profile.get("roles") or [])
    merged = list(dict.fromkeys([*wanted, *current]))
    if merged != current:
        supabase.table("user_profiles").update({"roles": merged}).eq("id", user_id).execute()
        profile = {**profile, "roles": merged}
    return profile


async def get_current_profile(current_user: Dict[str, Any] = Depends(get_current_user)) -> Dict[str, Any]:
    """
    当前用户的 user_profiles 记录（含 roles）。

    中文注释:
    - 角色由 user_profiles 表管理；身份服务只负责签发 token。
    - 首次访问自动建档，默认 roles=['author']。
    - ADMIN_EMAILS 里的邮箱自动补齐 admin/editor/reviewer（本地/演示环境引导用）。
    - 读写 profile 失败时降级为只含默认角色的最小 profile，不阻断请求。
    """
    user_id = str(current_user["id"])
    email = current_user.get("email")
    roles = _roles_for_new_user(email)

    try:
        rows = supabase.table("user_profiles").select("*").eq("id", user_id).execute().data or []
        if rows:
            profile = rows[0]
            if roles == BOOTSTRAP_ADMIN_ROLES:
                profile = _merge_bootstrap_roles(user_id, profile, roles)
            return profile

        created = supabase.table("user_profiles").insert({"id": user_id, "email": email, "roles": roles}).execute()
        return (created.data or [{"id": user_id, "email": email, "roles": roles}])[0]
    except Exception as e:
        logger.warning("[Auth] profile load/create failed for %s, using defaults: %s", user_id, e)
        return {"id": user_id, "email": email, "roles": roles}


def require_any_role(required: Iterable[str]) -> Callable[..., Any]:
    allowed = {str(r).strip().lower() for r in required}

    async def _dep(profile: Dict[str, Any] = Depends(get_current_profile)) -> Dict[str, Any]:
        if profile_roles(profile).isdisjoint(allowed):
            raise HTTPException(status_code=403, detail="Insufficient role")
        return profile

    return _dep
