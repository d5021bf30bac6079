from __future__ import annotations

from fastapi import HTTPException

from app.core.roles import EDITORIAL_ROLES, profile_roles
from app.models.reviews import Review
from app.models.schemas import Manuscript
from app.services.manuscript_service import ManuscriptLifecycleService
from app.services.notification_service import NotificationService
from app.services.storage_service import BlobStore


# 中文注释: 服务按请求创建；测试通过 app.dependency_overrides 替换这三个工厂。
def get_manuscript_service() -> ManuscriptLifecycleService:
    return ManuscriptLifecycleService()


def get_notification_service() -> NotificationService:
    return NotificationService()


def get_blob_store() -> BlobStore:
    return BlobStore()


def is_editorial(profile: dict) -> bool:
    return bool(profile_roles(profile) & EDITORIAL_ROLES)


def is_manuscript_author(profile: dict, manuscript: Manuscript) -> bool:
    user_id = str(profile.get("id") or "")
    if not user_id:
        return False
    if manuscript.author_id == user_id:
        return True
    return any(co.is_registered and co.linked_user_id == user_id for co in manuscript.co_authors)


def ensure_can_view(profile: dict, manuscript: Manuscript) -> None:
    if is_editorial(profile) or "publisher" in profile_roles(profile):
        return
    if is_manuscript_author(profile, manuscript):
        return
    user_id = str(profile.get("id") or "")
    if any(entry.reviewer_id == user_id for entry in manuscript.reviewers):
        return
    raise HTTPException(status_code=403, detail="Forbidden")


def ensure_review_owner(profile: dict, review: Review) -> None:
    # 审稿回复/提交只能由被邀请的审稿人本人操作（admin 可代操作）
    if review.reviewer_id == str(profile.get("id") or ""):
        return
    if "admin" in profile_roles(profile):
        return
    raise HTTPException(status_code=403, detail="Only the invited reviewer can act on this review")
