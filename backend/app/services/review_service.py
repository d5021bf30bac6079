from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional
from uuid import uuid4

from fastapi import HTTPException
from postgrest.exceptions import APIError

from app.lib.api_client import extract_rows, supabase_admin
from app.models.reviews import Review, ReviewStatus
from app.schemas.review import ReviewSubmission
from app.services.manuscript_store import is_valid_id

logger = logging.getLogger("reviewportal.reviews")

_UNIQUE_VIOLATION = "23505"


class ReviewLedgerService:
    """
    审稿记录（reviews 表）读写。

    中文注释:
    - reviews 表是审稿状态的唯一事实来源；稿件上的 reviewers 数组只是它的投影（见 RosterMirror）。
    - 本类只做单表读写，状态前置校验（能否邀请/能否提交）由 ManuscriptLifecycleService 负责。
    - 读写失败直接抛出，由中间件统一转 500；唯一约束冲突（跨进程重复邀请）例外，转 409。
    - 非法 review id（非 UUID）视为不存在。
    """

    TABLE = "reviews"

    def __init__(self, client: Any = None) -> None:
        self.client = client if client is not None else supabase_admin

    def _to_review(self, row: Dict[str, Any]) -> Review:
        return Review.model_validate(row)

    def create(
        self,
        *,
        manuscript_id: str,
        manuscript_version: int,
        reviewer_id: str,
        reviewer_name: str,
        due_at: datetime,
        assigned_at: datetime,
    ) -> Review:
        review = Review(
            id=str(uuid4()),
            manuscript_id=str(manuscript_id),
            manuscript_version=manuscript_version,
            reviewer_id=str(reviewer_id),
            reviewer_name=reviewer_name or "",
            status=ReviewStatus.INVITED,
            assigned_at=assigned_at,
            due_at=due_at,
        )
        try:
            rows = extract_rows(
                self.client.table(self.TABLE).insert(review.model_dump(mode="json")).execute()
            )
        except APIError as e:
            if str(getattr(e, "code", "") or "") == _UNIQUE_VIOLATION:
                raise HTTPException(
                    status_code=409,
                    detail="Reviewer already has an active assignment for this manuscript version",
                ) from e
            raise
        return self._to_review(rows[0]) if rows else review

    def get(self, review_id: str) -> Optional[Review]:
        if not is_valid_id(review_id):
            return None
        resp = self.client.table(self.TABLE).select("*").eq("id", str(review_id)).limit(1).execute()
        rows = extract_rows(resp)
        return self._to_review(rows[0]) if rows else None

    def list_for_manuscript(self, manuscript_id: str) -> List[Review]:
        """按指派时间正序（花名册展示顺序）"""
        resp = (
            self.client.table(self.TABLE)
            .select("*")
            .eq("manuscript_id", str(manuscript_id))
            .order("assigned_at")
            .execute()
        )
        return [self._to_review(r) for r in extract_rows(resp)]

    def list(self, *, reviewer_id: Optional[str] = None, manuscript_id: Optional[str] = None) -> List[Review]:
        query = self.client.table(self.TABLE).select("*")
        if reviewer_id:
            query = query.eq("reviewer_id", str(reviewer_id))
        if manuscript_id:
            query = query.eq("manuscript_id", str(manuscript_id))
        resp = query.order("assigned_at", desc=True).execute()
        return [self._to_review(r) for r in extract_rows(resp)]

    def find_active(self, *, manuscript_id: str, manuscript_version: int, reviewer_id: str) -> Optional[Review]:
        resp = (
            self.client.table(self.TABLE)
            .select("*")
            .eq("manuscript_id", str(manuscript_id))
            .eq("manuscript_version", manuscript_version)
            .eq("reviewer_id", str(reviewer_id))
            .in_("status", sorted(s.value for s in ReviewStatus.active()))
            .execute()
        )
        rows = extract_rows(resp)
        return self._to_review(rows[0]) if rows else None

    def _update(self, review_id: str, patch: Dict[str, Any]) -> Review:
        rows = extract_rows(self.client.table(self.TABLE).update(patch).eq("id", str(review_id)).execute())
        if not rows:
            raise LookupError(f"review {review_id} disappeared during update")
        return self._to_review(rows[0])

    def record_response(
        self,
        review: Review,
        *,
        status: ReviewStatus,
        reason: Optional[str],
        responded_at: datetime,
    ) -> Review:
        patch: Dict[str, Any] = {
            "status": status.value,
            "responded_at": responded_at.isoformat(),
            # 接受时清掉上一次拒绝留下的理由（最后一次回复为准）
            "decline_reason": (reason or None) if status == ReviewStatus.DECLINED else None,
        }
        return self._update(review.id, patch)

    def complete(self, review: Review, submission: ReviewSubmission, *, completed_at: datetime) -> Review:
        patch = {
            "status": ReviewStatus.COMPLETED.value,
            "scores": submission.scores.model_dump(mode="json"),
            "recommendation": submission.recommendation,
            "comments_to_author": submission.comments_to_author,
            "confidential_comments": submission.confidential_comments,
            "completed_at": completed_at.isoformat(),
        }
        return self._update(review.id, patch)

    def delete_for_reviewer(self, *, manuscript_id: str, reviewer_id: str) -> List[str]:
        resp = (
            self.client.table(self.TABLE)
            .delete()
            .eq("manuscript_id", str(manuscript_id))
            .eq("reviewer_id", str(reviewer_id))
            .execute()
        )
        return [str(r.get("id")) for r in extract_rows(resp)]

    def delete(self, review_id: str) -> None:
        self.client.table(self.TABLE).delete().eq("id", str(review_id)).execute()
