from __future__ import annotations

from typing import Any, Dict, List, Optional
from uuid import UUID

from fastapi import HTTPException
from postgrest.exceptions import APIError

from app.lib.api_client import extract_rows, supabase_admin
from app.models.schemas import Manuscript, ManuscriptListFilters

_UNIQUE_VIOLATION = "23505"


def is_valid_id(value: Any) -> bool:
    try:
        UUID(str(value))
    except (TypeError, ValueError):
        return False
    return True


class ManuscriptRepository:
    """
    manuscripts 表读写。

    中文注释:
    - 所有更新都带 lock_version 比较（乐观锁）：WHERE id=? AND lock_version=?，0 行命中即 409。
    - 非法 id（非 UUID）直接视为不存在，不把 PostgREST 的类型错误暴露给调用方。
    """

    TABLE = "manuscripts"

    def __init__(self, client: Any = None) -> None:
        self.client = client if client is not None else supabase_admin

    def get(self, manuscript_id: str) -> Optional[Manuscript]:
        if not is_valid_id(manuscript_id):
            return None
        resp = self.client.table(self.TABLE).select("*").eq("id", str(manuscript_id)).limit(1).execute()
        rows = extract_rows(resp)
        return Manuscript.model_validate(rows[0]) if rows else None

    def require(self, manuscript_id: str) -> Manuscript:
        manuscript = self.get(manuscript_id)
        if manuscript is None:
            raise HTTPException(status_code=404, detail="Manuscript not found")
        return manuscript

    def insert(self, row: Dict[str, Any]) -> Manuscript:
        try:
            rows = extract_rows(self.client.table(self.TABLE).insert(row).execute())
        except APIError as e:
            if str(getattr(e, "code", "") or "") == _UNIQUE_VIOLATION:
                raise HTTPException(status_code=409, detail="Display id already taken, please retry") from e
            raise
        return Manuscript.model_validate(rows[0] if rows else row)

    def update(self, manuscript: Manuscript, patch: Dict[str, Any]) -> Manuscript:
        expected = manuscript.lock_version
        payload = dict(patch)
        payload["lock_version"] = expected + 1
        resp = (
            self.client.table(self.TABLE)
            .update(payload)
            .eq("id", manuscript.id)
            .eq("lock_version", expected)
            .execute()
        )
        rows = extract_rows(resp)
        if not rows:
            raise HTTPException(
                status_code=409,
                detail="Manuscript was modified concurrently, please reload and retry",
            )
        return Manuscript.model_validate(rows[0])

    def list(self, filters: Optional[ManuscriptListFilters] = None) -> List[Manuscript]:
        f = filters or ManuscriptListFilters()
        query = self.client.table(self.TABLE).select("*")
        if f.author_id:
            query = query.eq("author_id", f.author_id)
        if f.status is not None:
            query = query.eq("status", f.status.value)
        if f.journal_ids:
            query = query.in_("journal_id", f.journal_ids)
        if f.editor_id:
            query = query.eq("editor_id", f.editor_id)
        resp = query.order("submitted_at", desc=True).execute()
        return [Manuscript.model_validate(r) for r in extract_rows(resp)]

    def find_by_co_author_email(self, email: str) -> List[Manuscript]:
        resp = (
            self.client.table(self.TABLE)
            .select("*")
            .contains("co_author_emails", [email])
            .execute()
        )
        return [Manuscript.model_validate(r) for r in extract_rows(resp)]
