from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Optional, Protocol

from app.core.config import WorkflowConfig
from app.lib.api_client import extract_rows, supabase_admin


@dataclass(frozen=True)
class DisplayId:
    value: str
    year: int
    seq: int


def format_display_id(prefix: str, year: int, seq: int) -> str:
    return f"{prefix}-{year}-{seq:03d}"


class DisplayIdGenerator(Protocol):
    def next_id(self, at: Optional[datetime] = None) -> DisplayId: ...


class SupabaseDisplayIdGenerator:
    """
    人类可读编号：PREFIX-YYYY-NNN，每个自然年从 001 重新开始。

    中文注释:
    - 取当年最大 display_seq + 1；display_year/display_seq 分列存储，排序不受字符串补零影响。
    - 并发下可能生成同一编号，由 manuscripts.display_id 唯一索引拒绝后者（调用方得到 409）。
    """

    def __init__(self, client: Any = None, *, prefix: Optional[str] = None) -> None:
        self.client = client if client is not None else supabase_admin
        self.prefix = prefix or WorkflowConfig.from_env().display_id_prefix

    def next_id(self, at: Optional[datetime] = None) -> DisplayId:
        year = (at or datetime.now(timezone.utc)).year
        resp = (
            self.client.table("manuscripts")
            .select("display_seq")
            .eq("display_year", year)
            .order("display_seq", desc=True)
            .limit(1)
            .execute()
        )
        rows = extract_rows(resp)
        last = int(rows[0].get("display_seq") or 0) if rows else 0
        seq = last + 1
        return DisplayId(value=format_display_id(self.prefix, year, seq), year=year, seq=seq)
