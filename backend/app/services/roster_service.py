from __future__ import annotations

from typing import Any, Iterable, List, Sequence

from app.models.reviews import Review, RosterEntry, RosterStatus


class RosterMirror:
    """
    稿件 reviewers 数组（花名册）= reviews 表的投影。

    中文注释:
    - 花名册永远由审稿记录推导，不单独维护，因此不会与 reviews 表各说各话。
    - 投影保留全部历史版本（重新指派后同一审稿人会出现多条，按指派时间排列）。
    """

    @staticmethod
    def project(reviews: Iterable[Review]) -> List[RosterEntry]:
        ordered = sorted(reviews, key=lambda r: r.assigned_at)
        return [
            RosterEntry(
                reviewer_id=r.reviewer_id,
                name=r.reviewer_name,
                status=RosterStatus(r.status.value),
                review_id=r.id,
                version=r.manuscript_version,
            )
            for r in ordered
        ]

    @classmethod
    def as_rows(cls, reviews: Iterable[Review]) -> List[dict[str, Any]]:
        return [entry.model_dump(mode="json") for entry in cls.project(reviews)]

    @staticmethod
    def orphans(roster: Sequence[RosterEntry], reviews: Sequence[Review]) -> tuple[set[str], set[str]]:
        """
        一致性检查：返回 (花名册里有、reviews 表没有的 review_id, reviews 表有、花名册没有的 id)。
        两边都为空才算一致。
        """
        roster_ids = {e.review_id for e in roster}
        ledger_ids = {r.id for r in reviews}
        return roster_ids - ledger_ids, ledger_ids - roster_ids
