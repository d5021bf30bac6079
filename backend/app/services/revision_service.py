"""
Revision Service: 修订稿 / 终稿提交的纯计算部分

中文注释:
1. 先归档再覆盖：快照必须在任何字段被改写之前生成，否则历史丢失。
2. previous_versions 只追加，已归档条目永不修改。
3. 终稿（camera-ready）与普通修订稿分开处理：终稿不重置审稿人，需要编辑显式重新指派。
4. 本模块不读写数据库，返回 patch 由 ManuscriptLifecycleService 在 CAS 更新里落库。
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional

from app.models.decision import Decision
from app.models.manuscript import ManuscriptStatus, normalize_status
from app.models.revision import ArchivedVersion
from app.models.schemas import FileRef, Manuscript


@dataclass(frozen=True)
class RevisionPlan:
    new_version: int
    status: ManuscriptStatus
    is_final: bool
    patch: Dict[str, Any]


class RevisionManager:
    """Revision 工作流的核心计算"""

    @staticmethod
    def is_final_submission(status: ManuscriptStatus | str | None, decision: Optional[str]) -> bool:
        current = normalize_status(status)
        if current in {
            ManuscriptStatus.FINAL_SUBMISSION_REQUESTED,
            ManuscriptStatus.ACCEPTED,
            ManuscriptStatus.FINAL_SUBMITTED,
        }:
            return True
        text = str(decision or "").strip()
        if not text:
            return False
        # 大小写敏感："Final" 才算终稿信号
        return "Final" in text or text == Decision.ACCEPT.value

    @staticmethod
    def archive_snapshot(manuscript: Manuscript, archived_at: datetime) -> ArchivedVersion:
        files = [f.model_dump(mode="json") for f in manuscript.files]
        return ArchivedVersion(
            version=manuscript.version,
            file_ref=files[0] if files else None,
            files=files,
            submitted_at=manuscript.submitted_at,
            decision=manuscript.decision,
            decision_reason=manuscript.decision_reason,
            decision_comments=manuscript.decision_comments,
            archived_at=archived_at,
        )

    def plan_revision(
        self,
        manuscript: Manuscript,
        *,
        manuscript_file: FileRef,
        response_file: Optional[FileRef] = None,
        now: datetime,
    ) -> RevisionPlan:
        """
        计算修订后的稿件字段。

        中文注释:
        - 归档条目取自调用前的 manuscript（Pydantic 实例，不会被本函数修改）。
        - response_to_reviewers 未上传时清空，避免旧版本的回复信挂在新版本上。
        """
        snapshot = self.archive_snapshot(manuscript, now)
        history = [v.model_dump(mode="json") for v in manuscript.previous_versions]
        history.append(snapshot.model_dump(mode="json"))

        is_final = self.is_final_submission(manuscript.status, manuscript.decision)
        status = ManuscriptStatus.FINAL_SUBMITTED if is_final else ManuscriptStatus.REVISION_SUBMITTED
        new_version = manuscript.version + 1

        patch: Dict[str, Any] = {
            "previous_versions": history,
            "version": new_version,
            "files": [manuscript_file.model_dump(mode="json")],
            "response_to_reviewers": response_file.model_dump(mode="json") if response_file else None,
            "status": status.value,
            "decision": Decision.FINAL_SUBMITTED.value if is_final else None,
            "decision_reason": None,
            "decision_comments": None,
            "submitted_at": now.isoformat(),
            "last_updated_at": now.isoformat(),
        }
        return RevisionPlan(new_version=new_version, status=status, is_final=is_final, patch=patch)
