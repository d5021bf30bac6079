"""
Decision engine.

中文注释:
- 纯函数：输入编辑的决定文本，输出 (目标状态, 通知标题, 通知正文, 通知语气)。
- 不做持久化、不发通知；这些由 ManuscriptLifecycleService 负责，方便单测覆盖映射表。
"""

from __future__ import annotations

from typing import Optional

from app.models.decision import Decision, DecisionOutcome
from app.models.manuscript import ManuscriptStatus
from app.models.notification import NotificationTone

_EXACT: dict[str, tuple[Decision, ManuscriptStatus]] = {
    Decision.ACCEPT.value.lower(): (Decision.ACCEPT, ManuscriptStatus.ACCEPTED),
    Decision.REJECT.value.lower(): (Decision.REJECT, ManuscriptStatus.REJECTED),
    Decision.DESK_REJECT.value.lower(): (Decision.DESK_REJECT, ManuscriptStatus.DESK_REJECTED),
    Decision.REQUEST_FINAL_SUBMISSION.value.lower(): (
        Decision.REQUEST_FINAL_SUBMISSION,
        ManuscriptStatus.FINAL_SUBMISSION_REQUESTED,
    ),
    Decision.SEND_TO_PUBLISHER.value.lower(): (
        Decision.SEND_TO_PUBLISHER,
        ManuscriptStatus.READY_FOR_PUBLICATION,
    ),
}

_SUCCESS = {
    ManuscriptStatus.ACCEPTED,
    ManuscriptStatus.FINAL_SUBMISSION_REQUESTED,
    ManuscriptStatus.READY_FOR_PUBLICATION,
}
_ERROR = {ManuscriptStatus.REJECTED, ManuscriptStatus.DESK_REJECTED}


def tone_for_status(status: ManuscriptStatus) -> NotificationTone:
    """语气只由结果状态决定"""
    if status in _SUCCESS:
        return NotificationTone.SUCCESS
    if status in _ERROR:
        return NotificationTone.ERROR
    if status == ManuscriptStatus.REVISION_REQUIRED:
        return NotificationTone.WARNING
    return NotificationTone.INFO


def map_decision(decision: str) -> tuple[str, ManuscriptStatus]:
    """
    Map a verdict onto (stored decision label, resulting status).

    Known labels match case-insensitively and are stored in canonical form; any label mentioning
    "revision" (Minor Revision, Major Revision, ...) requires a revision; anything else is kept
    verbatim under the generic Decision Made status.
    """
    label = str(decision or "").strip()
    if not label:
        raise ValueError("decision must not be blank")

    exact = _EXACT.get(label.lower())
    if exact is not None:
        canonical, status = exact
        return canonical.value, status
    if "revision" in label.lower():
        return label, ManuscriptStatus.REVISION_REQUIRED
    return label, ManuscriptStatus.DECISION_MADE


def _message_for(decision: str, status: ManuscriptStatus) -> str:
    if status == ManuscriptStatus.FINAL_SUBMISSION_REQUESTED:
        return "Your paper has been provisionally accepted. Please submit the final camera-ready version."
    if status == ManuscriptStatus.READY_FOR_PUBLICATION:
        return "Your paper has been sent to the publisher for final publication."
    return f"A decision has been made on your paper: {decision}. Please check your dashboard for details."


def evaluate_decision(
    decision: str,
    reason: Optional[str] = None,
    comments: Optional[str] = None,
) -> DecisionOutcome:
    """
    决定 -> 状态/通知 的完整映射。

    comments 只随稿件持久化（给作者看的意见），不进入通知正文。
    """
    label, status = map_decision(decision)
    message = _message_for(label, status)
    reason_text = str(reason or "").strip()
    if reason_text:
        message = f"{message} Reason: {reason_text}"

    return DecisionOutcome(
        decision=label,
        status=status,
        title=f"Decision: {label}",
        message=message,
        tone=tone_for_status(status),
    )
