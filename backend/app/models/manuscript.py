from __future__ import annotations

from enum import Enum


class ManuscriptStatus(str, Enum):
    """
    稿件生命周期状态枚举。

    中文注释:
    - 数据库存储的是 value（沿用门户既有的展示文案，如 "Under Review"）。
    - 所有状态写入都必须经过 allowed_next 校验，服务层不允许任意赋值。
    """

    SUBMITTED = "Submitted"
    UNDER_REVIEW = "Under Review"
    REVISION_REQUIRED = "Revision Required"
    REVISION_SUBMITTED = "Revision Submitted"
    DECISION_MADE = "Decision Made"
    ACCEPTED = "Accepted"
    REJECTED = "Rejected"
    DESK_REJECTED = "Desk Rejected"
    FINAL_SUBMISSION_REQUESTED = "final_submission_requested"
    FINAL_SUBMITTED = "final_submitted"
    READY_FOR_PUBLICATION = "ready_for_publication"
    PUBLISHED = "Published"

    @classmethod
    def decision_statuses(cls) -> set["ManuscriptStatus"]:
        """Statuses an editor's verdict can produce."""
        return {
            cls.ACCEPTED,
            cls.REJECTED,
            cls.DESK_REJECTED,
            cls.REVISION_REQUIRED,
            cls.FINAL_SUBMISSION_REQUESTED,
            cls.READY_FOR_PUBLICATION,
            cls.DECISION_MADE,
        }

    @classmethod
    def allowed_next(cls, current: "ManuscriptStatus | str | None") -> set["ManuscriptStatus"]:
        """
        状态机规则必须显性可见。

        - submitted/under_review/revision_* -> under_review, revision_submitted, final_submitted, any verdict
        - decision_made -> under_review, revision_submitted, final_submitted, any verdict
        - accepted / final_submission_requested -> final_submitted, any verdict (accepted may publish)
        - final_submitted -> under_review (explicit reassign), final_submitted, published, any verdict
        - ready_for_publication -> published, any verdict
        - rejected / desk_rejected -> a new verdict only (reconsideration)
        - published -> terminal
        """
        status = normalize_status(current)
        if status is None:
            return set()
        verdicts = cls.decision_statuses()
        if status in {cls.SUBMITTED, cls.UNDER_REVIEW, cls.REVISION_REQUIRED, cls.REVISION_SUBMITTED}:
            return {cls.UNDER_REVIEW, cls.REVISION_SUBMITTED, cls.FINAL_SUBMITTED} | verdicts
        if status == cls.DECISION_MADE:
            return {cls.UNDER_REVIEW, cls.REVISION_SUBMITTED, cls.FINAL_SUBMITTED} | verdicts
        if status == cls.ACCEPTED:
            return {cls.FINAL_SUBMITTED, cls.PUBLISHED} | verdicts
        if status == cls.FINAL_SUBMISSION_REQUESTED:
            return {cls.FINAL_SUBMITTED} | verdicts
        if status == cls.FINAL_SUBMITTED:
            return {cls.UNDER_REVIEW, cls.FINAL_SUBMITTED, cls.PUBLISHED} | verdicts
        if status == cls.READY_FOR_PUBLICATION:
            return {cls.PUBLISHED} | verdicts
        if status in {cls.REJECTED, cls.DESK_REJECTED}:
            return set(verdicts)
        return set()

    @classmethod
    def can_transition(cls, current: "ManuscriptStatus | str | None", target: "ManuscriptStatus | str") -> bool:
        to_status = normalize_status(target)
        return to_status is not None and to_status in cls.allowed_next(current)


def normalize_status(value: "ManuscriptStatus | str | None") -> ManuscriptStatus | None:
    if value is None:
        return None
    if isinstance(value, ManuscriptStatus):
        return value
    v = str(value).strip()
    if not v:
        return None
    try:
        return ManuscriptStatus(v)
    except ValueError:
        pass
    # 兼容大小写/下划线差异（历史数据里出现过 "under_review"、"ACCEPTED"）
    folded = v.lower().replace("_", " ")
    for member in ManuscriptStatus:
        if member.value.lower().replace("_", " ") == folded:
            return member
    return None
