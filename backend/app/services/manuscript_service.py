"""
Manuscript Lifecycle Service: 投稿 → 审稿 → 决定 → 修订 → 出版 的全部写操作

中文注释:
1. 所有状态变更都走 ManuscriptStatus.can_transition，非法跳转一律 409。
2. 同一稿件的写操作在进程内串行（manuscript_locks），跨进程由 lock_version 乐观锁兜底。
3. reviews 表是审稿状态的唯一事实来源；稿件 reviewers 数组在同一次 CAS 更新里按投影重写。
4. 通知在锁外、状态落库之后逐个 await；通知/邮件失败只记日志，不回滚已提交的状态。
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Iterable, List, Optional
from urllib.parse import quote
from uuid import uuid4

from fastapi import HTTPException

from app.core.config import WorkflowConfig
from app.core.locks import KeyedAsyncLock, manuscript_locks
from app.core.mail import EmailService, email_service
from app.lib.api_client import supabase_admin
from app.models.decision import Decision, DecisionOutcome
from app.models.manuscript import ManuscriptStatus
from app.models.notification import NotificationTone
from app.models.reviews import Review, ReviewStatus
from app.models.revision import RevisionSubmitResponse
from app.models.schemas import (
    CoAuthor,
    FileRef,
    Manuscript,
    ManuscriptListFilters,
    ManuscriptSubmission,
    SubmissionResult,
)
from app.schemas.review import ReviewSubmission
from app.services.decision_service import evaluate_decision
from app.services.display_id_service import DisplayIdGenerator, SupabaseDisplayIdGenerator
from app.services.manuscript_store import ManuscriptRepository, is_valid_id
from app.services.notification_service import NotificationService
from app.services.review_service import ReviewLedgerService
from app.services.revision_service import RevisionManager
from app.services.roster_service import RosterMirror
from app.services.user_service import UserDirectory, display_name

logger = logging.getLogger("reviewportal.manuscripts")


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class ManuscriptLifecycleService:
    def __init__(
        self,
        *,
        client: Any = None,
        notifications: Optional[NotificationService] = None,
        display_ids: Optional[DisplayIdGenerator] = None,
        directory: Optional[UserDirectory] = None,
        email: Optional[EmailService] = None,
        config: Optional[WorkflowConfig] = None,
        locks: Optional[KeyedAsyncLock] = None,
    ) -> None:
        self.client = client if client is not None else supabase_admin
        self.config = config or WorkflowConfig.from_env()
        self.manuscripts = ManuscriptRepository(self.client)
        self.reviews = ReviewLedgerService(self.client)
        self.revisions = RevisionManager()
        self.notifications = notifications or NotificationService(client=self.client, config=self.config)
        self.display_ids = display_ids or SupabaseDisplayIdGenerator(
            self.client, prefix=self.config.display_id_prefix
        )
        self.directory = directory or UserDirectory(self.client)
        self.email = email if email is not None else email_service
        self.locks = locks if locks is not None else manuscript_locks

    # ------------------------------------------------------------------ helpers

    @staticmethod
    def _ensure_transition(manuscript: Manuscript, target: ManuscriptStatus) -> None:
        if not ManuscriptStatus.can_transition(manuscript.status, target):
            raise HTTPException(
                status_code=409,
                detail=f"Cannot move manuscript from '{manuscript.status.value}' to '{target.value}'",
            )

    def _commit(self, manuscript: Manuscript, patch: Dict[str, Any], *, created: Iterable[Review] = ()) -> Manuscript:
        """
        CAS 写稿件；若同时新建了审稿记录而 CAS 冲突，删除这些记录再抛 409，保证不留孤儿。
        """
        try:
            return self.manuscripts.update(manuscript, patch)
        except HTTPException as e:
            if e.status_code == 409:
                for review in created:
                    self.reviews.delete(review.id)
            raise

    def _roster_patch(self, manuscript_id: str, now: datetime) -> Dict[str, Any]:
        return {
            "reviewers": RosterMirror.as_rows(self.reviews.list_for_manuscript(manuscript_id)),
            "last_updated_at": now.isoformat(),
        }

    def _sync_roster(self, manuscript_id: str, now: datetime) -> None:
        """只刷新花名册：冲突时读路径会重新投影，这里不让整个操作失败"""
        manuscript = self.manuscripts.get(manuscript_id)
        if manuscript is None:
            logger.warning("[Roster] manuscript %s missing, roster sync skipped", manuscript_id)
            return
        try:
            self.manuscripts.update(manuscript, self._roster_patch(manuscript_id, now))
        except HTTPException as e:
            if e.status_code != 409:
                raise
            logger.warning("[Roster] concurrent update on %s, roster will be re-projected on read", manuscript_id)

    async def _notify_user(
        self,
        user_id: Optional[str],
        *,
        title: str,
        message: str,
        tone: NotificationTone,
        related_id: Optional[str],
        fallback_name: str = "",
    ) -> bool:
        if not user_id:
            return False
        user = self.directory.get_user(user_id)
        if not user:
            logger.warning("[Notify] user %s not found, '%s' skipped", user_id, title)
            return False
        await self.notifications.notify(
            user_id=str(user_id),
            email=user.get("email"),
            name=display_name(user, fallback_name),
            title=title,
            message=message,
            tone=tone,
            related_id=related_id,
        )
        return True

    async def notify_all_editors(
        self,
        *,
        title: str,
        message: str,
        tone: NotificationTone = NotificationTone.INFO,
        related_id: Optional[str] = None,
        role: Optional[str] = None,
    ) -> int:
        """
        按角色逐个通知（非事务：中途失败时已发出的通知保留）。
        """
        sent = 0
        for editor in self.directory.list_by_role(role or self.config.editor_role):
            editor_id = editor.get("id")
            if not editor_id:
                continue
            await self.notifications.notify(
                user_id=str(editor_id),
                email=editor.get("email"),
                name=display_name(editor),
                title=title,
                message=message,
                tone=tone,
                related_id=related_id,
            )
            sent += 1
        return sent

    async def notify_authors(
        self,
        manuscript: Manuscript,
        *,
        title: str,
        message: str,
        tone: NotificationTone,
    ) -> int:
        """主作者 + 已注册的合著者（按 user id 去重）"""
        recipients: List[str] = [manuscript.author_id]
        for co in manuscript.co_authors:
            if co.is_registered and co.linked_user_id and co.linked_user_id not in recipients:
                recipients.append(co.linked_user_id)

        sent = 0
        for user_id in recipients:
            fallback = manuscript.author_name if user_id == manuscript.author_id else ""
            if await self._notify_user(
                user_id,
                title=title,
                message=message,
                tone=tone,
                related_id=manuscript.id,
                fallback_name=fallback,
            ):
                sent += 1
        return sent

    async def _invite_co_authors(self, manuscript: Manuscript, pending: List[CoAuthor]) -> None:
        for co in pending:
            register_url = f"{self.config.frontend_url}/signup?email={quote(co.email)}"
            try:
                await asyncio.to_thread(
                    self.email.send_template_email,
                    to_email=co.email,
                    subject=f"You have been listed as a co-author on {self.config.portal_name}",
                    template_name="coauthor_invitation.txt",
                    context={
                        "name": co.name,
                        "title": manuscript.title,
                        "author_name": manuscript.author_name,
                        "register_url": register_url,
                        "portal_name": self.config.portal_name,
                    },
                )
            except Exception as e:
                logger.warning("[CoAuthor] invitation to %s failed (ignored): %s", co.email, e)

    # ------------------------------------------------------------------ reads

    def get_manuscript(self, manuscript_id: str) -> Manuscript:
        manuscript = self.manuscripts.require(manuscript_id)
        roster = RosterMirror.project(self.reviews.list_for_manuscript(manuscript.id))
        return manuscript.model_copy(update={"reviewers": roster})

    def list_manuscripts(self, filters: Optional[ManuscriptListFilters] = None) -> List[Manuscript]:
        return self.manuscripts.list(filters)

    def get_review(self, review_id: str) -> Review:
        review = self.reviews.get(review_id)
        if review is None:
            raise HTTPException(status_code=404, detail="Review not found")
        return review

    def list_reviews(self, *, reviewer_id: Optional[str] = None, manuscript_id: Optional[str] = None) -> List[Review]:
        return self.reviews.list(reviewer_id=reviewer_id, manuscript_id=manuscript_id)

    # ------------------------------------------------------------------ submission

    async def submit_manuscript(
        self,
        submission: ManuscriptSubmission,
        *,
        files: List[FileRef],
        cover_letter: Optional[FileRef] = None,
    ) -> SubmissionResult:
        if not files:
            raise HTTPException(status_code=422, detail="At least one manuscript file is required")

        co_authors: List[CoAuthor] = []
        unregistered: List[CoAuthor] = []
        for co in submission.co_authors:
            account = self.directory.find_by_email(co.email)
            if account and account.get("id"):
                co_authors.append(co.model_copy(update={"linked_user_id": str(account["id"]), "is_registered": True}))
            else:
                linked = co.model_copy(update={"linked_user_id": None, "is_registered": False})
                co_authors.append(linked)
                unregistered.append(linked)

        # 编号生成与插入之间不能有 await，否则同进程两次投稿会拿到同一序号
        now = _utc_now()
        display = self.display_ids.next_id(now)
        row: Dict[str, Any] = {
            "id": str(uuid4()),
            "display_id": display.value,
            "display_year": display.year,
            "display_seq": display.seq,
            "title": submission.title,
            "abstract": submission.abstract,
            "keywords": submission.keywords,
            "author_id": submission.author_id,
            "author_name": submission.author_name,
            "co_authors": [c.model_dump(mode="json") for c in co_authors],
            "co_author_emails": [c.email for c in co_authors],
            "journal_id": submission.journal_id,
            "journal_name": submission.journal_name,
            "department": submission.department,
            "article_type": submission.article_type,
            "version": 1,
            "previous_versions": [],
            "files": [f.model_dump(mode="json") for f in files],
            "cover_letter": cover_letter.model_dump(mode="json") if cover_letter else None,
            "response_to_reviewers": None,
            "status": ManuscriptStatus.SUBMITTED.value,
            "decision": None,
            "decision_reason": None,
            "decision_comments": None,
            "reviewers": [],
            "submitted_at": now.isoformat(),
            "last_updated_at": now.isoformat(),
            "lock_version": 0,
        }
        manuscript = self.manuscripts.insert(row)
        logger.info("[Submission] %s created (%s) by %s", manuscript.display_id, manuscript.id, manuscript.author_id)

        if unregistered:
            await self._invite_co_authors(manuscript, unregistered)

        await self._notify_user(
            manuscript.author_id,
            title="Submission Received",
            message=(
                f'Your paper titled "{manuscript.title}" has been successfully submitted and is pending '
                f"editorial review. Manuscript ID: {manuscript.display_id}"
            ),
            tone=NotificationTone.INFO,
            related_id=manuscript.id,
            fallback_name=manuscript.author_name,
        )
        await self.notify_all_editors(
            title="New Paper Submission",
            message=f'A new paper titled "{manuscript.title}" has been submitted by {manuscript.author_name}.',
            related_id=manuscript.id,
        )
        return SubmissionResult(manuscript_id=manuscript.id, display_id=manuscript.display_id)

    # ------------------------------------------------------------------ editorial

    async def assign_editor(self, manuscript_id: str, *, editor_id: str, editor_name: str = "") -> Manuscript:
        if not str(editor_id or "").strip():
            raise HTTPException(status_code=422, detail="Editor ID is required")

        async with self.locks.hold(manuscript_id):
            manuscript = self.manuscripts.require(manuscript_id)
            self._ensure_transition(manuscript, ManuscriptStatus.UNDER_REVIEW)
            name = editor_name.strip() or display_name(self.directory.get_user(editor_id))
            now = _utc_now()
            updated = self._commit(
                manuscript,
                {
                    "editor_id": editor_id,
                    "editor_name": name or None,
                    "status": ManuscriptStatus.UNDER_REVIEW.value,
                    "last_updated_at": now.isoformat(),
                },
            )

        await self._notify_user(
            editor_id,
            title="New Editorial Assignment",
            message=(
                f'You have been assigned as the Associate Editor for the paper "{updated.title}". '
                "Please review the submission in your queue."
            ),
            tone=NotificationTone.INFO,
            related_id=updated.id,
        )
        return updated

    async def desk_reject(self, manuscript_id: str, *, reason: Optional[str] = None) -> Manuscript:
        outcome = evaluate_decision(Decision.DESK_REJECT.value, reason)
        async with self.locks.hold(manuscript_id):
            manuscript = self.manuscripts.require(manuscript_id)
            self._ensure_transition(manuscript, outcome.status)
            now = _utc_now()
            updated = self._commit(
                manuscript,
                {
                    "status": outcome.status.value,
                    "decision": outcome.decision,
                    "decision_reason": (reason or "").strip() or None,
                    "decision_at": now.isoformat(),
                    "last_updated_at": now.isoformat(),
                },
            )

        await self.notify_authors(
            updated,
            title="Paper Desk Rejected",
            message="Your paper has been desk rejected. Please check feedback.",
            tone=outcome.tone,
        )
        return updated

    async def record_decision(
        self,
        manuscript_id: str,
        *,
        decision: str,
        reason: Optional[str] = None,
        comments: Optional[str] = None,
    ) -> DecisionOutcome:
        try:
            outcome = evaluate_decision(decision, reason, comments)
        except ValueError as e:
            raise HTTPException(status_code=422, detail=str(e)) from e

        async with self.locks.hold(manuscript_id):
            manuscript = self.manuscripts.require(manuscript_id)
            self._ensure_transition(manuscript, outcome.status)
            now = _utc_now()
            updated = self._commit(
                manuscript,
                {
                    "status": outcome.status.value,
                    "decision": outcome.decision,
                    "decision_reason": (reason or "").strip() or None,
                    "decision_comments": (comments or "").strip() or None,
                    "decision_at": now.isoformat(),
                    "last_updated_at": now.isoformat(),
                },
            )
        logger.info("[Decision] %s -> %s (%s)", updated.display_id, outcome.status.value, outcome.decision)

        await self.notify_authors(updated, title=outcome.title, message=outcome.message, tone=outcome.tone)
        return outcome

    async def assign_to_issue(self, manuscript_id: str, *, issue_id: str) -> Manuscript:
        issue = str(issue_id or "").strip()
        if not issue:
            raise HTTPException(status_code=422, detail="Issue ID is required")

        async with self.locks.hold(manuscript_id):
            manuscript = self.manuscripts.require(manuscript_id)
            self._ensure_transition(manuscript, ManuscriptStatus.PUBLISHED)
            now = _utc_now()
            updated = self._commit(
                manuscript,
                {
                    "issue_id": issue,
                    "status": ManuscriptStatus.PUBLISHED.value,
                    "published_at": now.isoformat(),
                    "last_updated_at": now.isoformat(),
                },
            )

        await self.notify_authors(
            updated,
            title="Paper Published",
            message="Congratulations! Your paper has been assigned to an issue and is now officially published.",
            tone=NotificationTone.SUCCESS,
        )
        return updated

    # ------------------------------------------------------------------ reviewers

    async def invite_reviewer(
        self,
        manuscript_id: str,
        *,
        reviewer_id: str,
        reviewer_name: str = "",
        due_date: Optional[datetime],
    ) -> Review:
        if not str(reviewer_id or "").strip():
            raise HTTPException(status_code=422, detail="Reviewer ID is required")
        if not is_valid_id(reviewer_id):
            raise HTTPException(status_code=422, detail="Reviewer ID must be a valid user id")
        if due_date is None:
            raise HTTPException(status_code=422, detail="Due date is required")

        async with self.locks.hold(manuscript_id):
            manuscript = self.manuscripts.require(manuscript_id)
            self._ensure_transition(manuscript, ManuscriptStatus.UNDER_REVIEW)
            existing = self.reviews.find_active(
                manuscript_id=manuscript.id,
                manuscript_version=manuscript.version,
                reviewer_id=reviewer_id,
            )
            if existing is not None:
                raise HTTPException(
                    status_code=409,
                    detail="Reviewer already has an active assignment for this manuscript version",
                )

            reviewer = self.directory.get_user(reviewer_id)
            name = reviewer_name.strip() or display_name(reviewer)
            now = _utc_now()
            review = self.reviews.create(
                manuscript_id=manuscript.id,
                manuscript_version=manuscript.version,
                reviewer_id=reviewer_id,
                reviewer_name=name,
                due_at=due_date,
                assigned_at=now,
            )
            patch = self._roster_patch(manuscript.id, now)
            patch["status"] = ManuscriptStatus.UNDER_REVIEW.value
            self._commit(manuscript, patch, created=[review])

        await self._notify_user(
            reviewer_id,
            title="Review Request",
            message=(
                f'You have been invited to review the paper titled "{manuscript.title}". Please log in to your '
                f"dashboard to accept or decline this request. Due date: {due_date.date().isoformat()}"
            ),
            tone=NotificationTone.INFO,
            related_id=review.id,
            fallback_name=name,
        )
        return review

    async def respond_to_invitation(self, review_id: str, *, action: str, reason: Optional[str] = None) -> Review:
        normalized = str(action or "").strip().lower()
        if normalized not in {"accept", "decline"}:
            raise HTTPException(status_code=422, detail="Action must be 'accept' or 'decline'")
        target = ReviewStatus.ACCEPTED if normalized == "accept" else ReviewStatus.DECLINED

        review = self.get_review(review_id)
        async with self.locks.hold(review.manuscript_id):
            review = self.get_review(review_id)
            if review.status == ReviewStatus.COMPLETED:
                raise HTTPException(status_code=409, detail="Review has already been submitted")
            if target == ReviewStatus.ACCEPTED and not review.is_active:
                # 拒绝后又接受：同版本不能因此出现第二条在审记录
                other = self.reviews.find_active(
                    manuscript_id=review.manuscript_id,
                    manuscript_version=review.manuscript_version,
                    reviewer_id=review.reviewer_id,
                )
                if other is not None and other.id != review.id:
                    raise HTTPException(
                        status_code=409,
                        detail="Reviewer already has an active assignment for this manuscript version",
                    )

            now = _utc_now()
            updated = self.reviews.record_response(review, status=target, reason=reason, responded_at=now)
            self._sync_roster(review.manuscript_id, now)
            manuscript = self.manuscripts.get(review.manuscript_id)

        if target == ReviewStatus.ACCEPTED and manuscript is not None:
            await self._notify_user(
                manuscript.editor_id,
                title="Review Invitation Accepted",
                message=f"Reviewer {updated.reviewer_name} has ACCEPTED the invitation for paper: {manuscript.title}",
                tone=NotificationTone.SUCCESS,
                related_id=manuscript.id,
            )
        return updated

    async def submit_review(self, review_id: str, submission: ReviewSubmission) -> Review:
        review = self.get_review(review_id)
        async with self.locks.hold(review.manuscript_id):
            review = self.get_review(review_id)
            if review.status not in ReviewStatus.submittable():
                raise HTTPException(
                    status_code=409,
                    detail=f"Review cannot be submitted while '{review.status.value}'",
                )
            now = _utc_now()
            updated = self.reviews.complete(review, submission, completed_at=now)
            self._sync_roster(review.manuscript_id, now)
            manuscript = self.manuscripts.get(review.manuscript_id)

        if manuscript is not None:
            await self._notify_user(
                manuscript.editor_id,
                title="Review Submitted",
                message=f"A review has been submitted for paper: {manuscript.title}. Reviewer: {updated.reviewer_name}",
                tone=NotificationTone.SUCCESS,
                related_id=manuscript.id,
            )
        return updated

    async def remove_reviewer(self, manuscript_id: str, reviewer_id: str) -> List[str]:
        async with self.locks.hold(manuscript_id):
            manuscript = self.manuscripts.require(manuscript_id)
            removed = self.reviews.delete_for_reviewer(manuscript_id=manuscript.id, reviewer_id=reviewer_id)
            if not removed:
                raise HTTPException(status_code=404, detail="Reviewer is not assigned to this manuscript")
            # 物理删除：审计只能靠这行日志
            logger.info(
                "[Reviewer Removal] manuscript=%s reviewer=%s removed reviews=%s",
                manuscript.id,
                reviewer_id,
                ",".join(removed),
            )
            self._sync_roster(manuscript.id, _utc_now())
        return removed

    async def reassign_reviewers(self, manuscript_id: str) -> int:
        async with self.locks.hold(manuscript_id):
            manuscript = self.manuscripts.require(manuscript_id)
            history = self.reviews.list_for_manuscript(manuscript.id)
            if not history:
                raise HTTPException(status_code=422, detail="No previous reviewers to re-assign")

            # 去重保留首次出现的名字（list_for_manuscript 已按指派时间正序）
            prior: Dict[str, str] = {}
            for r in history:
                prior.setdefault(r.reviewer_id, r.reviewer_name)

            active_now = {
                r.reviewer_id
                for r in history
                if r.manuscript_version == manuscript.version and r.is_active
            }
            targets = [(rid, name) for rid, name in prior.items() if rid not in active_now]
            if not targets:
                return 0

            self._ensure_transition(manuscript, ManuscriptStatus.UNDER_REVIEW)
            now = _utc_now()
            due_at = now + timedelta(days=self.config.reassign_due_days)
            created: List[Review] = []
            try:
                for rid, name in targets:
                    created.append(
                        self.reviews.create(
                            manuscript_id=manuscript.id,
                            manuscript_version=manuscript.version,
                            reviewer_id=rid,
                            reviewer_name=name,
                            due_at=due_at,
                            assigned_at=now,
                        )
                    )
            except HTTPException:
                for review in created:
                    self.reviews.delete(review.id)
                raise
            patch = self._roster_patch(manuscript.id, now)
            patch["status"] = ManuscriptStatus.UNDER_REVIEW.value
            # 回到审稿循环，上一轮的决定不再有效
            patch["decision"] = None
            self._commit(manuscript, patch, created=created)

        for review in created:
            await self._notify_user(
                review.reviewer_id,
                title="Review Re-assignment",
                message=f"You have been re-assigned to review a revised version of: {manuscript.title}",
                tone=NotificationTone.INFO,
                related_id=manuscript.id,
                fallback_name=review.reviewer_name,
            )
        return len(created)

    # ------------------------------------------------------------------ revisions

    async def submit_revision(
        self,
        manuscript_id: str,
        *,
        manuscript_file: Optional[FileRef],
        response_file: Optional[FileRef] = None,
    ) -> RevisionSubmitResponse:
        if manuscript_file is None:
            raise HTTPException(status_code=422, detail="A revised manuscript file is required")

        async with self.locks.hold(manuscript_id):
            manuscript = self.manuscripts.require(manuscript_id)
            plan = self.revisions.plan_revision(
                manuscript,
                manuscript_file=manuscript_file,
                response_file=response_file,
                now=_utc_now(),
            )
            self._ensure_transition(manuscript, plan.status)
            updated = self._commit(manuscript, plan.patch)
        logger.info("[Revision] %s v%s -> v%s (%s)", updated.display_id, manuscript.version, plan.new_version, plan.status.value)

        if plan.is_final:
            title = "Final Version Received"
            message = f'The final camera-ready version of "{updated.title}" has been submitted.'
        else:
            title = "Revision Received"
            message = f'A revised version (v{plan.new_version}) of "{updated.title}" has been submitted.'
        await self._notify_user(
            updated.editor_id,
            title=title,
            message=message,
            tone=NotificationTone.INFO,
            related_id=updated.id,
        )
        return RevisionSubmitResponse(
            message="Final version submitted successfully" if plan.is_final else "Revision submitted successfully",
            new_version=plan.new_version,
            status=plan.status.value,
        )

    # ------------------------------------------------------------------ co-authors

    async def link_coauthor_account(self, user_id: str, email: str) -> int:
        """
        账号注册后回填：把所有以该邮箱登记、尚未关联的合著者条目标记为已注册。
        返回被更新的稿件数。
        """
        normalized = str(email or "").strip().lower()
        if not normalized or not str(user_id or "").strip():
            raise HTTPException(status_code=422, detail="user_id and email are required")

        linked = 0
        for candidate in self.manuscripts.find_by_co_author_email(normalized):
            async with self.locks.hold(candidate.id):
                manuscript = self.manuscripts.get(candidate.id)
                if manuscript is None:
                    continue
                changed = False
                co_authors = []
                for co in manuscript.co_authors:
                    if co.email == normalized and not co.is_registered:
                        co = co.model_copy(update={"linked_user_id": str(user_id), "is_registered": True})
                        changed = True
                    co_authors.append(co.model_dump(mode="json"))
                if not changed:
                    continue
                self._commit(
                    manuscript,
                    {"co_authors": co_authors, "last_updated_at": _utc_now().isoformat()},
                )
                linked += 1
        if linked:
            logger.info("[CoAuthor] linked user %s to %d manuscript(s)", user_id, linked)
        return linked
