from typing import Optional

from fastapi import APIRouter, Depends

from app.api.v1.workflow_common import ensure_review_owner, get_manuscript_service, is_editorial
from app.core.roles import EDITORIAL_ROLES, get_current_profile, require_any_role
from app.schemas.review import (
    InvitationResponsePayload,
    InviteReviewerRequest,
    InviteReviewerResponse,
    ReviewSubmission,
)
from app.services.manuscript_service import ManuscriptLifecycleService

router = APIRouter(prefix="/reviews", tags=["Reviews"])


def _review_view(review, *, include_confidential: bool) -> dict:
    data = review.model_dump(mode="json")
    if not include_confidential:
        # 给编辑看的保密意见不下发给其他角色
        data.pop("confidential_comments", None)
    return data


@router.post("/invite", status_code=201)
async def invite_reviewer(
    payload: InviteReviewerRequest,
    _profile: dict = Depends(require_any_role(EDITORIAL_ROLES)),
    service: ManuscriptLifecycleService = Depends(get_manuscript_service),
):
    review = await service.invite_reviewer(
        payload.manuscript_id,
        reviewer_id=payload.reviewer_id,
        reviewer_name=payload.reviewer_name,
        due_date=payload.due_date,
    )
    return InviteReviewerResponse(review_id=review.id).model_dump()


@router.get("")
async def list_reviews(
    reviewer_id: Optional[str] = None,
    manuscript_id: Optional[str] = None,
    profile: dict = Depends(get_current_profile),
    service: ManuscriptLifecycleService = Depends(get_manuscript_service),
):
    editorial = is_editorial(profile)
    if not editorial:
        # 审稿人只能看到自己的任务
        reviewer_id = str(profile["id"])
    rows = service.list_reviews(reviewer_id=reviewer_id, manuscript_id=manuscript_id)
    return {"success": True, "data": [_review_view(r, include_confidential=editorial) for r in rows]}


@router.put("/{review_id}/respond")
async def respond_to_invitation(
    review_id: str,
    payload: InvitationResponsePayload,
    profile: dict = Depends(get_current_profile),
    service: ManuscriptLifecycleService = Depends(get_manuscript_service),
):
    ensure_review_owner(profile, service.get_review(review_id))
    updated = await service.respond_to_invitation(review_id, action=payload.action, reason=payload.reason)
    return {"success": True, "message": f"Invitation {updated.status.value}", "data": {"status": updated.status.value}}


@router.put("/{review_id}")
async def submit_review(
    review_id: str,
    payload: ReviewSubmission,
    profile: dict = Depends(get_current_profile),
    service: ManuscriptLifecycleService = Depends(get_manuscript_service),
):
    ensure_review_owner(profile, service.get_review(review_id))
    updated = await service.submit_review(review_id, payload)
    return {"success": True, "message": "Review submitted successfully", "data": {"status": updated.status.value}}
