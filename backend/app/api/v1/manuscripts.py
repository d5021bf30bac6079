import json
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile
from pydantic import ValidationError

from app.api.v1.workflow_common import (
    ensure_can_view,
    get_blob_store,
    get_manuscript_service,
    is_editorial,
    is_manuscript_author,
)
from app.core.roles import (
    EDITORIAL_ROLES,
    PUBLISHING_ROLES,
    get_current_profile,
    profile_roles,
    require_any_role,
)
from app.models.decision import DecisionRequest, DeskRejectRequest
from app.models.manuscript import normalize_status
from app.models.schemas import ManuscriptListFilters, ManuscriptSubmission
from app.schemas.manuscript import AssignEditorRequest, AssignIssueRequest
from app.services.manuscript_service import ManuscriptLifecycleService
from app.services.storage_service import BlobStore

router = APIRouter(prefix="/manuscripts", tags=["Manuscripts"])


def _parse_co_authors(raw: Optional[str]) -> list:
    text = (raw or "").strip()
    if not text:
        return []
    try:
        parsed = json.loads(text)
    except json.JSONDecodeError as e:
        raise HTTPException(status_code=422, detail=f"co_authors must be a JSON array: {e.msg}") from e
    if not isinstance(parsed, list):
        raise HTTPException(status_code=422, detail="co_authors must be a JSON array")
    return parsed


@router.post("", status_code=201)
async def submit_manuscript(
    title: str = Form(...),
    abstract: str = Form(...),
    keywords: str = Form(""),
    department: str = Form(""),
    journal_id: Optional[str] = Form(None),
    journal_name: Optional[str] = Form(None),
    article_type: str = Form("Research Article"),
    author_name: Optional[str] = Form(None),
    co_authors: Optional[str] = Form(None),
    files: Optional[List[UploadFile]] = File(None),
    cover_letter: Optional[UploadFile] = File(None),
    profile: dict = Depends(get_current_profile),
    service: ManuscriptLifecycleService = Depends(get_manuscript_service),
    store: BlobStore = Depends(get_blob_store),
):
    """
    投稿（multipart）。

    中文注释:
    - 先做全部校验（字段 + 至少一个稿件文件），通过后才上传文件、写库。
    - 作者身份取自登录用户，不信任表单里的 author_id。
    """
    uploads = [f for f in (files or []) if f is not None and (f.filename or "").strip()]
    if not uploads:
        raise HTTPException(status_code=422, detail="At least one manuscript file is required")

    try:
        submission = ManuscriptSubmission(
            title=title,
            abstract=abstract,
            keywords=keywords,
            department=department,
            journal_id=journal_id or None,
            journal_name=journal_name or None,
            article_type=article_type or "Research Article",
            author_id=str(profile["id"]),
            author_name=(author_name or "").strip() or profile.get("full_name") or profile.get("email") or "Author",
            co_authors=_parse_co_authors(co_authors),
        )
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=e.errors(include_url=False, include_context=False)) from e

    folder = f"{profile['id']}/submissions"
    file_refs = [await store.store_upload(f, folder=folder) for f in uploads]
    cover_ref = None
    if cover_letter is not None and (cover_letter.filename or "").strip():
        cover_ref = await store.store_upload(cover_letter, folder=folder)

    result = await service.submit_manuscript(submission, files=file_refs, cover_letter=cover_ref)
    return {"success": True, "data": result.model_dump()}


@router.get("")
async def list_manuscripts(
    author_id: Optional[str] = None,
    status: Optional[str] = None,
    journal_ids: Optional[str] = None,
    editor_id: Optional[str] = None,
    profile: dict = Depends(get_current_profile),
    service: ManuscriptLifecycleService = Depends(get_manuscript_service),
):
    parsed_status = None
    if status:
        parsed_status = normalize_status(status)
        if parsed_status is None:
            raise HTTPException(status_code=422, detail=f"Unknown status: {status}")

    filters = ManuscriptListFilters(
        author_id=author_id,
        status=parsed_status,
        journal_ids=[j.strip() for j in (journal_ids or "").split(",") if j.strip()],
        editor_id=editor_id,
    )
    if not is_editorial(profile):
        # 非编辑只能看到自己投的稿
        filters.author_id = str(profile["id"])

    rows = service.list_manuscripts(filters)
    return {"success": True, "data": [m.model_dump(mode="json") for m in rows]}


@router.get("/{manuscript_id}")
async def get_manuscript(
    manuscript_id: str,
    profile: dict = Depends(get_current_profile),
    service: ManuscriptLifecycleService = Depends(get_manuscript_service),
):
    manuscript = service.get_manuscript(manuscript_id)
    ensure_can_view(profile, manuscript)
    return {"success": True, "data": manuscript.model_dump(mode="json")}


@router.put("/{manuscript_id}/assign-editor")
async def assign_editor(
    manuscript_id: str,
    payload: AssignEditorRequest,
    _profile: dict = Depends(require_any_role(EDITORIAL_ROLES)),
    service: ManuscriptLifecycleService = Depends(get_manuscript_service),
):
    updated = await service.assign_editor(
        manuscript_id, editor_id=payload.editor_id, editor_name=payload.editor_name
    )
    return {"success": True, "message": "Editor assigned", "data": {"status": updated.status.value}}


@router.put("/{manuscript_id}/desk-reject")
async def desk_reject(
    manuscript_id: str,
    payload: DeskRejectRequest,
    _profile: dict = Depends(require_any_role(EDITORIAL_ROLES)),
    service: ManuscriptLifecycleService = Depends(get_manuscript_service),
):
    updated = await service.desk_reject(manuscript_id, reason=payload.reason)
    return {"success": True, "message": "Paper desk rejected", "data": {"status": updated.status.value}}


@router.post("/{manuscript_id}/decision")
async def record_decision(
    manuscript_id: str,
    payload: DecisionRequest,
    _profile: dict = Depends(require_any_role(EDITORIAL_ROLES)),
    service: ManuscriptLifecycleService = Depends(get_manuscript_service),
):
    outcome = await service.record_decision(
        manuscript_id,
        decision=payload.decision,
        reason=payload.reason,
        comments=payload.comments,
    )
    return {
        "success": True,
        "message": "Decision recorded",
        "data": {
            "decision": outcome.decision,
            "status": outcome.status.value,
            "tone": outcome.tone.value,
        },
    }


@router.post("/{manuscript_id}/revision")
async def submit_revision(
    manuscript_id: str,
    manuscript_file: Optional[UploadFile] = File(None),
    response_to_reviewers: Optional[UploadFile] = File(None),
    profile: dict = Depends(get_current_profile),
    service: ManuscriptLifecycleService = Depends(get_manuscript_service),
    store: BlobStore = Depends(get_blob_store),
):
    if manuscript_file is None or not (manuscript_file.filename or "").strip():
        raise HTTPException(status_code=422, detail="A revised manuscript file is required")

    manuscript = service.get_manuscript(manuscript_id)
    if not is_manuscript_author(profile, manuscript) and "admin" not in profile_roles(profile):
        raise HTTPException(status_code=403, detail="Only the authors can submit a revision")

    folder = f"{manuscript.author_id}/{manuscript.id}/v{manuscript.version + 1}"
    file_ref = await store.store_upload(manuscript_file, folder=folder)
    response_ref = None
    if response_to_reviewers is not None and (response_to_reviewers.filename or "").strip():
        response_ref = await store.store_upload(response_to_reviewers, folder=folder)

    result = await service.submit_revision(manuscript_id, manuscript_file=file_ref, response_file=response_ref)
    return {"success": True, "message": result.message, "data": result.model_dump()}


@router.post("/{manuscript_id}/reassign-reviewers")
async def reassign_reviewers(
    manuscript_id: str,
    _profile: dict = Depends(require_any_role(EDITORIAL_ROLES)),
    service: ManuscriptLifecycleService = Depends(get_manuscript_service),
):
    count = await service.reassign_reviewers(manuscript_id)
    return {"success": True, "message": f"Re-assigned {count} reviewer(s)", "data": {"count": count}}


@router.delete("/{manuscript_id}/reviewers/{reviewer_id}")
async def remove_reviewer(
    manuscript_id: str,
    reviewer_id: str,
    _profile: dict = Depends(require_any_role(EDITORIAL_ROLES)),
    service: ManuscriptLifecycleService = Depends(get_manuscript_service),
):
    removed = await service.remove_reviewer(manuscript_id, reviewer_id)
    return {"success": True, "message": "Reviewer removed", "data": {"removed_review_ids": removed}}


@router.put("/{manuscript_id}/assign-issue")
async def assign_issue(
    manuscript_id: str,
    payload: AssignIssueRequest,
    _profile: dict = Depends(require_any_role(PUBLISHING_ROLES)),
    service: ManuscriptLifecycleService = Depends(get_manuscript_service),
):
    updated = await service.assign_to_issue(manuscript_id, issue_id=payload.issue_id)
    return {
        "success": True,
        "message": "Paper assigned to issue and published",
        "data": {"status": updated.status.value, "issue_id": updated.issue_id},
    }
