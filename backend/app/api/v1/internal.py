from fastapi import APIRouter, Depends

from app.api.v1.workflow_common import get_manuscript_service
from app.core.security import require_admin_key
from app.schemas.manuscript import LinkCoAuthorRequest
from app.services.manuscript_service import ManuscriptLifecycleService

router = APIRouter(prefix="/internal", tags=["Internal"])


@router.post("/co-authors/link")
async def link_coauthor_account(
    payload: LinkCoAuthorRequest,
    _admin: None = Depends(require_admin_key),
    service: ManuscriptLifecycleService = Depends(get_manuscript_service),
):
    """
    身份服务在新账号注册后回调：把以该邮箱登记的合著者条目关联到新账号（内部接口）
    """
    linked = await service.link_coauthor_account(payload.user_id, payload.email)
    return {"success": True, "data": {"linked_manuscripts": linked}}
