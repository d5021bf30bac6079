from typing import Dict
from unittest.mock import MagicMock

import pytest

from app.api.v1.workflow_common import get_blob_store, get_manuscript_service, get_notification_service
from app.core.auth_utils import get_current_user
from app.core.roles import get_current_profile
from app.services.storage_service import BlobStore
from main import app
from tests.utils.factories import AUTHOR_ID, profile


@pytest.fixture
def acting(lifecycle, notification_service) -> Dict[str, str]:
    """
    切换当前登录用户（acting["user"] = EDITOR_ID 等）

    中文注释:
    - 不走真实 JWT：直接覆盖 get_current_profile / get_current_user，角色取自 factories 里的种子用户。
    - 业务服务全部指向内存版 supabase；文件上传落到 MagicMock 存储客户端。
    """
    state = {"user": AUTHOR_ID}
    store = BlobStore(client=MagicMock())

    app.dependency_overrides[get_current_profile] = lambda: profile(state["user"])
    app.dependency_overrides[get_current_user] = lambda: {
        "id": state["user"],
        "email": profile(state["user"])["email"],
    }
    app.dependency_overrides[get_manuscript_service] = lambda: lifecycle
    app.dependency_overrides[get_notification_service] = lambda: notification_service
    app.dependency_overrides[get_blob_store] = lambda: store
    yield state
    app.dependency_overrides.clear()
