import os
import sys
from datetime import datetime, timedelta, timezone
from typing import AsyncGenerator
from unittest.mock import MagicMock

import jwt
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

# Import app from the correct location
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
from main import app  # noqa: E402

from app.core.config import WorkflowConfig, app_config  # noqa: E402
from app.core.locks import KeyedAsyncLock  # noqa: E402
from app.services.display_id_service import SupabaseDisplayIdGenerator  # noqa: E402
from app.services.manuscript_service import ManuscriptLifecycleService  # noqa: E402
from app.services.notification_service import NotificationService  # noqa: E402
from app.services.user_service import UserDirectory  # noqa: E402
from tests.utils.fake_supabase import FakeSupabase  # noqa: E402
from tests.utils.factories import seed_users  # noqa: E402

# === 全局测试配置 ===
# 中文注释:
# 1. 显式使用 pytest_asyncio.fixture，STRICT 模式下异步 fixture 才能被正确 await。
# 2. 业务测试全部跑在内存版 supabase（FakeSupabase）上，不依赖真实数据库。
# 3. JWT 令牌生成用于鉴权相关测试。


@pytest_asyncio.fixture
async def client() -> AsyncGenerator:
    """
    提供一个模拟的异步测试客户端
    """
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as ac:
        yield ac
    app.dependency_overrides.clear()


def generate_test_token(
    user_id: str = "00000000-0000-0000-0000-000000000000",
    email: str = "test@example.com",
    *,
    expires_in: timedelta = timedelta(hours=1),
) -> str:
    secret = app_config.jwt_secret
    now = datetime.now(timezone.utc)
    payload = {
        "sub": user_id,
        "email": email,
        "aud": "authenticated",
        "exp": now + expires_in,
        "iat": now,
        "role": "authenticated",
    }
    return jwt.encode(payload, secret, algorithm="HS256")


@pytest.fixture
def auth_token() -> str:
    return generate_test_token()


@pytest.fixture
def expired_token() -> str:
    return generate_test_token(expires_in=timedelta(hours=-1))


@pytest.fixture
def invalid_token() -> str:
    return "invalid.jwt.token"


@pytest.fixture
def workflow_config() -> WorkflowConfig:
    return WorkflowConfig(
        display_id_prefix="JRP",
        reassign_due_days=14,
        notification_page_size=50,
        editor_role="editor",
        portal_name="Test Research Portal",
        frontend_url="http://portal.test",
    )


@pytest.fixture
def fake_db() -> FakeSupabase:
    db = FakeSupabase()
    seed_users(db)
    return db


@pytest.fixture
def email_stub() -> MagicMock:
    stub = MagicMock()
    stub.send_template_email.return_value = True
    return stub


@pytest.fixture
def notification_service(fake_db, email_stub, workflow_config) -> NotificationService:
    return NotificationService(client=fake_db, email=email_stub, config=workflow_config)


@pytest.fixture
def lifecycle(fake_db, email_stub, workflow_config, notification_service) -> ManuscriptLifecycleService:
    return ManuscriptLifecycleService(
        client=fake_db,
        notifications=notification_service,
        display_ids=SupabaseDisplayIdGenerator(fake_db, prefix=workflow_config.display_id_prefix),
        directory=UserDirectory(fake_db),
        email=email_stub,
        config=workflow_config,
        locks=KeyedAsyncLock(),
    )
