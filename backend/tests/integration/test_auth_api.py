import pytest

from app.api.v1.workflow_common import get_manuscript_service, get_notification_service
from main import app
from tests.utils.http import API_PREFIX, bearer


@pytest.mark.asyncio
async def test_root_health(client):
    resp = await client.get("/")
    assert resp.status_code == 200
    assert resp.json()["message"] == "Review Portal API is running"


@pytest.mark.asyncio
async def test_missing_token_is_rejected(client):
    resp = await client.get(f"{API_PREFIX}/notifications")
    # HTTPBearer: 旧版 FastAPI 返回 403，新版返回 401
    assert resp.status_code in (401, 403)


@pytest.mark.asyncio
async def test_expired_token_is_401(client, expired_token):
    resp = await client.get(f"{API_PREFIX}/notifications", headers=bearer(expired_token))
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_malformed_token_is_401(client, invalid_token):
    resp = await client.get(f"{API_PREFIX}/notifications", headers=bearer(invalid_token))
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_valid_token_reaches_own_notifications(client, auth_token, notification_service, fake_db):
    fake_db.seed(
        "notifications",
        {"id": "n-1", "user_id": "00000000-0000-0000-0000-000000000000", "title": "Hello", "message": "m",
         "tone": "info", "is_read": False, "created_at": "2026-01-01T00:00:00+00:00"},
        {"id": "n-2", "user_id": "someone-else", "title": "Other", "message": "m",
         "tone": "info", "is_read": False, "created_at": "2026-01-02T00:00:00+00:00"},
    )
    app.dependency_overrides[get_notification_service] = lambda: notification_service

    resp = await client.get(f"{API_PREFIX}/notifications", headers=bearer(auth_token))
    assert resp.status_code == 200
    assert [n["id"] for n in resp.json()["data"]] == ["n-1"]


@pytest.mark.asyncio
async def test_internal_link_requires_admin_key(client, monkeypatch, lifecycle):
    monkeypatch.setenv("ADMIN_API_KEY", "internal-secret")
    app.dependency_overrides[get_manuscript_service] = lambda: lifecycle
    payload = {"user_id": "99999999-9999-9999-9999-999999999999", "email": "nico@elsewhere.test"}

    resp = await client.post(f"{API_PREFIX}/internal/co-authors/link", json=payload)
    assert resp.status_code == 401
    resp = await client.post(
        f"{API_PREFIX}/internal/co-authors/link", json=payload, headers={"X-Admin-Key": "wrong"}
    )
    assert resp.status_code == 401

    resp = await client.post(
        f"{API_PREFIX}/internal/co-authors/link", json=payload, headers={"X-Admin-Key": "internal-secret"}
    )
    assert resp.status_code == 200
    assert resp.json()["data"] == {"linked_manuscripts": 0}
