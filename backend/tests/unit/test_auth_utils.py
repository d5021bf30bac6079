import base64
import json
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

import pytest
from fastapi import HTTPException
from fastapi.security import HTTPAuthorizationCredentials
from jose import jwt

from app.core import auth_utils

SECRET = "unit-test-secret"


def _creds(token: str) -> HTTPAuthorizationCredentials:
    return HTTPAuthorizationCredentials(scheme="Bearer", credentials=token)


def _rs256_like_token(payload: dict) -> str:
    """三段式结构即可触发 header 解析；签名不会被本地校验（走 Auth API 分支）。"""

    def b64url(obj: dict) -> str:
        raw = json.dumps(obj, separators=(",", ":")).encode("utf-8")
        return base64.urlsafe_b64encode(raw).rstrip(b"=").decode("utf-8")

    sig = base64.urlsafe_b64encode(b"sig").rstrip(b"=").decode("utf-8")
    return f"{b64url({'alg': 'RS256', 'typ': 'JWT'})}.{b64url(payload)}.{sig}"


@pytest.mark.asyncio
async def test_hs256_token_decoded_locally(monkeypatch):
    monkeypatch.setattr(auth_utils, "JWT_SECRET", SECRET)
    token = jwt.encode(
        {
            "sub": "user-1",
            "email": "u@example.com",
            "aud": "authenticated",
            "exp": datetime.now(timezone.utc) + timedelta(minutes=5),
        },
        SECRET,
        algorithm="HS256",
    )
    user = await auth_utils.get_current_user(_creds(token))
    assert user == {"id": "user-1", "email": "u@example.com"}


@pytest.mark.asyncio
async def test_expired_token_rejected(monkeypatch):
    monkeypatch.setattr(auth_utils, "JWT_SECRET", SECRET)
    token = jwt.encode(
        {"sub": "user-1", "aud": "authenticated", "exp": datetime.now(timezone.utc) - timedelta(minutes=5)},
        SECRET,
        algorithm="HS256",
    )
    with pytest.raises(HTTPException) as exc:
        await auth_utils.get_current_user(_creds(token))
    assert exc.value.status_code == 401


@pytest.mark.asyncio
async def test_missing_sub_rejected(monkeypatch):
    monkeypatch.setattr(auth_utils, "JWT_SECRET", SECRET)
    token = jwt.encode({"email": "u@example.com", "aud": "authenticated"}, SECRET, algorithm="HS256")
    with pytest.raises(HTTPException) as exc:
        await auth_utils.get_current_user(_creds(token))
    assert exc.value.status_code == 401


@pytest.mark.asyncio
async def test_non_hs256_token_uses_auth_api(monkeypatch):
    fake_supabase = SimpleNamespace(
        auth=SimpleNamespace(
            get_user=lambda _token: SimpleNamespace(user=SimpleNamespace(id="user-9", email="n@example.com"))
        )
    )
    monkeypatch.setattr(auth_utils, "supabase", fake_supabase)

    user = await auth_utils.get_current_user(_creds(_rs256_like_token({"sub": "user-9"})))
    assert user["id"] == "user-9"


@pytest.mark.asyncio
async def test_auth_api_failure_is_401_not_500(monkeypatch):
    def boom(_token):
        raise RuntimeError("network down")

    monkeypatch.setattr(auth_utils, "supabase", SimpleNamespace(auth=SimpleNamespace(get_user=boom)))
    with pytest.raises(HTTPException) as exc:
        await auth_utils.get_current_user(_creds(_rs256_like_token({"sub": "user-9"})))
    assert exc.value.status_code == 401
