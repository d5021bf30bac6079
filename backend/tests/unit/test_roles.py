import pytest
from fastapi import HTTPException
from unittest.mock import MagicMock

from app.core.roles import EDITORIAL_ROLES, PUBLISHING_ROLES, profile_roles, require_any_role


def _mk_supabase_chain(*responses):
    mock = MagicMock()
    mock.table.return_value = mock
    mock.select.return_value = mock
    mock.eq.return_value = mock
    mock.update.return_value = mock
    mock.insert.return_value = mock
    mock.execute.side_effect = [MagicMock(data=data) for data in responses]
    return mock


@pytest.mark.asyncio
async def test_get_current_profile_creates_default_author(monkeypatch):
    monkeypatch.delenv("ADMIN_EMAILS", raising=False)
    from app.core import roles as roles_mod

    user_id = "00000000-0000-0000-0000-000000000000"
    supabase = _mk_supabase_chain([], [{"id": user_id, "email": "test@example.com", "roles": ["author"]}])
    monkeypatch.setattr(roles_mod, "supabase", supabase)

    profile = await roles_mod.get_current_profile({"id": user_id, "email": "test@example.com"})
    assert profile["id"] == user_id
    assert profile["roles"] == ["author"]
    supabase.insert.assert_called_once()


@pytest.mark.asyncio
async def test_get_current_profile_returns_existing_reviewer(monkeypatch):
    monkeypatch.delenv("ADMIN_EMAILS", raising=False)
    from app.core import roles as roles_mod

    existing = {"id": "r-1", "email": "rev@example.com", "roles": ["reviewer"]}
    supabase = _mk_supabase_chain([existing])
    monkeypatch.setattr(roles_mod, "supabase", supabase)

    profile = await roles_mod.get_current_profile({"id": "r-1", "email": "rev@example.com"})
    assert profile["roles"] == ["reviewer"]
    supabase.insert.assert_not_called()


@pytest.mark.asyncio
async def test_get_current_profile_admin_email_elevates_and_merges(monkeypatch):
    monkeypatch.setenv("ADMIN_EMAILS", "boss@example.com")
    from app.core import roles as roles_mod

    supabase = _mk_supabase_chain([{"id": "u-1", "email": "boss@example.com", "roles": ["publisher"]}], [])
    monkeypatch.setattr(roles_mod, "supabase", supabase)

    profile = await roles_mod.get_current_profile({"id": "u-1", "email": "Boss@Example.com"})
    assert {"admin", "editor", "reviewer", "author", "publisher"} <= set(profile["roles"])


@pytest.mark.asyncio
async def test_get_current_profile_falls_back_on_error(monkeypatch):
    monkeypatch.setenv("ADMIN_EMAILS", "test@example.com")
    from app.core import roles as roles_mod

    bad = MagicMock()
    bad.table.side_effect = RuntimeError("boom")
    monkeypatch.setattr(roles_mod, "supabase", bad)

    profile = await roles_mod.get_current_profile({"id": "u-2", "email": "test@example.com"})
    assert profile["id"] == "u-2"
    assert "admin" in profile["roles"]


@pytest.mark.asyncio
async def test_require_any_role_allows_and_denies():
    dep = require_any_role(EDITORIAL_ROLES)
    profile = await dep(profile={"roles": ["Editor_In_Chief"]})
    assert profile["roles"] == ["Editor_In_Chief"]

    with pytest.raises(HTTPException) as exc:
        await dep(profile={"roles": ["author", "reviewer"]})
    assert exc.value.status_code == 403


def test_profile_roles_normalises():
    assert profile_roles({"roles": [" Publisher ", "", "EDITOR"]}) == {"publisher", "editor"}
    assert profile_roles({}) == set()
    assert "publisher" in PUBLISHING_ROLES
