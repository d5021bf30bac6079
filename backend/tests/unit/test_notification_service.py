import logging
from unittest.mock import MagicMock

import pytest
from postgrest.exceptions import APIError

from app.services.notification_service import NotificationService
from tests.utils.fake_supabase import FakeSupabase

USER = "00000000-0000-0000-0000-000000000001"
OTHER = "00000000-0000-0000-0000-000000000002"


def _service(db=None, email=None, workflow_config=None):
    email = email or MagicMock()
    return NotificationService(client=db or FakeSupabase(), email=email, config=workflow_config)


@pytest.mark.asyncio
async def test_notify_records_in_app_then_sends_email(workflow_config):
    db = FakeSupabase()
    email = MagicMock()
    email.send_template_email.return_value = True
    service = _service(db, email, workflow_config)

    await service.notify(
        user_id=USER,
        email="ada@uni.test",
        name="Ada",
        title="Decision: Accept",
        message="Congrats",
        tone="success",
        related_id="m-1",
    )

    rows = db.rows("notifications")
    assert len(rows) == 1
    assert rows[0]["tone"] == "success"
    assert rows[0]["is_read"] is False
    kwargs = email.send_template_email.call_args.kwargs
    assert kwargs["to_email"] == "ada@uni.test"
    assert kwargs["subject"] == "Decision: Accept"
    assert kwargs["context"]["portal_name"] == "Test Research Portal"
    assert db.calls[0] == ("notifications", "insert")


@pytest.mark.asyncio
async def test_email_failure_is_logged_not_raised(workflow_config, caplog):
    db = FakeSupabase()
    email = MagicMock()
    email.send_template_email.side_effect = RuntimeError("smtp down")
    service = _service(db, email, workflow_config)

    with caplog.at_level(logging.WARNING, logger="reviewportal.notifications"):
        await service.notify(user_id=USER, email="x@uni.test", name=None, title="t", message="m")

    assert len(db.rows("notifications")) == 1
    assert "smtp down" in caplog.text


@pytest.mark.asyncio
async def test_in_app_failure_does_not_raise_and_email_still_attempted(workflow_config):
    db = FakeSupabase()
    db.failures[("notifications", "insert")] = APIError(
        {"code": "PGRST000", "message": "db down", "details": None, "hint": None}
    )
    email = MagicMock()
    service = _service(db, email, workflow_config)

    await service.notify(user_id=USER, email="x@uni.test", name="X", title="t", message="m")
    email.send_template_email.assert_called_once()


@pytest.mark.asyncio
async def test_notify_without_email_skips_transport(workflow_config):
    email = MagicMock()
    service = _service(FakeSupabase(), email, workflow_config)
    await service.notify(user_id=USER, email=None, name="X", title="t", message="m")
    email.send_template_email.assert_not_called()


def test_list_for_user_is_newest_first_and_paged(workflow_config):
    db = FakeSupabase()
    for i in range(3):
        db.seed(
            "notifications",
            {"id": f"n{i}", "user_id": USER, "title": f"t{i}", "message": "m", "tone": "info",
             "is_read": False, "created_at": f"2026-01-0{i + 1}T00:00:00+00:00"},
        )
    db.seed("notifications", {"id": "x", "user_id": OTHER, "title": "x", "message": "m", "tone": "info",
                               "is_read": False, "created_at": "2026-02-01T00:00:00+00:00"})
    service = _service(db, workflow_config=workflow_config)

    assert [n["id"] for n in service.list_for_user(USER)] == ["n2", "n1", "n0"]
    assert [n["id"] for n in service.list_for_user(USER, limit=1)] == ["n2"]


def test_mark_read_only_touches_own_rows(workflow_config):
    db = FakeSupabase()
    db.seed("notifications", {"id": "mine", "user_id": USER, "is_read": False, "created_at": "2026-01-01"})
    db.seed("notifications", {"id": "theirs", "user_id": OTHER, "is_read": False, "created_at": "2026-01-01"})
    service = _service(db, workflow_config=workflow_config)

    assert service.unread_count(USER) == 1
    assert service.mark_read(USER, ["mine", "theirs"]) == 1
    assert service.unread_count(USER) == 0
    assert service.unread_count(OTHER) == 1
    assert service.mark_read(USER, []) == 0


def test_mark_all_read(workflow_config):
    db = FakeSupabase()
    for i in range(2):
        db.seed("notifications", {"id": f"n{i}", "user_id": USER, "is_read": False, "created_at": "2026-01-01"})
    service = _service(db, workflow_config=workflow_config)
    assert service.mark_all_read(USER) == 2
    assert service.mark_all_read(USER) == 0
