from unittest.mock import MagicMock, patch

from app.core.config import ResendConfig, SMTPConfig
from app.core.mail import EmailService


def _smtp_config() -> SMTPConfig:
    return SMTPConfig(
        host="smtp.example.com",
        port=587,
        user="user@example.com",
        password="secret",
        from_email="no-reply@example.com",
        use_starttls=True,
    )


def test_send_email_success():
    service = EmailService(smtp_config=_smtp_config(), resend_config=None)
    with patch("app.core.mail.smtplib.SMTP") as smtp:
        server = MagicMock()
        smtp.return_value.__enter__.return_value = server

        ok = service.send_email(
            to_email="to@example.com",
            subject="Test Subject",
            text_body="Hello",
            html_body="<p>Hello</p>",
        )
        assert ok is True
        server.starttls.assert_called_once()
        server.login.assert_called_once()
        server.sendmail.assert_called_once()


def test_send_email_failure_does_not_raise():
    service = EmailService(smtp_config=_smtp_config(), resend_config=None)
    with patch("app.core.mail.smtplib.SMTP") as smtp:
        server = MagicMock()
        server.sendmail.side_effect = RuntimeError("smtp down")
        smtp.return_value.__enter__.return_value = server

        ok = service.send_email(to_email="to@example.com", subject="Test Subject", text_body="Hello")
        assert ok is False


def test_send_email_falls_back_to_resend():
    service = EmailService(smtp_config=None, resend_config=ResendConfig(api_key="re_test", sender="Portal <p@x.test>"))
    with patch("app.core.mail.resend.Emails.send") as send:
        ok = service.send_email(to_email="to@example.com", subject="s", text_body="body")
    assert ok is True
    params = send.call_args.args[0]
    assert params["to"] == ["to@example.com"]
    assert params["from"] == "Portal <p@x.test>"


def test_unconfigured_transport_is_dev_mode():
    service = EmailService(smtp_config=None, resend_config=None)
    assert service.is_configured() is False
    assert service.send_email(to_email="to@example.com", subject="s", text_body="x") is False


def test_notification_template_renders_name_and_portal():
    service = EmailService(smtp_config=None, resend_config=None)
    text = service.render_template(
        "notification.txt", {"name": "Ada", "message": "Your paper was accepted.", "portal_name": "Test Portal"}
    )
    assert text.startswith("Hello Ada,")
    assert "Your paper was accepted." in text
    assert "Test Portal" in text


def test_coauthor_invitation_template():
    service = EmailService(smtp_config=None, resend_config=None)
    text = service.render_template(
        "coauthor_invitation.txt",
        {
            "name": None,
            "title": "Graph Methods",
            "author_name": "Ada",
            "register_url": "http://portal.test/signup?email=c%40x.test",
            "portal_name": "Test Portal",
        },
    )
    assert "Hello Colleague," in text
    assert '"Graph Methods" submitted by Ada' in text
    assert "http://portal.test/signup?email=c%40x.test" in text


def test_send_template_email_handles_missing_template():
    service = EmailService(smtp_config=None, resend_config=None)
    assert (
        service.send_template_email(to_email="a@b.test", subject="s", template_name="missing.txt", context={})
        is False
    )
