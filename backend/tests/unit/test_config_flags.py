from app.core import config as config_module


def test_workflow_config_defaults(monkeypatch):
    for key in (
        "DISPLAY_ID_PREFIX",
        "REVIEW_REASSIGN_DUE_DAYS",
        "NOTIFICATION_PAGE_SIZE",
        "EDITOR_ROLE",
        "PORTAL_NAME",
        "FRONTEND_URL",
    ):
        monkeypatch.delenv(key, raising=False)

    cfg = config_module.WorkflowConfig.from_env()
    assert cfg.display_id_prefix == "JRP"
    assert cfg.reassign_due_days == 14
    assert cfg.notification_page_size == 50
    assert cfg.editor_role == "editor"
    assert cfg.frontend_url == "http://localhost:3000"


def test_workflow_config_tolerates_malformed_values(monkeypatch):
    monkeypatch.setenv("DISPLAY_ID_PREFIX", " jrn ")
    monkeypatch.setenv("REVIEW_REASSIGN_DUE_DAYS", "soon")
    monkeypatch.setenv("NOTIFICATION_PAGE_SIZE", "0")
    monkeypatch.setenv("EDITOR_ROLE", " Editor_In_Chief ")
    monkeypatch.setenv("FRONTEND_URL", "https://portal.example.org/")

    cfg = config_module.WorkflowConfig.from_env()
    assert cfg.display_id_prefix == "JRN"
    assert cfg.reassign_due_days == 14
    assert cfg.notification_page_size == 1
    assert cfg.editor_role == "editor_in_chief"
    assert cfg.frontend_url == "https://portal.example.org"


def test_smtp_config_absent_without_host(monkeypatch):
    monkeypatch.delenv("SMTP_HOST", raising=False)
    assert config_module.SMTPConfig.from_env() is None


def test_smtp_config_parses_port_and_starttls(monkeypatch):
    monkeypatch.setenv("SMTP_HOST", "smtp.example.com")
    monkeypatch.setenv("SMTP_PORT", "not-a-port")
    monkeypatch.setenv("SMTP_USE_STARTTLS", "off")
    cfg = config_module.SMTPConfig.from_env()
    assert cfg is not None
    assert cfg.port == 587
    assert cfg.use_starttls is False


def test_resend_config_requires_api_key(monkeypatch):
    monkeypatch.delenv("RESEND_API_KEY", raising=False)
    assert config_module.ResendConfig.from_env() is None
    monkeypatch.setenv("RESEND_API_KEY", "re_123")
    assert config_module.ResendConfig.from_env().api_key == "re_123"


def test_sentry_sample_rate_is_clamped(monkeypatch):
    monkeypatch.delenv("SENTRY_ENABLED", raising=False)
    monkeypatch.setenv("SENTRY_DSN", "https://public@example.ingest.sentry.io/1")
    monkeypatch.setenv("SENTRY_TRACES_SAMPLE_RATE", "7")
    cfg = config_module.SentryConfig.from_env()
    assert cfg.enabled is True
    assert cfg.traces_sample_rate == 1.0


def test_admin_api_key(monkeypatch):
    monkeypatch.delenv("ADMIN_API_KEY", raising=False)
    assert config_module.get_admin_api_key() is None
    monkeypatch.setenv("ADMIN_API_KEY", "  k  ")
    assert config_module.get_admin_api_key() == "k"
