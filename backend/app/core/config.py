import os
from dataclasses import dataclass
from typing import Optional


def _env_bool(key: str, default: bool) -> bool:
    raw = os.environ.get(key)
    if raw is None:
        return default
    lowered = raw.strip().lower()
    return lowered in {"1", "true", "yes", "y", "on"}


def _env_int(key: str, default: int, *, min_value: int = 0) -> int:
    raw = (os.environ.get(key) or "").strip()
    try:
        value = int(raw) if raw else default
    except ValueError:
        value = default
    return max(min_value, value)


@dataclass(frozen=True)
class AppConfig:
    """
    Deployment settings for the data store and identity provider.

    中文注释:
    - 部署环境里 SUPABASE_KEY 与 SUPABASE_ANON_KEY 都出现过（两者等价），优先读后者。
    - service role key 缺省时回退到 anon key（本地开发常见），写操作可能被 RLS 拒绝。
    """

    env: str
    supabase_url: str
    anon_key: str
    service_role_key: str
    jwt_secret: str

    @staticmethod
    def from_env() -> "AppConfig":
        anon = (os.environ.get("SUPABASE_ANON_KEY") or os.environ.get("SUPABASE_KEY") or "").strip()
        return AppConfig(
            env=(os.environ.get("APP_ENV") or "development").strip().lower(),
            supabase_url=(os.environ.get("SUPABASE_URL") or "").strip(),
            anon_key=anon,
            service_role_key=(os.environ.get("SUPABASE_SERVICE_ROLE_KEY") or "").strip() or anon,
            jwt_secret=(os.environ.get("SUPABASE_JWT_SECRET") or "mock-secret-replace-later").strip(),
        )


app_config = AppConfig.from_env()


def _env_str(key: str, default: str = "") -> str:
    return (os.environ.get(key) or default).strip()


@dataclass(frozen=True)
class SMTPConfig:
    """
    Outgoing mail server. Absent locally and in tests, where email degrades to a log line.
    """

    host: str
    port: int
    user: Optional[str]
    password: Optional[str]
    from_email: str
    use_starttls: bool

    @staticmethod
    def from_env() -> Optional["SMTPConfig"]:
        host = _env_str("SMTP_HOST")
        if not host:
            return None
        user = _env_str("SMTP_USER") or None
        return SMTPConfig(
            host=host,
            port=_env_int("SMTP_PORT", 587, min_value=1),
            user=user,
            password=_env_str("SMTP_PASSWORD") or None,
            from_email=_env_str("SMTP_FROM_EMAIL") or user or "no-reply@reviewportal.local",
            use_starttls=_env_bool("SMTP_USE_STARTTLS", True),
        )


@dataclass(frozen=True)
class ResendConfig:
    """Resend API, used when no SMTP server is configured."""

    api_key: str
    sender: str

    @staticmethod
    def from_env() -> Optional["ResendConfig"]:
        api_key = _env_str("RESEND_API_KEY")
        if not api_key:
            return None
        return ResendConfig(api_key=api_key, sender=_env_str("EMAIL_SENDER", "Review Portal <onboarding@resend.dev>"))


@dataclass(frozen=True)
class SentryConfig:
    enabled: bool
    dsn: Optional[str]
    environment: str
    traces_sample_rate: float

    @staticmethod
    def from_env() -> "SentryConfig":
        dsn = (os.environ.get("SENTRY_DSN") or "").strip() or None
        enabled = _env_bool("SENTRY_ENABLED", bool(dsn))
        environment = (
            os.environ.get("SENTRY_ENVIRONMENT") or os.environ.get("APP_ENV") or "development"
        ).strip()

        rate_raw = (os.environ.get("SENTRY_TRACES_SAMPLE_RATE") or "0").strip()
        try:
            traces_sample_rate = float(rate_raw)
        except ValueError:
            traces_sample_rate = 0.0
        traces_sample_rate = min(1.0, max(0.0, traces_sample_rate))

        return SentryConfig(
            enabled=enabled,
            dsn=dsn,
            environment=environment,
            traces_sample_rate=traces_sample_rate,
        )


@dataclass(frozen=True)
class WorkflowConfig:
    """
    Review workflow knobs.

    - display_id_prefix: leading token of the human readable id, e.g. JRP-2026-007.
    - reassign_due_days: due date offset for reviewers re-invited after a revision.
    - notification_page_size: default page size of the notification centre.
    - editor_role: role whose members receive "new submission" fan-out notifications.
    """

    display_id_prefix: str
    reassign_due_days: int
    notification_page_size: int
    editor_role: str
    portal_name: str
    frontend_url: str

    @staticmethod
    def from_env() -> "WorkflowConfig":
        prefix = (os.environ.get("DISPLAY_ID_PREFIX") or "JRP").strip().upper() or "JRP"
        portal_name = (
            os.environ.get("PORTAL_NAME") or "University Press Research Portal"
        ).strip()
        frontend_url = (os.environ.get("FRONTEND_URL") or "http://localhost:3000").strip().rstrip("/")
        editor_role = (os.environ.get("EDITOR_ROLE") or "editor").strip().lower() or "editor"

        return WorkflowConfig(
            display_id_prefix=prefix,
            reassign_due_days=_env_int("REVIEW_REASSIGN_DUE_DAYS", 14, min_value=1),
            notification_page_size=_env_int("NOTIFICATION_PAGE_SIZE", 50, min_value=1),
            editor_role=editor_role,
            portal_name=portal_name,
            frontend_url=frontend_url,
        )


def get_admin_api_key() -> Optional[str]:
    """
    Key for internal hooks (identity provider callbacks).

    Lives outside the user JWT system; `/api/v1/internal/*` rejects every call when unset.
    """

    raw = os.environ.get("ADMIN_API_KEY")
    return raw.strip() if raw else None
