import logging
from typing import Any, Dict, Optional

from app.core.config import SentryConfig

logger = logging.getLogger("reviewportal")

FILTERED = "[Filtered]"

# 中文注释: 这些字段在任何层级出现都不上报（凭证 + 审稿人写给编辑的保密意见）
_REDACTED_FIELDS = frozenset(
    {
        "authorization",
        "cookie",
        "set-cookie",
        "x-admin-key",
        "password",
        "access_token",
        "refresh_token",
        "token",
        "service_role_key",
        "confidential_comments",
        "decline_reason",
    }
)

# PDF / DOCX(zip) / DOC(OLE) 文件头
_UPLOAD_SIGNATURES = (b"%PDF-", b"PK\x03\x04", b"\xd0\xcf\x11\xe0")
_MAX_TEXT = 5000


def _is_manuscript_payload(value: Any) -> bool:
    if isinstance(value, (bytes, bytearray)):
        return bytes(value[:8]).startswith(_UPLOAD_SIGNATURES)
    # 摘要/审稿意见全文也不上报
    return isinstance(value, str) and len(value) > _MAX_TEXT


def redact(value: Any) -> Any:
    """Recursively replace credentials, confidential review text and document bodies."""
    if _is_manuscript_payload(value):
        return FILTERED
    if isinstance(value, dict):
        return {
            str(k): FILTERED if str(k).strip().lower() in _REDACTED_FIELDS else redact(v)
            for k, v in value.items()
        }
    if isinstance(value, (list, tuple)):
        return [redact(v) for v in value]
    return value


def before_send(event: Dict[str, Any], hint: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    request = event.get("request")
    if isinstance(request, dict):
        headers = request.get("headers")
        if isinstance(headers, dict):
            request["headers"] = {
                k: v for k, v in headers.items() if str(k).strip().lower() not in _REDACTED_FIELDS
            }
        # multipart 稿件和审稿正文一律不上报
        for key in ("data", "body", "cookies"):
            if key in request:
                request[key] = FILTERED

    for section in ("extra", "contexts"):
        if isinstance(event.get(section), dict):
            event[section] = redact(event[section])
    return event


def init_sentry() -> bool:
    """
    Start error reporting when SENTRY_DSN is set and not explicitly disabled.

    main.py wraps the call so a reporter problem never blocks startup.
    """
    cfg = SentryConfig.from_env()
    if not cfg.enabled or not cfg.dsn:
        return False

    import sentry_sdk
    from sentry_sdk.integrations.fastapi import FastApiIntegration

    sentry_sdk.init(
        dsn=cfg.dsn,
        environment=cfg.environment,
        traces_sample_rate=cfg.traces_sample_rate,
        integrations=[FastApiIntegration()],
        send_default_pii=False,
        max_request_body_size="never",
        before_send=before_send,
    )
    logger.info("[Sentry] enabled (env=%s, traces=%.2f)", cfg.environment, cfg.traces_sample_rate)
    return True
