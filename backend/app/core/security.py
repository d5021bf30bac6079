from __future__ import annotations

import hmac
import logging

from fastapi import Header, HTTPException, Request

from app.core.config import get_admin_api_key

logger = logging.getLogger("reviewportal.auth")


def _key_matches(supplied: str | None, expected: str) -> bool:
    if not supplied:
        return False
    return hmac.compare_digest(supplied.encode("utf-8"), expected.encode("utf-8"))


async def require_admin_key(
    request: Request,
    x_admin_key: str | None = Header(default=None, alias="X-Admin-Key"),
) -> None:
    """
    Guard for /internal hooks called by the identity service (e.g. co-author linking after signup).

    The key sits outside the user JWT system. With ADMIN_API_KEY unset every call is refused.
    """
    expected = get_admin_api_key()
    if not expected:
        logger.warning("[Internal] %s refused: ADMIN_API_KEY not configured", request.url.path)
        raise HTTPException(status_code=401, detail="Admin key not configured")
    if not _key_matches(x_admin_key, expected):
        logger.warning("[Internal] %s refused: bad admin key", request.url.path)
        raise HTTPException(status_code=401, detail="Invalid admin key")
