import logging
from typing import Any, Dict

from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import ExpiredSignatureError, JWTError, jwt

from app.core.config import app_config
from app.lib.api_client import supabase

logger = logging.getLogger("reviewportal.auth")

# 身份服务签发 bearer token；本服务只需要调用方的 {id, email}
JWT_SECRET = app_config.jwt_secret
LOCAL_ALGORITHM = "HS256"
AUDIENCE = "authenticated"

security = HTTPBearer()


def _unauthorized(detail: str = "Token invalid or expired") -> HTTPException:
    return HTTPException(status_code=401, detail=detail)


def _identity_from_claims(claims: Dict[str, Any]) -> Dict[str, Any]:
    user_id = claims.get("sub")
    if not user_id:
        raise _unauthorized("Invalid identity payload")
    return {"id": str(user_id), "email": claims.get("email")}


def _verify_with_identity_service(token: str) -> Dict[str, Any]:
    # 非 HS256（如 RS256/ES256）交给 Auth API 校验
    try:
        response = supabase.auth.get_user(token)
    except Exception as e:
        # 配置缺失/网络错误都按鉴权失败处理，不能变成 500
        logger.warning("[Auth] identity service check failed: %s", e)
        raise _unauthorized()
    user = getattr(response, "user", None)
    if user is None or not getattr(user, "id", None):
        raise _unauthorized("Invalid identity payload")
    return {"id": str(user.id), "email": getattr(user, "email", None)}


async def get_current_user(credentials: HTTPAuthorizationCredentials = Depends(security)) -> Dict[str, Any]:
    """
    解码并验证 bearer JWT，返回 {"id", "email"}。
    """
    token = credentials.credentials
    try:
        header = jwt.get_unverified_header(token)
    except JWTError as e:
        logger.info("[Auth] malformed token: %s", e)
        raise _unauthorized()

    if header.get("alg") != LOCAL_ALGORITHM:
        return _verify_with_identity_service(token)

    try:
        claims = jwt.decode(token, JWT_SECRET, algorithms=[LOCAL_ALGORITHM], audience=AUDIENCE)
    except ExpiredSignatureError:
        raise _unauthorized("Token expired")
    except JWTError as e:
        logger.info("[Auth] token rejected: %s", e)
        raise _unauthorized()
    return _identity_from_claims(claims)
