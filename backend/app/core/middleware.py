import logging
import time
from uuid import uuid4

from fastapi import HTTPException, Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

# === 日志配置 ===
logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
logger = logging.getLogger("reviewportal.http")


class ExceptionHandlerMiddleware(BaseHTTPMiddleware):
    """
    Request logging plus a last-resort error boundary.

    中文注释:
    - 每个请求带一个 X-Request-ID（沿用客户端传入的，否则生成），日志和响应头里都有，方便排查。
    - 业务层的 HTTPException 由 FastAPI 自己处理；漏到这里的未知异常统一返回 500，不泄露细节。
    - 这一层不回滚：异常前已经写入的状态保持原样。
    """

    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get("X-Request-ID") or uuid4().hex[:12]
        started = time.perf_counter()
        try:
            response = await call_next(request)
        except HTTPException as exc:
            response = JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})
        except Exception:
            logger.exception("[%s] %s %s failed", request_id, request.method, request.url.path)
            response = JSONResponse(
                status_code=500,
                content={"detail": "Internal server error", "request_id": request_id},
            )

        elapsed_ms = (time.perf_counter() - started) * 1000
        logger.info(
            "[%s] %s %s -> %s (%.1fms)",
            request_id,
            request.method,
            request.url.path,
            response.status_code,
            elapsed_ms,
        )
        response.headers["X-Request-ID"] = request_id
        return response
