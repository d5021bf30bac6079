import logging
import os

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

# 环境变量必须在导入 app.* 之前加载（config 在导入时读取）
load_dotenv()

from app.api.v1 import internal, manuscripts, notifications, reviews  # noqa: E402
from app.core.config import WorkflowConfig  # noqa: E402
from app.core.middleware import ExceptionHandlerMiddleware  # noqa: E402
from app.core.sentry_init import init_sentry  # noqa: E402

logger = logging.getLogger("reviewportal")

API_V1 = "/api/v1"


def _start_error_reporting() -> bool:
    # 错误上报出问题绝不能阻塞启动
    try:
        return init_sentry()
    except Exception as e:
        logger.warning("[Sentry] init failed (ignored): %s", e)
        return False


def _cors_origins() -> list[str]:
    """
    前端站点 + FRONTEND_ORIGINS（逗号分隔）里额外允许的来源，去重保序。
    """
    configured = [WorkflowConfig.from_env().frontend_url]
    configured += (os.environ.get("FRONTEND_ORIGINS") or "").split(",")
    origins = [o.strip().rstrip("/") for o in configured if o and o.strip()]
    return list(dict.fromkeys(origins))


_start_error_reporting()

app = FastAPI(
    title="Review Portal API",
    description="Manuscript submission, peer review and publication workflow",
    version="1.0.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(ExceptionHandlerMiddleware)

for module in (manuscripts, reviews, notifications, internal):
    app.include_router(module.router, prefix=API_V1)


@app.get("/")
async def root():
    return {"message": "Review Portal API is running", "docs": "/docs"}
