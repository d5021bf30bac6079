from typing import Any, Callable, Optional

from supabase import Client, create_client

from app.core.config import app_config

# 中文注释:
# - 导入本模块绝不能因为缺少环境变量而失败：单测会替换 supabase / supabase_admin，
#   配置错误的部署在第一次真正访问数据库时才报错。
# - supabase 走 anon key（身份服务相关调用），supabase_admin 走 service role（业务表读写）。


class _DeferredClient:
    """Builds the real Client on first attribute access."""

    def __init__(self, build: Callable[[], Client], label: str):
        self._build = build
        self._label = label
        self._client: Optional[Client] = None

    def __getattr__(self, item: str) -> Any:
        if self._client is None:
            self._client = self._build()
        return getattr(self._client, item)

    def __repr__(self) -> str:
        state = "connected" if self._client is not None else "deferred"
        return f"<{self._label} ({state})>"


def _connect(key: str, key_name: str) -> Client:
    if not app_config.supabase_url:
        raise RuntimeError("SUPABASE_URL is required")
    if not key:
        raise RuntimeError(f"{key_name} is required")
    return create_client(app_config.supabase_url, key)


supabase: Client = _DeferredClient(  # type: ignore[assignment]
    lambda: _connect(app_config.anon_key, "SUPABASE_ANON_KEY"), "supabase"
)
supabase_admin: Client = _DeferredClient(  # type: ignore[assignment]
    lambda: _connect(app_config.service_role_key, "SUPABASE_SERVICE_ROLE_KEY"), "supabase_admin"
)


def extract_rows(response: Any) -> list[dict[str, Any]]:
    """
    Normalises supabase-py responses across versions (object with `.data` or `(error, data)` tuple).
    """
    if response is None:
        return []
    data = getattr(response, "data", None)
    if data is None and isinstance(response, tuple) and len(response) == 2:
        data = response[1]
    if data is None:
        return []
    if isinstance(data, dict):
        return [data]
    return list(data)
