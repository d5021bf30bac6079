from __future__ import annotations

import logging
import re
from typing import Any, Optional
from uuid import uuid4

from fastapi import HTTPException, UploadFile

from app.lib.api_client import supabase_admin
from app.models.schemas import FileRef

logger = logging.getLogger("reviewportal.storage")

MANUSCRIPT_BUCKET = "manuscripts"
MAX_UPLOAD_BYTES = 50 * 1024 * 1024

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


def safe_filename(name: Optional[str]) -> str:
    cleaned = _UNSAFE_CHARS.sub("_", str(name or "").strip()).strip("._")
    return cleaned or "file"


class BlobStore:
    """
    文件字节存放在 Supabase Storage；核心只保存 FileRef（路径 + 原始文件名 + MIME）。

    中文注释:
    - 上传路径带 uuid 前缀，同名文件不会互相覆盖（修订稿永远是新对象）。
    - bucket 不存在时兜底创建一次（开发/演示环境常见）。
    """

    def __init__(self, client: Any = None, *, bucket: str = MANUSCRIPT_BUCKET) -> None:
        self.client = client if client is not None else supabase_admin
        self.bucket = bucket

    def ensure_bucket_exists(self) -> None:
        storage = getattr(self.client, "storage", None)
        if storage is None or not hasattr(storage, "get_bucket") or not hasattr(storage, "create_bucket"):
            return
        try:
            storage.get_bucket(self.bucket)
            return
        except Exception as e:
            logger.info("[Storage] bucket %s not found, creating: %s", self.bucket, e)

        try:
            storage.create_bucket(self.bucket, options={"public": False})
        except Exception as e:
            text = str(e).lower()
            if "already" in text or "exists" in text or "duplicate" in text:
                return
            raise

    def upload_bytes(self, *, path: str, content: bytes, content_type: str) -> None:
        self.ensure_bucket_exists()
        # storage3 期望 header value 为字符串；传 bool 会触发 httpx "Header value must be str or bytes"。
        opts = {"content-type": content_type, "upsert": "false"}
        self.client.storage.from_(self.bucket).upload(path, content, opts)

    async def store_upload(self, upload: UploadFile, *, folder: str) -> FileRef:
        content = await upload.read()
        if not content:
            raise HTTPException(status_code=422, detail=f"Uploaded file '{upload.filename}' is empty")
        if len(content) > MAX_UPLOAD_BYTES:
            raise HTTPException(status_code=413, detail="Uploaded file is too large")

        original_name = upload.filename or "file"
        mime_type = upload.content_type or "application/octet-stream"
        path = f"{folder.strip('/')}/{uuid4().hex}_{safe_filename(original_name)}"
        self.upload_bytes(path=path, content=content, content_type=mime_type)
        return FileRef(url=path, original_name=original_name, mime_type=mime_type)
