from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator


class KeyedAsyncLock:
    """
    One asyncio.Lock per key (manuscript id), created on demand.

    中文注释:
    - 同一稿件的写操作串行执行（邀请审稿人、记录决定、提交修订……），避免重复邀请等竞态。
    - 锁按引用计数回收：无人持有/等待时从字典删除，长时间运行也不会无限增长。
    - 仅保证单进程内互斥；跨进程由 manuscripts.lock_version 乐观锁兜底。
    """

    def __init__(self) -> None:
        self._locks: dict[str, asyncio.Lock] = {}
        self._waiters: dict[str, int] = {}

    def __len__(self) -> int:
        return len(self._locks)

    def locked(self, key: str) -> bool:
        lock = self._locks.get(str(key))
        return bool(lock and lock.locked())

    @asynccontextmanager
    async def hold(self, key: str) -> AsyncIterator[None]:
        k = str(key)
        lock = self._locks.get(k)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[k] = lock
        self._waiters[k] = self._waiters.get(k, 0) + 1
        try:
            async with lock:
                yield
        finally:
            remaining = self._waiters.get(k, 1) - 1
            if remaining <= 0:
                self._waiters.pop(k, None)
                self._locks.pop(k, None)
            else:
                self._waiters[k] = remaining


# Shared by every service instance in the process (services are created per request).
manuscript_locks = KeyedAsyncLock()
