"""
Single-flight guard для фоновых задач.

AICODE-NOTE: Две ступени:
- asyncio.Lock - в пределах процесса (всегда)
- Redis lock с TTL - между процессами (если передан клиент Redis)
Захват не блокирующий: занято → задача пропускается, а не ждёт.
Ошибка Redis при захвате пробрасывается вызывающему, при освобождении
только логируется (lock сам истечёт по TTL).
"""

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from redis.asyncio import Redis
from redis.asyncio.lock import Lock
from redis.exceptions import LockError, RedisError

logger = logging.getLogger(__name__)


class SingleFlightGuard:
    """Не даёт одной и той же задаче выполняться дважды одновременно."""

    def __init__(
        self, name: str, redis: Redis | None = None, ttl_seconds: int = 3600
    ) -> None:
        self.name = name
        self.ttl_seconds = ttl_seconds
        self._redis = redis
        self._local = asyncio.Lock()

    @property
    def busy(self) -> bool:
        return self._local.locked()

    @asynccontextmanager
    async def hold(self) -> AsyncIterator[bool]:
        """
        Попытаться захватить guard.

        Yields:
            True - захвачен, можно работать; False - задача уже выполняется

        Raises:
            RedisError: Redis недоступен при захвате
        """
        if self._local.locked():
            yield False
            return

        async with self._local:
            if self._redis is None:
                yield True
                return

            lock = Lock(self._redis, f"lock:{self.name}", timeout=self.ttl_seconds)
            if not await lock.acquire(blocking=False):
                logger.info(f"Lock {self.name} is held by another process")
                yield False
                return

            try:
                yield True
            finally:
                try:
                    await lock.release()
                except LockError:
                    logger.warning(f"Lock {self.name} expired before release")
                except RedisError as e:
                    logger.warning(f"Lock {self.name} not released ({e}), expires in TTL")

    async def close(self) -> None:
        """Закрыть клиент Redis (на остановке приложения)."""
        if self._redis is not None:
            await self._redis.aclose()
            self._redis = None
