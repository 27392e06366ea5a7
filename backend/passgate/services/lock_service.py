"""
Redis-backed per-booking entry lock.
Implements EntryLockStrategy interface using Redis locks.

Circuit Breaker Pattern:
  On Redis failure, the lock "fails open" and the check-in proceeds unlocked.
  The booking version check in the store remains authoritative, so a Redis
  outage degrades to optimistic retries instead of blocking the gate.
"""

from contextlib import asynccontextmanager
from typing import AsyncIterator, Awaitable, Callable, Optional

import redis.asyncio as redis
from redis.exceptions import LockError, RedisError

from passgate.core.config import get_settings
from passgate.core.logging import get_logger
from passgate.core.metrics import redis_connection_errors, redis_circuit_breaker_open
from passgate.infrastructure.redis_client import get_redis
from passgate.services.interfaces.entry_lock import EntryLockStrategy

logger = get_logger(__name__)

LOCK_KEY_PREFIX = "gate:booking:"


class RedisEntryLock(EntryLockStrategy):
    """
    Redis lock per booking id, shared by every gate worker.

    Use when:
    - Several gates scan the same group bookings at once
    - Multiple API workers/processes serve the gate
    """

    def __init__(
        self,
        client_factory: Callable[[], Awaitable[Optional[redis.Redis]]] = get_redis,
        timeout: Optional[float] = None,
        blocking_timeout: Optional[float] = None,
    ):
        settings = get_settings()
        self.client_factory = client_factory
        self.timeout = timeout if timeout is not None else settings.ENTRY_LOCK_TIMEOUT
        self.blocking_timeout = (
            blocking_timeout if blocking_timeout is not None else settings.ENTRY_LOCK_BLOCKING_TIMEOUT
        )

    @staticmethod
    def key_for(booking_id: int) -> str:
        return f"{LOCK_KEY_PREFIX}{booking_id}"

    @asynccontextmanager
    async def hold(self, booking_id: int) -> AsyncIterator[None]:
        client = await self.client_factory()
        if client is None:
            yield
            return

        lock = client.lock(
            self.key_for(booking_id),
            timeout=self.timeout,
            blocking_timeout=self.blocking_timeout,
        )
        acquired = False
        try:
            acquired = await lock.acquire()
            redis_circuit_breaker_open.set(0)
        except RedisError as e:
            redis_connection_errors.inc()
            redis_circuit_breaker_open.set(1)
            logger.warning("entry_lock_unavailable", booking_id=booking_id, error=str(e))

        if not acquired:
            logger.info("entry_lock_not_acquired", booking_id=booking_id)

        try:
            yield
        finally:
            if acquired:
                try:
                    await lock.release()
                except (LockError, RedisError) as e:
                    # Lock expired mid check-in; the version check still guarded the write
                    logger.warning("entry_lock_release_failed", booking_id=booking_id, error=str(e))
