"""Per-session lock held while one inbound message is handled.

Two messages for the same USSD session must not interleave their reads of
the cursor with each other's writes. The lock lives in Redis next to the
session hashes, so it holds across orchestrator processes.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from redis.asyncio import Redis
from redis.exceptions import LockError

from ussdkit.observability.logging import get_logger

logger = get_logger(__name__)


class SessionMutex:
    """Redis lock keyed by session id.

    Lock key format: {prefix}:lock:{session_id}
    """

    def __init__(
        self,
        redis: Redis,
        lock_timeout: int = 30,
        blocking_timeout: float = 5.0,
        key_prefix: str = "ussd",
    ):
        """Initialize the session mutex.

        Args:
            redis: Redis client instance
            lock_timeout: Seconds before a held lock expires on its own
            blocking_timeout: Seconds to wait for a session that is busy
            key_prefix: Prefix shared with the session hashes
        """
        self._redis = redis
        self._lock_timeout = lock_timeout
        self._blocking_timeout = blocking_timeout
        self._key_prefix = key_prefix

    def lock_key(self, session_id: str) -> str:
        return f"{self._key_prefix}:lock:{session_id}"

    @asynccontextmanager
    async def acquire(self, session_id: str) -> AsyncGenerator[bool, None]:
        """Hold the session lock for the body of the `async with`.

        Yields:
            True when the lock is held, False when the session stayed busy
            for the whole blocking timeout
        """
        lock = self._redis.lock(
            self.lock_key(session_id),
            timeout=self._lock_timeout,
            blocking_timeout=self._blocking_timeout,
        )
        acquired = await lock.acquire()
        if not acquired:
            yield False
            return

        try:
            yield True
        finally:
            try:
                await lock.release()
            except LockError as e:
                # Expired while the message was handled; another request may own it now
                logger.warning(
                    "session_lock_release_failed",
                    session_id=session_id,
                    error=str(e),
                )
