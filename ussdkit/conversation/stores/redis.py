"""Redis implementation of HashStore."""

from collections.abc import Sequence

import redis.asyncio as redis

from ussdkit.conversation.store import HashStore, HashWrite
from ussdkit.observability.logging import get_logger

logger = get_logger(__name__)


class RedisHashStore(HashStore):
    """Redis implementation of HashStore.

    Uses native hashes (HGET/HSET). Multi-field writes go through a
    MULTI/EXEC pipeline so the collected value and the input cursor land
    together. Redis errors are logged and re-raised unchanged.
    """

    def __init__(self, client: redis.Redis) -> None:
        """Initialize Redis hash store.

        Args:
            client: Redis client created with decode_responses=True
        """
        self._client = client

    async def hget(self, key: str, field: str) -> str | None:
        """Get one field of a hash."""
        try:
            value = await self._client.hget(key, field)
        except redis.RedisError as e:
            logger.error("redis_hget_error", key=key, field=field, error=str(e))
            raise
        if isinstance(value, bytes):
            return value.decode()
        return value

    async def hset(self, key: str, field: str, value: str | int) -> None:
        """Set one field of a hash."""
        try:
            await self._client.hset(key, field, str(value))
        except redis.RedisError as e:
            logger.error("redis_hset_error", key=key, field=field, error=str(e))
            raise

    async def hset_many(self, writes: Sequence[HashWrite]) -> None:
        """Apply several writes in one transaction."""
        try:
            async with self._client.pipeline(transaction=True) as pipe:
                for key, field, value in writes:
                    pipe.hset(key, field, str(value))
                await pipe.execute()
        except redis.RedisError as e:
            logger.error(
                "redis_hset_many_error",
                keys=sorted({key for key, _, _ in writes}),
                error=str(e),
            )
            raise
