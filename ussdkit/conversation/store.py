"""HashStore abstract interface."""

from abc import ABC, abstractmethod
from collections.abc import Sequence

# (key, field, value)
HashWrite = tuple[str, str, str | int]


class HashStore(ABC):
    """Abstract interface for the durable key/value store.

    Each key holds a hash map of string fields. Implementations surface
    backend failures unchanged and never retry on their own.
    """

    @abstractmethod
    async def hget(self, key: str, field: str) -> str | None:
        """Get one field of a hash, None if key or field is missing."""
        pass

    @abstractmethod
    async def hset(self, key: str, field: str, value: str | int) -> None:
        """Set one field of a hash, overwriting any previous value."""
        pass

    @abstractmethod
    async def hset_many(self, writes: Sequence[HashWrite]) -> None:
        """Apply several field writes, possibly across keys, atomically.

        Writes are applied in the given order.
        """
        pass
