"""In-memory implementation of HashStore."""

from collections.abc import Sequence

from ussdkit.conversation.store import HashStore, HashWrite


class InMemoryHashStore(HashStore):
    """In-memory implementation of HashStore for testing and development.

    Values are stored as strings, mirroring Redis with decode_responses.
    Not suitable for production use.
    """

    def __init__(self) -> None:
        """Initialize empty storage."""
        self._hashes: dict[str, dict[str, str]] = {}

    async def hget(self, key: str, field: str) -> str | None:
        """Get one field of a hash."""
        return self._hashes.get(key, {}).get(field)

    async def hset(self, key: str, field: str, value: str | int) -> None:
        """Set one field of a hash."""
        self._hashes.setdefault(key, {})[field] = str(value)

    async def hset_many(self, writes: Sequence[HashWrite]) -> None:
        """Apply several writes. Atomic since nothing awaits in between."""
        for key, field, value in writes:
            self._hashes.setdefault(key, {})[field] = str(value)

    def dump(self, key: str) -> dict[str, str]:
        """Return a copy of one hash, for assertions in tests."""
        return dict(self._hashes.get(key, {}))
