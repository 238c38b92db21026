"""Hash stores backing session state."""

from ussdkit.conversation.store import HashStore
from ussdkit.conversation.stores.inmemory import InMemoryHashStore
from ussdkit.conversation.stores.redis import RedisHashStore

__all__ = [
    "HashStore",
    "InMemoryHashStore",
    "RedisHashStore",
]
