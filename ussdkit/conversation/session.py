"""Per-request view over a USSD session's durable state.

All session state lives in two hashes of the external store:

- {prefix}:{session_id}:input_data - collected values, field = input name
- {prefix}:{session_id}:input_meta - Position (input cursor), Screen
  (current screen id) and Salt (encryption salt)

A Session object is built for one inbound message and dropped afterwards.
Nothing is cached between requests; the store is the source of truth.
"""

from ussdkit.conversation.models import UssdRequest
from ussdkit.conversation.store import HashStore
from ussdkit.observability.logging import get_logger
from ussdkit.security import StringCipher, generate_salt

logger = get_logger(__name__)

INPUT_DATA_NAMESPACE = "input_data"
INPUT_META_NAMESPACE = "input_meta"

POSITION_FIELD = "Position"
SCREEN_FIELD = "Screen"
SALT_FIELD = "Salt"


class Session:
    """Durable state of one dialog, as seen by a single request.

    Application behaviors receive this object. Besides the inbound message
    they may use `store` with `input_data_key` / `input_meta_key` to read
    or write extra state of their own.
    """

    def __init__(
        self,
        request: UssdRequest,
        store: HashStore,
        cipher: StringCipher,
        *,
        screen_id: str,
        salt: str,
        key_prefix: str = "ussd",
    ) -> None:
        self.request = request
        self.store = store
        self._cipher = cipher
        self.screen_id = screen_id
        self.salt = salt
        self._key_prefix = key_prefix
        # True while the current screen is being entered, not answered
        self.is_entry = False

    @property
    def session_id(self) -> str:
        return self.request.session_id

    @property
    def message(self) -> str:
        return self.request.message

    @property
    def mobile(self) -> str | None:
        return self.request.mobile

    @property
    def input_data_key(self) -> str:
        return build_key(self._key_prefix, self.session_id, INPUT_DATA_NAMESPACE)

    @property
    def input_meta_key(self) -> str:
        return build_key(self._key_prefix, self.session_id, INPUT_META_NAMESPACE)

    @classmethod
    async def load(
        cls,
        request: UssdRequest,
        store: HashStore,
        cipher: StringCipher,
        key_prefix: str = "ussd",
    ) -> "Session | None":
        """Load an existing session, None if the store has no record of it."""
        meta_key = build_key(key_prefix, request.session_id, INPUT_META_NAMESPACE)
        screen_id = await store.hget(meta_key, SCREEN_FIELD)
        if screen_id is None:
            return None
        salt = await store.hget(meta_key, SALT_FIELD) or ""
        return cls(
            request,
            store,
            cipher,
            screen_id=screen_id,
            salt=salt,
            key_prefix=key_prefix,
        )

    @classmethod
    async def start(
        cls,
        request: UssdRequest,
        store: HashStore,
        cipher: StringCipher,
        screen_id: str,
        key_prefix: str = "ussd",
    ) -> "Session":
        """Create the session record on the given screen."""
        session = cls(
            request,
            store,
            cipher,
            screen_id=screen_id,
            salt=generate_salt(),
            key_prefix=key_prefix,
        )
        await store.hset_many(
            [
                (session.input_meta_key, SCREEN_FIELD, screen_id),
                (session.input_meta_key, SALT_FIELD, session.salt),
                (session.input_meta_key, POSITION_FIELD, 0),
            ]
        )
        logger.info("session_started", session_id=session.session_id, screen=screen_id)
        return session

    async def get_position(self) -> int:
        """Read the input cursor, 0 when never written."""
        raw = await self.store.hget(self.input_meta_key, POSITION_FIELD)
        return int(raw) if raw is not None else 0

    async def set_position(self, position: int) -> None:
        """Persist the input cursor."""
        await self.store.hset(self.input_meta_key, POSITION_FIELD, position)

    async def set_screen(self, screen_id: str) -> None:
        """Move to another screen, rewinding the input cursor."""
        await self.store.hset_many(
            [
                (self.input_meta_key, SCREEN_FIELD, screen_id),
                (self.input_meta_key, POSITION_FIELD, 0),
            ]
        )
        self.screen_id = screen_id

    async def get_input(self, name: str) -> str | None:
        """Read the stored (possibly encrypted) value of one input."""
        return await self.store.hget(self.input_data_key, name)

    async def encrypt(self, value: str) -> str:
        """Encrypt a value with this session's salt."""
        return await self._cipher.encrypt(value, self.salt)

    async def decrypt(self, value: str) -> str:
        """Decrypt a value encrypted with this session's salt."""
        return await self._cipher.decrypt(value, self.salt)


def build_key(prefix: str, session_id: str, namespace: str) -> str:
    """Build a store key for one of a session's hashes.

    Format: {prefix}:{session_id}:{namespace}
    """
    return f"{prefix}:{session_id}:{namespace}"
