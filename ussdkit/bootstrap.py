"""Bootstrap module for wiring an Orchestrator from configuration.

Handles:
- Configuring structured logging
- Creating the Redis client, hash store and session mutex
- Creating the cipher from the configured secret

Example usage:

    from ussdkit.bootstrap import create_orchestrator

    orchestrator = create_orchestrator(screens, root="main")
    response = await orchestrator.handle(
        UssdRequest(session_id="abc123", message="*123#", mobile="233200000000")
    )
"""

from collections.abc import Mapping

import redis.asyncio as redis

from ussdkit.config import Settings, get_settings
from ussdkit.conversation.mutex import SessionMutex
from ussdkit.conversation.stores import RedisHashStore
from ussdkit.observability.logging import get_logger, setup_logging
from ussdkit.orchestration import Orchestrator
from ussdkit.screens import Screen
from ussdkit.security import FernetStringCipher

logger = get_logger(__name__)


def create_orchestrator(
    screens: Mapping[str, Screen],
    root: str,
    settings: Settings | None = None,
    redis_client: redis.Redis | None = None,
) -> Orchestrator:
    """Create a Redis-backed Orchestrator.

    Args:
        screens: Screen id -> screen template
        root: Screen id every new session starts on
        settings: Settings to use (default: get_settings())
        redis_client: Existing client to reuse (default: built from settings)

    Returns:
        Orchestrator ready to handle requests
    """
    settings = settings or get_settings()

    log_config = settings.observability.logging
    setup_logging(
        level=log_config.level,
        format=log_config.format,
        redact_pii=log_config.redact_pii,
    )

    client = redis_client or redis.Redis.from_url(
        settings.storage.redis_url, decode_responses=True
    )
    cipher = FernetStringCipher(
        settings.security.secret.get_secret_value(),
        iterations=settings.security.kdf_iterations,
    )

    mutex = None
    if settings.lock.enabled:
        mutex = SessionMutex(
            client,
            lock_timeout=settings.lock.lock_timeout,
            blocking_timeout=settings.lock.blocking_timeout,
            key_prefix=settings.storage.key_prefix,
        )

    logger.info(
        "orchestrator_created",
        app_name=settings.app_name,
        root=root,
        screens=len(screens),
        lock_enabled=mutex is not None,
    )

    return Orchestrator(
        screens,
        root,
        RedisHashStore(client),
        cipher,
        mutex=mutex,
        key_prefix=settings.storage.key_prefix,
        max_redirects=settings.session.max_redirects,
        annotate_invalid_selection=settings.session.annotate_invalid_selection,
    )
