"""Configuration model exports.

    from ussdkit.config.models import StorageConfig, LockConfig
"""

from ussdkit.config.models.observability import LoggingConfig, ObservabilityConfig
from ussdkit.config.models.security import SecurityConfig
from ussdkit.config.models.session import SessionConfig
from ussdkit.config.models.storage import LockConfig, StorageConfig

__all__ = [
    "LockConfig",
    "LoggingConfig",
    "ObservabilityConfig",
    "SecurityConfig",
    "SessionConfig",
    "StorageConfig",
]
