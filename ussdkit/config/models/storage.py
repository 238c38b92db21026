"""Storage and locking configuration models."""

from pydantic import BaseModel, Field


class StorageConfig(BaseModel):
    """Redis connection and key layout."""

    redis_url: str = Field(
        default="redis://localhost:6379/0",
        description="Redis connection URL",
    )
    key_prefix: str = Field(
        default="ussd",
        min_length=1,
        description="Prefix for all session keys",
    )


class LockConfig(BaseModel):
    """Per-session advisory lock held while one message is handled."""

    enabled: bool = Field(default=True, description="Serialize requests per session")
    lock_timeout: int = Field(
        default=30,
        gt=0,
        description="Seconds before a held lock auto-expires",
    )
    blocking_timeout: float = Field(
        default=5.0,
        gt=0,
        description="Seconds to wait for a busy session",
    )
