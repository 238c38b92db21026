"""Encryption configuration models."""

from pydantic import BaseModel, Field, SecretStr


class SecurityConfig(BaseModel):
    """Encryption of inputs flagged with encrypt=True.

    The secret should come from USSDKIT_SECURITY__SECRET, never from a
    committed config file.
    """

    secret: SecretStr = Field(
        default=SecretStr(""),
        description="Application secret for key derivation",
    )
    kdf_iterations: int = Field(
        default=100_000,
        ge=1_000,
        description="PBKDF2 iterations per key derivation",
    )
