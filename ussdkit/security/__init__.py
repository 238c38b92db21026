"""Encryption of sensitive input values."""

from ussdkit.security.cipher import (
    CipherError,
    FernetStringCipher,
    StringCipher,
    generate_salt,
)

__all__ = [
    "CipherError",
    "FernetStringCipher",
    "StringCipher",
    "generate_salt",
]
