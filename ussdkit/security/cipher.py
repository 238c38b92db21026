"""String encryption for sensitive input values.

Values flagged for encryption are stored as Fernet tokens. The Fernet key
is derived per session from the application secret and the session salt
with PBKDF2-HMAC-SHA256, so a token is only readable within its session.
"""

import asyncio
import base64
import secrets
from abc import ABC, abstractmethod

from cryptography.fernet import Fernet, InvalidToken
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

# Salt length in bytes before hex encoding
SALT_BYTES = 16


class CipherError(Exception):
    """Raised when a ciphertext cannot be decrypted."""

    def __init__(self, message: str, cause: Exception | None = None) -> None:
        super().__init__(message)
        self.cause = cause


def generate_salt() -> str:
    """Return a fresh random salt for a new session."""
    return secrets.token_hex(SALT_BYTES)


class StringCipher(ABC):
    """Abstract interface for the encryption primitive."""

    @abstractmethod
    async def encrypt(self, plaintext: str, salt: str) -> str:
        """Encrypt plaintext for the given salt."""
        pass

    @abstractmethod
    async def decrypt(self, ciphertext: str, salt: str) -> str:
        """Decrypt ciphertext produced by encrypt() with the same salt."""
        pass


class FernetStringCipher(StringCipher):
    """Fernet cipher with a PBKDF2-derived key per salt.

    Key derivation is CPU bound, so both operations run in a worker thread
    to keep the event loop free for other requests.
    """

    def __init__(self, secret: str, iterations: int = 100_000) -> None:
        """Initialize the cipher.

        Args:
            secret: Application secret shared by all sessions
            iterations: PBKDF2 iteration count
        """
        if not secret:
            raise ValueError("FernetStringCipher needs a non-empty secret")
        self._secret = secret.encode()
        self._iterations = iterations

    def _fernet(self, salt: str) -> Fernet:
        kdf = PBKDF2HMAC(
            algorithm=hashes.SHA256(),
            length=32,
            salt=salt.encode(),
            iterations=self._iterations,
        )
        return Fernet(base64.urlsafe_b64encode(kdf.derive(self._secret)))

    def _encrypt_sync(self, plaintext: str, salt: str) -> str:
        return self._fernet(salt).encrypt(plaintext.encode()).decode()

    def _decrypt_sync(self, ciphertext: str, salt: str) -> str:
        try:
            return self._fernet(salt).decrypt(ciphertext.encode()).decode()
        except InvalidToken as e:
            raise CipherError("Failed to decrypt value", cause=e) from e

    async def encrypt(self, plaintext: str, salt: str) -> str:
        """Encrypt plaintext for the given salt."""
        return await asyncio.to_thread(self._encrypt_sync, plaintext, salt)

    async def decrypt(self, ciphertext: str, salt: str) -> str:
        """Decrypt a Fernet token for the given salt.

        Raises:
            CipherError: If the token is malformed or was made for another salt
        """
        return await asyncio.to_thread(self._decrypt_sync, ciphertext, salt)
