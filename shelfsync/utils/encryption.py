"""
Encryption utilities for OAuth tokens held in memory.
Uses Fernet symmetric encryption with the configured ENCRYPTION_KEY.
"""
import logging
from typing import Optional

from cryptography.fernet import Fernet, InvalidToken

logger = logging.getLogger(__name__)


class TokenCipher:
    """Fernet wrapper. With no key configured, values pass through unchanged."""

    def __init__(self, key: str = ""):
        self._fernet: Optional[Fernet] = None
        if key:
            try:
                self._fernet = Fernet(key.encode() if isinstance(key, str) else key)
            except (ValueError, TypeError) as e:
                # A configured key never degrades to plaintext
                logger.error("ENCRYPTION_KEY is not a valid Fernet key: %s", str(e))
                raise ValueError(
                    "ENCRYPTION_KEY must be a 32-byte url-safe base64 Fernet key "
                    "(generate one with cryptography.fernet.Fernet.generate_key())"
                ) from e
        else:
            logger.warning("ENCRYPTION_KEY not configured - tokens will be held unencrypted")

    @property
    def enabled(self) -> bool:
        return self._fernet is not None

    def encrypt(self, plaintext: str) -> str:
        if not plaintext or self._fernet is None:
            return plaintext
        return self._fernet.encrypt(plaintext.encode()).decode()

    def decrypt(self, encrypted: str) -> Optional[str]:
        """
        Decrypt a value produced by encrypt().
        Returns None when the value was encrypted with a different key.
        """
        if not encrypted or self._fernet is None:
            return encrypted
        try:
            return self._fernet.decrypt(encrypted.encode()).decode()
        except InvalidToken:
            logger.error("Token decryption failed - ENCRYPTION_KEY changed?")
            return None
