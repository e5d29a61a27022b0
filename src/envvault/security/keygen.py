"""Cryptographically secure random material for salts, IVs and keys."""

import base64
import logging
import secrets

from envvault.security.config import DEFAULT_CONFIG, CryptoConfig
from envvault.security.errors import InvalidLength

logger = logging.getLogger(__name__)


class SecureKeyGenerator:
    """Produces random byte strings from the platform CSPRNG.

    Every request is bounds-checked: lengths must be integers between
    ``MIN_SECURE_LENGTH`` and ``MAX_REASONABLE_LENGTH`` bytes.
    """

    MIN_SECURE_LENGTH = 8
    MAX_REASONABLE_LENGTH = 1024

    def __init__(self, config: CryptoConfig | None = None) -> None:
        self._config = config or DEFAULT_CONFIG

    def validate_length(self, length: int) -> None:
        """Check that a requested length is usable.

        Args:
            length: Number of bytes requested.

        Raises:
            InvalidLength: If length is not an int or is out of bounds.
        """
        if isinstance(length, bool) or not isinstance(length, int):
            raise InvalidLength(f"Length must be an integer, got {length!r}")
        if length < self.MIN_SECURE_LENGTH:
            raise InvalidLength(
                f"Length must be at least {self.MIN_SECURE_LENGTH} bytes for security, "
                f"got {length}"
            )
        if length > self.MAX_REASONABLE_LENGTH:
            raise InvalidLength(
                f"Length {length} exceeds maximum reasonable length of "
                f"{self.MAX_REASONABLE_LENGTH} bytes"
            )

    def generate(self, length: int) -> bytes:
        """Return ``length`` random bytes.

        Args:
            length: Number of bytes to generate.

        Returns:
            Random bytes.

        Raises:
            InvalidLength: If length is invalid.
        """
        self.validate_length(length)
        return secrets.token_bytes(length)

    def generate_iv(self) -> bytes:
        """Nonce for AES-GCM."""
        return self.generate(self._config.iv_length)

    def generate_legacy_iv(self) -> bytes:
        """IV for 16-byte block modes."""
        return self.generate(self._config.legacy_iv_length)

    def generate_salt(self) -> bytes:
        return self.generate(self._config.salt_length)

    def generate_secret_key(self) -> bytes:
        return self.generate(self._config.secret_key_length)

    def generate_base64(self, length: int) -> str:
        return base64.b64encode(self.generate(length)).decode("ascii")

    def generate_hex(self, length: int = 32) -> str:
        return self.generate(length).hex()


def generate_secret_key(config: CryptoConfig | None = None) -> str:
    """Generate a new base64-encoded secret key.

    Args:
        config: Optional configuration controlling the key length.

    Returns:
        Base64 text suitable for storing in an env file.
    """
    config = config or DEFAULT_CONFIG
    key = SecureKeyGenerator(config).generate_base64(config.secret_key_length)
    logger.debug("Generated new secret key")
    return key
