"""Argon2id key derivation producing separate encryption and MAC keys."""

import base64
import binascii
import logging
from typing import NamedTuple

from argon2.exceptions import HashingError
from argon2.low_level import Type, hash_secret_raw

from envvault.security.config import DEFAULT_CONFIG, CryptoConfig
from envvault.security.errors import InvalidSaltError, KeyDerivationError

logger = logging.getLogger(__name__)


class DerivedKeyPair(NamedTuple):
    """Key material for a single encrypt or decrypt call.

    Attributes:
        encryption_key: AES-256 key.
        mac_key: HMAC-SHA256 key.
    """

    encryption_key: bytes
    mac_key: bytes

    def __repr__(self) -> str:
        return "DerivedKeyPair(encryption_key=<redacted>, mac_key=<redacted>)"


class KeyDerivationService:
    """Derives an encryption key and a MAC key from one Argon2id call.

    The salt is passed as the Argon2 salt, so different salts yield unrelated
    key pairs for the same secret. The 64-byte output is split in half: the
    first half is the encryption key, the second the MAC key.
    """

    def __init__(self, config: CryptoConfig | None = None) -> None:
        self._config = config or DEFAULT_CONFIG

    def decode_salt(self, salt: bytes | str) -> bytes:
        """Normalize a salt to raw bytes.

        Args:
            salt: Raw salt bytes or its base64 encoding.

        Returns:
            Decoded salt bytes.

        Raises:
            InvalidSaltError: If the salt is not valid base64 or has the wrong length.
        """
        if isinstance(salt, str):
            try:
                salt = base64.b64decode(salt, validate=True)
            except (binascii.Error, ValueError) as e:
                raise InvalidSaltError("Salt is not a valid base64 string") from e
        if len(salt) != self._config.salt_length:
            raise InvalidSaltError(
                f"Salt must be {self._config.salt_length} bytes, got {len(salt)}"
            )
        return salt

    def derive(self, secret: str, salt: bytes | str) -> DerivedKeyPair:
        """Derive the key pair for a secret and salt.

        Args:
            secret: Low-entropy secret key.
            salt: Per-value random salt, raw or base64.

        Returns:
            DerivedKeyPair with 32-byte encryption and MAC keys.

        Raises:
            InvalidSaltError: If the salt is malformed.
            KeyDerivationError: If Argon2 fails.
        """
        salt_bytes = self.decode_salt(salt)
        params = self._config.argon2

        try:
            derived = hash_secret_raw(
                secret=secret.encode("utf-8"),
                salt=salt_bytes,
                time_cost=params.time_cost,
                memory_cost=params.memory_cost,
                parallelism=params.parallelism,
                hash_len=self._config.derived_key_length,
                type=Type.ID,
            )
        except (HashingError, MemoryError) as e:
            raise KeyDerivationError(f"Failed to derive keys using Argon2: {e}") from e

        split = self._config.secret_key_length
        return DerivedKeyPair(encryption_key=derived[:split], mac_key=derived[split:])
