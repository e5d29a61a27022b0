"""Encrypt and decrypt single values with a password-derived key."""

import logging
from typing import NamedTuple

from envvault.security.cipher import AuthenticatedCipher
from envvault.security.config import DEFAULT_CONFIG, CryptoConfig
from envvault.security.errors import (
    AuthenticationFailure,
    FormatError,
    InvalidSecretKeyError,
)
from envvault.security.kdf import KeyDerivationService
from envvault.security.keygen import SecureKeyGenerator
from envvault.security.wire import EncryptedRecord, WireFormatCodec

logger = logging.getLogger(__name__)


class Credentials(NamedTuple):
    """Decrypted login material."""

    username: str
    password: str


class CryptoService:
    """Composes key derivation, AES-GCM and HMAC into the ``ENC2:`` format.

    Each call to :meth:`encrypt` draws a fresh salt and IV, so key material is
    never shared between values.
    """

    AUTHENTICATED_FIELDS = ("cipherText", "mac")

    def __init__(
        self,
        config: CryptoConfig | None = None,
        key_generator: SecureKeyGenerator | None = None,
        kdf: KeyDerivationService | None = None,
        cipher: AuthenticatedCipher | None = None,
        codec: WireFormatCodec | None = None,
    ) -> None:
        """Initialize the service.

        Args:
            config: Shared crypto configuration.
            key_generator: Source of salts and IVs.
            kdf: Key derivation service.
            cipher: AEAD cipher and MAC provider.
            codec: Wire format codec.
        """
        self._config = config or DEFAULT_CONFIG
        self._keygen = key_generator or SecureKeyGenerator(self._config)
        self._kdf = kdf or KeyDerivationService(self._config)
        self._cipher = cipher or AuthenticatedCipher()
        self._codec = codec or WireFormatCodec(self._config)

    @property
    def codec(self) -> WireFormatCodec:
        return self._codec

    def validate_secret_key(self, secret: str) -> None:
        """Reject empty or short secret keys.

        Raises:
            InvalidSecretKeyError: If the key is unusable.
        """
        if not secret or not isinstance(secret, str):
            raise InvalidSecretKeyError("Secret key must be a non-empty string")
        if len(secret) < self._config.min_secret_length:
            raise InvalidSecretKeyError(
                "Secret key must be at least "
                f"{self._config.min_secret_length} characters long"
            )

    def is_encrypted(self, text: str) -> bool:
        return self._codec.is_encrypted(text)

    def encrypt(self, value: str, secret: str) -> str:
        """Encrypt a value.

        Args:
            value: Non-empty plaintext.
            secret: Secret key to derive keys from.

        Returns:
            The encrypted value in wire format.

        Raises:
            ValueError: If value is empty.
            InvalidSecretKeyError: If the secret key is unusable.
            KeyDerivationError: If Argon2 fails.
            CipherError: If AES-GCM fails.
        """
        self.validate_secret_key(secret)
        if not value or not isinstance(value, str):
            raise ValueError("encrypt: Value must be a non-empty string")

        salt = self._keygen.generate_salt()
        iv = self._keygen.generate_iv()
        keys = self._kdf.derive(secret, salt)

        cipher_text = self._cipher.encrypt(value, iv, keys.encryption_key)
        mac = self._cipher.compute_mac(keys.mac_key, salt + iv + cipher_text)

        return self._codec.encode(EncryptedRecord(salt, iv, cipher_text, mac))

    def decrypt(self, encrypted: str, secret: str) -> str:
        """Decrypt a wire-format value.

        The HMAC is checked before any decryption is attempted. A cipherText
        or mac field that fails to parse is treated as tampering, since it can
        never authenticate.

        Args:
            encrypted: Value produced by :meth:`encrypt`.
            secret: Secret key used for encryption.

        Returns:
            The original plaintext.

        Raises:
            FormatError: If the value is malformed outside the MAC-bound fields.
            AuthenticationFailure: On wrong key or tampered data.
            DecryptionError: If AES-GCM decryption fails.
        """
        self.validate_secret_key(secret)
        try:
            record = self._codec.decode(encrypted)
        except FormatError as e:
            if e.field in self.AUTHENTICATED_FIELDS:
                raise AuthenticationFailure(
                    f"Authentication failed: {e} - tampered data"
                ) from e
            raise
        self._check_lengths(record)
        # Unused trailing bits in a base64 field change the text but not the bytes
        if self._codec.encode(record) != encrypted:
            raise AuthenticationFailure(
                "Authentication failed: non-canonical encoding - tampered data"
            )

        keys = self._kdf.derive(secret, record.salt)
        if not self._cipher.verify_mac(
            keys.mac_key, record.authenticated_data(), record.mac
        ):
            raise AuthenticationFailure(
                "Authentication failed: HMAC mismatch - Invalid key or tampered data"
            )

        plain = self._cipher.decrypt(record.iv, keys.encryption_key, record.cipher_text)
        try:
            return plain.decode("utf-8")
        except UnicodeDecodeError as e:
            raise FormatError("Decrypted value is not valid UTF-8") from e

    def encrypt_many(self, values: list[str], secret: str) -> list[str]:
        return [self.encrypt(value, secret) for value in values]

    def decrypt_many(self, values: list[str], secret: str) -> list[str]:
        return [self.decrypt(value, secret) for value in values]

    def decrypt_credentials(
        self, username: str, password: str, secret: str
    ) -> Credentials:
        """Decrypt an encrypted username and password pair."""
        return Credentials(
            username=self.decrypt(username, secret),
            password=self.decrypt(password, secret),
        )

    def _check_lengths(self, record: EncryptedRecord) -> None:
        if len(record.iv) != self._config.iv_length:
            raise FormatError(
                f"IV must be {self._config.iv_length} bytes, got {len(record.iv)}",
                field="iv",
            )
        # A MAC of the wrong length can never verify
        if len(record.mac) != self._config.mac_key_length:
            raise AuthenticationFailure(
                f"Authentication failed: MAC must be {self._config.mac_key_length} "
                f"bytes, got {len(record.mac)}"
            )


# Singleton instance for module-level functions
_service: CryptoService | None = None


def _get_service() -> CryptoService:
    """Get or create the default crypto service.

    Returns:
        The shared CryptoService instance.
    """
    global _service
    if _service is None:
        _service = CryptoService()
    return _service


def encrypt_value(value: str, secret: str) -> str:
    """Encrypt a value using the default service.

    Args:
        value: Plaintext to encrypt.
        secret: Secret key.

    Returns:
        Encrypted value in wire format.
    """
    return _get_service().encrypt(value, secret)


def decrypt_value(encrypted: str, secret: str) -> str:
    """Decrypt a value using the default service.

    Args:
        encrypted: Encrypted value in wire format.
        secret: Secret key.

    Returns:
        Decrypted plaintext.
    """
    return _get_service().decrypt(encrypted, secret)
