"""Textual wire format for encrypted values.

An encrypted value looks like::

    ENC2:<salt_b64>:<iv_b64>:<cipherText_b64>:<mac_b64>

All four fields are standard base64 with padding. The cipher text keeps the
AES-GCM tag, and the MAC is HMAC-SHA256 over ``salt || iv || cipherText``.
"""

import base64
import binascii
import re
from typing import NamedTuple

from envvault.security.config import DEFAULT_CONFIG, CryptoConfig
from envvault.security.errors import FormatError

BASE64_PATTERN = re.compile(r"^[A-Za-z0-9+/]*={0,2}$")


def is_valid_base64(value: str) -> bool:
    """Check that a string is non-empty, padded, decodable base64.

    Args:
        value: Candidate string.

    Returns:
        True if the string passes the pattern, length and decode checks.
    """
    if not value or not isinstance(value, str):
        return False
    if not BASE64_PATTERN.match(value):
        return False
    if len(value) % 4 != 0:
        return False
    try:
        base64.b64decode(value, validate=True)
    except (binascii.Error, ValueError):
        return False
    return True


class EncryptedRecord(NamedTuple):
    """One encrypted value, with every field as raw bytes.

    Attributes:
        salt: KDF salt.
        iv: AES-GCM nonce.
        cipher_text: Ciphertext including the GCM tag.
        mac: HMAC-SHA256 over salt, iv and cipher_text.
    """

    salt: bytes
    iv: bytes
    cipher_text: bytes
    mac: bytes

    def authenticated_data(self) -> bytes:
        """Bytes covered by the MAC."""
        return self.salt + self.iv + self.cipher_text


class WireFormatCodec:
    """Encodes and parses the ``ENC2:`` wire format."""

    FIELD_NAMES = ("salt", "iv", "cipherText", "mac")

    def __init__(self, config: CryptoConfig | None = None) -> None:
        self._config = config or DEFAULT_CONFIG

    @property
    def prefix(self) -> str:
        return self._config.prefix

    def encode(self, record: EncryptedRecord) -> str:
        """Serialize a record to its textual form.

        Raises:
            FormatError: If any field is empty.
        """
        fields = []
        for name, value in zip(self.FIELD_NAMES, record):
            if not value:
                raise FormatError(f"Cannot encode record: {name} is empty")
            fields.append(base64.b64encode(value).decode("ascii"))
        return self.prefix + self._config.separator.join(fields)

    def split(self, text: str) -> list[str]:
        """Validate structure and return the four base64 fields.

        Args:
            text: Candidate encrypted value.

        Returns:
            The salt, iv, cipherText and mac fields, still base64-encoded.

        Raises:
            FormatError: If the prefix, part count, or any field is invalid.
        """
        if not isinstance(text, str) or not text.startswith(self.prefix):
            raise FormatError("Invalid encrypted format: Missing prefix")

        parts = text[len(self.prefix) :].split(self._config.separator)
        if len(parts) != self._config.expected_parts:
            raise FormatError(
                f"Invalid format. Expected {self._config.expected_parts} parts, "
                f"got {len(parts)}"
            )

        missing = [name for name, part in zip(self.FIELD_NAMES, parts) if not part]
        if missing:
            field = missing[0] if len(missing) == 1 else None
            raise FormatError(f"Missing components - {', '.join(missing)}", field=field)

        for name, part in zip(self.FIELD_NAMES, parts):
            if not is_valid_base64(part):
                raise FormatError(f"Invalid {name} format", field=name)

        return parts

    def decode(self, text: str) -> EncryptedRecord:
        """Parse an encrypted value into an EncryptedRecord.

        Raises:
            FormatError: If the value is not well formed.
        """
        parts = self.split(text)
        return EncryptedRecord(*(base64.b64decode(part) for part in parts))

    def is_encrypted(self, text: str) -> bool:
        """Return True if ``text`` is structurally a valid encrypted value."""
        try:
            self.split(text)
        except FormatError:
            return False
        return True


def is_encrypted(text: str, config: CryptoConfig | None = None) -> bool:
    """Module-level probe for the encrypted wire format.

    Args:
        text: Value to check.
        config: Optional configuration (prefix and separator).

    Returns:
        True if the value is in the encrypted format.
    """
    return WireFormatCodec(config).is_encrypted(text)
