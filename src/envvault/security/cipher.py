"""AES-256-GCM encryption with an independent HMAC-SHA256 layer."""

import logging

from cryptography.exceptions import InvalidSignature, InvalidTag
from cryptography.hazmat.primitives import hashes, hmac
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from envvault.security.errors import AuthenticationFailure, CipherError, DecryptionError

logger = logging.getLogger(__name__)


class AuthenticatedCipher:
    """Symmetric AEAD encryption plus a separate MAC.

    The GCM authentication tag is kept on the ciphertext, and callers add an
    HMAC over the full record on top of it.
    """

    KEY_LENGTH = 32

    def encrypt(
        self, plaintext: str | bytes, iv: bytes, encryption_key: bytes
    ) -> bytes:
        """Encrypt with AES-256-GCM.

        Args:
            plaintext: Text (UTF-8 encoded) or bytes to encrypt.
            iv: Nonce, unique per encryption under the same key.
            encryption_key: 32-byte AES key.

        Returns:
            Ciphertext followed by the 16-byte GCM tag.

        Raises:
            CipherError: If the cipher provider rejects the inputs.
        """
        if isinstance(plaintext, str):
            plaintext = plaintext.encode("utf-8")
        try:
            return AESGCM(self._check_key(encryption_key)).encrypt(iv, plaintext, None)
        except (ValueError, TypeError, OverflowError) as e:
            raise CipherError(f"Failed to encrypt with AES-GCM: {e}") from e

    def decrypt(self, iv: bytes, encryption_key: bytes, cipher_bytes: bytes) -> bytes:
        """Decrypt and authenticate an AES-256-GCM ciphertext.

        Args:
            iv: Nonce used during encryption.
            encryption_key: 32-byte AES key.
            cipher_bytes: Ciphertext including the GCM tag.

        Returns:
            Decrypted bytes.

        Raises:
            AuthenticationFailure: If the GCM tag does not verify.
            DecryptionError: If the key or nonce is malformed.
        """
        try:
            aead = AESGCM(self._check_key(encryption_key))
            return aead.decrypt(iv, cipher_bytes, None)
        except InvalidTag as e:
            raise AuthenticationFailure(
                "Authentication failed: AES-GCM tag mismatch - "
                "Invalid key or tampered data"
            ) from e
        except (ValueError, TypeError) as e:
            raise DecryptionError(f"Failed to decrypt with AES-GCM: {e}") from e

    def compute_mac(self, key: bytes, data: bytes) -> bytes:
        """Return the HMAC-SHA256 tag of ``data``."""
        h = hmac.HMAC(key, hashes.SHA256())
        h.update(data)
        return h.finalize()

    def verify_mac(self, key: bytes, data: bytes, tag: bytes) -> bool:
        """Check an HMAC-SHA256 tag in constant time.

        Args:
            key: MAC key.
            data: Authenticated bytes.
            tag: Expected tag.

        Returns:
            True if the tag matches, False otherwise.
        """
        h = hmac.HMAC(key, hashes.SHA256())
        h.update(data)
        try:
            h.verify(tag)
        except InvalidSignature:
            return False
        return True

    def _check_key(self, key: bytes) -> bytes:
        if len(key) != self.KEY_LENGTH:
            raise ValueError(
                f"Encryption key must be {self.KEY_LENGTH} bytes, got {len(key)}"
            )
        return key
