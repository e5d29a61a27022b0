"""Tests for single-value encryption and decryption."""

import base64

import pytest

from envvault.security import service as service_module
from envvault.security.errors import (
    AuthenticationFailure,
    DecryptionError,
    FormatError,
    InvalidSaltError,
    InvalidSecretKeyError,
)
from envvault.security.service import Credentials, decrypt_value, encrypt_value
from envvault.security.wire import EncryptedRecord
from envvault.testing import create_fast_service

SEGMENTS = {"salt": 0, "iv": 1, "cipherText": 2, "mac": 3}


def flip_char(encrypted: str, segment: str, position: int | None = None) -> str:
    """Replace one base64 character inside a segment of an encrypted value."""
    prefix, body = encrypted[:5], encrypted[5:]
    parts = body.split(":")
    part = parts[SEGMENTS[segment]]
    index = len(part.rstrip("=")) // 2 if position is None else position
    replacement = "A" if part[index] != "A" else "B"
    parts[SEGMENTS[segment]] = part[:index] + replacement + part[index + 1:]
    return prefix + ":".join(parts)


class TestRoundTrip:
    """Test encrypting and decrypting values."""

    @pytest.mark.parametrize(
        "plaintext",
        ["hunter2", "p@ss:word=with:colons", "ünïcödé ✓ 密码", "x", "a" * 500],
    )
    def test_decrypt_restores_plaintext(self, service, secret, plaintext):
        """Test that decrypt(encrypt(v)) == v."""
        assert service.decrypt(service.encrypt(plaintext, secret), secret) == plaintext

    def test_output_is_wire_format(self, service, secret):
        """Test that encrypted values use the ENC2 format with expected sizes."""
        encrypted = service.encrypt("hunter2", secret)
        assert service.is_encrypted(encrypted)

        salt, iv, cipher_text, mac = (
            base64.b64decode(part) for part in encrypted[len("ENC2:"):].split(":")
        )
        assert len(salt) == 32
        assert len(iv) == 12
        assert len(mac) == 32
        assert len(cipher_text) == len("hunter2") + 16

    def test_same_plaintext_gives_different_output(self, service, secret):
        """Test that fresh salt and IV make every encryption unique."""
        first = service.encrypt("hunter2", secret)
        second = service.encrypt("hunter2", secret)
        assert first != second
        assert service.decrypt(first, secret) == service.decrypt(second, secret)

    def test_example_scenario(self, service):
        """Test the documented example secret and value."""
        secret = "correct-horse-battery-staple-32chars"
        encrypted = service.encrypt("hunter2", secret)
        assert encrypted.startswith("ENC2:")
        assert service.decrypt(encrypted, secret) == "hunter2"


class TestRejection:
    """Test that wrong keys and tampering never yield plaintext."""

    def test_wrong_key_fails(self, service, secret, other_secret):
        """Test that decrypting with another secret fails."""
        encrypted = service.encrypt("hunter2", secret)
        with pytest.raises(DecryptionError):
            service.decrypt(encrypted, other_secret)

    def test_wrong_key_is_authentication_failure(self, service, secret, other_secret):
        """Test that the MAC check rejects the wrong key first."""
        encrypted = service.encrypt("hunter2", secret)
        with pytest.raises(AuthenticationFailure, match="HMAC mismatch"):
            service.decrypt(encrypted, other_secret)

    @pytest.mark.parametrize("segment", ["mac", "cipherText", "iv", "salt"])
    def test_tampered_segment_fails(self, service, secret, segment):
        """Test that flipping one character in a segment is detected."""
        encrypted = service.encrypt("hunter2", secret)
        with pytest.raises(AuthenticationFailure):
            service.decrypt(flip_char(encrypted, segment), secret)

    @pytest.mark.parametrize("segment", ["mac", "cipherText"])
    def test_every_character_of_segment_is_protected(self, service, secret, segment):
        """Test tamper detection for each character position, padding included."""
        encrypted = service.encrypt("hunter2", secret)
        part = encrypted[5:].split(":")[SEGMENTS[segment]]
        assert part.endswith("=")
        for position in range(len(part)):
            with pytest.raises(AuthenticationFailure):
                service.decrypt(flip_char(encrypted, segment, position), secret)

    def test_mac_padding_replaced_is_authentication_failure(self, service, secret):
        """Test that filling the MAC padding fails authentication, not parsing."""
        encrypted = service.encrypt("hunter2", secret)
        assert encrypted.endswith("=")
        with pytest.raises(AuthenticationFailure, match="MAC must be 32 bytes"):
            service.decrypt(encrypted[:-1] + "A", secret)

    @pytest.mark.parametrize("segment", ["mac", "cipherText"])
    def test_padding_char_inside_segment_is_authentication_failure(
        self, service, secret, segment
    ):
        """Test that a stray '=' inside an authenticated field fails authentication."""
        encrypted = service.encrypt("hunter2", secret)
        parts = encrypted[5:].split(":")
        part = parts[SEGMENTS[segment]]
        parts[SEGMENTS[segment]] = part[:4] + "=" + part[5:]
        with pytest.raises(AuthenticationFailure):
            service.decrypt("ENC2:" + ":".join(parts), secret)

    def test_malformed_salt_stays_format_error(self, service, secret):
        """Test that a broken salt field is still reported as a format error."""
        encrypted = service.encrypt("hunter2", secret)
        parts = encrypted[5:].split(":")
        parts[0] = "not*base64"
        with pytest.raises(FormatError, match="salt") as exc_info:
            service.decrypt("ENC2:" + ":".join(parts), secret)
        assert not isinstance(exc_info.value, AuthenticationFailure)

    def test_malformed_value_raises_format_error(self, service, secret):
        """Test that plaintext cannot be decrypted."""
        with pytest.raises(FormatError):
            service.decrypt("hunter2", secret)

    def test_wrong_iv_length_raises_format_error(self, service, secret):
        """Test that an IV that is not 12 bytes is rejected."""
        record = EncryptedRecord(bytes(32), bytes(16), b"cipher", bytes(32))
        text = service.codec.encode(record)
        with pytest.raises(FormatError, match="IV"):
            service.decrypt(text, secret)

    def test_wrong_mac_length_is_authentication_failure(self, service, secret):
        """Test that a MAC that is not 32 bytes can never authenticate."""
        record = EncryptedRecord(bytes(32), bytes(12), b"cipher", bytes(16))
        text = service.codec.encode(record)
        with pytest.raises(AuthenticationFailure, match="MAC"):
            service.decrypt(text, secret)

    def test_wrong_salt_length_raises_invalid_salt(self, service, secret):
        """Test that a salt that is not 32 bytes is rejected."""
        record = EncryptedRecord(bytes(16), bytes(12), b"cipher", bytes(32))
        text = service.codec.encode(record)
        with pytest.raises(InvalidSaltError):
            service.decrypt(text, secret)


class TestValidation:
    """Test input validation."""

    @pytest.mark.parametrize("bad_secret", ["", "too-short", None])
    def test_short_secret_rejected(self, service, bad_secret):
        """Test that secrets under 16 characters are rejected."""
        with pytest.raises(InvalidSecretKeyError):
            service.encrypt("hunter2", bad_secret)

    def test_empty_value_rejected(self, service, secret):
        """Test that empty plaintext cannot be encrypted."""
        with pytest.raises(ValueError, match="non-empty"):
            service.encrypt("", secret)


class TestBatchHelpers:
    """Test batch and credential helpers."""

    def test_encrypt_many_decrypt_many(self, service, secret):
        """Test that batches preserve order."""
        values = ["one", "two", "three"]
        encrypted = service.encrypt_many(values, secret)
        assert len(set(encrypted)) == 3
        assert service.decrypt_many(encrypted, secret) == values

    def test_decrypt_many_empty(self, service, secret):
        """Test that an empty batch returns an empty list."""
        assert service.decrypt_many([], secret) == []

    def test_decrypt_credentials(self, service, secret):
        """Test decrypting a username and password pair."""
        username = service.encrypt("admin", secret)
        password = service.encrypt("hunter2", secret)
        assert service.decrypt_credentials(username, password, secret) == Credentials(
            "admin", "hunter2"
        )


class TestModuleFunctions:
    """Test module-level helpers backed by the shared service."""

    def test_encrypt_decrypt_value(self, monkeypatch, secret):
        """Test that module functions use the shared service."""
        monkeypatch.setattr(service_module, "_service", create_fast_service())
        encrypted = encrypt_value("hunter2", secret)
        assert decrypt_value(encrypted, secret) == "hunter2"
