"""Tests for the ENC2 wire format."""

import base64

import pytest

from envvault.security.errors import FormatError
from envvault.security.wire import (
    EncryptedRecord,
    WireFormatCodec,
    is_encrypted,
    is_valid_base64,
)

RECORD = EncryptedRecord(
    salt=bytes(32), iv=bytes(12), cipher_text=b"ciphertext-and-tag", mac=bytes(32)
)


def b64(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


@pytest.fixture
def codec():
    return WireFormatCodec()


class TestIsValidBase64:
    """Test base64 validation."""

    @pytest.mark.parametrize("value", ["YWJj", "YQ==", "YWI=", "AAAA+/+/"])
    def test_valid(self, value):
        """Test that padded standard base64 is accepted."""
        assert is_valid_base64(value)

    @pytest.mark.parametrize(
        "value",
        ["", "abc", "ab!=", "Y===", "=abc", "YW-_", "YWJj YWJj", None],
    )
    def test_invalid(self, value):
        """Test that bad characters, lengths and padding are rejected."""
        assert not is_valid_base64(value)


class TestWireFormatCodec:
    """Test WireFormatCodec functionality."""

    def test_encode_layout(self, codec):
        """Test that encoding yields prefix and four colon-separated fields."""
        text = codec.encode(RECORD)
        assert text.startswith("ENC2:")
        parts = text[len("ENC2:"):].split(":")
        assert parts == [
            b64(bytes(32)),
            b64(bytes(12)),
            b64(b"ciphertext-and-tag"),
            b64(bytes(32)),
        ]

    def test_decode_restores_record(self, codec):
        """Test that decoding an encoded record returns the same fields."""
        assert codec.decode(codec.encode(RECORD)) == RECORD

    def test_authenticated_data_order(self):
        """Test that the MAC covers salt, iv and cipher text in order."""
        expected = RECORD.salt + RECORD.iv + RECORD.cipher_text
        assert RECORD.authenticated_data() == expected

    def test_encode_rejects_empty_field(self, codec):
        """Test that records with an empty field cannot be encoded."""
        with pytest.raises(FormatError, match="iv"):
            codec.encode(RECORD._replace(iv=b""))

    def test_decode_missing_prefix(self, codec):
        """Test that a value without the prefix is rejected."""
        with pytest.raises(FormatError, match="prefix"):
            codec.decode("ENC1:YWJj:YWJj:YWJj:YWJj")

    @pytest.mark.parametrize(
        "value", ["ENC2:YWJj:YWJj:YWJj", "ENC2:YWJj:YWJj:YWJj:YWJj:YWJj", "ENC2:"]
    )
    def test_decode_wrong_part_count(self, codec, value):
        """Test that anything other than four parts is rejected."""
        with pytest.raises(FormatError, match="Expected 4 parts"):
            codec.decode(value)

    def test_decode_empty_part(self, codec):
        """Test that empty fields are reported by name."""
        with pytest.raises(FormatError, match="iv") as exc_info:
            codec.decode("ENC2:YWJj::YWJj:YWJj")
        assert exc_info.value.field == "iv"

    def test_decode_non_base64_part(self, codec):
        """Test that a non-base64 field is reported by name."""
        with pytest.raises(FormatError, match="cipherText") as exc_info:
            codec.decode("ENC2:YWJj:YWJj:not*base64:YWJj")
        assert exc_info.value.field == "cipherText"

    def test_decode_several_empty_parts_has_no_single_field(self, codec):
        """Test that no field is blamed when more than one is missing."""
        with pytest.raises(FormatError, match="cipherText, mac") as exc_info:
            codec.decode("ENC2:YWJj:YWJj::")
        assert exc_info.value.field is None

    def test_custom_prefix(self):
        """Test that the prefix comes from the config."""
        from envvault.security.config import CryptoConfig

        codec = WireFormatCodec(CryptoConfig(prefix="SEALED:"))
        text = codec.encode(RECORD)
        assert text.startswith("SEALED:")
        assert codec.is_encrypted(text)
        assert not WireFormatCodec().is_encrypted(text)


class TestIsEncrypted:
    """Test the non-throwing format probe."""

    def test_true_for_valid_value(self, codec):
        """Test that a well-formed value is recognized."""
        assert is_encrypted(codec.encode(RECORD))

    @pytest.mark.parametrize(
        "value",
        [
            "hunter2",
            "",
            "ENC2:",
            "ENC2:YWJj:YWJj:YWJj",
            "ENC2:YWJj:YWJj:YWJj:YWJj:YWJj",
            "ENC2:YWJj:YWJj:YW*j:YWJj",
            "ENC2:YWJj:YWJj:YWJ:YWJj",
            "enc2:YWJj:YWJj:YWJj:YWJj",
            None,
        ],
    )
    def test_false_for_plaintext_and_malformed(self, value):
        """Test plaintext, wrong part counts and non-base64 segments."""
        assert is_encrypted(value) is False
