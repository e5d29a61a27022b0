"""Cryptographic configuration model."""

from pydantic import BaseModel, Field


class Argon2Parameters(BaseModel):
    """Cost parameters for Argon2id key derivation.

    Args:
        memory_cost: Memory usage in KiB.
        time_cost: Number of passes over memory.
        parallelism: Number of lanes.
    """

    memory_cost: int = Field(262144, ge=8)
    time_cost: int = Field(4, ge=1)
    parallelism: int = Field(3, ge=1)


class CryptoConfig(BaseModel):
    """Settings shared by every component of the encryption pipeline.

    The wire format does not record KDF parameters, so a value can only be
    decrypted with the same ``argon2`` settings it was encrypted with.

    Args:
        prefix: Literal that starts every encrypted value.
        separator: Delimiter between the encoded fields.
        salt_length: Salt size in bytes.
        iv_length: AES-GCM nonce size in bytes.
        legacy_iv_length: IV size for block modes such as CBC.
        secret_key_length: Size of generated secret keys and of the encryption key.
        mac_key_length: Size of the HMAC key and of the HMAC tag.
        min_secret_length: Shortest secret key accepted for derivation.
        strict_duplicates: Reject duplicate keys in env files instead of warning.
        argon2: Key derivation cost parameters.
    """

    prefix: str = "ENC2:"
    separator: str = ":"
    salt_length: int = 32
    iv_length: int = 12
    legacy_iv_length: int = 16
    secret_key_length: int = 32
    mac_key_length: int = 32
    min_secret_length: int = 16
    strict_duplicates: bool = False
    argon2: Argon2Parameters = Field(default_factory=Argon2Parameters)

    @property
    def expected_parts(self) -> int:
        return 4

    @property
    def derived_key_length(self) -> int:
        return self.secret_key_length + self.mac_key_length


DEFAULT_CONFIG = CryptoConfig()
