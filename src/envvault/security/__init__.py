"""Security module for encrypting secrets inside env files."""

from envvault.security.cipher import AuthenticatedCipher
from envvault.security.config import Argon2Parameters, CryptoConfig
from envvault.security.envfile import EnvFileStore
from envvault.security.errors import (
    AuthenticationFailure,
    CipherError,
    DecryptionError,
    DuplicateKeyError,
    EnvFileError,
    EnvVaultError,
    FormatError,
    InvalidLength,
    InvalidSaltError,
    InvalidSecretKeyError,
    KeyDerivationError,
    OrchestrationError,
    SecretKeyNotFoundError,
    VariableNotFoundError,
)
from envvault.security.kdf import DerivedKeyPair, KeyDerivationService
from envvault.security.keygen import SecureKeyGenerator, generate_secret_key
from envvault.security.keys import SecretKeyResolver
from envvault.security.orchestrator import (
    EncryptionOrchestrator,
    EncryptionReport,
    decrypt_with_key_name,
    encrypt_env_file,
)
from envvault.security.service import (
    Credentials,
    CryptoService,
    decrypt_value,
    encrypt_value,
)
from envvault.security.storage import EnvFileStorage
from envvault.security.verification import EncryptionVerifier
from envvault.security.wire import (
    EncryptedRecord,
    WireFormatCodec,
    is_encrypted,
    is_valid_base64,
)

__all__ = [
    "Argon2Parameters",
    "AuthenticatedCipher",
    "AuthenticationFailure",
    "CipherError",
    "Credentials",
    "CryptoConfig",
    "CryptoService",
    "DecryptionError",
    "DerivedKeyPair",
    "DuplicateKeyError",
    "EncryptedRecord",
    "EncryptionOrchestrator",
    "EncryptionReport",
    "EncryptionVerifier",
    "EnvFileError",
    "EnvFileStorage",
    "EnvFileStore",
    "EnvVaultError",
    "FormatError",
    "InvalidLength",
    "InvalidSaltError",
    "InvalidSecretKeyError",
    "KeyDerivationError",
    "KeyDerivationService",
    "OrchestrationError",
    "SecretKeyNotFoundError",
    "SecretKeyResolver",
    "SecureKeyGenerator",
    "VariableNotFoundError",
    "WireFormatCodec",
    "decrypt_value",
    "decrypt_with_key_name",
    "encrypt_env_file",
    "encrypt_value",
    "generate_secret_key",
    "is_encrypted",
    "is_valid_base64",
]
