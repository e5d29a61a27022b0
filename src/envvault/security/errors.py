"""Exception hierarchy for the envvault security layer."""


class EnvVaultError(Exception):
    """Base class for all envvault errors."""


class InvalidLength(EnvVaultError, ValueError):
    """Requested random material length is outside the accepted bounds."""


class InvalidSecretKeyError(EnvVaultError, ValueError):
    """Secret key is empty or too short to be used for key derivation."""


class SecretKeyNotFoundError(EnvVaultError, LookupError):
    """A named secret key could not be resolved from any source."""


class KeyDerivationError(EnvVaultError):
    """The password hashing provider failed to derive key material."""


class FormatError(EnvVaultError, ValueError):
    """Encrypted value does not match the wire format.

    Attributes:
        field: Wire field that failed validation, if a single one is at fault.
    """

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(message)
        self.field = field



class InvalidSaltError(FormatError):
    """Salt is not valid base64 or has the wrong decoded length."""


class EnvFileError(EnvVaultError, ValueError):
    """Environment file exists but cannot be read as UTF-8 text."""


class CipherError(EnvVaultError):
    """The symmetric cipher failed during encryption."""


class DecryptionError(EnvVaultError):
    """Ciphertext could not be decrypted."""


class AuthenticationFailure(DecryptionError):
    """MAC or AEAD tag mismatch: wrong key or tampered data."""


class VariableNotFoundError(EnvVaultError, KeyError):
    """A requested variable name is absent from the secrets file."""

    def __init__(self, name: str) -> None:
        super().__init__(name)
        self.name = name

    def __str__(self) -> str:
        return f"Variable '{self.name}' not found"


class DuplicateKeyError(EnvVaultError):
    """A key appears more than once while strict duplicate checking is on."""

    def __init__(self, key: str, line_number: int) -> None:
        super().__init__(f"Duplicate variable '{key}' at line {line_number}")
        self.key = key
        self.line_number = line_number


class OrchestrationError(EnvVaultError):
    """Processing of one variable failed and the whole run was aborted.

    Attributes:
        variable: Name of the variable whose processing failed.
    """

    def __init__(self, variable: str, message: str) -> None:
        super().__init__(f"{variable}: {message}")
        self.variable = variable
