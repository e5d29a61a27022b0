"""Resolve secret key names to secret values.

The crypto core always receives the secret itself. This module looks a key
name up in the process environment, a base env file, and the OS keystore.
"""

import logging
import os
from pathlib import Path

import keyring
import keyring.errors

from envvault.security.envfile import EnvFileStore
from envvault.security.errors import SecretKeyNotFoundError
from envvault.security.keygen import generate_secret_key
from envvault.security.storage import EnvFileStorage

logger = logging.getLogger(__name__)

DEFAULT_BASE_ENV_FILE = Path("envs") / ".env"


def default_base_env_file() -> Path:
    """Base env file path, overridable with ``ENVVAULT_BASE_ENV_FILE``."""
    override = os.environ.get("ENVVAULT_BASE_ENV_FILE")
    return Path(override) if override else DEFAULT_BASE_ENV_FILE


class SecretKeyResolver:
    """Looks up secret keys by name.

    Sources are consulted in order: environment variables, the base env
    file, then the keyring under ``SERVICE_NAME``.
    """

    SERVICE_NAME = "envvault"

    def __init__(
        self,
        base_env_file: Path | str | None = None,
        use_keyring: bool = True,
        storage: EnvFileStorage | None = None,
    ) -> None:
        """Initialize the resolver.

        Args:
            base_env_file: Env file holding secret keys. Defaults to
                ``default_base_env_file()``.
            use_keyring: Consult the OS keystore as the last source.
            storage: File collaborator for the base env file.
        """
        self.base_env_file = (
            Path(base_env_file) if base_env_file else default_base_env_file()
        )
        self._use_keyring = use_keyring
        self._store = EnvFileStore()
        self._storage = storage or EnvFileStorage(self._store)

    def _from_keyring(self, name: str) -> str | None:
        if not self._use_keyring:
            return None
        try:
            return keyring.get_password(self.SERVICE_NAME, name)
        except keyring.errors.KeyringError as e:
            logger.debug("Keyring lookup for '%s' unavailable: %s", name, e)
            return None

    def _from_base_file(self, name: str) -> str | None:
        if not self.base_env_file.is_file():
            return None
        lines = self._storage.read_lines(self.base_env_file)
        value = self._store.get_value(lines, name)
        return value.strip() if value else None

    def resolve(self, name: str) -> str:
        """Return the secret stored under ``name``.

        Raises:
            SecretKeyNotFoundError: If no source provides a non-empty value.
        """
        value = (
            os.environ.get(name)
            or self._from_base_file(name)
            or self._from_keyring(name)
        )
        if not value:
            raise SecretKeyNotFoundError(
                f"Secret key variable '{name}' not found in environment, "
                f"{self.base_env_file} or keyring"
            )
        return value

    def store(self, name: str, secret: str) -> Path:
        """Insert or replace ``name`` in the base env file.

        Returns:
            Path of the base env file.
        """
        lines = self._storage.read_or_create_lines(self.base_env_file)
        lines = self._store.update_line(lines, name, secret)
        self._storage.write_lines(self.base_env_file, lines)
        logger.debug("Key '%s' stored in %s", name, self.base_env_file)
        return self.base_env_file

    def exists(self, name: str) -> bool:
        return self._from_base_file(name) is not None

    def generate(self, name: str, overwrite: bool = False) -> str:
        """Generate a secret key and store it in the base env file.

        Args:
            name: Variable name for the key.
            overwrite: Replace an existing key of the same name.

        Returns:
            The new secret key.

        Raises:
            FileExistsError: If the key already exists and overwrite is False.
        """
        if self.exists(name) and not overwrite:
            raise FileExistsError(
                f"Secret key '{name}' already exists in {self.base_env_file}"
            )
        secret = generate_secret_key()
        self.store(name, secret)
        return secret
