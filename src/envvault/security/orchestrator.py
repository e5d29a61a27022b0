"""Encryption workflow over whole env files."""

import logging
from pathlib import Path
from typing import NamedTuple

from envvault.security.envfile import EnvFileStore
from envvault.security.errors import (
    DecryptionError,
    EnvVaultError,
    OrchestrationError,
    VariableNotFoundError,
)
from envvault.security.keys import SecretKeyResolver
from envvault.security.service import CryptoService
from envvault.security.storage import EnvFileStorage

logger = logging.getLogger(__name__)


class EncryptionReport(NamedTuple):
    """Outcome of an encryption run.

    Attributes:
        encrypted: Variables encrypted for the first time.
        re_encrypted: Variables decrypted and encrypted again (rotation).
        skipped_encrypted: Variables left alone because they were already encrypted.
        skipped_empty: Variables skipped because their value is empty.
        not_found: Requested names that are not in the file.
        written: Whether the file was written back.
    """

    encrypted: list[str]
    re_encrypted: list[str]
    skipped_encrypted: list[str]
    skipped_empty: list[str]
    not_found: list[str]
    written: bool = False

    @property
    def changed(self) -> int:
        """Number of variables whose stored value changed."""
        return len(self.encrypted) + len(self.re_encrypted)

    def counts(self) -> dict[str, int]:
        return {
            "encrypted": len(self.encrypted),
            "re_encrypted": len(self.re_encrypted),
            "skipped_encrypted": len(self.skipped_encrypted),
            "skipped_empty": len(self.skipped_empty),
            "not_found": len(self.not_found),
        }


class EncryptionOrchestrator:
    """Selects variables in an env file and encrypts or rotates them.

    Variables are handled one at a time in file order. Any failure aborts the
    run before anything is written, so a file never holds a mix of old and new
    encodings from a partial run.
    """

    def __init__(
        self,
        service: CryptoService | None = None,
        store: EnvFileStore | None = None,
        storage: EnvFileStorage | None = None,
    ) -> None:
        """Initialize the orchestrator.

        Args:
            service: Value encryption service.
            store: Env file text transforms.
            storage: Reader and writer for env files on disk.
        """
        self._service = service or CryptoService()
        self._store = store or EnvFileStore()
        self._storage = storage or EnvFileStorage(self._store)

    def select_variables(
        self, variables: dict[str, str], names: list[str] | None = None
    ) -> tuple[dict[str, str], list[str]]:
        """Resolve which variables to process.

        Args:
            variables: All variables in the file.
            names: Explicit names to process. All variables when None or empty.

        Returns:
            Tuple of (selected variables in file order, names not found).
        """
        if not names:
            return dict(variables), []

        selected: dict[str, str] = {}
        not_found: list[str] = []
        for name in names:
            found = self._store.find_variable(variables, name)
            if found:
                selected.update(found)
            elif name not in not_found:
                not_found.append(name)

        if not_found:
            logger.warning("Environment variables not found: %s", ", ".join(not_found))

        ordered = {key: selected[key] for key in variables if key in selected}
        return ordered, not_found

    def encrypt_lines(
        self,
        lines: list[str],
        secret: str,
        names: list[str] | None = None,
        force_rotate: bool = False,
        new_secret: str | None = None,
    ) -> tuple[list[str], EncryptionReport]:
        """Encrypt selected variables in a list of lines.

        Args:
            lines: Current file lines.
            secret: Secret key for encryption, and for decryption when rotating.
            names: Variables to process. All variables when None.
            force_rotate: Re-encrypt values that are already encrypted.
            new_secret: Key to re-encrypt with. Defaults to ``secret``.

        Returns:
            Tuple of (updated lines, report).

        Raises:
            OrchestrationError: If any variable fails to encrypt or decrypt.
        """
        target_secret = new_secret or secret
        self._service.validate_secret_key(secret)
        self._service.validate_secret_key(target_secret)

        variables = self._store.extract_variables(lines)
        selected, not_found = self.select_variables(variables, names)
        report = EncryptionReport([], [], [], [], not_found)

        if not variables:
            logger.warning("No environment variables found")
            return list(lines), report
        if not selected:
            logger.info("No variables selected for encryption")
            return list(lines), report

        updated = list(lines)
        for key, raw_value in selected.items():
            value = raw_value.strip()
            if not value:
                logger.warning("Skipping variable '%s' with empty value", key)
                report.skipped_empty.append(key)
                continue

            currently_encrypted = self._service.is_encrypted(value)
            if currently_encrypted and not force_rotate:
                report.skipped_encrypted.append(key)
                continue

            if currently_encrypted:
                value = self._decrypt_for_rotation(key, value, secret)

            try:
                encrypted = self._service.encrypt(value, target_secret)
            except (EnvVaultError, ValueError) as e:
                logger.error("Failed to encrypt variable '%s': %s", key, e)
                raise OrchestrationError(key, f"encryption failed: {e}") from e

            updated = self._store.update_line(updated, key, encrypted, replace_all=True)
            if currently_encrypted:
                report.re_encrypted.append(key)
                logger.debug("Successfully re-encrypted variable: %s", key)
            else:
                report.encrypted.append(key)
                logger.debug("Successfully encrypted variable: %s", key)

        if report.skipped_encrypted:
            logger.info(
                "Skipped already encrypted variables: %s",
                ", ".join(report.skipped_encrypted),
            )
        if report.re_encrypted:
            logger.info(
                "Re-encrypted %d variables with new key", len(report.re_encrypted)
            )

        return updated, report

    def encrypt_file(
        self,
        path: Path | str,
        secret: str,
        names: list[str] | None = None,
        force_rotate: bool = False,
        new_secret: str | None = None,
    ) -> EncryptionReport:
        """Encrypt variables in an env file and write it back if anything changed.

        Args:
            path: Env file to process.
            secret: Secret key for encryption, and for decryption when rotating.
            names: Variables to process. All variables when None.
            force_rotate: Re-encrypt values that are already encrypted.
            new_secret: Key to re-encrypt with. Defaults to ``secret``.

        Returns:
            EncryptionReport describing the run.

        Raises:
            FileNotFoundError: If the file does not exist.
            OrchestrationError: If any variable fails. The file is left unchanged.
        """
        path = Path(path)
        lines = self._storage.read_lines(path)
        updated, report = self.encrypt_lines(
            lines, secret, names, force_rotate, new_secret
        )

        if report.changed == 0:
            logger.info("No variables needed encryption in %s", path)
            return report

        self._storage.write_lines(path, updated)
        operation = "Encryption/re-encryption" if force_rotate else "Encryption"
        logger.info(
            "%s completed. %d variables processed for %s, %d skipped",
            operation,
            report.changed,
            path,
            len(report.skipped_encrypted) + len(report.skipped_empty),
        )
        return report._replace(written=True)

    def decrypt_variables(
        self, lines: list[str], secret: str, names: list[str] | None = None
    ) -> dict[str, str]:
        """Return variable values with encrypted ones decrypted.

        Args:
            lines: File lines.
            secret: Secret key.
            names: Variables to return. All variables when None.

        Returns:
            Mapping of variable name to plaintext value.

        Raises:
            OrchestrationError: If an encrypted value cannot be decrypted.
        """
        selected, _ = self.select_variables(self._store.extract_variables(lines), names)
        result: dict[str, str] = {}
        for key, raw_value in selected.items():
            value = raw_value.strip()
            if self._service.is_encrypted(value):
                try:
                    value = self._service.decrypt(value, secret)
                except (EnvVaultError, ValueError) as e:
                    raise OrchestrationError(key, f"decryption failed: {e}") from e
            result[key] = value
        return result

    def decrypt_variable(self, lines: list[str], name: str, secret: str) -> str:
        """Decrypt a single named variable.

        Raises:
            VariableNotFoundError: If the variable is not in the lines.
            OrchestrationError: If decryption fails.
        """
        variables = self._store.extract_variables(lines)
        if name not in variables:
            raise VariableNotFoundError(name)
        return self.decrypt_variables(lines, secret, [name])[name]

    def _decrypt_for_rotation(self, key: str, value: str, secret: str) -> str:
        try:
            logger.debug("Decrypting variable '%s' for re-encryption", key)
            return self._service.decrypt(value, secret)
        except (EnvVaultError, ValueError) as e:
            logger.error(
                "Failed to decrypt variable '%s' for re-encryption: %s", key, e
            )
            reason = (
                "decryption with current key failed. This may indicate the variable "
                "was encrypted with a different key"
                if isinstance(e, DecryptionError)
                else f"decryption failed: {e}"
            )
            raise OrchestrationError(key, f"Cannot re-encrypt: {reason}") from e


def encrypt_env_file(
    secret_key_name: str,
    file_path: Path | str,
    variable_names: list[str] | None = None,
    force_rotate: bool = False,
    resolver: SecretKeyResolver | None = None,
    orchestrator: EncryptionOrchestrator | None = None,
) -> EncryptionReport:
    """Encrypt an env file using a secret key looked up by name.

    Args:
        secret_key_name: Name of the secret key (environment, base env file or keyring).
        file_path: Env file to process.
        variable_names: Variables to process. All variables when None.
        force_rotate: Re-encrypt values that are already encrypted.
        resolver: Secret key resolver. Defaults to a new SecretKeyResolver.
        orchestrator: Orchestrator to run. Defaults to a new EncryptionOrchestrator.

    Returns:
        EncryptionReport describing the run.
    """
    secret = (resolver or SecretKeyResolver()).resolve(secret_key_name)
    return (orchestrator or EncryptionOrchestrator()).encrypt_file(
        file_path, secret, variable_names, force_rotate
    )


def decrypt_with_key_name(
    encrypted_text: str,
    secret_key_name: str,
    resolver: SecretKeyResolver | None = None,
    service: CryptoService | None = None,
) -> str:
    """Decrypt a value using a secret key looked up by name."""
    secret = (resolver or SecretKeyResolver()).resolve(secret_key_name)
    return (service or CryptoService()).decrypt(encrypted_text, secret)
