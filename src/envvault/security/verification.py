"""Check which variables of an env file are encrypted."""

from envvault.security.envfile import EnvFileStore
from envvault.security.wire import WireFormatCodec


class EncryptionVerifier:
    """Reports the encryption status of named variables."""

    def __init__(
        self, store: EnvFileStore | None = None, codec: WireFormatCodec | None = None
    ) -> None:
        self._store = store or EnvFileStore()
        self._codec = codec or WireFormatCodec()

    def validate(self, lines: list[str], names: list[str]) -> dict[str, bool]:
        """Map each name to whether its value is encrypted.

        Missing and empty variables count as not encrypted.
        """
        variables = self._store.extract_variables(lines)
        results = {}
        for name in names:
            value = (variables.get(name) or "").strip()
            results[name] = bool(value) and self._codec.is_encrypted(value)
        return results

    def all_encrypted(self, lines: list[str], names: list[str]) -> bool:
        return all(self.validate(lines, names).values())
