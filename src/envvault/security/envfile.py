"""In-memory parsing and rewriting of line-oriented env files."""

import logging
import re

from envvault.security.config import DEFAULT_CONFIG, CryptoConfig
from envvault.security.errors import DuplicateKeyError

logger = logging.getLogger(__name__)

LINE_SPLIT_PATTERN = re.compile(r"\r?\n")


class EnvFileStore:
    """Pure text transforms over the lines of an env file.

    Lines are the source of truth: comments, blank lines and malformed
    entries are carried through untouched, and the variable map is derived
    from the lines whenever it is needed.
    """

    KEY_PATTERN = re.compile(r"^[A-Z_][A-Z0-9_]*$", re.IGNORECASE)

    def __init__(self, config: CryptoConfig | None = None) -> None:
        self._config = config or DEFAULT_CONFIG

    def parse_lines(self, raw_content: str) -> list[str]:
        """Split file content on ``\\n`` and ``\\r\\n``.

        Args:
            raw_content: Whole file content.

        Returns:
            List of lines. Content ending in a newline yields a trailing ``""``.
        """
        if not raw_content:
            return []
        return LINE_SPLIT_PATTERN.split(raw_content)

    def join_lines(self, lines: list[str]) -> str:
        return "\n".join(lines)

    def parse_line(
        self, line: str, line_number: int | None = None
    ) -> tuple[str, str] | None:
        """Parse one line into a key and raw value.

        Args:
            line: Raw line.
            line_number: 1-based line number used in log messages.

        Returns:
            ``(key, value)`` or None for blank, comment and malformed lines.
        """
        stripped = line.strip()
        if not stripped or stripped.startswith("#") or "=" not in stripped:
            return None

        key, value = stripped.split("=", 1)
        key = key.strip()
        if not self.KEY_PATTERN.match(key):
            location = f" at line {line_number}" if line_number else ""
            logger.warning(
                "Invalid environment variable key format: '%s'%s", key, location
            )
            return None
        return key, value

    def extract_variables(self, lines: list[str]) -> dict[str, str]:
        """Build the ordered key to value map for a list of lines.

        The last occurrence of a duplicated key wins, with a warning. In strict
        mode a duplicate raises instead.

        Args:
            lines: File lines.

        Returns:
            Mapping of key to raw value in first-seen order.

        Raises:
            DuplicateKeyError: On a duplicate key when ``strict_duplicates`` is set.
        """
        variables: dict[str, str] = {}
        for line_number, line in enumerate(lines, start=1):
            parsed = self.parse_line(line, line_number)
            if parsed is None:
                continue
            key, value = parsed
            if key in variables:
                if self._config.strict_duplicates:
                    raise DuplicateKeyError(key, line_number)
                logger.warning(
                    "Duplicate environment variable '%s' found at line %d",
                    key,
                    line_number,
                )
            variables[key] = value

        logger.debug("Extracted %d environment variables", len(variables))
        return variables

    def get_value(self, lines: list[str], key: str) -> str | None:
        """Return the effective value of ``key``, or None if absent."""
        return self.extract_variables(lines).get(key)

    def find_variable(self, variables: dict[str, str], lookup: str) -> dict[str, str]:
        """Return ``{lookup: value}`` on an exact key match, else an empty dict."""
        if lookup in variables:
            return {lookup: variables[lookup]}
        return {}

    def update_line(
        self, lines: list[str], key: str, new_value: str, replace_all: bool = False
    ) -> list[str]:
        """Set ``key`` to ``new_value`` and return the new line list.

        The first assignment of ``key`` is rewritten as ``key=new_value``. With
        ``replace_all`` every assignment of the key is rewritten. If the key is
        missing a new line is added at the end, before the trailing empty
        element that marks a final newline.

        Args:
            lines: Current lines (not modified).
            key: Variable name.
            new_value: Value to store.
            replace_all: Rewrite duplicate assignments as well.

        Returns:
            Updated copy of the lines.
        """
        updated = list(lines)
        assignment = f"{key}={new_value}"
        replaced = False

        for index, line in enumerate(updated):
            if self._assigns(line, key):
                updated[index] = assignment
                replaced = True
                if not replace_all:
                    break

        if not replaced:
            if updated and updated[-1] == "":
                updated.insert(len(updated) - 1, assignment)
            else:
                updated.append(assignment)
            logger.debug("Added new environment variable: %s", key)

        return updated

    def _assigns(self, line: str, key: str) -> bool:
        stripped = line.strip()
        if stripped.startswith(f"{key}="):
            return True
        if stripped.startswith("#") or "=" not in stripped:
            return False
        return stripped.split("=", 1)[0].strip() == key
