"""Reading and atomically writing env files on disk."""

import logging
import os
import tempfile
from pathlib import Path

from envvault.security.envfile import EnvFileStore
from envvault.security.errors import EnvFileError

logger = logging.getLogger(__name__)


class EnvFileStorage:
    """File system collaborator for :class:`EnvFileStore`.

    Writes go to a temporary file in the target directory which then replaces
    the target, so readers never see a half-written file. Concurrent writers
    are not coordinated; the last one wins.
    """

    FILE_MODE = 0o600

    def __init__(self, store: EnvFileStore | None = None) -> None:
        self._store = store or EnvFileStore()

    def read_lines(self, path: Path | str) -> list[str]:
        """Read an env file as lines.

        Args:
            path: File to read.

        Returns:
            List of lines, empty for an empty file.

        Raises:
            FileNotFoundError: If the file doesn't exist.
            EnvFileError: If the file is not valid UTF-8.
        """
        path = Path(path)
        if not path.is_file():
            raise FileNotFoundError(f"Environment file not found: {path}")

        try:
            content = path.read_text(encoding="utf-8")
        except UnicodeDecodeError as e:
            raise EnvFileError(f"Environment file is not valid UTF-8: {path}") from e
        if not content:
            logger.warning("Environment file is empty: %s", path)
            return []
        return self._store.parse_lines(content)

    def write_lines(self, path: Path | str, lines: list[str]) -> None:
        """Atomically replace an env file with the given lines.

        Args:
            path: File to write. Parent directories are created.
            lines: Lines to write, joined with ``\\n``.
        """
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        content = self._store.join_lines(lines)

        fd, tmp_name = tempfile.mkstemp(
            dir=path.parent, prefix=f".{path.name}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8", newline="") as handle:
                handle.write(content)
                handle.flush()
                os.fsync(handle.fileno())
            os.chmod(tmp_name, self.FILE_MODE)
            os.replace(tmp_name, path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

        logger.debug("Successfully wrote %d lines to %s", len(lines), path)

    def read_or_create_lines(self, path: Path | str) -> list[str]:
        """Read an env file, creating an empty one if it doesn't exist."""
        path = Path(path)
        if not path.exists():
            logger.warning(
                "Environment file not found at '%s'. A new empty file will be created.",
                path,
            )
            self.write_lines(path, [])
            return []
        return self.read_lines(path)
