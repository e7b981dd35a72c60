"""File system abstraction for batch-compile.

Architecture:
- FileSystem protocol defines the two queries the compiler needs
- LocalFileSystem implements them on the local disk with pathlib
"""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from typing import Protocol, runtime_checkable

import structlog

logger = structlog.get_logger(__name__)


@runtime_checkable
class FileSystem(Protocol):
    """Protocol for file existence and modification time queries.

    Example:
        >>> fs: FileSystem = LocalFileSystem()
        >>> if fs.file_exists("out/a.js"):
        ...     print(fs.last_write_time("out/a.js"))
    """

    def file_exists(self, path: str) -> bool:
        """Check if a regular file exists at path."""
        ...

    def last_write_time(self, path: str) -> datetime | None:
        """Get the last modification time of path, or None if unavailable."""
        ...


class LocalFileSystem:
    """Local disk implementation of FileSystem.

    Errors from the operating system are reported as a missing file
    rather than raised.
    """

    def file_exists(self, path: str) -> bool:
        """Check if a regular file exists at path.

        Args:
            path: File path.

        Returns:
            True if path is an existing file.
        """
        try:
            return Path(path).is_file()
        except OSError as e:
            logger.debug("file_exists_failed", path=path, error=str(e))
            return False

    def last_write_time(self, path: str) -> datetime | None:
        """Get file modification time.

        Args:
            path: File path.

        Returns:
            UTC datetime of last modification, or None if the file
            doesn't exist or cannot be read.
        """
        try:
            stat = Path(path).stat()
        except OSError:
            return None
        return datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc)

    def __repr__(self) -> str:
        return "LocalFileSystem()"
