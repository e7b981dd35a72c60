"""Resolve file existence and modification time."""

from __future__ import annotations

from typing import TYPE_CHECKING

from batch_compile.models import FileProperties

if TYPE_CHECKING:
    from batch_compile.filesystem import FileSystem


class FilePropertyResolver:
    """Resolve paths to FileProperties through a FileSystem.

    Example:
        >>> resolver = FilePropertyResolver(LocalFileSystem())
        >>> resolver.resolve("/proj/src/a.ts").exists
        True
    """

    def __init__(self, file_system: FileSystem) -> None:
        self.file_system = file_system

    def resolve(self, path: str | None) -> FileProperties:
        """Resolve existence and last write time of path.

        An empty or None path returns the empty sentinel without touching
        the file system.

        Args:
            path: File path, or None when there is nothing to resolve.

        Returns:
            FileProperties for path.
        """
        if not path:
            return FileProperties.empty()

        # A file whose modification time cannot be read is treated as missing
        last_modified = (
            self.file_system.last_write_time(path) if self.file_system.file_exists(path) else None
        )
        return FileProperties(
            path=path,
            exists=last_modified is not None,
            last_modified=last_modified,
        )
