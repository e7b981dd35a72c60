"""Derive compiled output paths from source paths.

This module provides:
- normalize_path_key: Case-insensitive key for path comparisons
- OutputPathMap: Source path to output path mapping with case-insensitive keys
- OutputPathMapper: Syntactic source-to-output path derivation
"""

from __future__ import annotations

import os
from collections.abc import Iterator
from typing import TYPE_CHECKING

from batch_compile.observability import get_logger

if TYPE_CHECKING:
    from structlog.stdlib import BoundLogger

    from batch_compile.models import CompileConfiguration

# Every supported source language compiles to JavaScript
COMPILED_EXTENSION = ".js"

_SEPARATORS = "/\\"


def normalize_path_key(path: str) -> str:
    """Return the case-insensitive comparison key for path.

    Lower-casing is explicit so that keys compare the same way on every
    platform, whatever the file system's own case rules are.
    """
    return path.lower()


class OutputPathMap:
    """Mapping from source path to output path with case-insensitive keys.

    Example:
        >>> output_map = OutputPathMap()
        >>> output_map["/Proj/Src/a.ts"] = "/proj/out/a.js"
        >>> "/proj/src/A.TS" in output_map
        True
    """

    def __init__(self) -> None:
        self._entries: dict[str, tuple[str, str]] = {}

    def __setitem__(self, source_path: str, output_path: str) -> None:
        self._entries[normalize_path_key(source_path)] = (source_path, output_path)

    def __getitem__(self, source_path: str) -> str:
        return self._entries[normalize_path_key(source_path)][1]

    def __contains__(self, source_path: object) -> bool:
        if not isinstance(source_path, str):
            return False
        return normalize_path_key(source_path) in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[str]:
        return (source for source, _ in self._entries.values())

    def get(self, source_path: str, default: str | None = None) -> str | None:
        """Return the output path for source_path, or default."""
        entry = self._entries.get(normalize_path_key(source_path))
        return entry[1] if entry else default

    def items(self) -> list[tuple[str, str]]:
        """Return (source path, output path) pairs in insertion order."""
        return list(self._entries.values())

    def __repr__(self) -> str:
        return f"OutputPathMap({dict(self.items())!r})"


class OutputPathMapper:
    """Derive the compiled output path of a source file.

    The derivation is purely syntactic: it never touches the file system
    and says nothing about whether the output exists.

    Example:
        >>> mapper = OutputPathMapper()
        >>> mapper.map_output_path("/proj/src/app/a.ts", config)
        '/proj/out/app/a.js'
    """

    def __init__(self, logger: BoundLogger | None = None) -> None:
        self._log = logger or get_logger()

    def map_output_path(self, source_path: str, config: CompileConfiguration) -> str | None:
        """Map source_path from config.source_directory into config.out_directory.

        Args:
            source_path: Source file path.
            config: Compile configuration of the settings group.

        Returns:
            Output path with the compiled extension, or None if source_path
            is not inside the configured source directory.
        """
        relative_path = _relative_to(source_path, config.source_directory)
        if relative_path is None:
            self._log.warning(
                "output_path_unmappable",
                source=source_path,
                source_directory=config.source_directory,
                settings_file=config.settings_file_name,
            )
            return None

        output_path = os.path.join(config.out_directory, relative_path)
        root, _ = os.path.splitext(output_path)
        return root + COMPILED_EXTENSION


def _relative_to(path: str, directory: str) -> str | None:
    """Return path relative to directory, compared case-insensitively.

    The directory must match whole path segments, so /proj/src does not
    contain /proj/src2/a.ts.
    """
    base = directory.rstrip(_SEPARATORS)
    path_key = normalize_path_key(path)
    base_key = normalize_path_key(base)

    if not base:
        # Root directory
        relative = path.lstrip(_SEPARATORS)
        return relative if relative and path[:1] in _SEPARATORS else None

    if not path_key.startswith(base_key):
        return None

    remainder = path[len(base) :]
    if not remainder or remainder[0] not in _SEPARATORS:
        return None

    relative = remainder.lstrip(_SEPARATORS)
    return relative or None
