"""Compile settings file loading for batch-compile.

This module handles loading compile configuration from settings files:
- find_settings_file: Walk up from a test directory to the nearest file
- SettingsResolver: Load, validate and cache CompileConfiguration

Settings files are YAML (JSON is accepted as a YAML subset). The compile
step lives in a top-level ``compile`` section:

    compile:
      executable: tsc
      arguments: -p tsconfig.json
      source_directory: src
      out_directory: build
      extensions: [.ts]
      skip_if_unchanged: true

Relative directories resolve against the settings file's directory, which
is also their default.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, ClassVar

import structlog
import yaml
from pydantic import ValidationError

from batch_compile.errors import SettingsError
from batch_compile.models import CompileConfiguration

logger = structlog.get_logger(__name__)

# Standard settings file name
SETTINGS_FILE_NAME = "batchcompile.yaml"

# Section holding the compile step
COMPILE_SECTION = "compile"

_DIRECTORY_FIELDS = ("source_directory", "out_directory", "working_directory")


def find_settings_file(
    start_dir: Path | str,
    file_name: str = SETTINGS_FILE_NAME,
) -> Path | None:
    """Find the nearest settings file at or above start_dir.

    Args:
        start_dir: Directory to start searching from (usually a test
            file's directory).
        file_name: Settings file name to look for.

    Returns:
        Path to the settings file, or None if no directory up to the file
        system root has one.
    """
    current = Path(start_dir).resolve()
    while True:
        candidate = current / file_name
        if candidate.is_file():
            logger.debug("settings_file_found", path=str(candidate))
            return candidate

        if current.parent == current:
            return None  # Reached filesystem root

        current = current.parent


class SettingsResolver:
    """Load CompileConfiguration from settings files.

    Configurations are cached by resolved settings path, so every test
    context loaded from the same file shares one CompileConfiguration
    instance and lands in the same settings group.

    Example:
        >>> resolver = SettingsResolver()
        >>> config = resolver.load(Path("tests/batchcompile.yaml"))
        >>> config.out_directory
        '/proj/tests/build'
    """

    _cache: ClassVar[dict[str, CompileConfiguration | None]] = {}

    def __init__(self, file_name: str = SETTINGS_FILE_NAME) -> None:
        self.file_name = file_name

    def load_for(self, test_path: Path | str, use_cache: bool = True) -> CompileConfiguration | None:
        """Load the compile configuration that applies to a test file.

        Args:
            test_path: Test file or directory.
            use_cache: Whether to reuse an already loaded configuration.

        Returns:
            CompileConfiguration of the nearest settings file, or None if
            there is no settings file or it has no compile section.
        """
        test_path = Path(test_path)
        start_dir = test_path if test_path.is_dir() else test_path.parent
        settings_path = find_settings_file(start_dir, self.file_name)
        if settings_path is None:
            return None
        return self.load(settings_path, use_cache=use_cache)

    def load(self, path: Path | str, use_cache: bool = True) -> CompileConfiguration | None:
        """Load compile configuration from a settings file.

        Args:
            path: Path to the settings file.
            use_cache: Whether to reuse an already loaded configuration. Set
                to False to force reload.

        Returns:
            Validated CompileConfiguration, or None if the file has no
            compile section.

        Raises:
            SettingsError: If the file is missing, unparsable or invalid.
        """
        resolved_path = Path(path).resolve()
        cache_key = str(resolved_path)

        if use_cache and cache_key in self._cache:
            logger.debug("settings_cache_hit", path=cache_key)
            return self._cache[cache_key]

        logger.info("settings_loading", path=cache_key)
        config = self._parse(resolved_path)
        self._cache[cache_key] = config
        return config

    def _parse(self, path: Path) -> CompileConfiguration | None:
        if not path.is_file():
            raise SettingsError("Settings file not found", file_path=str(path))

        try:
            with path.open("r", encoding="utf-8") as f:
                data: Any = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            raise SettingsError(
                "Settings file could not be parsed",
                file_path=str(path),
                internal_details=str(e),
            ) from e

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise SettingsError(
                "Settings file must contain a mapping",
                file_path=str(path),
                internal_details=f"got {type(data).__name__}",
            )

        section = data.get(COMPILE_SECTION)
        if section is None:
            logger.debug("settings_without_compile", path=str(path))
            return None
        if not isinstance(section, dict):
            raise SettingsError(
                f"'{COMPILE_SECTION}' section must be a mapping",
                file_path=str(path),
                internal_details=f"got {type(section).__name__}",
            )

        values = dict(section)
        base_dir = path.parent
        for field in _DIRECTORY_FIELDS:
            values[field] = _resolve_directory(base_dir, values.get(field))
        values["settings_file_name"] = str(path)

        try:
            return CompileConfiguration.model_validate(values)
        except ValidationError as e:
            raise SettingsError(
                "Invalid compile settings",
                file_path=str(path),
                internal_details=str(e),
            ) from e

    @classmethod
    def clear_cache(cls) -> None:
        """Clear the settings cache."""
        cls._cache.clear()


def _resolve_directory(base_dir: Path, value: object) -> object:
    if value is None or value == "":
        return str(base_dir)
    if not isinstance(value, str):
        return value  # left for validation to reject
    return os.path.normpath(os.path.join(base_dir, value))
