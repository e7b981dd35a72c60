"""Data models for batch-compile.

This module defines:
- CompileConfiguration: Compile step settings shared by a settings group
- ReferencedFile: A test file reference and its generated output location
- TestContext: Owner of a compile configuration and referenced files
- FileProperties: Existence and modification time of one path
- SourceCompileInfo: A source paired with its expected output
- CompileResult: Outcome of one compiler process run
- GroupCompileResult: Summary of one processed settings group
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_EXTENSIONS = (".ts", ".coffee")
DEFAULT_EXTENSIONS_WITH_NO_OUTPUT = (".d.ts",)
DEFAULT_TIMEOUT_SECONDS = 300.0


class CompileConfiguration(BaseModel):
    """Batch compile settings for one settings file.

    Contexts that share a CompileConfiguration *instance* are compiled
    together as one settings group. Two equal but distinct instances form
    two groups.

    Attributes:
        settings_file_name: Settings file identifier for logs and errors.
        source_directory: Root directory of the uncompiled sources.
        out_directory: Root directory the compiler writes outputs to.
        extensions: File extensions tracked by the compile step.
        extensions_with_no_output: Tracked extensions that never produce an
            output file (e.g. TypeScript declaration files).
        skip_if_unchanged: Skip the compile when every output is newer
            than every source.
        executable: Compiler executable for the default process runner.
        arguments: Command line arguments, split with shell rules.
        working_directory: Directory the compiler is run in.
        timeout_seconds: Compiler run time limit (None disables it).

    Example:
        >>> config = CompileConfiguration(
        ...     settings_file_name="/proj/batchcompile.yaml",
        ...     source_directory="/proj/src",
        ...     out_directory="/proj/out",
        ...     executable="tsc",
        ...     arguments="-p tsconfig.json",
        ... )
        >>> config.extensions
        ('.ts', '.coffee')
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    settings_file_name: str = Field(
        ...,
        min_length=1,
        description="Settings file identifier used in diagnostics",
    )
    source_directory: str = Field(
        ...,
        min_length=1,
        description="Root directory of source files",
    )
    out_directory: str = Field(
        ...,
        min_length=1,
        description="Root directory of compiled output files",
    )
    extensions: tuple[str, ...] = Field(
        default=DEFAULT_EXTENSIONS,
        description="Extensions tracked by the compile step",
    )
    extensions_with_no_output: tuple[str, ...] = Field(
        default=DEFAULT_EXTENSIONS_WITH_NO_OUTPUT,
        description="Tracked extensions that produce no output file",
    )
    skip_if_unchanged: bool = Field(
        default=True,
        description="Skip compile when outputs are newer than sources",
    )
    executable: str | None = Field(
        default=None,
        description="Compiler executable",
    )
    arguments: str | None = Field(
        default=None,
        description="Compiler arguments",
    )
    working_directory: str | None = Field(
        default=None,
        description="Directory the compiler runs in",
    )
    timeout_seconds: float | None = Field(
        default=DEFAULT_TIMEOUT_SECONDS,
        gt=0,
        description="Compiler run time limit in seconds",
    )

    @field_validator("extensions", "extensions_with_no_output", mode="before")
    @classmethod
    def normalize_extensions(cls, v: object) -> object:
        """Prefix extensions with a dot and drop blanks."""
        if isinstance(v, str):
            v = [v]
        if not isinstance(v, (list, tuple)):
            return v
        normalized: list[object] = []
        for ext in v:
            if isinstance(ext, str):
                ext = ext.strip()
                if not ext:
                    continue
                if not ext.startswith("."):
                    ext = f".{ext}"
            normalized.append(ext)
        return tuple(normalized)

    def tracks(self, path: str) -> bool:
        """Check whether a path ends with one of the tracked extensions."""
        return _ends_with_any(path, self.extensions)

    def expects_output(self, path: str) -> bool:
        """Check whether a tracked path is expected to produce an output file."""
        return not _ends_with_any(path, self.extensions_with_no_output)


def _ends_with_any(path: str, extensions: tuple[str, ...]) -> bool:
    lowered = path.lower()
    return any(lowered.endswith(ext.lower()) for ext in extensions)


class ReferencedFile(BaseModel):
    """A file referenced by a test context.

    generated_file_path stays None until the compiled counterpart of
    path has been confirmed to exist on disk.

    Attributes:
        path: Source file path.
        generated_file_path: Compiled output path, once confirmed.
    """

    model_config = ConfigDict(extra="forbid", validate_assignment=True)

    path: str = Field(..., min_length=1, description="Source file path")
    generated_file_path: str | None = Field(
        default=None,
        description="Confirmed compiled output path",
    )


class TestContext(BaseModel):
    """A test run's compile configuration and referenced files.

    Attributes:
        compile_configuration: Shared compile settings, or None when the
            context has no compile step.
        referenced_files: Files the test references.

    Example:
        >>> context = TestContext(
        ...     compile_configuration=config,
        ...     referenced_files=[ReferencedFile(path="/proj/src/a.ts")],
        ... )
    """

    __test__ = False  # not a pytest test class

    model_config = ConfigDict(extra="forbid")

    compile_configuration: CompileConfiguration | None = Field(
        default=None,
        description="Shared compile settings",
    )
    referenced_files: list[ReferencedFile] = Field(
        default_factory=list,
        description="Files referenced by the test",
    )


class FileProperties(BaseModel):
    """Existence and last modification time of a path.

    The empty sentinel (path None, exists False) stands in for sources
    that have no output path.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    path: str | None = None
    exists: bool = False
    last_modified: datetime | None = None

    @classmethod
    def empty(cls) -> FileProperties:
        """Return the sentinel used when there is no path to resolve."""
        return cls()


class SourceCompileInfo(BaseModel):
    """A tracked source paired with its expected output."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    source: FileProperties
    output: FileProperties = Field(default_factory=FileProperties.empty)
    source_has_output: bool = True


class CompileResult(BaseModel):
    """Outcome of one compiler process run.

    Attributes:
        exit_code: Process exit code. Only positive values are failures.
        standard_error: Captured standard error text.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    exit_code: int
    standard_error: str = ""

    @property
    def failed(self) -> bool:
        """Check if the exit code signals failure."""
        return self.exit_code > 0


class GroupCompileResult(BaseModel):
    """Summary of one processed settings group.

    Attributes:
        settings_file_name: Settings file of the group.
        compiled: Whether the compiler was run.
        tracked_files: Distinct tracked source files in the group.
        mapped_files: Referenced files that received a generated path.
        missing_outputs: Referenced files whose mapped output was missing.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    settings_file_name: str
    compiled: bool
    tracked_files: int = Field(default=0, ge=0)
    mapped_files: int = Field(default=0, ge=0)
    missing_outputs: int = Field(default=0, ge=0)
