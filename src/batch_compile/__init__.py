"""batch-compile: Staleness detection and batch compilation for test files.

This package provides:
- BatchCompiler: Compile settings groups and link sources to outputs
- Models for compile configuration, test contexts and referenced files
- SettingsResolver: Load compile configuration from settings files
- Default file system and compiler process collaborators
"""

from __future__ import annotations

__version__ = "0.1.0"

from batch_compile.compiler import (
    BatchCompiler,
    CompileInvoker,
    FilePropertyResolver,
    OutputPathMap,
    OutputPathMapper,
    StalenessEvaluator,
)
from batch_compile.errors import (
    BatchCompileError,
    CompilationFailedError,
    SettingsError,
)
from batch_compile.filesystem import FileSystem, LocalFileSystem
from batch_compile.models import (
    CompileConfiguration,
    CompileResult,
    FileProperties,
    GroupCompileResult,
    ReferencedFile,
    SourceCompileInfo,
    TestContext,
)
from batch_compile.observability import configure_logging
from batch_compile.process import ProcessRunner, SubprocessRunner
from batch_compile.settings import SettingsResolver, find_settings_file

__all__ = [
    "__version__",
    # Compiler
    "BatchCompiler",
    "CompileInvoker",
    "FilePropertyResolver",
    "OutputPathMap",
    "OutputPathMapper",
    "StalenessEvaluator",
    # Errors
    "BatchCompileError",
    "CompilationFailedError",
    "SettingsError",
    # Models
    "CompileConfiguration",
    "CompileResult",
    "FileProperties",
    "GroupCompileResult",
    "ReferencedFile",
    "SourceCompileInfo",
    "TestContext",
    # Collaborators
    "FileSystem",
    "LocalFileSystem",
    "ProcessRunner",
    "SubprocessRunner",
    # Settings
    "SettingsResolver",
    "find_settings_file",
    # Observability
    "configure_logging",
]
