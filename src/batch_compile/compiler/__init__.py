"""Compiler module for batch-compile.

This module exports the batch compile components:
- BatchCompiler: Group contexts, compile stale groups, link outputs
- FilePropertyResolver: Path to existence and modification time
- OutputPathMapper: Source path to compiled output path
- OutputPathMap: Case-insensitive source to output mapping
- StalenessEvaluator: Decide whether a group needs compiling
- CompileInvoker: Run the compiler and raise on failure
"""

from __future__ import annotations

from batch_compile.compiler.invoker import CompileInvoker
from batch_compile.compiler.orchestrator import (
    BatchCompiler,
    SettingsGroup,
    group_by_configuration,
)
from batch_compile.compiler.output_paths import (
    COMPILED_EXTENSION,
    OutputPathMap,
    OutputPathMapper,
    normalize_path_key,
)
from batch_compile.compiler.properties import FilePropertyResolver
from batch_compile.compiler.staleness import StalenessEvaluator

__all__: list[str] = [
    # Orchestration
    "BatchCompiler",
    "SettingsGroup",
    "group_by_configuration",
    # Components
    "CompileInvoker",
    "FilePropertyResolver",
    "StalenessEvaluator",
    # Output paths
    "OutputPathMapper",
    "OutputPathMap",
    "normalize_path_key",
    "COMPILED_EXTENSION",
]
