"""Batch compile orchestration for groups of test contexts.

BatchCompiler groups test contexts by their shared compile configuration,
decides per group whether the compiler has to run, runs it, and links every
referenced source file to its compiled output.

Error policy:
- CompilationFailedError propagates and aborts the remaining groups
- Unmappable sources and missing outputs are logged and leave the
  referenced file's generated_file_path unset
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING

from batch_compile.compiler.invoker import CompileInvoker
from batch_compile.compiler.output_paths import (
    OutputPathMap,
    OutputPathMapper,
    normalize_path_key,
)
from batch_compile.compiler.properties import FilePropertyResolver
from batch_compile.compiler.staleness import StalenessEvaluator
from batch_compile.filesystem import LocalFileSystem
from batch_compile.models import (
    FileProperties,
    GroupCompileResult,
    ReferencedFile,
    SourceCompileInfo,
)
from batch_compile.observability import get_logger, span
from batch_compile.process import SubprocessRunner

if TYPE_CHECKING:
    from structlog.stdlib import BoundLogger

    from batch_compile.filesystem import FileSystem
    from batch_compile.models import CompileConfiguration, TestContext
    from batch_compile.process import ProcessRunner


class SettingsGroup:
    """Test contexts that share one CompileConfiguration instance."""

    def __init__(self, config: CompileConfiguration) -> None:
        self.config = config
        self.contexts: list[TestContext] = []

    def referenced_files(self) -> list[ReferencedFile]:
        """Return every referenced file of every context, duplicates included."""
        return [file for context in self.contexts for file in context.referenced_files]

    def tracked_source_paths(self) -> list[str]:
        """Return distinct tracked source paths in first-seen order."""
        seen: dict[str, str] = {}
        for file in self.referenced_files():
            if self.config.tracks(file.path):
                seen.setdefault(normalize_path_key(file.path), file.path)
        return list(seen.values())


def group_by_configuration(test_contexts: Iterable[TestContext]) -> list[SettingsGroup]:
    """Group contexts by configuration identity, in discovery order.

    Contexts without a compile configuration are left out.
    """
    groups: dict[int, SettingsGroup] = {}
    for context in test_contexts:
        config = context.compile_configuration
        if config is None:
            continue
        group = groups.get(id(config))
        if group is None:
            group = groups[id(config)] = SettingsGroup(config)
        group.contexts.append(context)
    return list(groups.values())


class BatchCompiler:
    """Compile settings groups and link sources to their compiled outputs.

    Attributes:
        file_system: File existence and timestamp queries.
        process_runner: Runs the compiler process.

    Example:
        >>> compiler = BatchCompiler()
        >>> results = compiler.compile(test_contexts)
        >>> test_contexts[0].referenced_files[0].generated_file_path
        '/proj/out/a.js'
    """

    def __init__(
        self,
        process_runner: ProcessRunner | None = None,
        file_system: FileSystem | None = None,
        logger: BoundLogger | None = None,
    ) -> None:
        """Initialize the BatchCompiler.

        Args:
            process_runner: Compiler process runner. Defaults to SubprocessRunner.
            file_system: File system queries. Defaults to LocalFileSystem.
            logger: Diagnostics logger. Defaults to the library logger.
        """
        self.process_runner = process_runner or SubprocessRunner()
        self.file_system = file_system or LocalFileSystem()
        self._log = logger or get_logger()

        self.properties = FilePropertyResolver(self.file_system)
        self.mapper = OutputPathMapper(self._log)
        self.evaluator = StalenessEvaluator()
        self.invoker = CompileInvoker(self.process_runner, self._log)

    def compile(self, test_contexts: Iterable[TestContext]) -> list[GroupCompileResult]:
        """Run the batch compile step for every settings group.

        Args:
            test_contexts: Test contexts populated by test discovery.

        Returns:
            One GroupCompileResult per processed group, in discovery order.

        Raises:
            CompilationFailedError: If a group's compile fails. Groups after
                it are not processed.
        """
        results: list[GroupCompileResult] = []
        for group in group_by_configuration(test_contexts):
            attributes = {"settings_file": group.config.settings_file_name}
            with span("batch_compile.group", attributes=attributes, logger=self._log):
                results.append(self._compile_group(group))
        return results

    def _compile_group(self, group: SettingsGroup) -> GroupCompileResult:
        config = group.config
        infos = [self._source_compile_info(path, config) for path in group.tracked_source_paths()]
        output_map = self._build_output_map(infos)

        compiled = self.evaluator.needs_compile(config, infos)
        if compiled:
            self.invoker.invoke(config)
        else:
            self._log.info(
                "batch_compile_skipped",
                settings_file=config.settings_file_name,
                reason="all outputs up to date",
            )

        mapped, missing = self._link_generated_files(group, output_map)

        return GroupCompileResult(
            settings_file_name=config.settings_file_name,
            compiled=compiled,
            tracked_files=len(infos),
            mapped_files=mapped,
            missing_outputs=missing,
        )

    def _source_compile_info(self, path: str, config: CompileConfiguration) -> SourceCompileInfo:
        source_has_output = config.expects_output(path)
        output_path = self.mapper.map_output_path(path, config) if source_has_output else None

        return SourceCompileInfo(
            source=self.properties.resolve(path),
            output=self.properties.resolve(output_path) if output_path else FileProperties.empty(),
            source_has_output=source_has_output,
        )

    @staticmethod
    def _build_output_map(infos: list[SourceCompileInfo]) -> OutputPathMap:
        output_map = OutputPathMap()
        for info in infos:
            if info.source_has_output and info.source.path and info.output.path:
                output_map[info.source.path] = info.output.path
        return output_map

    def _link_generated_files(
        self,
        group: SettingsGroup,
        output_map: OutputPathMap,
    ) -> tuple[int, int]:
        """Set generated_file_path on files whose mapped output exists.

        Runs whether or not the compiler ran, so outputs from an earlier
        compile are still linked.

        Returns:
            Count of linked files and count of files with a missing output.
        """
        mapped = 0
        missing = 0
        for file in group.referenced_files():
            output_path = output_map.get(file.path)
            if output_path is None:
                continue

            if self.file_system.file_exists(output_path):
                file.generated_file_path = output_path
                mapped += 1
                self._log.info("generated_path_found", source=file.path, output=output_path)
            else:
                missing += 1
                self._log.warning("generated_path_missing", source=file.path, output=output_path)
        return mapped, missing
