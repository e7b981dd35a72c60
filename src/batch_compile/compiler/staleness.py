"""Decide whether a settings group needs to be compiled."""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from batch_compile.models import CompileConfiguration, SourceCompileInfo


class StalenessEvaluator:
    """Make-style rebuild decision from source and output timestamps.

    The evaluator is pure: it performs no I/O and logs nothing.

    Policy:
    - skip_if_unchanged off: always compile
    - any output-bearing source missing its output: compile
    - no output-bearing sources, or no existing sources: compile
    - an existing source or output without a timestamp: compile
    - otherwise compile when the newest source is at least as new as the
      oldest output (equal timestamps count as stale)
    """

    def needs_compile(
        self,
        config: CompileConfiguration,
        infos: Sequence[SourceCompileInfo],
    ) -> bool:
        """Check whether the compile step must run.

        Args:
            config: Compile configuration of the settings group.
            infos: Source and output properties of every tracked file.

        Returns:
            True if the group is stale.
        """
        if not config.skip_if_unchanged:
            return True

        with_output = [info for info in infos if info.source_has_output]
        if any(not info.output.exists for info in with_output):
            return True

        # An existing file without a timestamp cannot be proven up to date
        if any(info.output.last_modified is None for info in with_output):
            return True
        output_times = [info.output.last_modified for info in with_output]
        if not output_times:
            return True

        # Sources without output still count: any changed input makes outputs stale
        existing_sources = [info.source for info in infos if info.source.exists]
        if any(source.last_modified is None for source in existing_sources):
            return True
        source_times = [source.last_modified for source in existing_sources]
        if not source_times:
            return True

        return max(source_times) >= min(output_times)
