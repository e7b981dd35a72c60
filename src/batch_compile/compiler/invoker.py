"""Run the external compiler for a settings group."""

from __future__ import annotations

from typing import TYPE_CHECKING

from batch_compile.errors import CompilationFailedError
from batch_compile.observability import get_logger

if TYPE_CHECKING:
    from structlog.stdlib import BoundLogger

    from batch_compile.models import CompileConfiguration
    from batch_compile.process import ProcessRunner


class CompileInvoker:
    """Invoke the compiler once and turn failures into CompilationFailedError.

    Example:
        >>> invoker = CompileInvoker(SubprocessRunner())
        >>> invoker.invoke(config)
    """

    def __init__(self, process_runner: ProcessRunner, logger: BoundLogger | None = None) -> None:
        self.process_runner = process_runner
        self._log = logger or get_logger()

    def invoke(self, config: CompileConfiguration) -> None:
        """Run the batch compile for config.

        Args:
            config: Compile configuration of the settings group.

        Raises:
            CompilationFailedError: If running the process raises, or the
                process exits with a positive exit code.
        """
        settings_file = config.settings_file_name

        try:
            result = self.process_runner.run_batch_compile(config)
        except Exception as e:
            self._log.error(
                "batch_compile_error",
                settings_file=settings_file,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise CompilationFailedError(str(e), settings_file_name=settings_file) from e

        if result.failed:
            self._log.error(
                "batch_compile_failed",
                settings_file=settings_file,
                exit_code=result.exit_code,
                standard_error=result.standard_error,
            )
            raise CompilationFailedError(
                result.standard_error,
                settings_file_name=settings_file,
                exit_code=result.exit_code,
            )

        self._log.info(
            "batch_compile_completed",
            settings_file=settings_file,
            exit_code=result.exit_code,
        )
