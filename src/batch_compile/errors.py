"""Custom exception hierarchy for batch-compile.

This module defines the exception classes raised by the library:
- BatchCompileError: Base exception for all batch-compile errors
- CompilationFailedError: Raised when the external compiler fails
- SettingsError: Raised when a settings file cannot be loaded

Only CompilationFailedError escapes BatchCompiler.compile(). Unmappable
source paths and missing generated outputs are logged and absorbed.
"""

from __future__ import annotations

import structlog

logger = structlog.get_logger(__name__)


class BatchCompileError(Exception):
    """Base exception for batch-compile.

    Args:
        user_message: Message safe to show to whoever runs the tests.
        internal_details: Optional technical details. Logged, never part of
            the exception message.

    Example:
        >>> raise BatchCompileError(
        ...     "Compile settings invalid",
        ...     internal_details="compile.extensions: expected list, got int",
        ... )
    """

    def __init__(
        self,
        user_message: str,
        *,
        internal_details: str | None = None,
    ) -> None:
        """Initialize BatchCompileError.

        Args:
            user_message: Message safe to show to the user.
            internal_details: Technical details for internal logging only.
        """
        super().__init__(user_message)
        self.user_message = user_message

        if internal_details:
            logger.error(
                "batch_compile_error_details",
                error_type=self.__class__.__name__,
                user_message=user_message,
                internal_details=internal_details,
            )


class CompilationFailedError(BatchCompileError):
    """Raised when the batch compile step for a settings group fails.

    Raised when:
    - The compiler process exits with a positive exit code
    - Launching or talking to the compiler process raises

    This error is fatal to the whole batch. Groups after the failing one
    are not processed.

    Attributes:
        error_text: Captured standard error, or the message of the
            exception raised while running the process.
        settings_file_name: Settings file that defined the compile step.
        exit_code: Process exit code, or None if the process never finished.

    Example:
        >>> raise CompilationFailedError(
        ...     "src/a.ts(3,1): error TS1005: ';' expected.",
        ...     settings_file_name="/proj/batchcompile.yaml",
        ...     exit_code=2,
        ... )
    """

    def __init__(
        self,
        error_text: str,
        *,
        settings_file_name: str,
        exit_code: int | None = None,
    ) -> None:
        """Initialize CompilationFailedError.

        Args:
            error_text: Compiler error output or exception message.
            settings_file_name: Settings file that defined the compile step.
            exit_code: Process exit code, if the process completed.
        """
        user_message = f"Batch compile failed for {settings_file_name}: {error_text}"
        super().__init__(user_message)

        self.error_text = error_text
        self.settings_file_name = settings_file_name
        self.exit_code = exit_code


class SettingsError(BatchCompileError):
    """Raised when a settings file cannot be read or validated.

    Attributes:
        file_path: Path to the settings file.

    Example:
        >>> raise SettingsError(
        ...     "Invalid compile settings",
        ...     file_path="batchcompile.yaml",
        ...     internal_details="compile.timeout_seconds: must be > 0",
        ... )
    """

    def __init__(
        self,
        user_message: str,
        *,
        file_path: str | None = None,
        internal_details: str | None = None,
    ) -> None:
        """Initialize SettingsError with file context.

        Args:
            user_message: Message safe to show to the user.
            file_path: Path to the settings file (optional).
            internal_details: Technical details for internal logging only.
        """
        full_message = f"{user_message} (in {file_path})" if file_path else user_message
        super().__init__(full_message, internal_details=internal_details)

        self.file_path = file_path
