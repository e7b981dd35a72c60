"""Compiler process execution for batch-compile.

Architecture:
- ProcessRunner protocol defines the single call the invoker makes
- SubprocessRunner runs the configured executable with subprocess
"""

from __future__ import annotations

import os
import shlex
import subprocess
from typing import TYPE_CHECKING, Protocol, runtime_checkable

import structlog

from batch_compile.models import CompileResult

if TYPE_CHECKING:
    from batch_compile.models import CompileConfiguration

logger = structlog.get_logger(__name__)

# Windows argument strings keep their backslashes (C:\proj\tsconfig.json)
POSIX_ARGUMENTS = os.name != "nt"


@runtime_checkable
class ProcessRunner(Protocol):
    """Protocol for running the batch compile process of a settings group."""

    def run_batch_compile(self, config: CompileConfiguration) -> CompileResult:
        """Run the compiler once for config.

        Returns:
            CompileResult with the exit code and captured standard error.

        Raises:
            Any exception raised while launching or waiting for the process.
        """
        ...


class SubprocessRunner:
    """Run the compiler with subprocess.run.

    The command is config.executable followed by config.arguments split
    with shell rules (POSIX rules except on Windows, where backslashes are
    path separators). It runs in config.working_directory and is killed
    after config.timeout_seconds.

    Example:
        >>> runner = SubprocessRunner()
        >>> result = runner.run_batch_compile(config)
        >>> result.exit_code
        0
    """

    def build_command(self, config: CompileConfiguration) -> list[str]:
        """Build the argument vector for config.

        Raises:
            ValueError: If config has no executable.
        """
        if not config.executable:
            msg = f"No compile executable configured in {config.settings_file_name}"
            raise ValueError(msg)

        command = [config.executable]
        if config.arguments:
            command.extend(shlex.split(config.arguments, posix=POSIX_ARGUMENTS))
        return command

    def run_batch_compile(self, config: CompileConfiguration) -> CompileResult:
        """Run the compiler and capture its result.

        Args:
            config: Compile configuration of the settings group.

        Returns:
            CompileResult with return code and standard error.

        Raises:
            ValueError: If config has no executable.
            OSError: If the executable cannot be started.
            subprocess.TimeoutExpired: If the run exceeds the timeout.
        """
        command = self.build_command(config)
        log = logger.bind(settings_file=config.settings_file_name)
        log.info(
            "compile_process_started",
            command=command,
            working_directory=config.working_directory,
            timeout_seconds=config.timeout_seconds,
        )

        completed = subprocess.run(
            command,
            cwd=config.working_directory,
            capture_output=True,
            text=True,
            timeout=config.timeout_seconds,
            check=False,
        )

        log.info("compile_process_finished", exit_code=completed.returncode)
        return CompileResult(
            exit_code=completed.returncode,
            standard_error=completed.stderr or "",
        )
