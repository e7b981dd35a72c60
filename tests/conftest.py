"""Shared pytest fixtures for batch-compile tests.

Provides in-memory fakes for the file system and compiler process
collaborators, plus structlog configuration for log capture.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime, timedelta, timezone

import pytest
import structlog

from batch_compile.models import CompileConfiguration, CompileResult
from batch_compile.settings import SettingsResolver

BASE_TIME = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)


def at(minutes: int) -> datetime:
    """Return BASE_TIME shifted by minutes."""
    return BASE_TIME + timedelta(minutes=minutes)


@pytest.fixture(autouse=True)
def configure_structlog_for_tests() -> None:
    """Configure structlog to output to stdout for test capture."""
    structlog.configure(
        processors=[
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.dev.ConsoleRenderer(colors=False),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        # No fixed file: each logger writes to the current sys.stdout (capsys)
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=False,  # Important for test isolation
    )


@pytest.fixture(autouse=True)
def clear_settings_cache() -> None:
    """Keep cached settings files from leaking between tests."""
    SettingsResolver.clear_cache()


class FakeFileSystem:
    """In-memory FileSystem keyed by exact path.

    Paths in unreadable exist but report no modification time, like a
    file whose stat() fails after the existence check.
    """

    def __init__(
        self,
        files: dict[str, datetime] | None = None,
        *,
        unreadable: set[str] | None = None,
    ) -> None:
        self.files: dict[str, datetime] = dict(files or {})
        self.unreadable: set[str] = set(unreadable or ())
        self.exists_calls: list[str] = []
        self.time_calls: list[str] = []

    def add(self, path: str, modified: datetime) -> None:
        self.files[path] = modified

    def file_exists(self, path: str) -> bool:
        self.exists_calls.append(path)
        return path in self.files or path in self.unreadable

    def last_write_time(self, path: str) -> datetime | None:
        self.time_calls.append(path)
        return self.files.get(path)


class FakeProcessRunner:
    """ProcessRunner that records calls and returns a canned result.

    on_run is called before returning, so tests can simulate the compiler
    writing output files.
    """

    def __init__(
        self,
        result: CompileResult | None = None,
        *,
        error: Exception | None = None,
        on_run: Callable[[CompileConfiguration], None] | None = None,
    ) -> None:
        self.result = result or CompileResult(exit_code=0)
        self.error = error
        self.on_run = on_run
        self.calls: list[CompileConfiguration] = []

    def run_batch_compile(self, config: CompileConfiguration) -> CompileResult:
        self.calls.append(config)
        if self.error is not None:
            raise self.error
        if self.on_run is not None:
            self.on_run(config)
        return self.result


@pytest.fixture
def fake_fs() -> FakeFileSystem:
    """Return an empty in-memory file system."""
    return FakeFileSystem()


@pytest.fixture
def fake_runner() -> FakeProcessRunner:
    """Return a process runner that succeeds."""
    return FakeProcessRunner()


@pytest.fixture
def compile_config() -> CompileConfiguration:
    """Return a TypeScript compile configuration rooted at /proj."""
    return CompileConfiguration(
        settings_file_name="/proj/batchcompile.yaml",
        source_directory="/proj/src",
        out_directory="/proj/out",
        extensions=(".ts",),
        extensions_with_no_output=(".d.ts",),
        skip_if_unchanged=True,
        executable="tsc",
    )
