"""Structured logging and OpenTelemetry spans for batch-compile.

Library modules log through structlog; nothing is emitted until the host
application configures structlog or calls configure_logging(), which
routes events to a handler on the "batch_compile" stdlib logger only.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, MutableMapping
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any

import structlog
from opentelemetry import trace
from opentelemetry.trace import SpanKind, Status, StatusCode

if TYPE_CHECKING:
    from opentelemetry.trace import Span, Tracer
    from structlog.stdlib import BoundLogger

TRACER_NAME = "batch_compile"

_library_logger: BoundLogger | None = None
_library_tracer: Tracer | None = None
_installed_handler: logging.Handler | None = None


def get_logger() -> BoundLogger:
    """Return the structlog logger named after the package."""
    global _library_logger
    if _library_logger is None:
        _library_logger = structlog.get_logger(TRACER_NAME)
    return _library_logger


def get_tracer() -> Tracer:
    global _library_tracer
    if _library_tracer is None:
        _library_tracer = trace.get_tracer(TRACER_NAME)
    return _library_tracer


def add_trace_context(
    logger: Any, method_name: str, event_dict: MutableMapping[str, Any]
) -> MutableMapping[str, Any]:
    """structlog processor adding trace_id and span_id of the active span.

    Events logged outside a valid span context are left unchanged.
    """
    span_context = trace.get_current_span().get_span_context()
    if span_context.is_valid:
        event_dict["trace_id"] = format(span_context.trace_id, "032x")
        event_dict["span_id"] = format(span_context.span_id, "016x")
    return event_dict


def configure_logging(
    *,
    log_level: str = "INFO",
    json_format: bool = True,
    handler: logging.Handler | None = None,
) -> logging.Logger:
    """Send batch-compile events to handler.

    Only the "batch_compile" stdlib logger is touched: its level is set,
    it stops propagating to the root logger, and handler (stderr by
    default) replaces the one installed by any previous call. Loggers of
    the package's modules are its children and share the handler.

    Args:
        log_level: Minimum level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        json_format: Render events as JSON lines, or for the console if False.
        handler: Destination of rendered events.

    Returns:
        The configured stdlib logger.

    Example:
        >>> configure_logging(log_level="DEBUG", json_format=False)
    """
    global _installed_handler

    library_logger = logging.getLogger(TRACER_NAME)
    if _installed_handler is not None:
        library_logger.removeHandler(_installed_handler)

    _installed_handler = handler or logging.StreamHandler()
    # structlog renders the whole line
    _installed_handler.setFormatter(logging.Formatter("%(message)s"))
    library_logger.addHandler(_installed_handler)
    library_logger.setLevel(getattr(logging, log_level.upper()))
    library_logger.propagate = False

    renderer: Any = (
        structlog.processors.JSONRenderer()
        if json_format
        else structlog.dev.ConsoleRenderer(colors=False)
    )
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            add_trace_context,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        # Module-level loggers must pick up a later reconfiguration
        cache_logger_on_first_use=False,
    )
    return library_logger


@contextmanager
def span(
    name: str,
    *,
    attributes: dict[str, Any] | None = None,
    logger: BoundLogger | None = None,
) -> Iterator[Span]:
    """Create an OpenTelemetry span with structured logging.

    Args:
        name: Span name (e.g., "batch_compile.group").
        attributes: Optional span attributes, also attached to log events.
        logger: Logger for the start/completed/failed events. Defaults to
            get_logger().

    Yields:
        OpenTelemetry Span instance.

    Example:
        >>> with span("batch_compile.group", attributes={"settings_file": "a.yaml"}):
        ...     compile_group()
    """
    tracer = get_tracer()
    log = logger or get_logger()
    attrs = attributes or {}

    with tracer.start_as_current_span(name, kind=SpanKind.INTERNAL, attributes=attrs) as s:
        log.debug(f"{name}_started", **attrs)
        try:
            yield s
        except Exception as exc:
            s.set_status(Status(StatusCode.ERROR, str(exc)))
            s.record_exception(exc)
            log.error(f"{name}_failed", error=str(exc), **attrs)
            raise
        s.set_status(Status(StatusCode.OK))
        log.debug(f"{name}_completed", **attrs)
