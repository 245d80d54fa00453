"""
Logging subsystem for the Marne status bot.

Purpose
-------
Configure the process-wide logging stack from `Settings` and give every tick
a correlation ID so the fetch, update and error lines of one tick can be
grouped in aggregated logs.

Design
------
- Console is the only sink; containers collect stdout.
- JSON output in production (or when `log_json` is set), colored text on a
  TTY in development, plain text otherwise.
- Records are handed to a bounded `QueueHandler` and written by a
  `QueueListener` thread so console I/O never blocks the event loop. When
  the queue is full the record is dropped and counted.
- `ContextFilter` enriches each record from a ContextVar set by `LogContext`
  (`correlation_id`, `component`, `operation`, `server`).
- Extra fields passed via `logger.info("msg", extra={...})` are merged into
  the JSON document.
"""

from __future__ import annotations

import json
import logging
import queue
import sys
import uuid
from contextvars import ContextVar, Token
from dataclasses import dataclass
from datetime import datetime, timezone
from logging import Logger
from logging.handlers import QueueHandler, QueueListener
from typing import TYPE_CHECKING, Any, Dict, Optional

if TYPE_CHECKING:
    from src.core.config.config import Settings


_log_context: ContextVar[Dict[str, Any]] = ContextVar("log_context", default={})

CONSOLE_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)-28s | [%(correlation_id)s] %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
QUEUE_MAX_SIZE = 10_000

# Third-party loggers that are chatty at INFO
NOISY_LOGGERS = (
    "discord",
    "discord.http",
    "discord.gateway",
    "discord.client",
    "aiohttp.access",
    "asyncio",
)


@dataclass(slots=True)
class LoggingMetrics:
    records_enqueued: int = 0
    records_dropped: int = 0


_logging_metrics = LoggingMetrics()
_queue_listener: Optional[QueueListener] = None


# ============================================================================
# Filters & Formatters
# ============================================================================


class ContextFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:  # type: ignore[override]
        context: Dict[str, Any] = _log_context.get({})

        record.correlation_id = context.get("correlation_id") or "-"
        record.component = context.get("component") or record.name.split(".", 1)[0]
        record.operation = context.get("operation", "N/A")
        record.server = context.get("server", "N/A")
        return True


class ColoredFormatter(logging.Formatter):
    COLORS: Dict[str, str] = {
        "DEBUG": "\033[90m",
        "INFO": "\033[94m",
        "WARNING": "\033[93m",
        "ERROR": "\033[91m",
        "CRITICAL": "\033[91m\033[1m",
        "RESET": "\033[0m",
    }

    def format(self, record: logging.LogRecord) -> str:  # type: ignore[override]
        original = record.levelname
        prefix = self.COLORS.get(original, "")
        if prefix:
            record.levelname = f"{prefix}{original}{self.COLORS['RESET']}"
        try:
            return super().format(record)
        finally:
            record.levelname = original


class JSONFormatter(logging.Formatter):
    # Attributes every LogRecord has; anything else came in through `extra=`
    STANDARD_ATTRS = set(
        logging.LogRecord("", 0, "", 0, "", None, None).__dict__.keys()
    ) | {"message", "asctime"}

    CONTEXT_ATTRS = {"correlation_id", "component", "operation", "server"}

    def format(self, record: logging.LogRecord) -> str:  # type: ignore[override]
        created = datetime.fromtimestamp(record.created, tz=timezone.utc)

        log_data: Dict[str, Any] = {
            "timestamp": created.isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        for attr in self.CONTEXT_ATTRS:
            value = getattr(record, attr, None)
            if value not in (None, "N/A", "-"):
                log_data[attr] = value

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        extra = {
            key: val
            for key, val in record.__dict__.items()
            if key not in self.STANDARD_ATTRS
            and key not in self.CONTEXT_ATTRS
            and not key.startswith("_")
        }
        if extra:
            log_data["extra"] = extra

        return json.dumps(log_data, ensure_ascii=False, default=str)


class _DroppingQueueHandler(QueueHandler):
    def enqueue(self, record: logging.LogRecord) -> None:  # type: ignore[override]
        _logging_metrics.records_enqueued += 1
        try:
            self.queue.put_nowait(record)
        except queue.Full:
            _logging_metrics.records_dropped += 1


# ============================================================================
# Setup / Teardown
# ============================================================================


def _use_json(settings: "Settings") -> bool:
    if settings.log_json is None:
        return settings.is_production()
    return settings.log_json


def _build_console_handler(settings: "Settings") -> logging.Handler:
    handler = logging.StreamHandler(sys.stdout)

    if _use_json(settings):
        handler.setFormatter(JSONFormatter())
    elif sys.stdout.isatty():
        handler.setFormatter(ColoredFormatter(fmt=CONSOLE_FORMAT, datefmt=DATE_FORMAT))
    else:
        handler.setFormatter(logging.Formatter(fmt=CONSOLE_FORMAT, datefmt=DATE_FORMAT))

    return handler


def setup_logging(settings: "Settings") -> None:
    """Install the queue-backed console logging stack on the root logger."""
    global _queue_listener, _logging_metrics

    root = logging.getLogger()
    if getattr(root, "_marne_logging_initialized", False):
        return

    level = getattr(logging, settings.log_level, logging.INFO)
    _logging_metrics = LoggingMetrics()

    root.setLevel(level)
    root.handlers.clear()

    console = _build_console_handler(settings)
    log_queue: "queue.Queue[logging.LogRecord]" = queue.Queue(QUEUE_MAX_SIZE)

    _queue_listener = QueueListener(log_queue, console, respect_handler_level=True)
    _queue_listener.start()

    queue_handler = _DroppingQueueHandler(log_queue)
    # Filter on the handler so context is captured on the producing task
    queue_handler.addFilter(ContextFilter())
    root.addHandler(queue_handler)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    setattr(root, "_marne_logging_initialized", True)

    logging.getLogger(__name__).info(
        "Logging initialized",
        extra={
            "environment": settings.environment.value,
            "log_level": settings.log_level,
            "json": _use_json(settings),
        },
    )


def shutdown_logging() -> None:
    """Stop the listener thread and flush the console handler."""
    global _queue_listener

    root = logging.getLogger()
    if not getattr(root, "_marne_logging_initialized", False):
        return

    if _queue_listener is not None:
        _queue_listener.stop()
        _queue_listener = None

    for handler in list(root.handlers):
        handler.flush()
        handler.close()
        root.removeHandler(handler)

    setattr(root, "_marne_logging_initialized", False)


def get_logging_metrics() -> LoggingMetrics:
    return _logging_metrics


# ============================================================================
# Public API
# ============================================================================


def get_logger(name: str) -> Logger:
    return logging.getLogger(name)


class LogContext:
    """
    Scope log context to a block (sync or async).

    Example
    -------
    >>> async with LogContext(operation="tick", server="My Server"):
    ...     logger.info("Fetching server list")
    """

    def __init__(
        self,
        component: Optional[str] = None,
        operation: Optional[str] = None,
        correlation_id: Optional[str] = None,
        **extra: Any,
    ) -> None:
        self.context: Dict[str, Any] = {
            **_log_context.get({}),
            "component": component,
            "operation": operation,
            "correlation_id": correlation_id or self._generate_correlation_id(),
            **extra,
        }
        self._token: Optional[Token[Dict[str, Any]]] = None

    @property
    def correlation_id(self) -> str:
        return self.context["correlation_id"]

    @staticmethod
    def _generate_correlation_id() -> str:
        return str(uuid.uuid4())[:8]

    def __enter__(self) -> "LogContext":
        self._token = _log_context.set(self.context)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        if self._token is not None:
            _log_context.reset(self._token)
            self._token = None

    async def __aenter__(self) -> "LogContext":
        return self.__enter__()

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        self.__exit__(exc_type, exc_val, exc_tb)


def get_log_context() -> Dict[str, Any]:
    return dict(_log_context.get({}))


def clear_log_context() -> None:
    _log_context.set({})
