"""
SiegeStats Logging Subsystem

Purpose
-------
Structured logging for stats lookups. Every record emitted while a lookup is
running carries the lookup's platform, player id, operation and correlation
id, so one `get_all` and its five concurrent category fetches can be
followed as a single trace.

Lookup Context
--------------
`LogContext` opens a lookup scope on a ContextVar. Scopes nest: an inner
scope inherits every field it does not set itself, including the
correlation id and the `root_operation` (the outermost operation of the
trace). Only a scope with no enclosing lookup mints a new correlation id.
Tasks created by `asyncio.gather` copy the current context, so category
fetches fanned out by the aggregate stay inside its trace.

Output
------
Records go through a bounded QueueHandler to a QueueListener thread that
owns the console handler: JSON in production (or when LOG_JSON is set),
colored text on a development TTY, plain text otherwise. A full queue drops
the record rather than blocking the event loop.
"""

from __future__ import annotations

import atexit
import json
import logging
import queue
import sys
import uuid
from contextvars import ContextVar, Token
from dataclasses import asdict, dataclass, replace
from datetime import datetime, timezone
from logging import Logger
from logging.handlers import QueueHandler, QueueListener
from typing import Any, Dict, Optional

from siegestats.core.config.config import Config

CONSOLE_FORMAT = (
    "%(asctime)s | %(levelname)-8s | %(name)-36s | "
    "[%(correlation_id)s %(operation)s %(platform)s/%(player_id)s] %(message)s"
)
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
QUEUE_MAX_SIZE = 10_000
UNSET = "N/A"


@dataclass(frozen=True)
class LookupContext:
    """Fields stamped onto every record of one lookup."""

    correlation_id: str
    root_operation: str = UNSET
    operation: str = UNSET
    platform: str = UNSET
    player_id: str = UNSET


_lookup_context: ContextVar[Optional[LookupContext]] = ContextVar(
    "lookup_context", default=None
)


def _new_correlation_id() -> str:
    return uuid.uuid4().hex[:8]


# ============================================================================
# Filters & Formatters
# ============================================================================


class ContextFilter(logging.Filter):
    """Copy the active LookupContext onto the record."""

    FIELDS = ("correlation_id", "root_operation", "operation", "platform", "player_id")

    def filter(self, record: logging.LogRecord) -> bool:  # type: ignore[override]
        context = _lookup_context.get()
        for field in self.FIELDS:
            setattr(record, field, getattr(context, field) if context else UNSET)
        return True


class ColoredFormatter(logging.Formatter):
    COLORS: Dict[str, str] = {
        "DEBUG": "\033[90m",
        "INFO": "\033[94m",
        "WARNING": "\033[93m",
        "ERROR": "\033[91m",
        "CRITICAL": "\033[91m\033[1m",
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:  # type: ignore[override]
        original = record.levelname
        prefix = self.COLORS.get(original)
        if prefix:
            record.levelname = f"{prefix}{original}{self.RESET}"
        try:
            return super().format(record)
        finally:
            record.levelname = original


class JSONFormatter(logging.Formatter):
    """One JSON object per record; lookup fields at top level, extras nested."""

    RESERVED = set(
        logging.LogRecord("", 0, "", 0, "", None, None).__dict__
    ) | {"message", "asctime", "taskName"}

    def format(self, record: logging.LogRecord) -> str:  # type: ignore[override]
        log_data: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        for field in ContextFilter.FIELDS:
            value = getattr(record, field, UNSET)
            if value != UNSET:
                log_data[field] = value

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        extra = {
            key: value
            for key, value in record.__dict__.items()
            if key not in self.RESERVED
            and key not in ContextFilter.FIELDS
            and not key.startswith("_")
        }
        if extra:
            log_data["extra"] = extra

        return json.dumps(log_data, ensure_ascii=False, default=str)


class _DroppingQueueHandler(QueueHandler):
    def enqueue(self, record: logging.LogRecord) -> None:  # type: ignore[override]
        try:
            self.queue.put_nowait(record)
        except queue.Full:
            sys.stderr.write("SiegeStats logging queue full; dropping log record.\n")


# ============================================================================
# Global Setup
# ============================================================================

_queue_listener: Optional[QueueListener] = None


def _log_level() -> int:
    return getattr(logging, str(Config.LOG_LEVEL).upper(), logging.INFO)


def _build_console_handler() -> logging.Handler:
    handler = logging.StreamHandler(sys.stdout)
    use_json = Config.LOG_JSON if Config.LOG_JSON is not None else Config.is_production()

    if use_json:
        handler.setFormatter(JSONFormatter())
    elif Config.LOG_COLORS and sys.stdout.isatty():
        handler.setFormatter(ColoredFormatter(CONSOLE_FORMAT, DATE_FORMAT))
    else:
        handler.setFormatter(logging.Formatter(CONSOLE_FORMAT, DATE_FORMAT))
    return handler


def _stop_listener() -> None:
    global _queue_listener
    if _queue_listener is not None:
        _queue_listener.stop()
        _queue_listener = None


def setup_logging() -> None:
    global _queue_listener

    root = logging.getLogger()
    if getattr(root, "_siegestats_logging_initialized", False):
        return

    root.setLevel(_log_level())
    root.handlers.clear()

    log_queue: "queue.Queue[logging.LogRecord]" = queue.Queue(QUEUE_MAX_SIZE)
    _queue_listener = QueueListener(
        log_queue, _build_console_handler(), respect_handler_level=True
    )
    _queue_listener.start()
    atexit.register(_stop_listener)

    # The filter runs on the caller's task, where the ContextVar is visible
    queue_handler = _DroppingQueueHandler(log_queue)
    queue_handler.addFilter(ContextFilter())
    root.addHandler(queue_handler)

    for noisy in ("asyncio", "sqlalchemy.engine", "aiosqlite"):
        logging.getLogger(noisy).setLevel(logging.WARNING)

    setattr(root, "_siegestats_logging_initialized", True)
    logging.getLogger(__name__).info(
        "Logging initialized",
        extra={
            "environment": Config.ENVIRONMENT,
            "log_level": logging.getLevelName(_log_level()),
        },
    )


# ============================================================================
# Public API
# ============================================================================


def get_logger(name: str) -> Logger:
    return logging.getLogger(name)


class LogContext:
    """
    Scope log records to one stats lookup.

    Usage
    -----
    >>> async with LogContext("get_all", platform="uplay"):
    ...     await aggregate.fetch_all("uplay", "Pengu.G2")
    """

    def __init__(
        self,
        operation: Optional[str] = None,
        *,
        platform: Optional[str] = None,
        player_id: Optional[str] = None,
        correlation_id: Optional[str] = None,
    ) -> None:
        self._overrides = {
            "operation": operation,
            "platform": platform,
            "player_id": player_id,
            "correlation_id": correlation_id,
        }
        self._token: Optional[Token[Optional[LookupContext]]] = None
        self.context: Optional[LookupContext] = None

    def _build(self, parent: Optional[LookupContext]) -> LookupContext:
        if parent is None:
            parent = LookupContext(
                correlation_id=self._overrides["correlation_id"] or _new_correlation_id(),
                root_operation=self._overrides["operation"] or UNSET,
            )
        changes = {key: value for key, value in self._overrides.items() if value}
        return replace(parent, **changes)

    def __enter__(self) -> "LogContext":
        self.context = self._build(_lookup_context.get())
        self._token = _lookup_context.set(self.context)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        if self._token is not None:
            _lookup_context.reset(self._token)
            self._token = None

    async def __aenter__(self) -> "LogContext":
        return self.__enter__()

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        self.__exit__(exc_type, exc_val, exc_tb)


def get_log_context() -> Dict[str, Any]:
    """The active lookup's fields, or an empty dict outside any lookup."""
    context = _lookup_context.get()
    return asdict(context) if context else {}


setup_logging()
