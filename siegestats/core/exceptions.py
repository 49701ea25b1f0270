"""
Infrastructure exceptions for SiegeStats.

Purpose
-------
Structured errors for the backends behind the cache-aside path (document
store, freshness tracker, Redis client) and for invalid configuration.

Design Notes
------------
- `StructuredError` carries the shared metadata: `message`, `details`,
  `severity`, `is_retryable`, `error_code` and `to_dict()`. Both the
  infrastructure hierarchy here and the domain hierarchy in
  `siegestats.modules.shared.exceptions` derive from it.
- `severity` decides the log level the error is reported at, through
  `log_error()`.
- The stats core never retries; `is_retryable` is a hint for callers.
- "Backend offline" is not an exception anywhere in this package: the
  cache-aside path checks reachability up front and bypasses the stores.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Dict, Optional


class ErrorSeverity(Enum):
    """Error severity levels; each maps onto a stdlib logging level."""

    DEBUG = "debug"
    INFO = "info"  # e.g. unknown player
    WARNING = "warning"  # e.g. provider hiccup
    ERROR = "error"
    CRITICAL = "critical"

    @property
    def log_level(self) -> int:
        return getattr(logging, self.name)


class StructuredError(Exception):
    """
    Exception with structured metadata for logs and callers.

    Args:
        message: Human-readable error message
        details: Additional structured data about the error
        severity: Overrides the class's DEFAULT_SEVERITY
        is_retryable: Overrides the class's DEFAULT_RETRYABLE
        error_code: Stable identifier, defaults to the class name
    """

    DEFAULT_SEVERITY: ErrorSeverity = ErrorSeverity.ERROR
    DEFAULT_RETRYABLE: bool = False

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        severity: Optional[ErrorSeverity] = None,
        is_retryable: Optional[bool] = None,
        error_code: Optional[str] = None,
    ) -> None:
        self.message: str = message
        self.details: Dict[str, Any] = details or {}
        self.severity: ErrorSeverity = severity or self.DEFAULT_SEVERITY
        self.is_retryable: bool = (
            is_retryable if is_retryable is not None else self.DEFAULT_RETRYABLE
        )
        self.error_code: str = error_code or self.__class__.__name__
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error_type": self.__class__.__name__,
            "error_code": self.error_code,
            "message": self.message,
            "details": self.details,
            "severity": self.severity.value,
            "is_retryable": self.is_retryable,
        }

    def __str__(self) -> str:
        details_str = f" | Details: {self.details}" if self.details else ""
        return f"[{self.error_code}] {self.message}{details_str}"


class SiegeStatsInfrastructureException(StructuredError):
    """Base for backend and configuration failures."""


class ConfigurationError(SiegeStatsInfrastructureException):
    """A configuration or options value is invalid or missing."""

    DEFAULT_SEVERITY = ErrorSeverity.CRITICAL

    def __init__(self, config_key: str, message: str) -> None:
        self.config_key = config_key
        super().__init__(
            f"Configuration error for {config_key}: {message}",
            details={"config_key": config_key, "message": message},
            error_code="CONFIG_ERROR",
        )


class BackendError(SiegeStatsInfrastructureException):
    """
    A call into a storage backend failed.

    Subclasses name the backend; the driver exception is kept as
    `original_error` and summarized in `details`.
    """

    BACKEND = "Backend"
    CODE = "BACKEND_ERROR"
    DEFAULT_RETRYABLE = True

    def __init__(
        self,
        operation: str,
        original_error: Optional[Exception] = None,
        **details: Any,
    ) -> None:
        self.operation = operation
        self.original_error = original_error
        cause = str(original_error) if original_error else "operation failed"
        super().__init__(
            f"{self.BACKEND} error during {operation}: {cause}",
            details={
                "operation": operation,
                "error": cause,
                "error_type": type(original_error).__name__ if original_error else None,
                **details,
            },
            error_code=self.CODE,
        )


class DatabaseError(BackendError):
    """A document store read or write failed."""

    BACKEND = "Database"
    CODE = "DATABASE_ERROR"


class RedisConnectionError(BackendError):
    """The Redis client could not be created or reached."""

    BACKEND = "Redis"
    CODE = "REDIS_ERROR"


class CacheError(BackendError):
    """A freshness or identity key could not be read or written."""

    BACKEND = "Cache"
    CODE = "CACHE_ERROR"
    DEFAULT_SEVERITY = ErrorSeverity.WARNING

    def __init__(
        self,
        operation: str,
        cache_key: str,
        original_error: Optional[Exception] = None,
    ) -> None:
        self.cache_key = cache_key
        super().__init__(operation, original_error, cache_key=cache_key)


def log_error(
    logger: logging.Logger,
    message: str,
    error: Exception,
    **context: Any,
) -> None:
    """
    Log `error` at the level its severity maps to.

    Structured errors contribute their `to_dict()`; anything else is logged
    at ERROR with its type and text.
    """
    if isinstance(error, StructuredError):
        level = error.severity.log_level
        payload = error.to_dict()
    else:
        level = logging.ERROR
        payload = {"error_type": type(error).__name__, "message": str(error)}
    logger.log(level, message, extra={**context, "error": payload})
