"""
Core infrastructure layer for SiegeStats.

- Configuration (Config)
- Logging (structured logging, logger factory, LogContext)
- Infrastructure exceptions
- Redis subsystem (freshness and identity cache backend)
- Database subsystem (document store backend)
- Cache-aside metrics

Subsystems are imported from their own packages, e.g.
``from siegestats.core.redis import RedisService``.
"""

from siegestats.core.config import Config
from siegestats.core.exceptions import (
    BackendError,
    CacheError,
    ConfigurationError,
    DatabaseError,
    ErrorSeverity,
    RedisConnectionError,
    SiegeStatsInfrastructureException,
    StructuredError,
    log_error,
)
from siegestats.core.logging import LogContext, get_logger

__all__ = [
    "BackendError",
    "CacheError",
    "Config",
    "ConfigurationError",
    "DatabaseError",
    "ErrorSeverity",
    "LogContext",
    "RedisConnectionError",
    "SiegeStatsInfrastructureException",
    "StructuredError",
    "get_logger",
    "log_error",
]
