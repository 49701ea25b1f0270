"""
SiegeStats Logging Infrastructure

Exports the logger factory and the lookup-scoped log context.
"""

from siegestats.core.logging.logger import (
    LogContext,
    LookupContext,
    get_log_context,
    get_logger,
    setup_logging,
)

__all__ = [
    "setup_logging",
    "get_logger",
    "LogContext",
    "LookupContext",
    "get_log_context",
]
