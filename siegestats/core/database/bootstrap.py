"""
Database Subsystem Bootstrap

Single entry point for bringing the document-store database up and down:

1. `initialize_database_subsystem()` initializes DatabaseService
2. optionally verifies connectivity with a bounded health check
3. optionally creates the schema
4. `shutdown_database_subsystem()` disposes the engine

Errors surface as DatabaseInitializationError with the original exception
chained via ``from``.

Configuration
-------------
- DATABASE_URL (required)
- DATABASE_BOOTSTRAP_HEALTH_TIMEOUT_SECONDS (default: 5.0)
"""

from __future__ import annotations

import asyncio

from siegestats.core.config import Config
from siegestats.core.database.health_monitor import DatabaseHealthMonitor
from siegestats.core.database.service import (
    DatabaseInitializationError,
    DatabaseService,
)
from siegestats.core.logging.logger import get_logger

logger = get_logger(__name__)


async def initialize_database_subsystem(
    *,
    verify_health: bool = True,
    create_schema: bool = True,
) -> None:
    """
    Initialize the database subsystem.

    Raises
    ------
    DatabaseInitializationError
        If initialization fails, or the health check fails or times out.
    """
    logger.info("Initializing database subsystem")

    await DatabaseService.initialize()

    if verify_health:
        health_timeout = float(Config.DATABASE_BOOTSTRAP_HEALTH_TIMEOUT_SECONDS)
        logger.debug(
            "Performing bootstrap health check",
            extra={"timeout_seconds": health_timeout},
        )

        try:
            healthy = await asyncio.wait_for(
                DatabaseService.health_check(),
                timeout=health_timeout,
            )
        except asyncio.TimeoutError as exc:
            logger.error(
                "Database health check timed out during bootstrap",
                extra={"timeout_seconds": health_timeout},
            )
            raise DatabaseInitializationError(
                f"Database health check timed out after {health_timeout}s"
            ) from exc

        if not healthy:
            logger.error("Database health check failed during bootstrap")
            raise DatabaseInitializationError("Database health check failed")

    if create_schema:
        try:
            await DatabaseService.create_schema()
        except Exception as exc:
            logger.error(
                "Schema creation failed during bootstrap",
                extra={"error": str(exc), "error_type": type(exc).__name__},
                exc_info=True,
            )
            raise DatabaseInitializationError(
                f"Database schema creation failed: {exc}"
            ) from exc

    logger.info(
        "Database subsystem initialized",
        extra={"verify_health": verify_health, "create_schema": create_schema},
    )


async def shutdown_database_subsystem() -> None:
    logger.info("Shutting down database subsystem")
    await DatabaseService.shutdown()
    logger.info("Database subsystem shutdown complete")


def create_health_monitor() -> DatabaseHealthMonitor:
    """Build a DatabaseHealthMonitor from Config. The caller schedules it."""
    return DatabaseHealthMonitor.from_config()
