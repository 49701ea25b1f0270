"""
Database Health Monitor

Periodic background probe of database availability. Consecutive-result
thresholds keep the state from flapping; each transition is pushed into
`DatabaseService.mark_healthy()` / `mark_unhealthy()`, which is what the
document store reports as "online".

Configuration
-------------
- DATABASE_HEALTH_CHECK_INTERVAL_SECONDS (default: 30.0)
- DATABASE_HEALTH_FAILURE_THRESHOLD (default: 3)
- DATABASE_HEALTH_RECOVERY_THRESHOLD (default: 2)

Usage Example
-------------
>>> stop_event = asyncio.Event()
>>> monitor = DatabaseHealthMonitor.from_config()
>>> task = asyncio.create_task(monitor.run_forever(stop_event=stop_event))
>>> # ... later ...
>>> stop_event.set()
>>> await task
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Optional

from siegestats.core.config import Config
from siegestats.core.database.service import DatabaseService
from siegestats.core.logging.logger import get_logger

logger = get_logger(__name__)


@dataclass
class DatabaseHealthMonitorConfig:
    """
    Attributes
    ----------
    interval_seconds : float
        Time between health checks in seconds.
    failure_threshold : int
        Consecutive failures before marking unhealthy.
    recovery_threshold : int
        Consecutive successes before marking healthy again.
    """

    interval_seconds: float
    failure_threshold: int
    recovery_threshold: int

    @classmethod
    def from_config(cls) -> DatabaseHealthMonitorConfig:
        return cls(
            interval_seconds=float(Config.DATABASE_HEALTH_CHECK_INTERVAL_SECONDS),
            failure_threshold=int(Config.DATABASE_HEALTH_FAILURE_THRESHOLD),
            recovery_threshold=int(Config.DATABASE_HEALTH_RECOVERY_THRESHOLD),
        )


class DatabaseHealthMonitor:
    """
    Periodic database health monitor.

    Starts in the unknown state (``None``); the first threshold crossing
    decides it.
    """

    def __init__(self, config: DatabaseHealthMonitorConfig) -> None:
        self._config = config
        self._consecutive_failures: int = 0
        self._consecutive_successes: int = 0
        self._is_healthy: Optional[bool] = None

    @classmethod
    def from_config(cls) -> DatabaseHealthMonitor:
        return cls(DatabaseHealthMonitorConfig.from_config())

    @property
    def is_healthy(self) -> Optional[bool]:
        return self._is_healthy

    async def run_forever(self, *, stop_event: asyncio.Event) -> None:
        """Run health checks until `stop_event` is set."""
        logger.info(
            "DatabaseHealthMonitor started",
            extra={
                "interval_seconds": self._config.interval_seconds,
                "failure_threshold": self._config.failure_threshold,
                "recovery_threshold": self._config.recovery_threshold,
            },
        )

        try:
            while not stop_event.is_set():
                await self._tick_once()
                try:
                    await asyncio.wait_for(
                        stop_event.wait(),
                        timeout=self._config.interval_seconds,
                    )
                except asyncio.TimeoutError:
                    continue
        except Exception as exc:
            logger.error(
                "Unexpected error in DatabaseHealthMonitor",
                extra={"error": str(exc), "error_type": type(exc).__name__},
                exc_info=True,
            )
            raise
        finally:
            logger.info("DatabaseHealthMonitor stopped")

    async def _tick_once(self) -> None:
        healthy = await DatabaseService.health_check()

        if healthy:
            self._consecutive_successes += 1
            self._consecutive_failures = 0
        else:
            self._consecutive_failures += 1
            self._consecutive_successes = 0

        logger.debug(
            "Database health monitor tick",
            extra={
                "healthy": healthy,
                "consecutive_failures": self._consecutive_failures,
                "consecutive_successes": self._consecutive_successes,
                "current_state": self._is_healthy,
            },
        )

        self._check_unhealthy_transition(healthy)
        self._check_healthy_transition(healthy)

    def _check_unhealthy_transition(self, healthy: bool) -> None:
        should_transition = (
            not healthy
            and self._is_healthy is not False
            and self._consecutive_failures >= self._config.failure_threshold
        )
        if should_transition:
            self._is_healthy = False
            DatabaseService.mark_unhealthy()
            logger.error(
                "Database marked UNHEALTHY by health monitor",
                extra={
                    "consecutive_failures": self._consecutive_failures,
                    "failure_threshold": self._config.failure_threshold,
                },
            )

    def _check_healthy_transition(self, healthy: bool) -> None:
        should_transition = (
            healthy
            and self._is_healthy is not True
            and self._consecutive_successes >= self._config.recovery_threshold
        )
        if should_transition:
            self._is_healthy = True
            DatabaseService.mark_healthy()
            logger.info(
                "Database marked HEALTHY by health monitor",
                extra={
                    "consecutive_successes": self._consecutive_successes,
                    "recovery_threshold": self._config.recovery_threshold,
                },
            )
