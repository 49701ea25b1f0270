"""
Redis health monitor for SiegeStats.

Runs a periodic PING in the background and tracks a HEALTHY / DEGRADED /
UNHEALTHY state from the results. The RedisService health flag is what the
freshness tracker reports as "online"; this monitor keeps it current so a
Redis outage flips the stats service into provider-only mode and a recovery
flips it back.

Configuration Keys
------------------
- Config.REDIS_HEALTH_CHECK_INTERVAL_SECONDS
- Config.REDIS_SOCKET_TIMEOUT (used as the per-check timeout)
"""

from __future__ import annotations

import asyncio
import time
from collections import deque
from enum import Enum
from typing import Any, Deque, Dict, Optional, TYPE_CHECKING

from siegestats.core.config import Config
from siegestats.core.logging.logger import get_logger

if TYPE_CHECKING:
    from siegestats.core.redis.service import RedisService

logger = get_logger(__name__)


class HealthState(Enum):
    """Redis health states."""

    HEALTHY = "HEALTHY"
    DEGRADED = "DEGRADED"  # One failed check, not yet confirmed
    UNHEALTHY = "UNHEALTHY"


class RedisHealthMonitor:
    """
    Periodic health checks for the Redis singleton.

    Two consecutive failures mark Redis unhealthy; three consecutive
    successes bring it back.
    """

    FAILURE_THRESHOLD = 2
    RECOVERY_THRESHOLD = 3

    def __init__(
        self,
        redis_service: type[RedisService],
        check_interval_seconds: Optional[float] = None,
        timeout_seconds: Optional[float] = None,
    ) -> None:
        self._redis_service = redis_service
        self._state: HealthState = HealthState.HEALTHY
        self._is_running: bool = False
        self._monitor_task: Optional[asyncio.Task] = None

        self._check_history: Deque[Dict[str, Any]] = deque(maxlen=100)
        self._consecutive_failures: int = 0
        self._consecutive_successes: int = 0
        self._last_check_time: Optional[float] = None
        self._last_state_change: Optional[float] = None

        self._check_interval = (
            check_interval_seconds
            if check_interval_seconds is not None
            else Config.REDIS_HEALTH_CHECK_INTERVAL_SECONDS
        )
        self._timeout = (
            timeout_seconds
            if timeout_seconds is not None
            else float(Config.REDIS_SOCKET_TIMEOUT)
        )

    # ═══════════════════════════════════════════════════════════════════════
    # LIFECYCLE
    # ═══════════════════════════════════════════════════════════════════════

    async def start(self) -> None:
        """Start the health monitoring background task."""
        if self._is_running:
            logger.warning("RedisHealthMonitor already running")
            return

        self._is_running = True
        self._monitor_task = asyncio.create_task(self._monitor_loop())
        logger.info(
            "RedisHealthMonitor started",
            extra={
                "check_interval_seconds": self._check_interval,
                "timeout_seconds": self._timeout,
            },
        )

    async def stop(self) -> None:
        """Stop the health monitoring background task."""
        if not self._is_running:
            return

        self._is_running = False

        if self._monitor_task:
            self._monitor_task.cancel()
            try:
                await self._monitor_task
            except asyncio.CancelledError:
                pass
            self._monitor_task = None

        logger.info("RedisHealthMonitor stopped")

    # ═══════════════════════════════════════════════════════════════════════
    # MONITORING LOOP
    # ═══════════════════════════════════════════════════════════════════════

    async def _monitor_loop(self) -> None:
        while self._is_running:
            await asyncio.sleep(self._check_interval)
            try:
                await self.check_now()
            except Exception as exc:
                # Keep monitoring; the next tick re-checks
                logger.error(
                    "Error in Redis health monitor loop",
                    extra={"error": str(exc), "error_type": type(exc).__name__},
                    exc_info=True,
                )

    async def check_now(self) -> bool:
        """Run one health check, record it, update state. Returns pass/fail."""
        start_time = time.monotonic()
        error_msg: Optional[str] = None
        passed = False

        try:
            passed = await asyncio.wait_for(
                self._redis_service.health_check(),
                timeout=self._timeout,
            )
        except asyncio.TimeoutError:
            error_msg = "Health check timed out"
            self._redis_service.mark_unhealthy()
            logger.warning(
                "Redis health check timed out",
                extra={"timeout_seconds": self._timeout},
            )

        latency_ms = (time.monotonic() - start_time) * 1000
        self._check_history.append(
            {
                "timestamp": time.time(),
                "passed": passed,
                "latency_ms": latency_ms,
                "error": error_msg,
            }
        )
        self._last_check_time = time.time()
        self._update_health_state(passed, latency_ms)
        return passed

    # ═══════════════════════════════════════════════════════════════════════
    # STATE MANAGEMENT
    # ═══════════════════════════════════════════════════════════════════════

    def _update_health_state(self, check_passed: bool, latency_ms: float) -> None:
        old_state = self._state

        if check_passed:
            self._consecutive_successes += 1
            self._consecutive_failures = 0
            if old_state == HealthState.UNHEALTHY:
                new_state = (
                    HealthState.HEALTHY
                    if self._consecutive_successes >= self.RECOVERY_THRESHOLD
                    else HealthState.UNHEALTHY
                )
            else:
                new_state = HealthState.HEALTHY
        else:
            self._consecutive_failures += 1
            self._consecutive_successes = 0
            new_state = (
                HealthState.UNHEALTHY
                if self._consecutive_failures >= self.FAILURE_THRESHOLD
                else HealthState.DEGRADED
            )

        if new_state != old_state:
            self._state = new_state
            self._last_state_change = time.time()
            logger.warning(
                "Redis health state changed",
                extra={
                    "old_state": old_state.value,
                    "new_state": new_state.value,
                    "consecutive_failures": self._consecutive_failures,
                    "consecutive_successes": self._consecutive_successes,
                    "latency_ms": round(latency_ms, 2),
                },
            )

    # ═══════════════════════════════════════════════════════════════════════
    # STATUS API
    # ═══════════════════════════════════════════════════════════════════════

    @property
    def state(self) -> HealthState:
        return self._state

    def get_status(self) -> Dict[str, Any]:
        """Current state plus error rate and latency over the last 20 checks."""
        recent_checks = list(self._check_history)[-20:]
        error_rate = (
            sum(1 for check in recent_checks if not check["passed"]) / len(recent_checks)
            if recent_checks
            else 0.0
        )
        avg_latency = (
            sum(check["latency_ms"] for check in recent_checks) / len(recent_checks)
            if recent_checks
            else 0.0
        )

        return {
            "state": self._state.value,
            "is_running": self._is_running,
            "consecutive_failures": self._consecutive_failures,
            "consecutive_successes": self._consecutive_successes,
            "last_check_time": self._last_check_time,
            "last_state_change": self._last_state_change,
            "total_checks": len(self._check_history),
            "error_rate": round(error_rate, 3),
            "avg_latency_ms": round(avg_latency, 2),
            "check_interval_seconds": self._check_interval,
        }
