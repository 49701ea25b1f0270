"""
RedisService: async Redis infrastructure for SiegeStats.

Purpose
-------
Own the singleton `redis.asyncio` client that backs the freshness tracker
and the identity cache:
- Singleton async client created from Config
- Background health monitoring that keeps a reachability flag current
- Timed KV operations (get/set/delete) with structured logs

Responsibilities
----------------
- Initialize and shut down the connection pool
- Verify connectivity on startup (PING)
- Expose `is_healthy()` without I/O, for the cache-aside bypass decision
- Log every KV operation with its latency

Non-Responsibilities
--------------------
- Key naming (see `siegestats.modules.stats.freshness`)
- Retries: a failed call is logged and re-raised to the caller
- Business logic of any kind

Configuration Keys
------------------
- Config.REDIS_URL
- Config.REDIS_PASSWORD
- Config.REDIS_SOCKET_TIMEOUT
- Config.REDIS_DECODE_RESPONSES
- Config.REDIS_MAX_CONNECTIONS
- Config.REDIS_HEALTH_CHECK_INTERVAL_SECONDS
"""

from __future__ import annotations

import asyncio
import time
from typing import Any, Optional

from redis.asyncio.client import Redis as AsyncRedis  # type: ignore[misc]
from redis.exceptions import RedisError

from siegestats.core.config import Config
from siegestats.core.exceptions import RedisConnectionError
from siegestats.core.logging.logger import get_logger
from siegestats.core.redis.health_monitor import RedisHealthMonitor

logger = get_logger(__name__)


class RedisService:
    """
    Async Redis infrastructure service.

    Class-level singleton: every caller shares one client and one
    health flag.
    """

    _client: Optional[AsyncRedis] = None
    _health_monitor: Optional[RedisHealthMonitor] = None
    _init_lock: asyncio.Lock = asyncio.Lock()
    _is_healthy: bool = False

    # ═══════════════════════════════════════════════════════════════════════
    # LIFECYCLE MANAGEMENT
    # ═══════════════════════════════════════════════════════════════════════

    @classmethod
    async def initialize(cls, start_health_monitor: bool = True) -> None:
        """
        Initialize the singleton Redis client.

        Idempotent. Safe to call multiple times.

        Raises
        ------
        RedisConnectionError
            If the client cannot be created or the initial PING fails.
        """
        if cls._client is not None:
            logger.debug("RedisService already initialized, skipping")
            return

        async with cls._init_lock:
            if cls._client is not None:
                return

            url = Config.REDIS_URL
            url_scheme = url.split("://")[0] if "://" in url else "unknown"
            start_time = time.monotonic()
            client: Optional[AsyncRedis] = None

            try:
                client = AsyncRedis.from_url(
                    url,
                    password=Config.REDIS_PASSWORD,
                    socket_timeout=Config.REDIS_SOCKET_TIMEOUT,
                    encoding="utf-8",
                    decode_responses=Config.REDIS_DECODE_RESPONSES,
                    max_connections=Config.REDIS_MAX_CONNECTIONS,
                    retry_on_timeout=False,
                )
                await client.ping()  # type: ignore[misc]
            except Exception as exc:
                if client is not None:
                    try:
                        await client.aclose()
                    except RedisError as close_exc:
                        logger.debug(
                            "Error closing Redis client after failed init",
                            extra={"error": str(close_exc)},
                        )

                cls._client = None
                cls._is_healthy = False

                logger.critical(
                    "Failed to initialize RedisService",
                    extra={
                        "error": str(exc),
                        "error_type": type(exc).__name__,
                        "url_scheme": url_scheme,
                    },
                    exc_info=True,
                )
                raise RedisConnectionError("initialize", exc) from exc

            cls._client = client
            cls._is_healthy = True

            if start_health_monitor:
                cls._health_monitor = RedisHealthMonitor(cls)
                await cls._health_monitor.start()

            logger.info(
                "RedisService initialized successfully",
                extra={
                    "url_scheme": url_scheme,
                    "socket_timeout_seconds": Config.REDIS_SOCKET_TIMEOUT,
                    "max_connections": Config.REDIS_MAX_CONNECTIONS,
                    "health_monitor": start_health_monitor,
                    "initialization_time_ms": round(
                        (time.monotonic() - start_time) * 1000, 2
                    ),
                },
            )

    @classmethod
    async def shutdown(cls) -> None:
        """
        Stop the health monitor and close the client.

        Safe to call even if not initialized.
        """
        if cls._client is None and cls._health_monitor is None:
            logger.debug("RedisService not initialized, nothing to shutdown")
            return

        client = cls._client
        health_monitor = cls._health_monitor

        cls._client = None
        cls._health_monitor = None
        cls._is_healthy = False

        # Monitor first so it doesn't ping a closing client
        if health_monitor is not None:
            await health_monitor.stop()

        if client is not None:
            try:
                await client.aclose()
                logger.info("RedisService shutdown complete")
            except RedisError as exc:
                logger.error(
                    "Error during RedisService shutdown",
                    extra={"error": str(exc), "error_type": type(exc).__name__},
                    exc_info=True,
                )

    # ═══════════════════════════════════════════════════════════════════════
    # HEALTH & STATUS
    # ═══════════════════════════════════════════════════════════════════════

    @classmethod
    async def health_check(cls) -> bool:
        """
        Verify Redis connectivity via PING.

        Updates the cached health flag and returns it.
        """
        if cls._client is None:
            cls._is_healthy = False
            return False

        start_time = time.monotonic()
        try:
            pong = await cls._client.ping()  # type: ignore[misc]
        except RedisError as exc:
            cls._is_healthy = False
            logger.error(
                "Redis health check failed",
                extra={"error": str(exc), "error_type": type(exc).__name__},
            )
            return False

        cls._is_healthy = bool(pong)
        logger.debug(
            "Redis health check",
            extra={
                "passed": cls._is_healthy,
                "latency_ms": round((time.monotonic() - start_time) * 1000, 2),
            },
        )
        return cls._is_healthy

    @classmethod
    def is_healthy(cls) -> bool:
        """Return cached health status without performing I/O."""
        return cls._client is not None and cls._is_healthy

    @classmethod
    def mark_unhealthy(cls) -> None:
        cls._is_healthy = False

    @classmethod
    def get_status(cls) -> dict[str, Any]:
        """Status snapshot: initialization, health flag, monitor state."""
        return {
            "initialized": cls._client is not None,
            "healthy": cls.is_healthy(),
            "health_monitor": (
                cls._health_monitor.get_status()
                if cls._health_monitor is not None
                else None
            ),
        }

    @classmethod
    def client(cls) -> AsyncRedis:
        """
        Return the singleton Redis client.

        Raises
        ------
        RuntimeError
            If RedisService has not been initialized.
        """
        if cls._client is None:
            raise RuntimeError(
                "RedisService not initialized. "
                "Call `await RedisService.initialize()` first."
            )
        return cls._client

    # ═══════════════════════════════════════════════════════════════════════
    # KEY-VALUE OPERATIONS
    # ═══════════════════════════════════════════════════════════════════════

    @classmethod
    async def get(cls, key: str) -> Optional[str]:
        """Get a string value, or None if the key does not exist."""
        start_time = time.monotonic()
        try:
            result = await cls.client().get(key)
        except RedisError as exc:
            logger.error(
                "Redis GET operation failed",
                extra={
                    "key": key,
                    "latency_ms": round((time.monotonic() - start_time) * 1000, 2),
                    "error": str(exc),
                    "error_type": type(exc).__name__,
                },
                exc_info=True,
            )
            raise

        logger.debug(
            "Redis GET operation",
            extra={
                "key": key,
                "found": result is not None,
                "latency_ms": round((time.monotonic() - start_time) * 1000, 2),
            },
        )
        return result

    @classmethod
    async def set(
        cls,
        key: str,
        value: Any,
        ttl_seconds: Optional[int] = None,
    ) -> bool:
        """
        Set a value, optionally with a TTL.

        Freshness and identity keys are written without a TTL: their
        staleness is decided by the caller, not by Redis.
        """
        start_time = time.monotonic()
        try:
            result = await cls.client().set(key, value, ex=ttl_seconds)
        except RedisError as exc:
            logger.error(
                "Redis SET operation failed",
                extra={
                    "key": key,
                    "ttl_seconds": ttl_seconds,
                    "latency_ms": round((time.monotonic() - start_time) * 1000, 2),
                    "error": str(exc),
                    "error_type": type(exc).__name__,
                },
                exc_info=True,
            )
            raise

        success = bool(result)
        logger.debug(
            "Redis SET operation",
            extra={
                "key": key,
                "ttl_seconds": ttl_seconds,
                "success": success,
                "latency_ms": round((time.monotonic() - start_time) * 1000, 2),
            },
        )
        return success

    @classmethod
    async def delete(cls, key: str) -> int:
        """Delete a key. Returns the number of keys removed (0 or 1)."""
        start_time = time.monotonic()
        try:
            count = await cls.client().delete(key)
        except RedisError as exc:
            logger.error(
                "Redis DELETE operation failed",
                extra={
                    "key": key,
                    "latency_ms": round((time.monotonic() - start_time) * 1000, 2),
                    "error": str(exc),
                    "error_type": type(exc).__name__,
                },
                exc_info=True,
            )
            raise

        deleted = int(count)
        logger.debug(
            "Redis DELETE operation",
            extra={
                "key": key,
                "deleted_count": deleted,
                "latency_ms": round((time.monotonic() - start_time) * 1000, 2),
            },
        )
        return deleted
