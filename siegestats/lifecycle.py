"""
Application lifecycle for SiegeStats.

`StatsApplication` owns startup and shutdown of everything behind
PlayerStatsService:

Startup
-------
1. Redis: client, initial PING, background health monitor
2. Database: engine, bootstrap health check, schema
3. Database health monitor task
4. Freshness tracker, document store, options, service

Shutdown runs in reverse and is safe to call after a failed start. With
STATS_CACHING_DISABLED neither backend is started and the service talks to
the provider only.

Usage
-----
>>> async with StatsApplication(client) as app:
...     doc = await app.service.get_all("uplay", "Pengu.G2")
"""

from __future__ import annotations

import asyncio
from typing import Any, Dict, Optional

from siegestats.core.cache.metrics import CacheMetrics
from siegestats.core.config import Config
from siegestats.core.database.bootstrap import (
    create_health_monitor,
    initialize_database_subsystem,
    shutdown_database_subsystem,
)
from siegestats.core.database.service import DatabaseService
from siegestats.core.logging.logger import get_logger
from siegestats.core.redis.service import RedisService
from siegestats.modules.stats.document_store import SqlDocumentStore
from siegestats.modules.stats.freshness import RedisFreshnessTracker
from siegestats.modules.stats.interfaces import StatsProvider
from siegestats.modules.stats.options import StatsServiceOptions
from siegestats.modules.stats.provider import R6ProviderAdapter
from siegestats.modules.stats.service import PlayerStatsService

logger = get_logger(__name__)


class StatsApplication:
    def __init__(
        self,
        client: StatsProvider,
        *,
        start_health_monitors: bool = True,
    ) -> None:
        self._client = client
        self._start_health_monitors = start_health_monitors
        self._service: Optional[PlayerStatsService] = None
        self._backends_started = False
        self._db_monitor_stop: Optional[asyncio.Event] = None
        self._db_monitor_task: Optional[asyncio.Task] = None

    @property
    def service(self) -> PlayerStatsService:
        if self._service is None:
            raise RuntimeError("StatsApplication not started. Call `await start()` first.")
        return self._service

    async def start(self) -> None:
        if self._service is not None:
            logger.debug("StatsApplication already started")
            return

        logger.info(
            "Starting StatsApplication",
            extra={
                "environment": Config.ENVIRONMENT,
                "caching_disabled": Config.STATS_CACHING_DISABLED,
                "expiration_ms": Config.STATS_EXPIRATION_MS,
            },
        )

        if Config.STATS_CACHING_DISABLED:
            options = StatsServiceOptions.from_config()
        else:
            try:
                await self._start_backends()
            except Exception:
                await self._stop_backends()
                raise
            options = StatsServiceOptions.from_config(
                freshness_tracker=RedisFreshnessTracker(),
                document_store=SqlDocumentStore(),
            )

        self._service = PlayerStatsService(R6ProviderAdapter(self._client), options)
        logger.info("StatsApplication started")

    async def _start_backends(self) -> None:
        self._backends_started = True
        await RedisService.initialize(start_health_monitor=self._start_health_monitors)
        await initialize_database_subsystem(verify_health=True, create_schema=True)

        if self._start_health_monitors:
            self._db_monitor_stop = asyncio.Event()
            monitor = create_health_monitor()
            self._db_monitor_task = asyncio.create_task(
                monitor.run_forever(stop_event=self._db_monitor_stop)
            )

    async def _stop_backends(self) -> None:
        if not self._backends_started:
            return

        if self._db_monitor_task is not None and self._db_monitor_stop is not None:
            self._db_monitor_stop.set()
            await self._db_monitor_task
        self._db_monitor_task = None
        self._db_monitor_stop = None

        await shutdown_database_subsystem()
        await RedisService.shutdown()
        self._backends_started = False

    async def stop(self) -> None:
        self._service = None
        await self._stop_backends()
        logger.info("StatsApplication stopped")

    async def get_status(self) -> Dict[str, Any]:
        return {
            "started": self._service is not None,
            "caching_disabled": Config.STATS_CACHING_DISABLED,
            "redis": RedisService.get_status(),
            "database_healthy": DatabaseService.is_healthy(),
            "cache": await CacheMetrics.get_metrics(),
        }

    async def __aenter__(self) -> StatsApplication:
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.stop()
