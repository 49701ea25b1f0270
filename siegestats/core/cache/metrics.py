"""
Cache-aside metrics for SiegeStats.

Purpose
-------
Count what the stats cache-aside path decided on each call, so the hit rate
and the rate of provider refreshes can be observed in production.

Counters
--------
- hits            : stored document served without a provider call
- misses          : no freshness record (first fetch for the key)
- refreshes       : freshness record present but the window had elapsed
- inserts/updates : document store writes after a provider fetch
- bypasses        : caching disabled or a backend reported offline
- drift_repairs   : fresh timestamp but no stored document
- identity_hits / identity_misses : identity cache lookups

Architecture Notes
------------------
- Class-level counters guarded by an asyncio.Lock
- Derived values (hit_rate) computed on read
- `reset_metrics()` for tests and monitoring cycles
"""

import asyncio
from typing import Any, Dict

_COUNTERS = (
    "hits",
    "misses",
    "refreshes",
    "inserts",
    "updates",
    "bypasses",
    "drift_repairs",
    "identity_hits",
    "identity_misses",
)


class CacheMetrics:
    """
    Async-safe cache-aside metrics tracker.

    Every `record_*` coroutine bumps one counter under the shared lock.
    """

    _metrics: Dict[str, int] = {name: 0 for name in _COUNTERS}
    _lock: asyncio.Lock = asyncio.Lock()

    @classmethod
    async def _increment(cls, name: str) -> None:
        async with cls._lock:
            cls._metrics[name] += 1

    @classmethod
    async def record_hit(cls) -> None:
        await cls._increment("hits")

    @classmethod
    async def record_miss(cls) -> None:
        await cls._increment("misses")

    @classmethod
    async def record_refresh(cls) -> None:
        await cls._increment("refreshes")

    @classmethod
    async def record_insert(cls) -> None:
        await cls._increment("inserts")

    @classmethod
    async def record_update(cls) -> None:
        await cls._increment("updates")

    @classmethod
    async def record_bypass(cls) -> None:
        await cls._increment("bypasses")

    @classmethod
    async def record_drift_repair(cls) -> None:
        await cls._increment("drift_repairs")

    @classmethod
    async def record_identity_hit(cls) -> None:
        await cls._increment("identity_hits")

    @classmethod
    async def record_identity_miss(cls) -> None:
        await cls._increment("identity_misses")

    @classmethod
    async def get_metrics(cls) -> Dict[str, Any]:
        """
        Snapshot of all counters plus derived values.

        Returns
        -------
        Dict[str, Any]
            Raw counters, and:
            - hit_rate: hits / (hits + misses + refreshes) as a percentage
            - provider_fetches: misses + refreshes + drift repairs

        Example
        -------
        >>> metrics = await CacheMetrics.get_metrics()
        >>> print(f"Hit rate: {metrics['hit_rate']:.1f}%")
        """
        async with cls._lock:
            snapshot: Dict[str, Any] = dict(cls._metrics)

        lookups = snapshot["hits"] + snapshot["misses"] + snapshot["refreshes"]
        snapshot["hit_rate"] = (
            round(snapshot["hits"] / lookups * 100, 2) if lookups > 0 else 0.0
        )
        snapshot["provider_fetches"] = (
            snapshot["misses"] + snapshot["refreshes"] + snapshot["drift_repairs"]
        )
        return snapshot

    @classmethod
    def reset_metrics(cls) -> None:
        """Zero every counter. No await point, so no lock is needed."""
        for name in _COUNTERS:
            cls._metrics[name] = 0
