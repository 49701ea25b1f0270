"""Unit tests for CacheMetrics."""

import asyncio

import pytest

from siegestats.core.cache.metrics import CacheMetrics


@pytest.mark.asyncio
class TestCacheMetrics:
    async def test_starts_at_zero(self):
        metrics = await CacheMetrics.get_metrics()

        assert metrics["hits"] == 0
        assert metrics["hit_rate"] == 0.0
        assert metrics["provider_fetches"] == 0

    async def test_hit_rate(self):
        for _ in range(3):
            await CacheMetrics.record_hit()
        await CacheMetrics.record_miss()
        await CacheMetrics.record_refresh()
        await CacheMetrics.record_bypass()

        metrics = await CacheMetrics.get_metrics()

        assert metrics["hit_rate"] == 60.0
        assert metrics["bypasses"] == 1

    async def test_provider_fetches_include_drift_repairs(self):
        await CacheMetrics.record_miss()
        await CacheMetrics.record_refresh()
        await CacheMetrics.record_drift_repair()

        assert (await CacheMetrics.get_metrics())["provider_fetches"] == 3

    async def test_concurrent_increments(self):
        await asyncio.gather(*(CacheMetrics.record_insert() for _ in range(50)))

        assert (await CacheMetrics.get_metrics())["inserts"] == 50

    async def test_reset(self):
        await CacheMetrics.record_update()
        await CacheMetrics.record_identity_hit()
        await CacheMetrics.record_identity_miss()

        CacheMetrics.reset_metrics()

        metrics = await CacheMetrics.get_metrics()
        assert metrics["updates"] == 0
        assert metrics["identity_hits"] == 0
        assert metrics["identity_misses"] == 0
