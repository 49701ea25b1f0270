"""
Cache-aside orchestration for per-category stats lookups.

`fetch_cached` decides, for one (player_id, category) pair, whether the
stored document can be served or the provider must be asked again, and
keeps the freshness tracker and the document store in step:

1. Caching disabled, or either backend offline: call the provider and
   return. Neither backend is read or written.
2. Read the freshness timestamp for ``{player_id}_{category}`` (-1 if absent).
3. Inside the staleness window, serve the stored document. A fresh
   timestamp with no stored document is drift: fall through as if the
   record had never been written.
4. Otherwise fetch, insert (first write or drift) or update, then stamp the
   key with the time captured in step 2.

A ``None`` from the provider is stored and stamped like any other result,
so a known absence is not re-fetched inside the window.

Calls for the same key are not serialized; concurrent refreshes both hit
the provider and the last write wins.
"""

from __future__ import annotations

import time
from typing import Awaitable, Callable, Optional, TypeVar

from siegestats.core.cache.metrics import CacheMetrics
from siegestats.core.logging.logger import get_logger
from siegestats.modules.stats.models import StatsCategory
from siegestats.modules.stats.options import StatsServiceOptions

logger = get_logger(__name__)

T = TypeVar("T")

Clock = Callable[[], int]

NEVER_REFRESHED = -1


def epoch_ms() -> int:
    return int(time.time() * 1000)


def cache_key(player_id: str, category: StatsCategory) -> str:
    return f"{player_id}_{StatsCategory(category).value}"


class CacheAsideOrchestrator:
    def __init__(self, options: StatsServiceOptions, clock: Clock = epoch_ms) -> None:
        self._options = options
        self._clock = clock

    def _should_bypass(self) -> bool:
        options = self._options
        if options.caching_disabled:
            return True
        assert options.freshness_tracker is not None
        assert options.document_store is not None
        return not (
            options.freshness_tracker.is_online() and options.document_store.is_online()
        )

    async def fetch_cached(
        self,
        player_id: str,
        category: StatsCategory,
        fetch_fn: Callable[[], Awaitable[Optional[T]]],
    ) -> Optional[T]:
        category = StatsCategory(category)

        if self._should_bypass():
            await CacheMetrics.record_bypass()
            logger.debug(
                "Cache bypassed",
                extra={
                    "category": category.value,
                    "caching_disabled": self._options.caching_disabled,
                },
            )
            return await fetch_fn()

        tracker = self._options.freshness_tracker
        store = self._options.document_store
        assert tracker is not None and store is not None

        key = cache_key(player_id, category)
        now = self._clock()
        stored_timestamp = await tracker.get_expiration(key)
        timestamp = NEVER_REFRESHED if stored_timestamp is None else stored_timestamp

        not_expired = timestamp + self._options.expiration_ms > now

        if not_expired:
            stored = await store.get(category, player_id)
            if stored is not None:
                await CacheMetrics.record_hit()
                logger.debug(
                    "Serving stored document",
                    extra={
                        "cache_key": key,
                        "age_ms": now - timestamp,
                    },
                )
                return stored.document

            await CacheMetrics.record_drift_repair()
            logger.warning(
                "Fresh timestamp without stored document; refreshing",
                extra={"cache_key": key, "timestamp": timestamp},
            )
            timestamp = NEVER_REFRESHED
        elif timestamp == NEVER_REFRESHED:
            await CacheMetrics.record_miss()
        else:
            await CacheMetrics.record_refresh()

        data = await fetch_fn()

        if timestamp == NEVER_REFRESHED:
            await store.insert(category, player_id, data)
            await CacheMetrics.record_insert()
        else:
            await store.update(category, player_id, data)
            await CacheMetrics.record_update()

        await tracker.set_expiration(key, now)

        logger.debug(
            "Document refreshed from provider",
            extra={
                "cache_key": key,
                "first_write": timestamp == NEVER_REFRESHED,
                "absent": data is None,
            },
        )
        return data
