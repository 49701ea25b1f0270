"""
Identity resolution: platform-scoped username -> stable player id.

Resolved ids are cached under ``{platform}/{username}`` with no expiry: a
player id never changes, so a hit is returned without any freshness check.
Only the freshness tracker is involved; the document store's state does
not matter here.
"""

from __future__ import annotations

from siegestats.core.cache.metrics import CacheMetrics
from siegestats.core.logging.logger import get_logger
from siegestats.modules.shared.exceptions import PlayerNotFoundError
from siegestats.modules.stats.options import StatsServiceOptions
from siegestats.modules.stats.provider import R6ProviderAdapter
from siegestats.modules.stats.results import first_result

logger = get_logger(__name__)


def identity_key(platform: str, username: str) -> str:
    return f"{platform}/{username}"


class IdentityResolver:
    def __init__(self, provider: R6ProviderAdapter, options: StatsServiceOptions) -> None:
        self._provider = provider
        self._options = options

    async def _lookup(self, platform: str, username: str) -> str:
        player_id = first_result(await self._provider.get_ids(platform, username))
        if player_id is None:
            logger.info(
                "Player not found",
                extra={"lookup_key": identity_key(platform, username)},
            )
            raise PlayerNotFoundError(platform, username)
        return player_id

    async def resolve(self, platform: str, username: str) -> str:
        """
        Return the player id for `username` on `platform`.

        Raises
        ------
        PlayerNotFoundError
            The provider returned no match.
        ProviderError
            The provider call failed.
        """
        tracker = self._options.freshness_tracker
        if self._options.caching_disabled or tracker is None or not tracker.is_online():
            return await self._lookup(platform, username)

        key = identity_key(platform, username)
        cached_id = await tracker.get_id(key)
        if cached_id is not None:
            await CacheMetrics.record_identity_hit()
            logger.debug("Identity cache hit", extra={"lookup_key": key})
            return cached_id

        await CacheMetrics.record_identity_miss()
        player_id = await self._lookup(platform, username)
        await tracker.set_id(key, player_id)
        logger.debug("Identity resolved and cached", extra={"lookup_key": key})
        return player_id
