"""
PlayerStatsService: public lookup surface for Rainbow Six Siege stats.

Purpose
-------
Expose per-category lookups by player id or by username, the aggregate
player document and the (uncached) server status, with the cache-aside
behaviour applied transparently.

Responsibilities
----------------
- Validate caller input (platform, username, player id)
- Resolve usernames through IdentityResolver
- Route every category lookup through CacheAsideOrchestrator
- Unwrap the provider's list responses into a single document or ``None``
- Bind platform / player id / operation to the log context of each call

Non-Responsibilities
--------------------
- Backend lifecycles (see `siegestats.lifecycle.StatsApplication`)
- Retries: ProviderError and backend failures propagate unchanged

Error Handling
--------------
- ValidationError     : malformed platform / username / id
- PlayerNotFoundError : username did not resolve
- ProviderError       : remote provider failed
- A category with no data is returned as ``None``, not raised
"""

from __future__ import annotations

from typing import Awaitable, Callable, List, Optional

from siegestats.core.logging.logger import LogContext
from siegestats.modules.shared.exceptions import ValidationError
from siegestats.modules.stats.aggregate_service import AggregateFetcher
from siegestats.modules.stats.cache_aside import CacheAsideOrchestrator, Clock, epoch_ms
from siegestats.modules.stats.identity_service import IdentityResolver
from siegestats.modules.stats.models import (
    PlayerDocument,
    PlayerLevel,
    PlayerPlaytime,
    PlayerRank,
    PlayerStats,
    PlayerUsername,
    ServerStatus,
    StatsCategory,
)
from siegestats.modules.stats.options import StatsServiceOptions
from siegestats.modules.stats.provider import R6ProviderAdapter
from siegestats.modules.stats.results import first_result

VALID_PLATFORMS = ("uplay", "psn", "xbl")


class PlayerStatsService:
    """
    Stats lookups with transparent caching.

    Usage
    -----
    >>> service = PlayerStatsService(R6ProviderAdapter(client), options)
    >>> doc = await service.get_all("uplay", "Pengu.G2")
    >>> doc.level.level
    312
    """

    def __init__(
        self,
        provider: R6ProviderAdapter,
        options: StatsServiceOptions,
        clock: Clock = epoch_ms,
    ) -> None:
        self._provider = provider
        self._options = options
        self._orchestrator = CacheAsideOrchestrator(options, clock=clock)
        self._identity = IdentityResolver(provider, options)
        self._aggregate = AggregateFetcher(
            self._identity,
            {
                StatsCategory.LEVEL: self.get_level_by_id,
                StatsCategory.PLAYTIME: self.get_playtime_by_id,
                StatsCategory.RANK: self.get_rank_by_id,
                StatsCategory.STATS: self.get_stats_by_id,
                StatsCategory.USERNAME: self.get_username,
            },
        )

    @property
    def options(self) -> StatsServiceOptions:
        return self._options

    # ========================================================================
    # Validation
    # ========================================================================

    @staticmethod
    def _validate_platform(platform: str) -> None:
        if platform not in VALID_PLATFORMS:
            raise ValidationError(
                "platform", f"must be one of {', '.join(VALID_PLATFORMS)}, got {platform!r}"
            )

    @staticmethod
    def _validate_non_empty(field: str, value: str) -> None:
        if not isinstance(value, str) or not value.strip():
            raise ValidationError(field, "must be a non-empty string")

    def _validate_username_lookup(self, platform: str, username: str) -> None:
        self._validate_platform(platform)
        self._validate_non_empty("username", username)

    def _validate_id_lookup(self, platform: str, player_id: str) -> None:
        self._validate_platform(platform)
        self._validate_non_empty("player_id", player_id)

    # ========================================================================
    # Identity
    # ========================================================================

    async def get_id(self, platform: str, username: str) -> str:
        """
        Resolve a username to its player id.

        Raises
        ------
        PlayerNotFoundError
            No player with that username on that platform.
        """
        self._validate_username_lookup(platform, username)
        async with LogContext("get_id", platform=platform):
            return await self._identity.resolve(platform, username)

    # ========================================================================
    # Category lookups
    # ========================================================================

    async def _cached_first(
        self,
        operation: str,
        platform: str,
        player_id: str,
        category: StatsCategory,
        fetch_many: Callable[[], Awaitable[List]],
    ):
        self._validate_id_lookup(platform, player_id)

        async def fetch():
            return first_result(await fetch_many())

        async with LogContext(operation, platform=platform, player_id=player_id):
            return await self._orchestrator.fetch_cached(player_id, category, fetch)

    async def get_level_by_id(self, platform: str, player_id: str) -> Optional[PlayerLevel]:
        return await self._cached_first(
            "get_level",
            platform,
            player_id,
            StatsCategory.LEVEL,
            lambda: self._provider.get_level(platform, player_id),
        )

    async def get_level_by_username(self, platform: str, username: str) -> Optional[PlayerLevel]:
        player_id = await self.get_id(platform, username)
        return await self.get_level_by_id(platform, player_id)

    async def get_playtime_by_id(
        self, platform: str, player_id: str
    ) -> Optional[PlayerPlaytime]:
        return await self._cached_first(
            "get_playtime",
            platform,
            player_id,
            StatsCategory.PLAYTIME,
            lambda: self._provider.get_playtime(platform, player_id),
        )

    async def get_playtime_by_username(
        self, platform: str, username: str
    ) -> Optional[PlayerPlaytime]:
        player_id = await self.get_id(platform, username)
        return await self.get_playtime_by_id(platform, player_id)

    async def get_rank_by_id(self, platform: str, player_id: str) -> Optional[PlayerRank]:
        """Rank history for the configured seasons and regions."""
        return await self._cached_first(
            "get_rank",
            platform,
            player_id,
            StatsCategory.RANK,
            lambda: self._provider.get_rank(
                platform,
                player_id,
                seasons=self._options.rank_seasons,
                regions=self._options.rank_regions,
            ),
        )

    async def get_rank_by_username(self, platform: str, username: str) -> Optional[PlayerRank]:
        player_id = await self.get_id(platform, username)
        return await self.get_rank_by_id(platform, player_id)

    async def get_stats_by_id(self, platform: str, player_id: str) -> Optional[PlayerStats]:
        return await self._cached_first(
            "get_stats",
            platform,
            player_id,
            StatsCategory.STATS,
            lambda: self._provider.get_stats(platform, player_id),
        )

    async def get_stats_by_username(self, platform: str, username: str) -> Optional[PlayerStats]:
        player_id = await self.get_id(platform, username)
        return await self.get_stats_by_id(platform, player_id)

    async def get_username(self, platform: str, player_id: str) -> Optional[PlayerUsername]:
        """Current profile (username) of a player id."""
        return await self._cached_first(
            "get_username",
            platform,
            player_id,
            StatsCategory.USERNAME,
            lambda: self._provider.get_username(platform, player_id),
        )

    # ========================================================================
    # Uncached & aggregate
    # ========================================================================

    async def get_servers_status(self) -> List[ServerStatus]:
        """Live server status for every platform. Always asks the provider."""
        async with LogContext("get_servers_status"):
            return await self._provider.get_status()

    async def get_all(self, platform: str, username: str) -> PlayerDocument:
        """
        Every category for one player, fetched concurrently.

        Fails as a whole if any single category lookup fails.
        """
        self._validate_username_lookup(platform, username)
        async with LogContext("get_all", platform=platform):
            return await self._aggregate.fetch_all(platform, username)
