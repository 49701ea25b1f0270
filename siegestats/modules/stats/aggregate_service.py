"""Concurrent fan-out of every category lookup for one player."""

from __future__ import annotations

import asyncio
from typing import Any, Awaitable, Callable, Mapping, Optional

from siegestats.core.logging.logger import get_logger
from siegestats.modules.stats.identity_service import IdentityResolver
from siegestats.modules.stats.models import PlayerDocument, StatsCategory

logger = get_logger(__name__)

CategoryFetcher = Callable[[str, str], Awaitable[Optional[Any]]]

# Order of the fan-out and of the PlayerDocument fields
AGGREGATE_CATEGORIES = (
    StatsCategory.LEVEL,
    StatsCategory.PLAYTIME,
    StatsCategory.RANK,
    StatsCategory.STATS,
    StatsCategory.USERNAME,
)


class AggregateFetcher:
    """
    Resolve a player once, then fetch every category concurrently.

    All-or-nothing: if any category raises, the exception propagates out of
    `fetch_all` and no partial document is returned. Sibling lookups that
    are already in flight are not cancelled.
    """

    def __init__(
        self,
        identity_resolver: IdentityResolver,
        fetchers: Mapping[StatsCategory, CategoryFetcher],
    ) -> None:
        missing = [c.value for c in AGGREGATE_CATEGORIES if c not in fetchers]
        if missing:
            raise ValueError(f"Missing category fetchers: {missing}")
        self._identity_resolver = identity_resolver
        self._fetchers = dict(fetchers)

    async def fetch_all(self, platform: str, username: str) -> PlayerDocument:
        player_id = await self._identity_resolver.resolve(platform, username)

        level, playtime, rank, stats, profile = await asyncio.gather(
            *(self._fetchers[category](platform, player_id) for category in AGGREGATE_CATEGORIES)
        )

        logger.debug(
            "Aggregate fetched",
            extra={
                "missing_categories": [
                    category.value
                    for category, value in zip(
                        AGGREGATE_CATEGORIES, (level, playtime, rank, stats, profile)
                    )
                    if value is None
                ],
            },
        )
        return PlayerDocument(
            player=username,
            level=level,
            playtime=playtime,
            rank=rank,
            stats=stats,
            username=profile,
        )
