"""
Adapter over the raw remote stats client.

Converts provider JSON into typed documents as soon as it arrives and
wraps any client failure in ProviderError, once. Nothing above this layer
sees an untyped payload or a client-specific exception.
"""

from __future__ import annotations

import time
from typing import Any, Awaitable, Callable, Dict, List, Optional, Sequence, TypeVar

from siegestats.core.exceptions import log_error
from siegestats.core.logging.logger import get_logger
from siegestats.modules.shared.exceptions import ProviderError
from siegestats.modules.stats.interfaces import StatsProvider
from siegestats.modules.stats.models import (
    PlayerLevel,
    PlayerPlaytime,
    PlayerRank,
    PlayerStats,
    PlayerUsername,
    ServerStatus,
)

logger = get_logger(__name__)

T = TypeVar("T")


class R6ProviderAdapter:
    """Typed, error-normalizing facade over a `StatsProvider` client."""

    def __init__(self, client: StatsProvider) -> None:
        self._client = client

    @staticmethod
    def _failed(
        operation: str, platform: Optional[str], exc: Exception, start: float
    ) -> ProviderError:
        error = ProviderError(operation, exc, platform=platform)
        log_error(
            logger,
            "Stats provider call failed",
            error,
            provider_operation=operation,
            duration_ms=round((time.perf_counter() - start) * 1000, 2),
        )
        return error

    async def _call(
        self,
        operation: str,
        platform: Optional[str],
        request: Callable[[], Awaitable[List[Dict[str, Any]]]],
        convert: Callable[[Dict[str, Any]], T],
    ) -> List[T]:
        start = time.perf_counter()
        try:
            payload = await request()
        except ProviderError:
            raise
        except Exception as exc:
            raise self._failed(operation, platform, exc, start) from exc

        try:
            results = [convert(item) for item in payload or []]
        except (KeyError, TypeError, ValueError, AttributeError) as exc:
            raise self._failed(operation, platform, exc, start) from exc

        logger.debug(
            "Stats provider call",
            extra={
                "provider_operation": operation,
                "result_count": len(results),
                "duration_ms": round((time.perf_counter() - start) * 1000, 2),
            },
        )
        return results

    async def get_ids(self, platform: str, username: str) -> List[str]:
        """Player ids matching `username` on `platform`, best match first."""
        return await self._call(
            "get_id",
            platform,
            lambda: self._client.get_id(platform, username),
            lambda item: str(item["id"]),
        )

    async def get_level(self, platform: str, player_id: str) -> List[PlayerLevel]:
        return await self._call(
            "get_level",
            platform,
            lambda: self._client.get_level(platform, player_id),
            PlayerLevel.from_dict,
        )

    async def get_playtime(self, platform: str, player_id: str) -> List[PlayerPlaytime]:
        return await self._call(
            "get_playtime",
            platform,
            lambda: self._client.get_playtime(platform, player_id),
            PlayerPlaytime.from_dict,
        )

    async def get_rank(
        self,
        platform: str,
        player_id: str,
        *,
        seasons: Any,
        regions: Sequence[str],
    ) -> List[PlayerRank]:
        return await self._call(
            "get_rank",
            platform,
            lambda: self._client.get_rank(
                platform, player_id, seasons=seasons, regions=list(regions)
            ),
            PlayerRank.from_dict,
        )

    async def get_stats(self, platform: str, player_id: str) -> List[PlayerStats]:
        return await self._call(
            "get_stats",
            platform,
            lambda: self._client.get_stats(platform, player_id),
            PlayerStats.from_dict,
        )

    async def get_username(self, platform: str, player_id: str) -> List[PlayerUsername]:
        return await self._call(
            "get_username",
            platform,
            lambda: self._client.get_username(platform, player_id),
            PlayerUsername.from_dict,
        )

    async def get_status(self) -> List[ServerStatus]:
        return await self._call(
            "get_status",
            None,
            self._client.get_status,
            ServerStatus.from_dict,
        )
