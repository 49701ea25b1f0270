"""
Redis-backed freshness tracker.

Two keyspaces under Config.REDIS_KEY_PREFIX:

- ``{prefix}:expiration:{player_id}_{category}`` -> ms timestamp of the last refresh
- ``{prefix}:identity:{platform}/{username}``    -> resolved player id

Neither carries a Redis TTL. Staleness is decided by the orchestrator and
identities are permanent.
"""

from __future__ import annotations

from typing import Optional, Type

from redis.exceptions import RedisError

from siegestats.core.config import Config
from siegestats.core.exceptions import CacheError, log_error
from siegestats.core.logging.logger import get_logger
from siegestats.core.redis.service import RedisService

logger = get_logger(__name__)


class RedisFreshnessTracker:
    """FreshnessTracker on top of the RedisService singleton."""

    def __init__(
        self,
        redis_service: Type[RedisService] = RedisService,
        key_prefix: Optional[str] = None,
    ) -> None:
        self._redis = redis_service
        self._prefix = key_prefix if key_prefix is not None else Config.REDIS_KEY_PREFIX

    def _expiration_key(self, key: str) -> str:
        return f"{self._prefix}:expiration:{key}"

    def _identity_key(self, key: str) -> str:
        return f"{self._prefix}:identity:{key}"

    @staticmethod
    def _failure(operation: str, redis_key: str, exc: RedisError) -> CacheError:
        error = CacheError(operation, redis_key, exc)
        log_error(logger, "Freshness tracker call failed", error)
        return error

    def is_online(self) -> bool:
        return self._redis.is_healthy()

    async def get_expiration(self, key: str) -> Optional[int]:
        redis_key = self._expiration_key(key)
        try:
            raw = await self._redis.get(redis_key)
        except RedisError as exc:
            raise self._failure("get_expiration", redis_key, exc) from exc

        if raw is None:
            return None
        try:
            return int(raw)
        except (TypeError, ValueError):
            # Unparseable timestamp: treat as never refreshed
            logger.warning(
                "Discarding malformed freshness timestamp",
                extra={"cache_key": redis_key, "value": str(raw)},
            )
            return None

    async def set_expiration(self, key: str, timestamp: int) -> None:
        redis_key = self._expiration_key(key)
        try:
            await self._redis.set(redis_key, str(int(timestamp)))
        except RedisError as exc:
            raise self._failure("set_expiration", redis_key, exc) from exc

    async def get_id(self, key: str) -> Optional[str]:
        redis_key = self._identity_key(key)
        try:
            raw = await self._redis.get(redis_key)
        except RedisError as exc:
            raise self._failure("get_id", redis_key, exc) from exc
        if raw is None:
            return None
        return raw.decode("utf-8") if isinstance(raw, bytes) else str(raw)

    async def set_id(self, key: str, player_id: str) -> None:
        redis_key = self._identity_key(key)
        try:
            await self._redis.set(redis_key, player_id)
        except RedisError as exc:
            raise self._failure("set_id", redis_key, exc) from exc
