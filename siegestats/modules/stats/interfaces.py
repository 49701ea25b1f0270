"""
Collaborator interfaces for the stats cache-aside path.

The orchestrator only depends on these protocols; the Redis and SQL backends
in this package are one implementation, the in-memory fakes in the test
suite are another.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Protocol, Sequence, runtime_checkable

from siegestats.modules.stats.models import StatsCategory, StatsDocument


@runtime_checkable
class StatsProvider(Protocol):
    """
    Raw remote stats client.

    Every call returns the provider's JSON objects as a list, which may be
    empty. Failures are raised as whatever the client raises; the
    R6ProviderAdapter wraps them.
    """

    async def get_id(self, platform: str, username: str) -> List[Dict[str, Any]]: ...

    async def get_level(self, platform: str, player_id: str) -> List[Dict[str, Any]]: ...

    async def get_playtime(self, platform: str, player_id: str) -> List[Dict[str, Any]]: ...

    async def get_rank(
        self,
        platform: str,
        player_id: str,
        *,
        seasons: Any,
        regions: Sequence[str],
    ) -> List[Dict[str, Any]]: ...

    async def get_stats(self, platform: str, player_id: str) -> List[Dict[str, Any]]: ...

    async def get_username(self, platform: str, player_id: str) -> List[Dict[str, Any]]: ...

    async def get_status(self) -> List[Dict[str, Any]]: ...


@runtime_checkable
class FreshnessTracker(Protocol):
    """
    Key/value service holding last-refresh timestamps and resolved ids.

    `is_online()` is a cheap, I/O-free reachability check.
    """

    def is_online(self) -> bool: ...

    async def get_expiration(self, key: str) -> Optional[int]: ...

    async def set_expiration(self, key: str, timestamp: int) -> None: ...

    async def get_id(self, key: str) -> Optional[str]: ...

    async def set_id(self, key: str, player_id: str) -> None: ...


@dataclass(frozen=True)
class StoredDocument:
    """
    A document store hit.

    `document` may be ``None``: the provider had no data for the player in
    that category and the absence itself was cached.
    """

    document: Optional[StatsDocument]


@runtime_checkable
class DocumentStore(Protocol):
    """Per-category persistent store keyed by player id."""

    def is_online(self) -> bool: ...

    async def get(self, category: StatsCategory, player_id: str) -> Optional[StoredDocument]: ...

    async def insert(
        self,
        category: StatsCategory,
        player_id: str,
        document: Optional[StatsDocument],
    ) -> None: ...

    async def update(
        self,
        category: StatsCategory,
        player_id: str,
        document: Optional[StatsDocument],
    ) -> None: ...
