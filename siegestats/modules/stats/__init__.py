"""
Stats module: cache-aside lookups of Rainbow Six Siege player data.

Public surface
--------------
- PlayerStatsService       : facade used by callers
- StatsServiceOptions      : validated service options
- R6ProviderAdapter        : typed wrapper over a raw provider client
- RedisFreshnessTracker    : FreshnessTracker on Redis
- SqlDocumentStore         : DocumentStore on SQLAlchemy
"""

from siegestats.modules.stats.aggregate_service import AggregateFetcher
from siegestats.modules.stats.cache_aside import CacheAsideOrchestrator, cache_key
from siegestats.modules.stats.document_store import SqlDocumentStore
from siegestats.modules.stats.freshness import RedisFreshnessTracker
from siegestats.modules.stats.identity_service import IdentityResolver, identity_key
from siegestats.modules.stats.interfaces import (
    DocumentStore,
    FreshnessTracker,
    StatsProvider,
    StoredDocument,
)
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
from siegestats.modules.stats.service import PlayerStatsService

__all__ = [
    "AggregateFetcher",
    "CacheAsideOrchestrator",
    "DocumentStore",
    "FreshnessTracker",
    "IdentityResolver",
    "PlayerDocument",
    "PlayerLevel",
    "PlayerPlaytime",
    "PlayerRank",
    "PlayerStats",
    "PlayerStatsService",
    "PlayerUsername",
    "R6ProviderAdapter",
    "RedisFreshnessTracker",
    "ServerStatus",
    "SqlDocumentStore",
    "StatsCategory",
    "StatsProvider",
    "StatsServiceOptions",
    "StoredDocument",
    "cache_key",
    "first_result",
    "identity_key",
]
