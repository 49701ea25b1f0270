"""Options for the stats service, validated once at construction."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple, Type

from siegestats.core.config import Config
from siegestats.core.exceptions import ConfigurationError
from siegestats.modules.stats.interfaces import DocumentStore, FreshnessTracker

DEFAULT_EXPIRATION_MS = 60 * 1000


@dataclass(frozen=True)
class StatsServiceOptions:
    """
    Attributes
    ----------
    caching_disabled : bool
        When True every read goes straight to the provider and neither
        backend is touched.
    expiration_ms : int
        Staleness window. A stored document is served while
        ``timestamp + expiration_ms > now``.
    freshness_tracker, document_store
        Cache backends. Both are required unless caching is disabled.
    rank_seasons, rank_regions
        Filters passed on every rank lookup.
    """

    caching_disabled: bool = False
    expiration_ms: int = DEFAULT_EXPIRATION_MS
    freshness_tracker: Optional[FreshnessTracker] = None
    document_store: Optional[DocumentStore] = None
    rank_seasons: str = "all"
    rank_regions: Tuple[str, ...] = ("emea",)

    def __post_init__(self) -> None:
        # bool is an int subclass; reject it explicitly
        if (
            not isinstance(self.expiration_ms, int)
            or isinstance(self.expiration_ms, bool)
            or self.expiration_ms < 0
        ):
            raise ConfigurationError(
                "expiration_ms",
                f"must be a non-negative integer, got {self.expiration_ms!r}",
            )

        if not self.caching_disabled:
            if self.freshness_tracker is None:
                raise ConfigurationError(
                    "freshness_tracker", "required when caching is enabled"
                )
            if self.document_store is None:
                raise ConfigurationError(
                    "document_store", "required when caching is enabled"
                )

        if not self.rank_regions:
            raise ConfigurationError("rank_regions", "at least one region is required")

        # Accept any iterable of regions but store a tuple
        object.__setattr__(self, "rank_regions", tuple(self.rank_regions))

    @property
    def caching_enabled(self) -> bool:
        return not self.caching_disabled

    @classmethod
    def from_config(
        cls,
        freshness_tracker: Optional[FreshnessTracker] = None,
        document_store: Optional[DocumentStore] = None,
        config: Type[Config] = Config,
    ) -> StatsServiceOptions:
        return cls(
            caching_disabled=config.STATS_CACHING_DISABLED,
            expiration_ms=config.STATS_EXPIRATION_MS,
            freshness_tracker=freshness_tracker,
            document_store=document_store,
            rank_seasons=config.STATS_RANK_SEASONS,
            rank_regions=tuple(config.STATS_RANK_REGIONS),
        )
