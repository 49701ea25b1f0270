"""
Typed stats documents.

Provider payloads are untyped JSON objects. They are converted into these
dataclasses at the provider boundary and serialized back with `to_dict()`
for persistence. `raw` keeps the full provider payload so nothing the
provider sent is lost; it does not take part in equality.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Type, Union


class StatsCategory(str, Enum):
    """Per-player data categories; each is cached and stored separately."""

    LEVEL = "level"
    PLAYTIME = "playtime"
    RANK = "rank"
    STATS = "stats"
    USERNAME = "username"

    def __str__(self) -> str:
        return self.value


def _pick(data: Mapping[str, Any], *keys: str, default: Any = None) -> Any:
    for key in keys:
        if key in data:
            return data[key]
    return default


def _merged(raw: Mapping[str, Any], typed: Dict[str, Any]) -> Dict[str, Any]:
    payload = dict(raw)
    payload.update(typed)
    return payload


@dataclass(frozen=True)
class PlayerLevel:
    player_id: str
    level: int
    xp: int = 0
    lootbox_probability: Optional[Dict[str, Any]] = None
    raw: Dict[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> PlayerLevel:
        return cls(
            player_id=str(_pick(data, "id", "player_id", default="")),
            level=int(_pick(data, "level", default=0) or 0),
            xp=int(_pick(data, "xp", default=0) or 0),
            lootbox_probability=_pick(data, "lootboxProbability", "lootbox_probability"),
            raw=dict(data),
        )

    def to_dict(self) -> Dict[str, Any]:
        return _merged(
            self.raw,
            {
                "id": self.player_id,
                "level": self.level,
                "xp": self.xp,
                "lootboxProbability": self.lootbox_probability,
            },
        )


@dataclass(frozen=True)
class PlayerPlaytime:
    """Playtime in seconds, overall and per queue."""

    player_id: str
    general: int = 0
    ranked: int = 0
    casual: int = 0
    raw: Dict[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> PlayerPlaytime:
        return cls(
            player_id=str(_pick(data, "id", "player_id", default="")),
            general=int(_pick(data, "general", default=0) or 0),
            ranked=int(_pick(data, "ranked", default=0) or 0),
            casual=int(_pick(data, "casual", default=0) or 0),
            raw=dict(data),
        )

    def to_dict(self) -> Dict[str, Any]:
        return _merged(
            self.raw,
            {
                "id": self.player_id,
                "general": self.general,
                "ranked": self.ranked,
                "casual": self.casual,
            },
        )


@dataclass(frozen=True)
class PlayerRank:
    """Ranked history keyed by season id; each season holds per-region data."""

    player_id: str
    seasons: Dict[str, Any] = field(default_factory=dict)
    raw: Dict[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> PlayerRank:
        return cls(
            player_id=str(_pick(data, "id", "player_id", default="")),
            seasons=dict(_pick(data, "seasons", default={}) or {}),
            raw=dict(data),
        )

    def to_dict(self) -> Dict[str, Any]:
        return _merged(self.raw, {"id": self.player_id, "seasons": self.seasons})


@dataclass(frozen=True)
class PlayerStats:
    player_id: str
    pvp: Dict[str, Any] = field(default_factory=dict)
    pve: Dict[str, Any] = field(default_factory=dict)
    raw: Dict[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> PlayerStats:
        return cls(
            player_id=str(_pick(data, "id", "player_id", default="")),
            pvp=dict(_pick(data, "pvp", default={}) or {}),
            pve=dict(_pick(data, "pve", default={}) or {}),
            raw=dict(data),
        )

    def to_dict(self) -> Dict[str, Any]:
        return _merged(
            self.raw, {"id": self.player_id, "pvp": self.pvp, "pve": self.pve}
        )


@dataclass(frozen=True)
class PlayerUsername:
    player_id: str
    username: str
    user_id: Optional[str] = None
    platform: Optional[str] = None
    raw: Dict[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> PlayerUsername:
        return cls(
            player_id=str(_pick(data, "id", "player_id", default="")),
            username=str(_pick(data, "username", default="")),
            user_id=_pick(data, "userId", "user_id"),
            platform=_pick(data, "platform"),
            raw=dict(data),
        )

    def to_dict(self) -> Dict[str, Any]:
        return _merged(
            self.raw,
            {
                "id": self.player_id,
                "userId": self.user_id,
                "username": self.username,
                "platform": self.platform,
            },
        )


@dataclass(frozen=True)
class ServerStatus:
    """Status of one platform's game servers. Never cached."""

    app_id: str
    name: str
    platform: Optional[str] = None
    status: Optional[str] = None
    maintenance: Optional[bool] = None
    impacted_features: List[str] = field(default_factory=list)
    raw: Dict[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ServerStatus:
        return cls(
            app_id=str(_pick(data, "appId", "app_id", default="")),
            name=str(_pick(data, "name", default="")),
            platform=_pick(data, "platform"),
            status=_pick(data, "status"),
            maintenance=_pick(data, "maintenance"),
            impacted_features=list(
                _pick(data, "impactedFeatures", "impacted_features", default=[]) or []
            ),
            raw=dict(data),
        )

    def to_dict(self) -> Dict[str, Any]:
        return _merged(
            self.raw,
            {
                "appId": self.app_id,
                "name": self.name,
                "platform": self.platform,
                "status": self.status,
                "maintenance": self.maintenance,
                "impactedFeatures": list(self.impacted_features),
            },
        )


StatsDocument = Union[PlayerLevel, PlayerPlaytime, PlayerRank, PlayerStats, PlayerUsername]

DOCUMENT_TYPES: Dict[StatsCategory, Type[Any]] = {
    StatsCategory.LEVEL: PlayerLevel,
    StatsCategory.PLAYTIME: PlayerPlaytime,
    StatsCategory.RANK: PlayerRank,
    StatsCategory.STATS: PlayerStats,
    StatsCategory.USERNAME: PlayerUsername,
}


def document_from_payload(
    category: StatsCategory, payload: Optional[Mapping[str, Any]]
) -> Optional[StatsDocument]:
    """Rebuild a typed document from its persisted form. ``None`` stays ``None``."""
    if payload is None:
        return None
    return DOCUMENT_TYPES[StatsCategory(category)].from_dict(payload)


def document_to_payload(document: Optional[StatsDocument]) -> Optional[Dict[str, Any]]:
    if document is None:
        return None
    return document.to_dict()


@dataclass(frozen=True)
class PlayerDocument:
    """Everything known about one player. Any category may be ``None``."""

    player: str
    level: Optional[PlayerLevel] = None
    playtime: Optional[PlayerPlaytime] = None
    rank: Optional[PlayerRank] = None
    stats: Optional[PlayerStats] = None
    username: Optional[PlayerUsername] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "player": self.player,
            "level": document_to_payload(self.level),
            "playtime": document_to_payload(self.playtime),
            "rank": document_to_payload(self.rank),
            "stats": document_to_payload(self.stats),
            "username": document_to_payload(self.username),
        }
