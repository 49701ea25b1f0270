"""
Pytest Configuration and Fixtures for SiegeStats Tests
======================================================

Purpose
-------
Centralized fixtures for the SiegeStats test suite.

Responsibilities
----------------
- Test environment variables (set before the package is imported)
- In-memory freshness tracker and document store for unit tests
- Controllable millisecond clock
- Mocked raw provider client with realistic payloads
- Testcontainers setup for PostgreSQL and Redis (integration tests)

Architecture Notes
------------------
- Unit tests use fakes and mocks (fast, isolated)
- Integration tests use a real database (SQLite file, plus PostgreSQL via
  testcontainers when Docker is available) and a real Redis container
- Cache metrics are reset before every test
"""

from __future__ import annotations

import os

os.environ.setdefault("ENVIRONMENT", "testing")
os.environ.setdefault("LOG_LEVEL", "DEBUG")
os.environ.setdefault("LOG_JSON", "false")

from dataclasses import dataclass, field
from typing import Any, Dict, Generator, List, Optional, Tuple

import docker
import pytest
from testcontainers.postgres import PostgresContainer
from testcontainers.redis import RedisContainer

from siegestats.core.cache.metrics import CacheMetrics
from siegestats.core.logging.logger import get_logger
from siegestats.modules.stats.interfaces import StoredDocument
from siegestats.modules.stats.models import StatsCategory, StatsDocument
from siegestats.modules.stats.options import StatsServiceOptions
from siegestats.modules.stats.provider import R6ProviderAdapter

logger = get_logger(__name__)


# ============================================================================
# PAYLOADS
# ============================================================================

PLAYER_ID = "0b3b1f5e-2b9e-4a3e-8d6f-6d5a8f3b7c21"
USERNAME = "Pengu.G2"
PLATFORM = "uplay"

LEVEL_PAYLOAD: Dict[str, Any] = {
    "id": PLAYER_ID,
    "level": 312,
    "xp": 48210,
    "lootboxProbability": {"raw": 2400, "percent": "24.00%"},
}

PLAYTIME_PAYLOAD: Dict[str, Any] = {
    "id": PLAYER_ID,
    "general": 5_400_000,
    "ranked": 3_100_000,
    "casual": 1_200_000,
    "discovery": 600,
}

RANK_PAYLOAD: Dict[str, Any] = {
    "id": PLAYER_ID,
    "seasons": {
        "23": {
            "name": "Shadow Legacy",
            "regions": {"emea": {"current": {"name": "Champions", "mmr": 5120}}},
        }
    },
}

STATS_PAYLOAD: Dict[str, Any] = {
    "id": PLAYER_ID,
    "pvp": {"general": {"kills": 41234, "deaths": 30877, "wins": 2210}},
    "pve": {"general": {"kills": 1200, "deaths": 80}},
}

USERNAME_PAYLOAD: Dict[str, Any] = {
    "id": PLAYER_ID,
    "userId": PLAYER_ID,
    "username": USERNAME,
    "platform": PLATFORM,
}

STATUS_PAYLOAD: List[Dict[str, Any]] = [
    {
        "appId": "e3d5ea9e-50bd-43b7-88bf-39794f4e3d40",
        "name": "Rainbow Six Siege - PC - LIVE",
        "platform": "PC",
        "status": "Online",
        "maintenance": None,
        "impactedFeatures": [],
    },
    {
        "appId": "fb4cc4c9-2063-461d-a1e8-84a7d36525fc",
        "name": "Rainbow Six Siege - PS4 - LIVE",
        "platform": "PS4",
        "status": "Degraded",
        "maintenance": False,
        "impactedFeatures": ["Matchmaking"],
    },
]


# ============================================================================
# FAKES (Unit Tests)
# ============================================================================


class FakeClock:
    """Millisecond clock that only moves when told to."""

    def __init__(self, now: int = 1_700_000_000_000) -> None:
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


@dataclass
class InMemoryFreshnessTracker:
    online: bool = True
    expirations: Dict[str, int] = field(default_factory=dict)
    ids: Dict[str, str] = field(default_factory=dict)
    calls: List[Tuple[str, str]] = field(default_factory=list)

    def is_online(self) -> bool:
        return self.online

    async def get_expiration(self, key: str) -> Optional[int]:
        self.calls.append(("get_expiration", key))
        return self.expirations.get(key)

    async def set_expiration(self, key: str, timestamp: int) -> None:
        self.calls.append(("set_expiration", key))
        self.expirations[key] = timestamp

    async def get_id(self, key: str) -> Optional[str]:
        self.calls.append(("get_id", key))
        return self.ids.get(key)

    async def set_id(self, key: str, player_id: str) -> None:
        self.calls.append(("set_id", key))
        self.ids[key] = player_id


@dataclass
class InMemoryDocumentStore:
    online: bool = True
    documents: Dict[Tuple[str, str], Optional[StatsDocument]] = field(default_factory=dict)
    calls: List[Tuple[str, str, str]] = field(default_factory=list)

    def is_online(self) -> bool:
        return self.online

    async def get(self, category: StatsCategory, player_id: str) -> Optional[StoredDocument]:
        self.calls.append(("get", StatsCategory(category).value, player_id))
        key = (StatsCategory(category).value, player_id)
        if key not in self.documents:
            return None
        return StoredDocument(self.documents[key])

    async def insert(
        self, category: StatsCategory, player_id: str, document: Optional[StatsDocument]
    ) -> None:
        self.calls.append(("insert", StatsCategory(category).value, player_id))
        self.documents[(StatsCategory(category).value, player_id)] = document

    async def update(
        self, category: StatsCategory, player_id: str, document: Optional[StatsDocument]
    ) -> None:
        self.calls.append(("update", StatsCategory(category).value, player_id))
        self.documents[(StatsCategory(category).value, player_id)] = document

    def writes(self) -> List[Tuple[str, str, str]]:
        return [call for call in self.calls if call[0] in ("insert", "update")]


@pytest.fixture(autouse=True)
def reset_cache_metrics():
    CacheMetrics.reset_metrics()
    yield


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def tracker() -> InMemoryFreshnessTracker:
    return InMemoryFreshnessTracker()


@pytest.fixture
def store() -> InMemoryDocumentStore:
    return InMemoryDocumentStore()


@pytest.fixture
def options(tracker, store) -> StatsServiceOptions:
    return StatsServiceOptions(
        caching_disabled=False,
        expiration_ms=60_000,
        freshness_tracker=tracker,
        document_store=store,
    )


@pytest.fixture
def mock_stats_client(mocker):
    """
    Mock raw provider client.

    Every method is an AsyncMock returning a single-element list (an empty
    list for nothing); override `.return_value` / `.side_effect` per test.
    """
    client = mocker.MagicMock()
    client.get_id = mocker.AsyncMock(return_value=[{"id": PLAYER_ID, "username": USERNAME}])
    client.get_level = mocker.AsyncMock(return_value=[dict(LEVEL_PAYLOAD)])
    client.get_playtime = mocker.AsyncMock(return_value=[dict(PLAYTIME_PAYLOAD)])
    client.get_rank = mocker.AsyncMock(return_value=[dict(RANK_PAYLOAD)])
    client.get_stats = mocker.AsyncMock(return_value=[dict(STATS_PAYLOAD)])
    client.get_username = mocker.AsyncMock(return_value=[dict(USERNAME_PAYLOAD)])
    client.get_status = mocker.AsyncMock(return_value=[dict(item) for item in STATUS_PAYLOAD])
    return client


@pytest.fixture
def provider(mock_stats_client) -> R6ProviderAdapter:
    return R6ProviderAdapter(mock_stats_client)


# ============================================================================
# TESTCONTAINERS FIXTURES (Integration Tests)
# ============================================================================


def _docker_available() -> bool:
    try:
        docker.from_env().ping()
    except Exception:
        return False
    return True


@pytest.fixture(scope="session")
def docker_available() -> bool:
    return _docker_available()


@pytest.fixture(scope="session")
def postgres_container(docker_available) -> Generator[PostgresContainer, None, None]:
    """
    Start PostgreSQL testcontainer.

    Scope: session (container persists across all tests)
    """
    if not docker_available:
        pytest.skip("Docker is not available")

    logger.info("Starting PostgreSQL testcontainer...")
    container = PostgresContainer(image="postgres:17-alpine", driver="asyncpg")
    container.start()
    yield container
    logger.info("Stopping PostgreSQL testcontainer...")
    container.stop()


@pytest.fixture(scope="session")
def redis_container(docker_available) -> Generator[RedisContainer, None, None]:
    """
    Start Redis testcontainer.

    Scope: session (container persists across all tests)
    """
    if not docker_available:
        pytest.skip("Docker is not available")

    logger.info("Starting Redis testcontainer...")
    container = RedisContainer(image="redis:7-alpine")
    container.start()
    yield container
    logger.info("Stopping Redis testcontainer...")
    container.stop()


@pytest.fixture
def redis_url(redis_container: RedisContainer) -> str:
    host = redis_container.get_container_host_ip()
    port = redis_container.get_exposed_port(6379)
    return f"redis://{host}:{port}/0"
