"""Unit tests for RedisFreshnessTracker, with RedisService patched out."""

import logging

import pytest
from redis.exceptions import ConnectionError as RedisConnectionFailure

from siegestats.core.exceptions import CacheError
from siegestats.core.redis.service import RedisService
from siegestats.modules.stats.freshness import RedisFreshnessTracker


@pytest.fixture
def tracker_under_test() -> RedisFreshnessTracker:
    return RedisFreshnessTracker(key_prefix="test")


@pytest.mark.asyncio
class TestRedisFreshnessTracker:
    async def test_set_expiration_writes_prefixed_key(self, tracker_under_test, mocker):
        set_mock = mocker.patch.object(RedisService, "set", mocker.AsyncMock(return_value=True))

        await tracker_under_test.set_expiration("pid_level", 1_700_000_000_123)

        set_mock.assert_awaited_once_with("test:expiration:pid_level", "1700000000123")

    async def test_get_expiration_parses_int(self, tracker_under_test, mocker):
        get_mock = mocker.patch.object(
            RedisService, "get", mocker.AsyncMock(return_value="1700000000123")
        )

        assert await tracker_under_test.get_expiration("pid_level") == 1_700_000_000_123
        get_mock.assert_awaited_once_with("test:expiration:pid_level")

    async def test_missing_expiration_is_none(self, tracker_under_test, mocker):
        mocker.patch.object(RedisService, "get", mocker.AsyncMock(return_value=None))

        assert await tracker_under_test.get_expiration("pid_level") is None

    async def test_malformed_expiration_is_none(self, tracker_under_test, mocker):
        mocker.patch.object(RedisService, "get", mocker.AsyncMock(return_value="yesterday"))

        assert await tracker_under_test.get_expiration("pid_level") is None

    async def test_identity_round_trip_keys(self, tracker_under_test, mocker):
        set_mock = mocker.patch.object(RedisService, "set", mocker.AsyncMock(return_value=True))
        mocker.patch.object(RedisService, "get", mocker.AsyncMock(return_value=b"pid"))

        await tracker_under_test.set_id("uplay/Pengu.G2", "pid")

        set_mock.assert_awaited_once_with("test:identity:uplay/Pengu.G2", "pid")
        assert await tracker_under_test.get_id("uplay/Pengu.G2") == "pid"

    async def test_redis_failure_wrapped_in_cache_error(self, tracker_under_test, mocker):
        mocker.patch.object(
            RedisService, "get", mocker.AsyncMock(side_effect=RedisConnectionFailure("down"))
        )

        with pytest.raises(CacheError) as exc_info:
            await tracker_under_test.get_id("uplay/x")

        assert exc_info.value.cache_key == "test:identity:uplay/x"
        assert exc_info.value.operation == "get_id"

    async def test_redis_failure_logged_as_warning(self, tracker_under_test, mocker):
        log = mocker.patch("siegestats.modules.stats.freshness.logger")
        mocker.patch.object(
            RedisService, "set", mocker.AsyncMock(side_effect=RedisConnectionFailure("down"))
        )

        with pytest.raises(CacheError):
            await tracker_under_test.set_id("uplay/x", "pid")

        assert log.log.call_args.args[0] == logging.WARNING
        assert log.log.call_args.kwargs["extra"]["error"]["error_code"] == "CACHE_ERROR"

    async def test_set_failure_wrapped_in_cache_error(self, tracker_under_test, mocker):
        mocker.patch.object(
            RedisService, "set", mocker.AsyncMock(side_effect=RedisConnectionFailure("down"))
        )

        with pytest.raises(CacheError):
            await tracker_under_test.set_expiration("pid_rank", 1)


class TestOnline:
    def test_follows_redis_health(self, mocker):
        health = mocker.patch.object(RedisService, "is_healthy", return_value=False)
        tracker = RedisFreshnessTracker()

        assert tracker.is_online() is False
        health.return_value = True
        assert tracker.is_online() is True

    def test_uninitialized_redis_is_offline(self):
        assert RedisService._client is None
        assert RedisFreshnessTracker().is_online() is False

    def test_default_prefix_from_config(self):
        tracker = RedisFreshnessTracker()

        assert tracker._expiration_key("k") == "siegestats:v1:expiration:k"
        assert tracker._identity_key("uplay/x") == "siegestats:v1:identity:uplay/x"
