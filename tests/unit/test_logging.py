"""Unit tests for lookup-scoped log context and record formatting."""

import asyncio
import json
import logging

import pytest

from siegestats.core.exceptions import DatabaseError, log_error
from siegestats.core.logging.logger import (
    ContextFilter,
    JSONFormatter,
    LogContext,
    get_log_context,
)
from siegestats.modules.shared.exceptions import PlayerNotFoundError
from siegestats.modules.stats.service import PlayerStatsService
from tests.conftest import PLATFORM, PLAYER_ID, USERNAME


def make_record(**extra) -> logging.LogRecord:
    record = logging.LogRecord("siegestats.test", logging.INFO, __file__, 1, "msg", None, None)
    record.__dict__.update(extra)
    return record


class TestContextFilter:
    def test_defaults_outside_a_lookup(self):
        record = make_record()

        ContextFilter().filter(record)

        assert record.platform == "N/A"
        assert record.correlation_id == "N/A"
        assert record.root_operation == "N/A"

    def test_lookup_fields_stamped_on_record(self):
        record = make_record()

        with LogContext("get_rank", platform="psn", player_id="p1"):
            ContextFilter().filter(record)

        assert (record.platform, record.player_id) == ("psn", "p1")
        assert record.operation == record.root_operation == "get_rank"
        assert record.correlation_id != "N/A"


class TestLogContextNesting:
    def test_inner_scope_inherits_trace(self):
        with LogContext("get_all", platform="xbl") as outer:
            with LogContext("get_level", player_id="p1") as inner:
                context = get_log_context()

        assert context["correlation_id"] == outer.context.correlation_id
        assert context["root_operation"] == "get_all"
        assert context["operation"] == "get_level"
        assert context["platform"] == "xbl"
        assert inner.context.player_id == "p1"

    def test_scope_restored_on_exit(self):
        with LogContext("get_all", platform="xbl"):
            with LogContext("get_level", platform="psn"):
                pass
            assert get_log_context()["platform"] == "xbl"
        assert get_log_context() == {}

    def test_each_top_level_lookup_gets_its_own_id(self):
        with LogContext("get_id") as first:
            pass
        with LogContext("get_id") as second:
            pass

        assert first.context.correlation_id != second.context.correlation_id

    def test_explicit_correlation_id_wins(self):
        with LogContext("get_all", correlation_id="req-42"):
            assert get_log_context()["correlation_id"] == "req-42"


@pytest.mark.asyncio
class TestAsyncContext:
    async def test_concurrent_tasks_keep_their_own_context(self):
        async def tagged(player_id):
            async with LogContext("get_level", player_id=player_id):
                await asyncio.sleep(0)
                return get_log_context()["player_id"]

        assert await asyncio.gather(tagged("a"), tagged("b")) == ["a", "b"]

    async def test_get_all_fan_out_shares_one_correlation_id(
        self, provider, options, clock, mocker
    ):
        service = PlayerStatsService(provider, options, clock=clock)
        seen = []

        async def capture(platform, player_id):
            seen.append(get_log_context())
            return []

        mocker.patch.object(provider, "get_level", side_effect=capture)
        mocker.patch.object(provider, "get_stats", side_effect=capture)

        await service.get_all(PLATFORM, USERNAME)

        assert len(seen) == 2
        assert seen[0]["correlation_id"] == seen[1]["correlation_id"]
        assert {entry["operation"] for entry in seen} == {"get_level", "get_stats"}
        assert all(entry["root_operation"] == "get_all" for entry in seen)
        assert all(entry["player_id"] == PLAYER_ID for entry in seen)
        assert get_log_context() == {}


class TestJSONFormatter:
    def test_lookup_fields_top_level_and_extras_nested(self):
        record = make_record(cache_key="p1_level")
        with LogContext("get_level", platform="psn", player_id="p1"):
            ContextFilter().filter(record)

        data = json.loads(JSONFormatter().format(record))

        assert data["operation"] == "get_level"
        assert data["player_id"] == "p1"
        assert data["extra"] == {"cache_key": "p1_level"}

    def test_unset_fields_omitted(self):
        record = make_record()
        ContextFilter().filter(record)

        data = json.loads(JSONFormatter().format(record))

        assert "correlation_id" not in data
        assert "extra" not in data


class TestLogError:
    def test_logged_at_error_severity(self, mocker):
        log = mocker.Mock(spec=logging.Logger)
        error = DatabaseError("insert level", RuntimeError("disk full"))

        log_error(log, "Document store call failed", error, category="level")

        level = log.log.call_args.args[0]
        extra = log.log.call_args.kwargs["extra"]
        assert level == logging.ERROR
        assert extra["category"] == "level"
        assert extra["error"]["error_code"] == "DATABASE_ERROR"

    def test_info_severity_for_unknown_player(self, mocker):
        log = mocker.Mock(spec=logging.Logger)

        log_error(log, "Lookup failed", PlayerNotFoundError("psn", "ghost"))

        assert log.log.call_args.args[0] == logging.INFO

    def test_plain_exception_logged_as_error(self, mocker):
        log = mocker.Mock(spec=logging.Logger)

        log_error(log, "Unexpected", KeyError("x"))

        assert log.log.call_args.args[0] == logging.ERROR
        assert log.log.call_args.kwargs["extra"]["error"]["error_type"] == "KeyError"
