"""Unit tests for the typed stats documents."""

import pytest

from siegestats.modules.stats.models import (
    PlayerDocument,
    PlayerLevel,
    PlayerPlaytime,
    PlayerRank,
    PlayerUsername,
    ServerStatus,
    StatsCategory,
    document_from_payload,
    document_to_payload,
)
from tests.conftest import (
    LEVEL_PAYLOAD,
    PLAYER_ID,
    PLAYTIME_PAYLOAD,
    RANK_PAYLOAD,
    STATS_PAYLOAD,
    STATUS_PAYLOAD,
    USERNAME,
    USERNAME_PAYLOAD,
)


class TestFromDict:
    def test_level_reads_camel_case(self):
        level = PlayerLevel.from_dict(LEVEL_PAYLOAD)

        assert level.player_id == PLAYER_ID
        assert level.level == 312
        assert level.lootbox_probability == {"raw": 2400, "percent": "24.00%"}

    def test_snake_case_accepted(self):
        profile = PlayerUsername.from_dict(
            {"player_id": PLAYER_ID, "username": USERNAME, "user_id": "u1"}
        )
        assert profile.player_id == PLAYER_ID
        assert profile.user_id == "u1"

    def test_missing_numbers_default_to_zero(self):
        playtime = PlayerPlaytime.from_dict({"id": PLAYER_ID, "general": None})

        assert (playtime.general, playtime.ranked, playtime.casual) == (0, 0, 0)

    def test_status_impacted_features(self):
        status = ServerStatus.from_dict(STATUS_PAYLOAD[1])

        assert status.platform == "PS4"
        assert status.maintenance is False
        assert status.impacted_features == ["Matchmaking"]


class TestPayloads:
    def test_unknown_provider_fields_survive_persistence(self):
        playtime = PlayerPlaytime.from_dict(PLAYTIME_PAYLOAD)

        payload = document_to_payload(playtime)

        assert payload["discovery"] == 600
        assert document_from_payload(StatsCategory.PLAYTIME, payload) == playtime

    @pytest.mark.parametrize(
        "category, payload",
        [
            (StatsCategory.LEVEL, LEVEL_PAYLOAD),
            (StatsCategory.RANK, RANK_PAYLOAD),
            (StatsCategory.STATS, STATS_PAYLOAD),
            (StatsCategory.USERNAME, USERNAME_PAYLOAD),
        ],
    )
    def test_category_picks_document_type(self, category, payload):
        document = document_from_payload(category, payload)

        assert document.player_id == PLAYER_ID
        assert document_to_payload(document)["id"] == PLAYER_ID

    def test_category_value_string_accepted(self):
        assert isinstance(document_from_payload("rank", RANK_PAYLOAD), PlayerRank)

    def test_none_stays_none(self):
        assert document_from_payload(StatsCategory.LEVEL, None) is None
        assert document_to_payload(None) is None

    def test_raw_ignored_by_equality(self):
        a = PlayerLevel(player_id=PLAYER_ID, level=1, raw={"extra": 1})
        b = PlayerLevel(player_id=PLAYER_ID, level=1)
        assert a == b


class TestPlayerDocument:
    def test_to_dict_with_missing_categories(self):
        document = PlayerDocument(player=USERNAME, level=PlayerLevel.from_dict(LEVEL_PAYLOAD))

        payload = document.to_dict()

        assert payload["player"] == USERNAME
        assert payload["level"]["level"] == 312
        assert payload["rank"] is None
        assert payload["username"] is None


def test_category_str_is_value():
    assert str(StatsCategory.USERNAME) == "username"
    assert StatsCategory("stats") is StatsCategory.STATS
