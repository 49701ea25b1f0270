"""Unit tests for unwrapping list-shaped provider responses."""

from siegestats.modules.stats.results import first_result


def test_first_element_returned():
    assert first_result([{"id": "a"}, {"id": "b"}]) == {"id": "a"}


def test_empty_list_is_none():
    assert first_result([]) is None


def test_falsy_first_element_kept():
    assert first_result([0, 1]) == 0
