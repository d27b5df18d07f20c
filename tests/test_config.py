from __future__ import annotations

import pytest

from core.config import join_lines, parse_threshold, parse_toggle


@pytest.mark.parametrize(
    ("raw", "expected"),
    [(None, 5), ("", 5), ("3", 3), (2, 2), ("abc", 5), ("0", 5), (-1, 5)],
)
def test_parse_threshold(raw, expected) -> None:
    assert parse_threshold(raw) == expected


@pytest.mark.parametrize(
    ("raw", "expected"),
    [(None, True), (True, True), (False, False), ("false", False), ("TRUE", True), ("maybe", True), (0, True)],
)
def test_parse_toggle(raw, expected) -> None:
    assert parse_toggle(raw) is expected


def test_join_lines_accepts_lists_and_strings() -> None:
    assert join_lines(["a", "b"]) == "a\nb"
    assert join_lines("a\nb") == "a\nb"
    assert join_lines(None) == ""
    assert join_lines({"a": 1}) == ""
