"""Tests for outgoing text helpers."""

from memogram.bot.utils import excerpt, truncate_text


def test_truncate_keeps_text_within_limit():
    assert truncate_text("short", 10) == "short"
    assert truncate_text("x" * 10, 10) == "x" * 10


def test_truncate_marks_the_cut():
    result = truncate_text("a" * 5000, 3900)

    assert len(result) == 3900
    assert result.endswith("...")


def test_excerpt_has_no_marker():
    assert excerpt("Shopping list for today", 10) == "Shopping l"
    assert excerpt("short", 10) == "short"
