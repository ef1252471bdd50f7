"""Tests for Markdown rendering of message text and forward origins."""

import re

import pytest

from memogram.bot.formatting import (
    build_message_content,
    format_entities,
    forward_origin_prefix,
    split_whitespace,
)
from memogram.models import EntityKind, EntitySpan, ForwardOrigin, IncomingMessage

LINK = re.compile(r"\[([^\]]*)\]\([^)]*\)")


def strip_markup(rendered: str) -> str:
    """Undo the Markdown that format_entities inserts."""
    return LINK.sub(r"\1", rendered).replace("**", "").replace("*", "")


def span(kind: EntityKind, offset: int, length: int, url: str | None = None) -> EntitySpan:
    return EntitySpan(kind=kind, offset=offset, length=length, url=url)


class TestFormatEntities:
    """Test entity to Markdown conversion."""

    def test_bold_and_italic(self):
        text = "Hello brave world"
        result = format_entities(
            text, [span(EntityKind.BOLD, 0, 5), span(EntityKind.ITALIC, 6, 5)]
        )
        assert result == "**Hello** *brave* world"

    def test_url_and_text_link(self):
        text = "see https://example.com or docs"
        result = format_entities(
            text,
            [
                span(EntityKind.URL, 4, 19),
                span(EntityKind.TEXT_LINK, 27, 4, url="https://docs.example.com"),
            ],
        )
        assert result == (
            "see [https://example.com](https://example.com) or "
            "[docs](https://docs.example.com)"
        )

    def test_text_link_without_url_links_to_itself(self):
        assert format_entities("docs", [span(EntityKind.TEXT_LINK, 0, 4)]) == "[docs](docs)"

    def test_whitespace_stays_outside_markers(self):
        """Markers hug the non-whitespace core of the span."""
        result = format_entities("Hello world", [span(EntityKind.BOLD, 0, 6)])
        assert result == "**Hello** world"

    def test_whitespace_only_span_is_unchanged(self):
        assert format_entities("a   b", [span(EntityKind.BOLD, 1, 3)]) == "a   b"

    def test_overlapping_span_is_dropped(self):
        result = format_entities(
            "Hello world", [span(EntityKind.ITALIC, 2, 3), span(EntityKind.BOLD, 0, 5)]
        )
        assert result == "**Hello** world"

    def test_unsupported_kinds_are_ignored(self):
        assert format_entities("#tag here", [span(EntityKind.OTHER, 0, 4)]) == "#tag here"

    def test_span_past_end_of_text_stops_rendering(self):
        result = format_entities("short", [span(EntityKind.BOLD, 0, 5), span(EntityKind.BOLD, 10, 3)])
        assert result == "**short**"

    @pytest.mark.parametrize(
        "text, spans",
        [
            ("Hello brave world", [span(EntityKind.BOLD, 0, 5), span(EntityKind.ITALIC, 6, 5)]),
            (
                "see https://example.com or docs",
                [
                    span(EntityKind.URL, 4, 19),
                    span(EntityKind.TEXT_LINK, 27, 4, url="https://docs.example.com"),
                ],
            ),
            ("a  padded  word", [span(EntityKind.BOLD, 1, 9), span(EntityKind.ITALIC, 10, 5)]),
            ("  lead and trail  ", [span(EntityKind.ITALIC, 0, 7), span(EntityKind.TEXT_LINK, 7, 11)]),
            ("one two three", [span(EntityKind.BOLD, 0, 3), span(EntityKind.OTHER, 4, 3)]),
            ("nothing marked", []),
        ],
    )
    def test_removing_markup_restores_text(self, text, spans):
        """Rendering only inserts markers; the text itself is untouched."""
        assert strip_markup(format_entities(text, spans)) == text

    def test_split_whitespace(self):
        assert split_whitespace("  core \n") == ("  ", "core", " \n")


class TestForwardOriginPrefix:
    """Test forward origin lines."""

    def test_user_with_handle(self):
        origin = ForwardOrigin(kind="user", name="Ann Lee", handle="annlee")
        assert forward_origin_prefix(origin) == "Forwarded from Ann Lee (@annlee)"

    def test_channel_without_handle(self):
        origin = ForwardOrigin(kind="channel", name="News")
        assert forward_origin_prefix(origin) == "Forwarded from News"

    def test_hidden_user(self):
        assert forward_origin_prefix(ForwardOrigin(kind="hidden_user", name="Ghost")) == (
            "Forwarded from Ghost"
        )
        assert forward_origin_prefix(ForwardOrigin(kind="hidden_user")) == (
            "Forwarded from Hidden User"
        )

    def test_missing_origin_object_falls_back_to_kind(self):
        assert forward_origin_prefix(ForwardOrigin(kind="chat", present=False)) == (
            "Forwarded from chat"
        )

    def test_unknown_kind_has_no_prefix(self):
        assert forward_origin_prefix(ForwardOrigin(kind="unknown")) is None


class TestBuildMessageContent:
    """Test canonical memo body construction."""

    def test_caption_takes_priority_over_text(self):
        message = IncomingMessage(
            chat_id=1,
            text="ignored",
            caption="Caption here",
            caption_entities=(span(EntityKind.BOLD, 0, 7),),
        )
        assert build_message_content(message) == "**Caption** here"

    def test_forward_prefix_and_trim(self):
        message = IncomingMessage(
            chat_id=1,
            text="  body text \n",
            forward_origin=ForwardOrigin(kind="user", name="Ann"),
        )
        assert build_message_content(message) == "Forwarded from Ann\n  body text"

    def test_plain_text_is_only_trimmed(self):
        message = IncomingMessage(chat_id=1, text="\n  plain #tag text \t\n")
        assert build_message_content(message) == "plain #tag text"

    def test_unsupported_entities_leave_text_trimmed(self):
        message = IncomingMessage(
            chat_id=1,
            text="  #tag here  ",
            entities=(span(EntityKind.OTHER, 2, 4),),
        )
        assert build_message_content(message) == "#tag here"

    def test_empty_message(self):
        assert build_message_content(IncomingMessage(chat_id=1)) == ""
