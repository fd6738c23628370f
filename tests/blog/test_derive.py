"""Tests for reading time and edit detection."""

from __future__ import annotations

import math

import pytest

from spacetraveling.blog.derive import (
    WORDS_PER_MINUTE,
    count_words,
    is_edited,
    post_text,
    reading_time,
)
from spacetraveling.cms.models import ContentSection


def _section(heading: str, *paragraphs: str) -> ContentSection:
    return ContentSection.model_validate(
        {
            "heading": heading,
            "body": [{"type": "paragraph", "text": p, "spans": []} for p in paragraphs],
        }
    )


def _words(n: int) -> str:
    return " ".join(f"w{i}" for i in range(n))


class TestReadingTime:
    def test_three_sections_of_400_words_read_in_two_minutes(self):
        sections = [
            _section("Intro", _words(99)),
            _section("Middle part", _words(148)),
            _section("The end", _words(100), _words(48)),
        ]
        assert count_words(post_text(sections)) == 400
        assert reading_time(sections) == 2

    @pytest.mark.parametrize("words", [1, 199, 200, 201, 399, 400, 401, 1000])
    def test_is_ceiling_of_words_over_speed(self, words):
        sections = [_section("", _words(words))]
        assert reading_time(sections) == math.ceil(words / WORDS_PER_MINUTE)

    def test_single_word_reads_in_one_minute(self):
        assert reading_time([_section("Hello")]) == 1

    def test_no_sections_is_zero(self):
        assert reading_time([]) == 0

    def test_blank_text_is_zero(self):
        assert reading_time([_section("", "   \n\t  ")]) == 0

    def test_none_is_rejected(self):
        with pytest.raises(TypeError):
            reading_time(None)  # type: ignore[arg-type]

    def test_headings_are_counted(self):
        sections = [_section(_words(150)), _section(_words(100))]
        assert reading_time(sections) == 2

    def test_whitespace_runs_are_one_separator(self):
        sections = [_section("A  heading", "one   two\n\nthree", "four\tfive")]
        assert count_words(post_text(sections)) == 7

    def test_sections_do_not_glue_words_together(self):
        sections = [_section("first", "ends"), _section("second", "starts")]
        assert count_words(post_text(sections)) == 4

    def test_uses_injected_text_renderer(self):
        sections = [_section("h", "ignored")]
        assert reading_time(sections, to_text=lambda blocks: _words(400)) == 3


class TestCountWords:
    def test_empty_string_has_no_words(self):
        assert count_words("") == 0

    def test_counts_tokens(self):
        assert count_words(" a b  c ") == 3


class TestIsEdited:
    def test_same_dates_not_edited(self):
        assert is_edited("2021-01-01", "2021-01-01") is False

    def test_later_date_is_edited(self):
        assert is_edited("2021-01-01", "2021-02-01") is True

    def test_null_vs_present_is_edited(self):
        assert is_edited(None, "2021-01-01") is True
        assert is_edited("2021-01-01", None) is True

    def test_both_null_not_edited(self):
        assert is_edited(None, None) is False

    def test_no_tolerance_window(self):
        assert is_edited("2021-01-01T10:00:00+0000", "2021-01-01T10:00:01+0000") is True
