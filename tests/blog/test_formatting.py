"""Tests for date formatting."""

from __future__ import annotations

from datetime import UTC, datetime

import pytest

from spacetraveling.blog.formatting import (
    DATE_PATTERN,
    EDITED_PATTERN,
    display_date,
    format_date,
    parse_timestamp,
)


class TestParseTimestamp:
    def test_compact_offset(self):
        parsed = parse_timestamp("2021-03-25T19:25:28+0000")
        assert parsed == datetime(2021, 3, 25, 19, 25, 28, tzinfo=UTC)

    def test_zulu(self):
        assert parse_timestamp("2021-03-25T19:25:28Z").tzinfo is not None

    def test_date_only_is_utc_midnight(self):
        assert parse_timestamp("2021-01-01") == datetime(2021, 1, 1, tzinfo=UTC)

    def test_garbage_raises(self):
        with pytest.raises(ValueError):
            parse_timestamp("yesterday")


class TestFormatDate:
    def test_card_date_pt_br(self):
        assert format_date("2021-03-25T19:25:28+0000", DATE_PATTERN, tz="UTC") == "25 mar 2021"

    def test_edited_pattern_with_literal(self):
        result = format_date("2021-03-25T19:25:28+0000", EDITED_PATTERN, tz="UTC")
        assert result == "25 mar 2021, às 19:25"

    def test_converts_timezone(self):
        result = format_date(
            "2021-03-25T19:25:28+0000", EDITED_PATTERN, tz="America/Sao_Paulo"
        )
        assert result == "25 mar 2021, às 16:25"

    def test_english_months(self):
        result = format_date("2021-02-01T00:00:00+0000", "MMMM dd, yyyy", locale="en-US", tz="UTC")
        assert result == "February 01, 2021"

    def test_pt_br_full_month(self):
        assert format_date("2021-03-05", "dd 'de' MMMM", tz="UTC") == "05 de março"

    def test_escaped_quote(self):
        assert format_date("2021-03-05", "dd''MM", tz="UTC") == "05'03"

    def test_accepts_datetime(self):
        moment = datetime(2021, 12, 31, 23, 59, tzinfo=UTC)
        assert format_date(moment, "dd/MM/yyyy HH:mm", tz="UTC") == "31/12/2021 23:59"

    @pytest.mark.parametrize("value", [None, ""])
    def test_missing_value_is_empty(self, value):
        assert format_date(value) == ""


class TestDisplayDate:
    def test_formats_valid_timestamp(self):
        assert display_date("2021-03-25T19:25:28+0000", tz="UTC") == "25 mar 2021"

    def test_unparseable_is_empty(self):
        assert display_date("not-a-date", tz="UTC") == ""
