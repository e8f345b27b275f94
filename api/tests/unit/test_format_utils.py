"""
Tests unitarios para format_utils.py (duraciones, fechas y presentadores).
"""
from __future__ import annotations

from datetime import timedelta, timezone

import pytest

from app.shared.utils.format_utils import (
    format_date,
    format_duration,
    package_authors,
    pad,
    parse_iso8601,
)


UTC_MINUS_5 = timezone(timedelta(hours=-5))


class TestFormatDuration:

    @pytest.mark.parametrize(
        "seconds, expected",
        [
            (9244, "2:34:04"),
            (2722, "45:22"),
            (27, "0:27"),
            (3600, "1:00:00"),
            ("125", "2:05"),
        ],
    )
    def test_formats_seconds(self, seconds, expected) -> None:
        assert format_duration(seconds) == expected

    @pytest.mark.parametrize("value", [None, "", "abc", -5, True])
    def test_invalid_values_return_empty(self, value) -> None:
        assert format_duration(value) == ""


class TestFormatDate:

    def test_renders_iso_in_target_timezone(self) -> None:
        assert format_date("2020-12-07T21:55:43.000Z", UTC_MINUS_5) == "2020-12-07 16:55:43"

    def test_offset_input_is_normalized(self) -> None:
        assert format_date("2020-12-07T23:55:43+02:00", timezone.utc) == "2020-12-07 21:55:43"

    def test_basic_format_is_accepted(self) -> None:
        assert format_date("20201207T215543Z", timezone.utc) == "2020-12-07 21:55:43"

    def test_non_iso_value_passes_through(self) -> None:
        assert format_date("2020-12-07 16:55:43", UTC_MINUS_5) == "2020-12-07 16:55:43"
        assert format_date(None) is None

    def test_parse_rejects_missing_zone(self) -> None:
        assert parse_iso8601("2020-12-07T21:55:43") is None


class TestAuthors:

    def test_package_authors_pairs_by_position(self) -> None:
        assert package_authors(["Jane"], ["Doe"]) == [{"firstName": "Jane", "lastName": "Doe"}]

    def test_package_authors_fills_missing_parts(self) -> None:
        result = package_authors(["Jane", "Cher"], ["Doe"])
        assert result == [
            {"firstName": "Jane", "lastName": "Doe"},
            {"firstName": "Cher", "lastName": ""},
        ]

    def test_package_authors_handles_none(self) -> None:
        assert package_authors(None, None) == []


def test_pad() -> None:
    assert pad(4, 3) == "004"
    assert pad("text", 10, "~*~") == "~*~~*~text"
    assert pad(7, 3, prepend=False) == "700"
    assert pad(12345, 3) == "12345"
