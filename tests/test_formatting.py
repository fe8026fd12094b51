"""
Display Formatting Tests
Price and timestamp rendering with a fixed time zone.
"""

import math
from datetime import timedelta, timezone

import pytest

from ticker.formatting import PLACEHOLDER, format_price, format_timestamp

UTC = timezone.utc


class TestFormatPrice:

    def test_five_decimals(self):
        assert format_price(1.23456789) == "1.23457"
        assert format_price(1.085) == "1.08500"
        assert format_price(0) == "0.00000"

    @pytest.mark.parametrize("value", [None, math.nan, float("nan")])
    def test_missing_values(self, value):
        assert format_price(value) == PLACEHOLDER

    def test_non_numbers(self):
        assert format_price("abc") == PLACEHOLDER
        assert format_price(True) == PLACEHOLDER


class TestFormatTimestamp:

    def test_epoch_millis(self):
        assert format_timestamp(1700000000000, tz=UTC) == "Nov 14, 2023, 22:13:20"

    def test_epoch_millis_contains_year_month_and_time(self):
        text = format_timestamp(1700000000000)
        assert text != PLACEHOLDER
        assert "2023" in text
        assert "Nov" in text
        assert text.count(":") == 2

    def test_float_epoch(self):
        assert format_timestamp(1700000000000.0, tz=UTC) == "Nov 14, 2023, 22:13:20"

    def test_iso_with_z(self):
        assert format_timestamp("2023-11-14T22:13:20Z", tz=UTC) == "Nov 14, 2023, 22:13:20"

    def test_iso_with_offset(self):
        assert format_timestamp("2023-11-14T23:13:20+01:00", tz=UTC) == "Nov 14, 2023, 22:13:20"

    def test_date_only_is_utc_midnight(self):
        assert format_timestamp("2023-11-14", tz=UTC) == "Nov 14, 2023, 00:00:00"

    def test_renders_in_requested_zone(self):
        tz = timezone(timedelta(hours=2))
        assert format_timestamp(1700000000000, tz=tz) == "Nov 15, 2023, 00:13:20"

    @pytest.mark.parametrize("value", [
        "not a date",
        "",
        "2023-13-45",
        None,
        True,
        math.nan,
        float("inf"),
        10 ** 20,
    ])
    def test_invalid_values(self, value):
        assert format_timestamp(value, tz=UTC) == PLACEHOLDER
