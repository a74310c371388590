from datetime import date, datetime

import pytest
from dateutil import tz

from fleetline.utils import css_color_to_hex, fmt_duration, parse_date_range

from conftest import at


class TestCssColorToHex:
    def test_hex_passthrough(self):
        assert css_color_to_hex("#3B82F6") == "#3B82F6"

    def test_short_hex_expanded(self):
        assert css_color_to_hex("#abc") == "#AABBCC"

    def test_gray_percentage(self):
        assert css_color_to_hex("gray(0%)") == "#000000"
        assert css_color_to_hex("grey(100%)") == "#FFFFFF"

    def test_named_color(self):
        assert css_color_to_hex("RoyalBlue") == "#4169E1"

    def test_unknown_name_passed_through(self):
        assert css_color_to_hex("blurple") == "blurple"


class TestFmtDuration:
    def test_hours(self):
        assert fmt_duration(at(0, 10), at(0, 13)) == "3h"

    def test_days(self):
        assert fmt_duration(at(0), at(2, 12)) == "2.5d"


class TestParseDateRange:
    def test_explicit_range(self):
        days = parse_date_range("2024-01-07:2024-01-09", tz.UTC)
        assert days == [date(2024, 1, 7), date(2024, 1, 8), date(2024, 1, 9)]

    def test_to_syntax(self):
        assert len(parse_date_range("2024-01-07 to 2024-01-13", tz.UTC)) == 7

    def test_single_date(self):
        assert parse_date_range("2024-02-29", tz.UTC) == [date(2024, 2, 29)]

    def test_week_starts_sunday(self):
        days = parse_date_range("week", tz.UTC)
        assert len(days) == 7
        assert days[0].weekday() == 6
        assert datetime.now(tz.UTC).date() in days

    def test_n_days(self):
        days = parse_date_range("3 days", tz.UTC)
        assert len(days) == 3
        assert days[0] == datetime.now(tz.UTC).date()

    def test_inverted_range(self):
        with pytest.raises(ValueError):
            parse_date_range("2024-01-09:2024-01-07", tz.UTC)

    def test_zero_units(self):
        with pytest.raises(ValueError):
            parse_date_range("0 days", tz.UTC)
