from datetime import date, datetime, timedelta

import pytest
from dateutil import tz

from fleetline.kinds import ItemKind
from fleetline.layout import (
    TimeAxis, ViewScale, elapsed, get_layout_config, grid_relative_x, item_geometry,
    parse_scale, x_to_page,
)

from conftest import DAY0, at, make_item


class TestCoordinateMapper:
    """Instant <-> pixel mapping in both scales."""

    def test_day_scale_offsets(self, week_axis):
        assert week_axis.to_pixel(DAY0) == 0
        assert week_axis.to_pixel(at(1, 12)) == pytest.approx(210)
        assert week_axis.to_pixel(at(7)) == pytest.approx(week_axis.total_width)

    def test_hour_scale_offsets(self, hour_axis):
        assert hour_axis.to_pixel(at(0, 3, 30)) == pytest.approx(210)
        assert hour_axis.to_pixel(at(1)) == pytest.approx(24 * 60)

    def test_hour_axis_is_one_day_from_midnight(self):
        axis = TimeAxis(at(2, 15, 30), "hour", columns=5)
        assert axis.columns == 24
        assert axis.origin == at(2)

    @pytest.mark.parametrize("instant", [
        at(0),
        at(0, 0, 1),
        at(2, 5, 17),
        at(3, 23, 59),
        at(6, 13, 47),
    ])
    def test_day_round_trip_within_a_minute(self, week_axis, instant):
        back = week_axis.to_instant(week_axis.to_pixel(instant))
        assert abs(back - instant) < timedelta(minutes=1)

    @pytest.mark.parametrize("instant", [at(0, 0, 0), at(0, 7, 13), at(0, 23, 59)])
    def test_hour_round_trip_within_a_minute(self, hour_axis, instant):
        back = hour_axis.to_instant(hour_axis.to_pixel(instant))
        assert abs(back - instant) < timedelta(minutes=1)

    def test_inverse_rounds_to_whole_minutes(self, week_axis):
        back = week_axis.to_instant(100.0)
        assert back.second == 0 and back.microsecond == 0

    def test_instants_in_another_zone_use_origin_calendar(self, week_axis):
        la = tz.gettz("America/Los_Angeles")
        instant = datetime(2024, 1, 8, 4, 0, tzinfo=la)  # 12:00 UTC on the 8th
        assert week_axis.to_pixel(instant) == pytest.approx(210)

    def test_parse_scale(self):
        assert parse_scale("HOUR") is ViewScale.HOUR
        with pytest.raises(ValueError):
            parse_scale("week")


class TestTimeAxis:
    def test_columns_mark_weekends(self, week_axis):
        cols = week_axis.columns_list(today=date(2024, 1, 9))
        assert [c.is_weekend for c in cols] == [True, False, False, False, False, False, True]
        assert [c.index for c in cols if c.is_today] == [2]

    def test_hour_columns_never_weekend(self, hour_axis):
        assert not any(c.is_weekend for c in hour_axis.columns_list())
        assert len(hour_axis.columns_list()) == 24

    def test_anchor(self, week_axis, hour_axis):
        assert week_axis.anchor() == "day:2024-01-07:7"
        assert hour_axis.anchor() == "hour:2024-01-07:24"

    def test_end(self, week_axis):
        assert week_axis.end == at(7)


class TestItemGeometry:
    def test_lane_offset(self, week_axis):
        item = make_item("a", at(1), at(2))
        geom = item_geometry(item, 2, week_axis)
        assert geom.left == pytest.approx(140)
        assert geom.width == pytest.approx(140)
        assert geom.top == pytest.approx(5 + 2 * 44)
        assert geom.height == 38

    def test_inverted_interval_gets_minimum_width(self, week_axis):
        item = make_item("a", at(2), at(1), kind=ItemKind.BLOCK)
        geom = item_geometry(item, 0, week_axis)
        assert geom.width == 4

    def test_cropping_flags(self, week_axis):
        item = make_item("a", at(-1), at(8))
        geom = item_geometry(item, 0, week_axis)
        assert geom.cropped_left and geom.cropped_right

    def test_grid_relative_x(self):
        assert grid_relative_x(500, 100, 40, sidebar_width=200) == 240


class TestPageLayout:
    def test_grid_fills_printable_width(self, week_axis):
        layout = get_layout_config(842, 595, week_axis)
        assert x_to_page(week_axis.total_width, layout) == pytest.approx(layout["page_right"])
        assert layout["grid_left"] == pytest.approx(layout["page_left"] + layout["sidebar_w"])
        assert layout["grid_top"] < layout["header_top"] < layout["page_top"]


NEW_YORK = tz.gettz("America/New_York")


class TestDaylightSaving:
    """Mapping across days with a repeated or skipped wall-clock hour."""

    @pytest.mark.parametrize("scale", ["day", "hour"])
    @pytest.mark.parametrize("day, instant", [
        # fall back: 01:30 happens twice on Nov 3rd
        (datetime(2024, 11, 3), datetime(2024, 11, 3, 5, 30, tzinfo=tz.UTC)),
        (datetime(2024, 11, 3), datetime(2024, 11, 3, 6, 30, tzinfo=tz.UTC)),
        (datetime(2024, 11, 3), datetime(2024, 11, 3, 22, 45, tzinfo=tz.UTC)),
        # spring forward: 02:00-03:00 does not exist on Mar 10th
        (datetime(2024, 3, 10), datetime(2024, 3, 10, 6, 59, tzinfo=tz.UTC)),
        (datetime(2024, 3, 10), datetime(2024, 3, 10, 7, 30, tzinfo=tz.UTC)),
        (datetime(2024, 3, 10), datetime(2024, 3, 10, 20, 15, tzinfo=tz.UTC)),
    ])
    def test_round_trip_within_a_minute(self, scale, day, instant):
        axis = TimeAxis(day.replace(tzinfo=NEW_YORK), scale)
        back = axis.to_instant(axis.to_pixel(instant))
        assert abs(back - instant) < timedelta(minutes=1)

    @pytest.mark.parametrize("scale", ["day", "hour"])
    def test_repeated_hour_keeps_instants_apart(self, scale):
        axis = TimeAxis(datetime(2024, 11, 3, tzinfo=NEW_YORK), scale)
        first = axis.to_pixel(datetime(2024, 11, 3, 5, 30, tzinfo=tz.UTC))
        second = axis.to_pixel(datetime(2024, 11, 3, 6, 30, tzinfo=tz.UTC))
        assert second > first

    def test_hour_offsets_are_real_hours(self):
        axis = TimeAxis(datetime(2024, 11, 3, tzinfo=NEW_YORK), "hour", cell_width=60)
        # local midnight is 04:00 UTC
        assert axis.to_pixel(datetime(2024, 11, 3, 6, 30, tzinfo=tz.UTC)) == pytest.approx(150)

    def test_long_day_still_fills_one_column(self):
        axis = TimeAxis(datetime(2024, 11, 3, tzinfo=NEW_YORK), "day", cell_width=140)
        next_midnight = datetime(2024, 11, 4, tzinfo=NEW_YORK)
        assert axis.to_pixel(next_midnight) == pytest.approx(140)
        assert axis.to_instant(140) == next_midnight

    def test_fall_back_hour_columns(self):
        axis = TimeAxis(datetime(2024, 11, 3, tzinfo=NEW_YORK), "hour")
        cols = axis.columns_list(today=date(2024, 1, 1))
        assert [c.start.hour for c in cols[:4]] == [0, 1, 1, 2]
        assert all(elapsed(c.start, c.end) == timedelta(hours=1) for c in cols)

    def test_spring_forward_hour_columns_skip_missing_hour(self):
        axis = TimeAxis(datetime(2024, 3, 10, tzinfo=NEW_YORK), "hour")
        hours = [c.start.hour for c in axis.columns_list(today=date(2024, 1, 1))]
        assert 2 not in hours
        assert hours[:3] == [0, 1, 3]
