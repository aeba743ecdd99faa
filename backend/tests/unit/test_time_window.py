"""Tests for clock-time parsing and booking windows."""

from datetime import date

import pytest

from evenlyo.domain.time_window import (
    TimeWindow,
    hours_between,
    inclusive_day_count,
    normalize_clock,
    parse_clock,
)


class TestClockParsing:
    def test_parse_clock_returns_minutes(self):
        assert parse_clock("00:00") == 0
        assert parse_clock("09:30") == 570
        assert parse_clock("23:59") == 1439

    def test_single_digit_hour_is_normalized(self):
        assert normalize_clock("9:05") == "09:05"

    @pytest.mark.parametrize("value", ["24:00", "12:60", "noon", "", "12-00"])
    def test_invalid_clock_rejected(self, value):
        with pytest.raises(ValueError):
            parse_clock(value)


class TestDurations:
    def test_hours_between_same_day(self):
        assert hours_between("10:00", "14:30") == 4.5

    def test_end_before_start_wraps_past_midnight(self):
        assert hours_between("22:00", "02:00") == 4.0

    def test_inclusive_day_count_counts_both_endpoints(self):
        assert inclusive_day_count(date(2024, 2, 1), date(2024, 2, 1)) == 1
        assert inclusive_day_count(date(2024, 2, 1), date(2024, 2, 3)) == 3


class TestTimeWindow:
    def test_missing_bound_gives_no_window(self):
        assert TimeWindow.from_clock("10:00", None) is None
        assert TimeWindow.from_clock(None, None) is None

    def test_touching_windows_do_not_overlap(self):
        morning = TimeWindow.from_clock("08:00", "12:00")
        afternoon = TimeWindow.from_clock("12:00", "16:00")
        assert not morning.overlaps(afternoon)
        assert not afternoon.overlaps(morning)

    def test_overlapping_windows(self):
        a = TimeWindow.from_clock("10:00", "14:00")
        b = TimeWindow.from_clock("13:00", "18:00")
        assert a.overlaps(b)

    def test_within_slot(self):
        slot = TimeWindow.from_clock("09:00", "17:00")
        assert TimeWindow.from_clock("10:00", "12:00").within(slot)
        assert not TimeWindow.from_clock("16:00", "18:00").within(slot)
