from datetime import datetime, timedelta, timezone

import pytest

from front_tracker.errors import InvalidDateTime
from front_tracker.timeparse import parse_duration, parse_range_start

NOW = datetime(2024, 3, 10, 12, 30, tzinfo=timezone.utc)


def test_parse_duration_accepts_combined_units():
    assert parse_duration("30d") == timedelta(days=30)
    assert parse_duration("2w 3d") == timedelta(days=17)
    assert parse_duration("1h30m") == timedelta(hours=1, minutes=30)
    assert parse_duration("2024-01-01") is None


def test_relative_window_counts_back_from_now():
    assert parse_range_start("30d", NOW) == NOW - timedelta(days=30)


def test_absolute_date_is_read_in_system_zone():
    start = parse_range_start("2024-01-05 14:00", NOW, "Europe/Berlin")
    assert start == datetime(2024, 1, 5, 13, 0, tzinfo=timezone.utc)


def test_date_only_means_local_midnight():
    start = parse_range_start("2024-03-01", NOW, "America/New_York")
    assert start == datetime(2024, 3, 1, 5, 0, tzinfo=timezone.utc)


def test_time_of_day_refers_to_the_past():
    assert parse_range_start("10:00", NOW) == datetime(2024, 3, 10, 10, 0, tzinfo=timezone.utc)
    assert parse_range_start("13:00", NOW) == datetime(2024, 3, 9, 13, 0, tzinfo=timezone.utc)


@pytest.mark.parametrize("value", ["", "soon", "30 parsecs", "2024-13-01", "3000y"])
def test_unparseable_values_raise(value):
    with pytest.raises(InvalidDateTime):
        parse_range_start(value, NOW)


@pytest.mark.parametrize(
    "value, zone",
    [("0001-01-01", "Asia/Tokyo"), ("9999-12-31 23:00", "America/New_York")],
)
def test_dates_beyond_the_calendar_raise(value, zone):
    with pytest.raises(InvalidDateTime):
        parse_range_start(value, NOW, zone)
