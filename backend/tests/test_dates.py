"""Tests for services/dates.py — canonical calendar dates."""

from datetime import date, datetime, timezone

from services.dates import parse_day, shift, today, trailing_days, week_start


def test_shift_rolls_over_leap_day():
    assert shift(date(2024, 2, 29), 1) == date(2024, 3, 1)
    assert shift(date(2024, 3, 1), -1) == date(2024, 2, 29)


def test_shift_rolls_over_year():
    assert shift(date(2023, 12, 31), 1) == date(2024, 1, 1)
    assert shift(date(2024, 1, 1), -1) == date(2023, 12, 31)


def test_parse_day_accepts_strings_dates_and_datetimes():
    assert parse_day("2024-02-29") == date(2024, 2, 29)
    assert parse_day("2024-02-29T23:59:59+00:00") == date(2024, 2, 29)
    assert parse_day(date(2024, 1, 1)) == date(2024, 1, 1)
    assert parse_day(datetime(2024, 1, 1, 22, 30)) == date(2024, 1, 1)


def test_today_uses_viewer_timezone():
    now = datetime(2024, 1, 1, 23, 30, tzinfo=timezone.utc)
    assert today("UTC", now=now) == date(2024, 1, 1)
    assert today("Asia/Tokyo", now=now) == date(2024, 1, 2)
    assert today("America/New_York", now=now) == date(2024, 1, 1)


def test_today_falls_back_to_utc_for_unknown_zone():
    now = datetime(2024, 1, 1, 23, 30, tzinfo=timezone.utc)
    assert today("Not/AZone", now=now) == date(2024, 1, 1)


def test_week_start_sunday_rolls_back_six_days():
    assert week_start(date(2024, 3, 10)) == date(2024, 3, 4)


def test_trailing_days():
    days = trailing_days(date(2024, 3, 1), 3)
    assert days == [date(2024, 2, 28), date(2024, 2, 29), date(2024, 3, 1)]
