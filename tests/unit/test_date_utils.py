"""Unit tests for date helpers and clocks"""

import pytest
from datetime import date, datetime, timezone
from nudgepal.domain.exceptions import ValidationError
from nudgepal.utils.clock import FixedClock, SystemClock
from nudgepal.utils.date_utils import (
    days_in_month,
    generate_date_range,
    parse_iso_date,
    try_parse_iso_date,
    week_start,
)


def test_parse_iso_date_accepts_timestamps():
    assert parse_iso_date("2025-06-15") == date(2025, 6, 15)
    assert parse_iso_date("2025-06-15T23:59:59.000Z") == date(2025, 6, 15)
    assert parse_iso_date(datetime(2025, 6, 15, 8, 0)) == date(2025, 6, 15)


@pytest.mark.parametrize("value", ["", "15/06/2025", "2025-02-30", None, 20250615])
def test_parse_iso_date_rejects_malformed(value):
    with pytest.raises(ValidationError):
        parse_iso_date(value)
    assert try_parse_iso_date(value) is None


def test_days_in_month_handles_leap_years():
    assert days_in_month(date(2024, 2, 10)) == 29
    assert days_in_month(date(2025, 2, 10)) == 28
    assert days_in_month(date(2025, 12, 31)) == 31


def test_week_start_is_sunday():
    assert week_start(date(2025, 6, 15)) == date(2025, 6, 15)  # Sunday
    assert week_start(date(2025, 6, 21)) == date(2025, 6, 15)  # Saturday
    assert week_start(date(2025, 6, 16)) == date(2025, 6, 15)  # Monday


def test_generate_date_range_inclusive():
    days = generate_date_range(date(2025, 6, 29), date(2025, 7, 2))

    assert days == [date(2025, 6, 29), date(2025, 6, 30), date(2025, 7, 1), date(2025, 7, 2)]


def test_fixed_clock():
    clock = FixedClock(date(2025, 6, 15))

    assert clock.today() == date(2025, 6, 15)
    assert clock.now() == datetime(2025, 6, 15, 12, 0, tzinfo=timezone.utc)


def test_system_clock_returns_dates():
    clock = SystemClock()

    assert isinstance(clock.today(), date)
    assert clock.now().tzinfo is not None


def test_fixed_clock_advance():
    clock = FixedClock(date(2025, 6, 30))

    clock.advance()

    assert clock.today() == date(2025, 7, 1)
    assert clock.now().date() == date(2025, 7, 1)
