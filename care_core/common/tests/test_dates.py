from datetime import date, datetime, timezone as dt_timezone

from care_core.common.clock import FixedClock, resolve_clock, SYSTEM_CLOCK
from care_core.common.dates import (
    add_months,
    date_to_millis,
    datetime_to_millis,
    local_start_of_day,
    millis_to_date,
    millis_to_datetime,
)
from care_core.conftest import local_dt


def test_epoch_is_zero_millis():
    assert datetime_to_millis(datetime(1970, 1, 1, tzinfo=dt_timezone.utc)) == 0
    assert millis_to_datetime(0) == datetime(1970, 1, 1, tzinfo=dt_timezone.utc)


def test_none_passes_through():
    assert datetime_to_millis(None) is None
    assert millis_to_datetime(None) is None
    assert date_to_millis(None) is None
    assert millis_to_date(None) is None


def test_date_is_stored_as_local_start_of_day():
    # America/Chicago is UTC-6 in January.
    assert date_to_millis(date(1970, 1, 1)) == 6 * 60 * 60 * 1000
    assert millis_to_date(date_to_millis(date(2024, 7, 4))) == date(2024, 7, 4)


def test_local_start_of_day_is_aware_midnight():
    start = local_start_of_day(date(2024, 3, 15))

    assert start == local_dt(2024, 3, 15)
    assert start.utcoffset() is not None


def test_add_months_clamps_to_month_end():
    assert add_months(date(2024, 1, 31), 1) == date(2024, 2, 29)
    assert add_months(date(2023, 1, 31), 1) == date(2023, 2, 28)
    assert add_months(date(2024, 8, 31), 1) == date(2024, 9, 30)


def test_add_months_across_year_boundary():
    assert add_months(date(2024, 11, 15), 3) == date(2025, 2, 15)
    assert add_months(date(2024, 2, 29), 12) == date(2025, 2, 28)


def test_add_months_keeps_time_of_day():
    assert add_months(local_dt(2024, 1, 31, 9, 45), 1) == local_dt(2024, 2, 29, 9, 45)


def test_fixed_clock_today_uses_local_date():
    # 03:00 UTC on the 16th is still the 15th in Chicago.
    clock = FixedClock(datetime(2024, 3, 16, 3, 0, tzinfo=dt_timezone.utc))

    assert clock.today() == date(2024, 3, 15)


def test_resolve_clock_defaults_to_system_clock(clock):
    assert resolve_clock() is SYSTEM_CLOCK
    assert resolve_clock(clock) is clock
