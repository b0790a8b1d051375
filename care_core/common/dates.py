# care_core/common/dates.py
"""
Conversions between Python dates and the persisted epoch-millisecond layout.

Datetimes are stored as epoch milliseconds (UTC instant). Date-only values
are stored as the epoch milliseconds of local start-of-day, where "local" is
the configured TIME_ZONE.
"""
from __future__ import annotations

import calendar
from datetime import date, datetime, time, timedelta, timezone as dt_timezone
from typing import Optional

from django.utils import timezone

_EPOCH = datetime(1970, 1, 1, tzinfo=dt_timezone.utc)


def local_start_of_day(d: date) -> datetime:
    return timezone.make_aware(datetime.combine(d, time.min), timezone.get_current_timezone())


def datetime_to_millis(value: Optional[datetime]) -> Optional[int]:
    if value is None:
        return None
    if timezone.is_naive(value):
        value = timezone.make_aware(value, timezone.get_current_timezone())
    return (value - _EPOCH) // timedelta(milliseconds=1)


def millis_to_datetime(millis: Optional[int]) -> Optional[datetime]:
    if millis is None:
        return None
    return _EPOCH + timedelta(milliseconds=millis)


def date_to_millis(value: Optional[date]) -> Optional[int]:
    if value is None:
        return None
    return datetime_to_millis(local_start_of_day(value))


def millis_to_date(millis: Optional[int]) -> Optional[date]:
    if millis is None:
        return None
    return timezone.localtime(millis_to_datetime(millis)).date()


def add_months(value, months: int):
    """
    Calendar month addition for date or datetime values.

    The day of month is kept when the target month has it, otherwise it is
    clamped to the target month's last day (Jan 31 + 1 month -> Feb 28/29).
    Time of day and tzinfo are preserved.
    """
    total = value.month - 1 + months
    year = value.year + total // 12
    month = total % 12 + 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return value.replace(year=year, month=month, day=day)
