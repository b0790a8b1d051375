# care_core/common/clock.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime

from django.utils import timezone


class SystemClock:
    """Wall clock in the configured TIME_ZONE."""

    def now(self) -> datetime:
        return timezone.now()

    def today(self) -> date:
        return timezone.localdate()


@dataclass(frozen=True)
class FixedClock:
    """
    Clock pinned to one instant. Used by tests and by batch jobs that
    must stamp a whole run with the same time.
    """
    at: datetime

    def now(self) -> datetime:
        return self.at

    def today(self) -> date:
        if timezone.is_aware(self.at):
            return timezone.localtime(self.at).date()
        return self.at.date()


SYSTEM_CLOCK = SystemClock()


def resolve_clock(clock=None):
    return clock if clock is not None else SYSTEM_CLOCK
