# care_core/events/followups.py
from __future__ import annotations

from datetime import datetime, timedelta
from typing import Optional

from django.utils import timezone

from care_core.common.dates import add_months, local_start_of_day
from care_core.events.models import FollowUpRecurrence

# Calendar months added per recurrence (WEEKLY is a fixed 7 days).
RECURRENCE_MONTHS = {
    FollowUpRecurrence.MONTHLY: 1,
    FollowUpRecurrence.QUARTERLY: 3,
    FollowUpRecurrence.SEMI_ANNUAL: 6,
    FollowUpRecurrence.ANNUAL: 12,
}


def follow_up_anchor(event) -> Optional[datetime]:
    """`ttdd_date` at local start of day when set, else `event_datetime` in local time."""
    if event.ttdd_date is not None:
        return local_start_of_day(event.ttdd_date)
    anchor = event.event_datetime
    if anchor is not None and timezone.is_aware(anchor):
        # Calendar steps run in the configured zone, whatever tzinfo was loaded.
        anchor = timezone.localtime(anchor)
    return anchor


def next_follow_up_from(anchor: Optional[datetime], recurrence) -> Optional[datetime]:
    if anchor is None or recurrence in (None, FollowUpRecurrence.NONE):
        return None
    if recurrence == FollowUpRecurrence.WEEKLY:
        return anchor + timedelta(weeks=1)
    months = RECURRENCE_MONTHS.get(recurrence)
    if months is None:
        return None
    # Day-of-month clamps to the target month's end: Jan 31 -> Feb 28/29.
    return add_months(anchor, months)


def next_follow_up(event) -> Optional[datetime]:
    """
    Next follow-up timestamp for an event, or None when the event does not
    recur. Reads only the event's own fields; repeated calls agree.
    """
    return next_follow_up_from(follow_up_anchor(event), event.follow_up_recurrence)
