# care_core/events/selectors.py
from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Dict, Optional
from uuid import UUID

from django.conf import settings
from django.db.models import Count, QuerySet

from care_core.common.clock import resolve_clock
from care_core.common.dates import local_start_of_day
from care_core.common.enums import EnumMapping
from care_core.events.models import Event, EventStatus, EventType


def _local_day_bounds(start: date, end: date) -> tuple[datetime, datetime]:
    # Inclusive of both days: [start 00:00, end+1 00:00) in local time.
    return local_start_of_day(start), local_start_of_day(end + timedelta(days=1))


def get_event(*, event_id: UUID) -> Optional[Event]:
    return Event.objects.filter(id=event_id).first()


def events_by_patient(*, patient_id: UUID) -> QuerySet[Event]:
    return Event.objects.filter(patient_id=patient_id).order_by("-event_datetime")


def events_by_type(*, event_type, patient_id: UUID | None = None) -> QuerySet[Event]:
    qs = Event.objects.filter(event_type=event_type)
    if patient_id is not None:
        qs = qs.filter(patient_id=patient_id)
    return qs.order_by("-event_datetime")


def events_by_status(*, status, patient_id: UUID | None = None) -> QuerySet[Event]:
    qs = Event.objects.filter(status=status)
    if patient_id is not None:
        qs = qs.filter(patient_id=patient_id)
    return qs.order_by("-event_datetime")


def events_between_dates(*, start: date, end: date, patient_id: UUID | None = None) -> QuerySet[Event]:
    lo, hi = _local_day_bounds(start, end)
    qs = Event.objects.filter(event_datetime__gte=lo, event_datetime__lt=hi)
    if patient_id is not None:
        qs = qs.filter(patient_id=patient_id)
    return qs.order_by("event_datetime")


def recent_events(*, days: int = 30, patient_id: UUID | None = None, clock=None) -> QuerySet[Event]:
    since = resolve_clock(clock).now() - timedelta(days=days)
    qs = Event.objects.filter(event_datetime__gte=since)
    if patient_id is not None:
        qs = qs.filter(patient_id=patient_id)
    return qs.order_by("-event_datetime")


def unbilled_events(*, patient_id: UUID | None = None) -> QuerySet[Event]:
    """Completed events not yet rolled into a monthly billing batch."""
    qs = Event.objects.filter(status=EventStatus.COMPLETED, monthly_billing_id__isnull=True)
    if patient_id is not None:
        qs = qs.filter(patient_id=patient_id)
    return qs.order_by("event_datetime")


def events_for_billing_batch(*, monthly_billing_id: int) -> QuerySet[Event]:
    return Event.objects.filter(monthly_billing_id=monthly_billing_id).order_by("event_datetime")


def event_count(*, patient_id: UUID | None = None) -> int:
    qs = Event.objects.all()
    if patient_id is not None:
        qs = qs.filter(patient_id=patient_id)
    return qs.count()


def _counts_by(field: str, enum_cls, *, start: date, end: date, patient_id: UUID | None) -> Dict:
    rows = (
        events_between_dates(start=start, end=end, patient_id=patient_id)
        .order_by()
        .values(field)
        .annotate(n=Count("id"))
    )
    mapping = EnumMapping.for_enum(enum_cls)
    return {mapping.coerce(row[field]): row["n"] for row in rows}


def count_events_by_type(*, start: date, end: date, patient_id: UUID | None = None) -> Dict[EventType, int]:
    return _counts_by("event_type", EventType, start=start, end=end, patient_id=patient_id)


def count_events_by_status(*, start: date, end: date, patient_id: UUID | None = None) -> Dict[EventStatus, int]:
    return _counts_by("status", EventStatus, start=start, end=end, patient_id=patient_id)


def recent_tcm_discharge_date(*, patient_id: UUID, within_days: int | None = None, clock=None) -> Optional[date]:
    """
    Latest hospital discharge date recorded on a TCM event for the patient
    that falls within the lookback window ending today.
    """
    if within_days is None:
        within_days = (getattr(settings, "CARE_CORE", {}) or {}).get("TCM_DISCHARGE_LOOKBACK_DAYS", 30)
    today = resolve_clock(clock).today()
    cutoff = today - timedelta(days=within_days)

    event = (
        Event.objects.filter(
            patient_id=patient_id,
            event_type=EventType.TCM,
            hosp_discharge_date__isnull=False,
            hosp_discharge_date__gte=cutoff,
            hosp_discharge_date__lte=today,
        )
        .order_by("-hosp_discharge_date")
        .first()
    )
    return event.hosp_discharge_date if event is not None else None
