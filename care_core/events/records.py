# care_core/events/records.py
"""
Flat record layout used for exports and imports of events.

Datetimes are epoch milliseconds; date-only fields are local start-of-day
epoch milliseconds; enumerations are their stored strings. The event's
clinical datetime and its bill date are carried separately.
"""
from __future__ import annotations

from typing import Any, Dict

from care_core.common.dates import date_to_millis, datetime_to_millis, millis_to_date, millis_to_datetime
from care_core.common.enums import EnumMapping
from care_core.events.models import Event, EventStatus, EventType, FollowUpRecurrence, VisitLocation, VisitType

ENUM_FIELDS = {
    "event_type": EventType,
    "visit_type": VisitType,
    "visit_location": VisitLocation,
    "status": EventStatus,
    "follow_up_recurrence": FollowUpRecurrence,
}
DATETIME_FIELDS = ("event_datetime", "created_at", "updated_at")
DATE_FIELDS = ("event_bill_date", "hosp_discharge_date", "ttdd_date")
PLAIN_FIELDS = ("event_minutes", "note_text", "cpt_code", "modifier", "event_file", "monthly_billing_id")


def event_to_record(event: Event) -> Dict[str, Any]:
    record: Dict[str, Any] = {
        "id": str(event.id) if event.id else None,
        "patient_id": str(event.patient_id) if event.patient_id else None,
    }
    for name in DATETIME_FIELDS:
        record[name] = datetime_to_millis(getattr(event, name))
    for name in DATE_FIELDS:
        record[name] = date_to_millis(getattr(event, name))
    for name, enum_cls in ENUM_FIELDS.items():
        value = getattr(event, name)
        record[name] = EnumMapping.for_enum(enum_cls).to_storage(value) if value is not None else None
    for name in PLAIN_FIELDS:
        record[name] = getattr(event, name)
    return record


def record_to_event_fields(record: Dict[str, Any]) -> Dict[str, Any]:
    """
    Model field values for a record, suitable for Event(**fields).
    Keys absent from the record are left out; unknown stored enum strings
    raise UnknownEnumValue.
    """
    fields: Dict[str, Any] = {}
    if record.get("id"):
        fields["id"] = record["id"]
    if record.get("patient_id"):
        fields["patient_id"] = record["patient_id"]

    for name in DATETIME_FIELDS:
        if name in record:
            fields[name] = millis_to_datetime(record[name])
    for name in DATE_FIELDS:
        if name in record:
            fields[name] = millis_to_date(record[name])
    for name, enum_cls in ENUM_FIELDS.items():
        if name in record and record[name] is not None:
            fields[name] = EnumMapping.for_enum(enum_cls).from_storage(record[name])
    for name in PLAIN_FIELDS:
        if name in record:
            fields[name] = record[name]

    if fields.get("event_minutes") is None and "event_minutes" in fields:
        fields["event_minutes"] = 0
    if fields.get("note_text") is None and "note_text" in fields:
        fields["note_text"] = ""
    return fields
