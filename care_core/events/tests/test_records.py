from datetime import date

import pytest

from care_core.common.dates import date_to_millis, datetime_to_millis
from care_core.common.exceptions import UnknownEnumValue
from care_core.conftest import local_dt
from care_core.events.models import Event, EventStatus, EventType, VisitType
from care_core.events.records import event_to_record, record_to_event_fields
from care_core.events.services import EventService

pytestmark = pytest.mark.django_db


def test_record_layout(patient, clock):
    event = EventService.create_event(
        patient_id=patient.id,
        event_type=EventType.FACE_TO_FACE,
        visit_type=VisitType.TELEHEALTH,
        event_datetime=local_dt(2024, 3, 14, 23, 30),
        clock=clock,
    )

    record = event_to_record(event)

    assert record["patient_id"] == str(patient.id)
    assert record["event_datetime"] == datetime_to_millis(local_dt(2024, 3, 14, 23, 30))
    assert record["event_bill_date"] == date_to_millis(date(2024, 3, 14))
    assert record["event_type"] == "FACE_TO_FACE"
    assert record["visit_type"] == "TELEHEALTH"
    assert record["status"] == "PENDING"
    assert record["cpt_code"] == "99457"
    assert record["ttdd_date"] is None


def test_record_restores_an_equal_event(patient, clock):
    event = EventService.create_event(
        patient_id=patient.id,
        event_type=EventType.TCM,
        hosp_discharge_date=date(2024, 3, 10),
        event_datetime=local_dt(2024, 3, 12, 8, 15),
        clock=clock,
    )

    restored = Event(**record_to_event_fields(event_to_record(event)))

    assert str(restored.id) == str(event.id)
    assert restored.event_datetime == event.event_datetime
    assert restored.event_bill_date == event.event_bill_date
    assert restored.hosp_discharge_date == date(2024, 3, 10)
    assert restored.event_type is EventType.TCM
    assert restored.status is EventStatus.PENDING


def test_unknown_enum_string_in_record():
    with pytest.raises(UnknownEnumValue):
        record_to_event_fields({"status": "ARCHIVED"})
