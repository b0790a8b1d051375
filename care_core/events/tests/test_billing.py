import pytest

from care_core.events import billing
from care_core.events.models import Event, EventType, VisitLocation, VisitType


@pytest.mark.parametrize(
    "event_type, visit_type, minutes, expected",
    [
        (EventType.FACE_TO_FACE, VisitType.HOME_VISIT, 0, "99348"),
        (EventType.FACE_TO_FACE, VisitType.NURSING_FACILITY, 0, "99318"),
        (EventType.FACE_TO_FACE, VisitType.TELEHEALTH, 0, "99457"),
        (EventType.FACE_TO_FACE, VisitType.OFFICE_VISIT, 0, None),
        (EventType.FACE_TO_FACE, VisitType.NON_VISIT, 0, None),
        (EventType.CCM, VisitType.NON_VISIT, 19, None),
        (EventType.CCM, VisitType.NON_VISIT, 20, "99490"),
        (EventType.CCM, VisitType.NON_VISIT, 59, "99490"),
        (EventType.CCM, VisitType.NON_VISIT, 60, "99487"),
        (EventType.TCM, VisitType.NON_VISIT, 0, "99495"),
        (EventType.HOSPICE, VisitType.NON_VISIT, 0, "G0182"),
        (EventType.HOME_HEALTH, VisitType.NON_VISIT, 29, None),
        (EventType.HOME_HEALTH, VisitType.NON_VISIT, 30, "G0181"),
        (EventType.FOLLOW_UP, VisitType.HOME_VISIT, 45, None),
        (EventType.PSY, VisitType.NON_VISIT, 90, None),
    ],
)
def test_default_procedure_code(event_type, visit_type, minutes, expected):
    assert billing.default_procedure_code(event_type, visit_type, minutes) == expected


@pytest.mark.parametrize(
    "event_type, visit_type, minutes, expected",
    [
        (EventType.FACE_TO_FACE, VisitType.HOME_VISIT, 0, True),
        (EventType.FACE_TO_FACE, VisitType.OFFICE_VISIT, 30, False),
        (EventType.CCM, VisitType.NON_VISIT, 19, False),
        (EventType.CCM, VisitType.NON_VISIT, 20, True),
        (EventType.TCM, VisitType.NON_VISIT, 0, True),
        (EventType.HOSPICE, VisitType.NON_VISIT, 0, True),
        (EventType.HOME_HEALTH, VisitType.NON_VISIT, 30, True),
        (EventType.MEDICATION_REVIEW, VisitType.NON_VISIT, 60, False),
        (EventType.OTHER, VisitType.HOME_VISIT, 60, False),
    ],
)
def test_is_billable(event_type, visit_type, minutes, expected):
    assert billing.is_billable(event_type, visit_type, minutes) is expected


def test_billable_exactly_when_a_code_is_derived():
    for event_type in EventType:
        for visit_type in VisitType:
            for minutes in (0, 20, 30, 60):
                code = billing.default_procedure_code(event_type, visit_type, minutes)
                assert (code is not None) == billing.is_billable(event_type, visit_type, minutes)


def test_minimum_minutes_and_descriptions():
    assert billing.minimum_required_minutes(EventType.CCM) == 20
    assert billing.minimum_required_minutes(EventType.HOME_HEALTH) == 30
    assert billing.minimum_required_minutes(EventType.TCM) == 0

    assert billing.time_requirement_description(EventType.TCM) == "Must be within 30 days of discharge"
    assert billing.time_requirement_description(EventType.DNR) == "No specific time requirement"


def test_meets_minimum_time():
    assert billing.meets_minimum_time(EventType.CCM, 20) is True
    assert billing.meets_minimum_time(EventType.CCM, None) is False
    assert billing.meets_minimum_time(EventType.FOLLOW_UP, 0) is True


def test_face_to_face_encounter_needs_a_location():
    assert billing.is_face_to_face_encounter(EventType.FACE_TO_FACE, VisitLocation.PATIENT_HOME) is True
    assert billing.is_face_to_face_encounter(EventType.FACE_TO_FACE, VisitLocation.NONE) is False
    assert billing.is_face_to_face_encounter(EventType.CCM, VisitLocation.OFFICE) is False


def test_event_properties_delegate_to_rules():
    event = Event(event_type=EventType.CCM, visit_type=VisitType.NON_VISIT, event_minutes=25)

    assert event.is_billable is True
    assert event.minimum_required_minutes == 20
