# care_core/events/billing.py
"""
Billing rules for clinical events.

Pure functions over (event_type, visit_type, minutes). No rule ever fails:
an input no rule covers yields "no code" (None) / "not billable" (False).
"""
from __future__ import annotations

from typing import Optional

from care_core.events.models import EventType, VisitLocation, VisitType

CCM_MINIMUM_MINUTES = 20
CCM_COMPLEX_MINUTES = 60
HOME_HEALTH_MINIMUM_MINUTES = 30

# CPT / HCPCS codes
FACE_TO_FACE_CODES = {
    VisitType.HOME_VISIT: "99348",
    VisitType.NURSING_FACILITY: "99318",
    VisitType.TELEHEALTH: "99457",
}
CCM_STANDARD_CODE = "99490"
CCM_COMPLEX_CODE = "99487"
TCM_CODE = "99495"
HOSPICE_CODE = "G0182"
HOME_HEALTH_CODE = "G0181"

MINIMUM_MINUTES = {
    EventType.CCM: CCM_MINIMUM_MINUTES,
    EventType.HOME_HEALTH: HOME_HEALTH_MINIMUM_MINUTES,
}

TIME_REQUIREMENTS = {
    EventType.CCM: "Requires minimum 20 minutes, 60+ minutes for complex care",
    EventType.HOME_HEALTH: "Requires minimum 30 minutes per calendar month",
    EventType.TCM: "Must be within 30 days of discharge",
    EventType.HOSPICE: "Regular supervision required",
}
NO_TIME_REQUIREMENT = "No specific time requirement"


def is_billable(event_type, visit_type=VisitType.NON_VISIT, minutes: int = 0) -> bool:
    minutes = minutes or 0

    if event_type == EventType.FACE_TO_FACE:
        return visit_type in FACE_TO_FACE_CODES
    if event_type == EventType.CCM:
        return minutes >= CCM_MINIMUM_MINUTES
    if event_type in (EventType.TCM, EventType.HOSPICE):
        return True
    if event_type == EventType.HOME_HEALTH:
        return minutes >= HOME_HEALTH_MINIMUM_MINUTES
    return False


def default_procedure_code(event_type, visit_type=VisitType.NON_VISIT, minutes: int = 0) -> Optional[str]:
    """
    Default CPT/HCPCS code for a new event.

    Computed once when the event is created; callers that later change
    type/visit/minutes must recompute explicitly.
    """
    minutes = minutes or 0

    if event_type == EventType.FACE_TO_FACE:
        return FACE_TO_FACE_CODES.get(visit_type)
    if event_type == EventType.CCM:
        if minutes >= CCM_COMPLEX_MINUTES:
            return CCM_COMPLEX_CODE
        if minutes >= CCM_MINIMUM_MINUTES:
            return CCM_STANDARD_CODE
        return None
    if event_type == EventType.TCM:
        return TCM_CODE
    if event_type == EventType.HOSPICE:
        return HOSPICE_CODE
    if event_type == EventType.HOME_HEALTH:
        return HOME_HEALTH_CODE if minutes >= HOME_HEALTH_MINIMUM_MINUTES else None
    return None


def minimum_required_minutes(event_type) -> int:
    return MINIMUM_MINUTES.get(event_type, 0)


def meets_minimum_time(event_type, minutes: int) -> bool:
    return (minutes or 0) >= minimum_required_minutes(event_type)


def time_requirement_description(event_type) -> str:
    # Informational only.
    return TIME_REQUIREMENTS.get(event_type, NO_TIME_REQUIREMENT)


def is_face_to_face_encounter(event_type, visit_location) -> bool:
    return event_type == EventType.FACE_TO_FACE and visit_location != VisitLocation.NONE
