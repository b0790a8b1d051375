# care_core/conftest.py
from datetime import date, datetime

import pytest
from django.utils import timezone

from care_core.common.clock import FixedClock
from care_core.facilities.services import FacilityService
from care_core.patients.services import PatientService


def local_dt(*args) -> datetime:
    """Aware datetime in the configured TIME_ZONE."""
    return timezone.make_aware(datetime(*args), timezone.get_current_timezone())


@pytest.fixture
def clock():
    return FixedClock(local_dt(2024, 3, 15, 10, 30))


@pytest.fixture
def facility(db, clock):
    return FacilityService.create(name="Sunrise Care Home", facility_code="SUN-01", city="Austin", state="TX", clock=clock)


@pytest.fixture
def patient(db, facility, clock):
    return PatientService.create_patient(
        first_name="John",
        last_name="Smith",
        date_of_birth=date(1980, 5, 3),
        is_male=True,
        facility_id=facility.id,
        clock=clock,
    )


@pytest.fixture
def other_patient(db, facility, clock):
    return PatientService.create_patient(
        first_name="Mary",
        last_name="Jones",
        date_of_birth=date(1950, 11, 20),
        facility_id=facility.id,
        clock=clock,
    )
