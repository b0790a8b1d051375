import pytest

from care_core.audit.selectors import audit_events_by_code
from care_core.common.exceptions import DomainValidationError
from care_core.facilities import selectors
from care_core.facilities.models import Facility
from care_core.facilities.services import FacilityService, FacilityUpdate

pytestmark = pytest.mark.django_db


def test_create_requires_a_name(clock):
    with pytest.raises(DomainValidationError) as exc:
        FacilityService.create(city="Austin", clock=clock)

    assert exc.value.code == "facility_name_required"


def test_duplicate_facility_code_is_rejected(facility, clock):
    with pytest.raises(DomainValidationError) as exc:
        FacilityService.create(name="Other Home", facility_code="SUN-01", clock=clock)

    assert exc.value.code == "duplicate_facility_code"
    assert Facility.objects.count() == 1


def test_facilities_without_code_can_coexist(clock):
    FacilityService.create(name="A", facility_code="", clock=clock)
    FacilityService.create(name="B", clock=clock)

    assert selectors.facility_count() == 2


def test_individual_provider_display_name(clock):
    f = FacilityService.create(last_name="Garcia", first_name="Ana", middle_name="M", suffix="MD", clock=clock)

    assert f.display_name == "Garcia, Ana M, MD"
    assert Facility(name="").display_name == "Unknown Provider"


def test_formatted_address(facility):
    facility.address1 = "12 Elm St"
    facility.zip_code = "78701"

    assert facility.formatted_address == "12 Elm St\nAustin, TX 78701"


def test_update_applies_only_given_fields(facility, clock):
    updated = FacilityService.update(
        facility_id=facility.id,
        patch=FacilityUpdate(phone_number="512-555-0100", facility_code="  SUN-02 "),
        clock=clock,
    )

    assert updated.phone_number == "512-555-0100"
    assert updated.facility_code == "SUN-02"
    assert updated.name == "Sunrise Care Home"


def test_activation_toggle_and_active_list(facility, clock):
    FacilityService.create(name="Zephyr Clinic", clock=clock)

    assert FacilityService.set_active(facility_id=facility.id, is_active=False, clock=clock) is True

    assert [f.name for f in selectors.all_facilities(active_only=True)] == ["Zephyr Clinic"]
    assert selectors.facility_count() == 2
    assert selectors.facility_count(active_only=True) == 1


def test_search_and_lookup(facility):
    assert list(selectors.search_facilities(q="sunrise")) == [facility]
    assert selectors.get_facility_by_code(facility_code="SUN-01") == facility
    assert selectors.get_facility_by_code(facility_code="NOPE") is None


def test_create_is_audited(facility, clock):
    events = list(audit_events_by_code(event_code="facility.created"))

    assert len(events) == 1
    assert events[0].entity_id == facility.id
    assert events[0].occurred_at == clock.now()
    assert events[0].metadata == {"facility_code": "SUN-01"}
