from datetime import date
from types import SimpleNamespace

import pytest

from care_core.common.clock import FixedClock
from care_core.common.exceptions import DiagnosisOwnershipError, PriorityConflict, PriorityOutOfRange
from care_core.conftest import local_dt
from care_core.diagnoses import ordering


def dx(id, priority, active=True, patient_id="p1", resolved_date=None, is_hospice_code=False):
    return SimpleNamespace(
        id=id,
        patient_id=patient_id,
        priority=priority,
        active=active,
        resolved_date=resolved_date,
        is_hospice_code=is_hospice_code,
    )


@pytest.mark.parametrize("priority", [0, 11, -1, "1", 2.0, True])
def test_priority_outside_range_or_not_int_is_rejected(priority):
    with pytest.raises(PriorityOutOfRange):
        ordering.validate_priority(priority)


def test_priority_bounds_are_inclusive():
    assert ordering.validate_priority(1) == 1
    assert ordering.validate_priority(10) == 10


def test_conflict_only_among_active_diagnoses():
    diagnoses = [dx("a", 1), dx("b", 2, active=False)]

    assert ordering.find_priority_conflict(diagnoses, 1).id == "a"
    assert ordering.find_priority_conflict(diagnoses, 2) is None
    assert ordering.find_priority_conflict(diagnoses, 1, exclude_id="a") is None


def test_check_priority_available_raises_with_holder():
    with pytest.raises(PriorityConflict) as exc:
        ordering.check_priority_available([dx("a", 3)], patient_id="p1", priority=3)

    assert exc.value.existing_id == "a"
    assert exc.value.priority == 3


def test_next_free_priority_skips_active_slots():
    diagnoses = [dx("a", 1), dx("b", 2, active=False), dx("c", 3)]

    assert ordering.next_free_priority(diagnoses) == 2
    assert ordering.next_free_priority([dx(str(p), p) for p in range(1, 11)]) is None


def test_duplicates_and_primary():
    diagnoses = [dx("a", 2), dx("b", 2), dx("c", 1, active=False), dx("d", 4)]

    assert sorted(d.id for d in ordering.duplicate_priorities(diagnoses)[2]) == ["a", "b"]
    assert ordering.primary_diagnosis(diagnoses).id in {"a", "b"}
    assert ordering.primary_diagnosis([dx("x", 1, active=False)]) is None


def test_ownership_is_checked_by_id_value():
    ordering.ensure_belongs_to(dx("a", 1, patient_id="p1"), "p1")

    with pytest.raises(DiagnosisOwnershipError):
        ordering.ensure_belongs_to(dx("a", 1, patient_id="p1"), "p2")


def test_resolve_uses_clock_and_is_idempotent():
    d = dx("a", 1)
    ordering.resolve_diagnosis(d, clock=FixedClock(local_dt(2024, 3, 15, 9)))

    assert d.active is False
    assert d.resolved_date == date(2024, 3, 15)

    ordering.resolve_diagnosis(d, clock=FixedClock(local_dt(2024, 4, 1, 9)))
    assert d.resolved_date == date(2024, 3, 15)


def test_resolve_again_with_explicit_date_moves_it():
    d = dx("a", 1, active=False, resolved_date=date(2024, 3, 15))

    ordering.resolve_diagnosis(d, date(2024, 3, 1))

    assert d.resolved_date == date(2024, 3, 1)


def test_reactivate_clears_resolution_and_hospice_flag_is_orthogonal():
    d = dx("a", 1, active=False, resolved_date=date(2024, 3, 15))

    ordering.set_hospice_flag(d, True)
    ordering.reactivate_diagnosis(d)

    assert d.active is True
    assert d.resolved_date is None
    assert d.is_hospice_code is True
