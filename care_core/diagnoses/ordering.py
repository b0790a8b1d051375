# care_core/diagnoses/ordering.py
"""
Diagnosis ordering and hospice-designation rules.

Pure functions over diagnosis records (anything with `id`, `patient_id`,
`priority`, `active`, `resolved_date`, `is_hospice_code`). Nothing here
queries or writes storage; PatientDiagnosisService loads the patient's
diagnoses, calls into this module, then persists the result.
"""
from __future__ import annotations

from datetime import date
from typing import Iterable, Optional

from care_core.common.clock import resolve_clock
from care_core.common.exceptions import DiagnosisOwnershipError, PriorityConflict, PriorityOutOfRange
from care_core.diagnoses.models import MAX_PRIORITY, MIN_PRIORITY


def validate_priority(priority) -> int:
    if isinstance(priority, bool) or not isinstance(priority, int):
        raise PriorityOutOfRange(f"Priority must be an integer, got {priority!r}.")
    if not MIN_PRIORITY <= priority <= MAX_PRIORITY:
        raise PriorityOutOfRange(f"Priority must be between {MIN_PRIORITY} and {MAX_PRIORITY}, got {priority}.")
    return priority


def ensure_belongs_to(diagnosis, patient_id) -> None:
    if str(diagnosis.patient_id) != str(patient_id):
        raise DiagnosisOwnershipError(diagnosis_id=diagnosis.id, patient_id=patient_id)


def find_priority_conflict(diagnoses: Iterable, priority: int, exclude_id=None):
    """
    The active diagnosis already holding `priority`, or None.
    Resolved diagnoses never conflict.
    """
    for d in diagnoses:
        if exclude_id is not None and d.id == exclude_id:
            continue
        if d.active and d.priority == priority:
            return d
    return None


def check_priority_available(diagnoses: Iterable, *, patient_id, priority: int, exclude_id=None) -> None:
    validate_priority(priority)
    existing = find_priority_conflict(diagnoses, priority, exclude_id=exclude_id)
    if existing is not None:
        raise PriorityConflict(patient_id=patient_id, priority=priority, existing_id=existing.id)


def next_free_priority(diagnoses: Iterable) -> Optional[int]:
    """Lowest priority not held by an active diagnosis; None when all are taken."""
    taken = {d.priority for d in diagnoses if d.active}
    for p in range(MIN_PRIORITY, MAX_PRIORITY + 1):
        if p not in taken:
            return p
    return None


def duplicate_priorities(diagnoses: Iterable) -> dict[int, list]:
    """Priorities shared by more than one active diagnosis."""
    by_priority: dict[int, list] = {}
    for d in diagnoses:
        if d.active:
            by_priority.setdefault(d.priority, []).append(d)
    return {p: ds for p, ds in by_priority.items() if len(ds) > 1}


def primary_diagnosis(diagnoses: Iterable):
    """Active diagnosis with the lowest priority (1 = primary)."""
    active = [d for d in diagnoses if d.active]
    if not active:
        return None
    return min(active, key=lambda d: d.priority)


# -------------------------
# State transitions (mutate + return the record)
# -------------------------
def resolve_diagnosis(diagnosis, resolved_date: Optional[date] = None, clock=None):
    """
    active -> resolved. Sets resolved_date and clears active.

    Resolving an already-resolved diagnosis keeps its original resolved date
    unless a date is given explicitly.
    """
    if not diagnosis.active and diagnosis.resolved_date is not None and resolved_date is None:
        return diagnosis

    diagnosis.active = False
    diagnosis.resolved_date = resolved_date or resolve_clock(clock).today()
    return diagnosis


def reactivate_diagnosis(diagnosis):
    diagnosis.active = True
    diagnosis.resolved_date = None
    return diagnosis


def set_hospice_flag(diagnosis, is_hospice_code: bool):
    """Orthogonal to active/resolved."""
    diagnosis.is_hospice_code = bool(is_hospice_code)
    return diagnosis
