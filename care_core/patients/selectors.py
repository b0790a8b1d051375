# care_core/patients/selectors.py
from __future__ import annotations

from typing import Optional
from uuid import UUID

from django.db.models import Q, QuerySet

from care_core.patients.models import Patient


def get_patient(*, patient_id: UUID) -> Optional[Patient]:
    return Patient.objects.filter(id=patient_id).first()


def get_patient_by_upi(*, upi: str) -> Optional[Patient]:
    return Patient.objects.filter(upi=upi).first()


def all_patients() -> QuerySet[Patient]:
    return Patient.objects.all().order_by("last_name", "first_name")


def search_patients(*, q: str | None = None) -> QuerySet[Patient]:
    qs = Patient.objects.all()

    qv = (q or "").strip()
    if qv:
        qs = qs.filter(
            Q(last_name__icontains=qv)
            | Q(first_name__icontains=qv)
            | Q(upi__icontains=qv)
        )

    return qs.order_by("last_name", "first_name")


def patients_by_facility(*, facility_id: UUID) -> QuerySet[Patient]:
    return Patient.objects.filter(facility_id=facility_id).order_by("last_name", "first_name")


def hospice_patients() -> QuerySet[Patient]:
    return Patient.objects.filter(is_hospice=True).order_by("last_name", "first_name")


def ccm_patients() -> QuerySet[Patient]:
    return Patient.objects.filter(on_ccm=True).order_by("last_name", "first_name")


def psych_patients() -> QuerySet[Patient]:
    return Patient.objects.filter(on_psych=True).order_by("last_name", "first_name")


def patients_needing_hospice_diagnosis() -> QuerySet[Patient]:
    return Patient.objects.filter(is_hospice=True, hospice_diagnosis__isnull=True).order_by("last_name", "first_name")


def patient_count(*, facility_id: UUID | None = None) -> int:
    qs = Patient.objects.all()
    if facility_id is not None:
        qs = qs.filter(facility_id=facility_id)
    return qs.count()
