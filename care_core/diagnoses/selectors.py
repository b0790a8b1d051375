# care_core/diagnoses/selectors.py
from __future__ import annotations

from typing import Optional
from uuid import UUID

from django.db.models import Q, QuerySet

from care_core.diagnoses.models import DiagnosticCode, PatientDiagnosis


# -------------------------
# Patient diagnoses
# -------------------------
def get_patient_diagnosis(*, diagnosis_id: UUID) -> Optional[PatientDiagnosis]:
    return PatientDiagnosis.objects.filter(id=diagnosis_id).first()


def patient_diagnoses(*, patient_id: UUID) -> QuerySet[PatientDiagnosis]:
    return PatientDiagnosis.objects.filter(patient_id=patient_id).order_by("priority", "created_at")


def active_patient_diagnoses(*, patient_id: UUID) -> QuerySet[PatientDiagnosis]:
    return patient_diagnoses(patient_id=patient_id).filter(active=True)


def hospice_diagnoses(*, patient_id: UUID) -> QuerySet[PatientDiagnosis]:
    return active_patient_diagnoses(patient_id=patient_id).filter(is_hospice_code=True)


def diagnoses_by_icd_code(*, icd_code: str) -> QuerySet[PatientDiagnosis]:
    return PatientDiagnosis.objects.filter(icd_code=icd_code).order_by("patient_id", "priority")


def diagnosis_by_priority(*, patient_id: UUID, priority: int) -> Optional[PatientDiagnosis]:
    # Prefer the active holder; priorities may be shared transiently.
    return (
        PatientDiagnosis.objects.filter(patient_id=patient_id, priority=priority)
        .order_by("-active", "created_at")
        .first()
    )


def patient_diagnosis_count(*, patient_id: UUID) -> int:
    return PatientDiagnosis.objects.filter(patient_id=patient_id).count()


# -------------------------
# Catalog
# -------------------------
def get_diagnostic_code(*, code_id: UUID) -> Optional[DiagnosticCode]:
    return DiagnosticCode.objects.filter(id=code_id).first()


def diagnostic_code_by_icd(*, icd_code: str) -> Optional[DiagnosticCode]:
    return DiagnosticCode.objects.filter(icd_code=icd_code).first()


def all_diagnostic_codes() -> QuerySet[DiagnosticCode]:
    return DiagnosticCode.objects.order_by("icd_code")


def billable_diagnostic_codes() -> QuerySet[DiagnosticCode]:
    return DiagnosticCode.objects.filter(billable=True).order_by("icd_code")


def common_diagnostic_codes() -> QuerySet[DiagnosticCode]:
    return DiagnosticCode.objects.filter(common_code=True).order_by("icd_code")


def search_diagnostic_codes(*, q: str | None = None) -> QuerySet[DiagnosticCode]:
    qs = DiagnosticCode.objects.all()

    qv = (q or "").strip()
    if qv:
        qs = qs.filter(
            Q(icd_code__icontains=qv)
            | Q(description__icontains=qv)
            | Q(shorthand__icontains=qv)
        )

    return qs.order_by("icd_code")


def diagnostic_code_count() -> int:
    return DiagnosticCode.objects.count()
