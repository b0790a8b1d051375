# care_core/diagnoses/services.py
from __future__ import annotations

import logging
from datetime import date
from typing import Optional
from uuid import UUID

from django.db import DatabaseError, IntegrityError, transaction

from care_core.audit.services import AuditService
from care_core.common.clock import resolve_clock
from care_core.common.exceptions import DomainValidationError, PatientNotFound, PriorityConflict
from care_core.diagnoses import ordering
from care_core.diagnoses.models import DiagnosticCode, PatientDiagnosis
from care_core.patients.models import Patient

logger = logging.getLogger(__name__)


class PatientDiagnosisService:
    """
    Patient diagnosis write-model operations.

    Notes:
    - Every operation addressed by (patient_id, diagnosis_id) checks that the
      diagnosis belongs to the patient before anything is written.
    - Priority conflicts among active diagnoses are rejected unless the
      caller passes allow_duplicate_priority=True.
    - Writers lock the patient row so conflict checks for one patient run
      one at a time (on backends with row locks).
    - Single-field writes report storage failures as False.
    """

    UPDATABLE_FIELDS = {"icd_code", "priority", "is_hospice_code", "diagnosis_date", "notes"}

    # -------------------------
    # Internal helpers
    # -------------------------
    @staticmethod
    def _lock_patient(patient_id: UUID) -> Patient:
        patient = Patient.objects.select_for_update().filter(id=patient_id).first()
        if patient is None:
            raise PatientNotFound(patient_id)
        return patient

    @staticmethod
    def _siblings(patient_id: UUID) -> list[PatientDiagnosis]:
        return list(PatientDiagnosis.objects.filter(patient_id=patient_id))

    @staticmethod
    def _get_owned(*, patient_id: UUID, diagnosis_id: UUID) -> Optional[PatientDiagnosis]:
        diagnosis = PatientDiagnosis.objects.filter(id=diagnosis_id).first()
        if diagnosis is None:
            return None
        ordering.ensure_belongs_to(diagnosis, patient_id)
        return diagnosis

    @staticmethod
    def _save(diagnosis: PatientDiagnosis, update_fields: list[str], clock=None) -> bool:
        diagnosis.updated_at = resolve_clock(clock).now()
        try:
            with transaction.atomic():
                diagnosis.save(update_fields=update_fields + ["updated_at"])
        except DatabaseError:
            logger.exception("Failed to write %s on diagnosis %s", update_fields, diagnosis.id)
            return False
        return True

    @staticmethod
    def _audit(diagnosis: PatientDiagnosis, event_code: str, clock=None, **meta) -> None:
        AuditService.log(
            event_code=event_code,
            entity_type="PatientDiagnosis",
            entity_id=diagnosis.id,
            metadata={"patient_id": str(diagnosis.patient_id), "icd_code": diagnosis.icd_code, **meta},
            clock=clock,
        )

    # -------------------------
    # Create / update
    # -------------------------
    @staticmethod
    @transaction.atomic
    def add_diagnosis(
        *,
        patient_id: UUID,
        icd_code: str,
        priority: int | None = None,
        is_hospice_code: bool = False,
        diagnosis_date: Optional[date] = None,
        notes: str = "",
        allow_duplicate_priority: bool = False,
        clock=None,
    ) -> PatientDiagnosis:
        """
        priority=None takes the lowest free slot among active diagnoses.
        diagnosis_date defaults to the clock's today.
        """
        PatientDiagnosisService._lock_patient(patient_id)
        siblings = PatientDiagnosisService._siblings(patient_id)

        if priority is None:
            priority = ordering.next_free_priority(siblings)
            if priority is None:
                raise DomainValidationError(
                    "Patient already has an active diagnosis at every priority.",
                    code="no_free_priority",
                )
        elif allow_duplicate_priority:
            ordering.validate_priority(priority)
        else:
            ordering.check_priority_available(siblings, patient_id=patient_id, priority=priority)

        c = resolve_clock(clock)
        ts = c.now()
        diagnosis = PatientDiagnosis.objects.create(
            patient_id=patient_id,
            icd_code=(icd_code or "").strip().upper(),
            priority=priority,
            is_hospice_code=is_hospice_code,
            diagnosis_date=diagnosis_date or c.today(),
            resolved_date=None,
            notes=notes or "",
            active=True,
            created_at=ts,
            updated_at=ts,
        )

        PatientDiagnosisService._audit(diagnosis, "diagnosis.added", clock=clock, priority=priority)
        return diagnosis

    @staticmethod
    @transaction.atomic
    def update_diagnosis(
        *,
        patient_id: UUID,
        diagnosis_id: UUID,
        data: dict,
        allow_duplicate_priority: bool = False,
        clock=None,
    ) -> Optional[PatientDiagnosis]:
        PatientDiagnosisService._lock_patient(patient_id)
        diagnosis = PatientDiagnosisService._get_owned(patient_id=patient_id, diagnosis_id=diagnosis_id)
        if diagnosis is None:
            return None

        updates = {k: v for k, v in (data or {}).items() if k in PatientDiagnosisService.UPDATABLE_FIELDS}
        if not updates:
            return diagnosis

        if "priority" in updates and updates["priority"] != diagnosis.priority:
            if allow_duplicate_priority or not diagnosis.active:
                ordering.validate_priority(updates["priority"])
            else:
                ordering.check_priority_available(
                    PatientDiagnosisService._siblings(patient_id),
                    patient_id=patient_id,
                    priority=updates["priority"],
                    exclude_id=diagnosis.id,
                )

        if "icd_code" in updates:
            updates["icd_code"] = (updates["icd_code"] or "").strip().upper()

        for k, v in updates.items():
            setattr(diagnosis, k, v)

        diagnosis.updated_at = resolve_clock(clock).now()
        diagnosis.save(update_fields=sorted(updates) + ["updated_at"])

        PatientDiagnosisService._audit(diagnosis, "diagnosis.updated", clock=clock, updated_fields=sorted(updates))
        return diagnosis

    @staticmethod
    @transaction.atomic
    def change_priority(
        *,
        patient_id: UUID,
        diagnosis_id: UUID,
        priority: int,
        swap: bool = False,
        clock=None,
    ) -> Optional[PatientDiagnosis]:
        """
        Moves a diagnosis to `priority`. With swap=True an active diagnosis
        already holding that priority takes over the old one instead of
        the move being rejected.
        """
        PatientDiagnosisService._lock_patient(patient_id)
        diagnosis = PatientDiagnosisService._get_owned(patient_id=patient_id, diagnosis_id=diagnosis_id)
        if diagnosis is None:
            return None

        ordering.validate_priority(priority)
        if priority == diagnosis.priority:
            return diagnosis

        siblings = PatientDiagnosisService._siblings(patient_id)
        holder = ordering.find_priority_conflict(siblings, priority, exclude_id=diagnosis.id)
        ts = resolve_clock(clock).now()

        if holder is not None and diagnosis.active:
            if not swap:
                raise PriorityConflict(patient_id=patient_id, priority=priority, existing_id=holder.id)
            holder.priority = diagnosis.priority
            holder.updated_at = ts
            holder.save(update_fields=["priority", "updated_at"])

        previous = diagnosis.priority
        diagnosis.priority = priority
        diagnosis.updated_at = ts
        diagnosis.save(update_fields=["priority", "updated_at"])

        PatientDiagnosisService._audit(
            diagnosis,
            "diagnosis.priority_changed",
            clock=clock,
            previous_priority=previous,
            priority=priority,
            swapped_with=str(holder.id) if holder is not None and swap and diagnosis.active else None,
        )
        return diagnosis

    # -------------------------
    # State transitions
    # -------------------------
    @staticmethod
    def resolve_diagnosis(
        *,
        patient_id: UUID,
        diagnosis_id: UUID,
        resolved_date: Optional[date] = None,
        clock=None,
    ) -> bool:
        diagnosis = PatientDiagnosisService._get_owned(patient_id=patient_id, diagnosis_id=diagnosis_id)
        if diagnosis is None:
            return False

        before = (diagnosis.active, diagnosis.resolved_date)
        ordering.resolve_diagnosis(diagnosis, resolved_date, clock=clock)
        if (diagnosis.active, diagnosis.resolved_date) == before:
            return True

        ok = PatientDiagnosisService._save(diagnosis, ["active", "resolved_date"], clock=clock)
        if ok:
            PatientDiagnosisService._audit(
                diagnosis,
                "diagnosis.resolved",
                clock=clock,
                resolved_date=diagnosis.resolved_date.isoformat(),
            )
        return ok

    @staticmethod
    @transaction.atomic
    def reactivate_diagnosis(
        *,
        patient_id: UUID,
        diagnosis_id: UUID,
        allow_duplicate_priority: bool = False,
        clock=None,
    ) -> bool:
        PatientDiagnosisService._lock_patient(patient_id)
        diagnosis = PatientDiagnosisService._get_owned(patient_id=patient_id, diagnosis_id=diagnosis_id)
        if diagnosis is None:
            return False
        if diagnosis.active:
            return True

        if not allow_duplicate_priority:
            ordering.check_priority_available(
                PatientDiagnosisService._siblings(patient_id),
                patient_id=patient_id,
                priority=diagnosis.priority,
                exclude_id=diagnosis.id,
            )

        ordering.reactivate_diagnosis(diagnosis)
        ok = PatientDiagnosisService._save(diagnosis, ["active", "resolved_date"], clock=clock)
        if ok:
            PatientDiagnosisService._audit(diagnosis, "diagnosis.reactivated", clock=clock)
        return ok

    @staticmethod
    def set_hospice_flag(*, patient_id: UUID, diagnosis_id: UUID, is_hospice_code: bool, clock=None) -> bool:
        diagnosis = PatientDiagnosisService._get_owned(patient_id=patient_id, diagnosis_id=diagnosis_id)
        if diagnosis is None:
            return False
        if diagnosis.is_hospice_code == bool(is_hospice_code):
            return True

        ordering.set_hospice_flag(diagnosis, is_hospice_code)
        return PatientDiagnosisService._save(diagnosis, ["is_hospice_code"], clock=clock)

    @staticmethod
    @transaction.atomic
    def set_active(*, patient_id: UUID, diagnosis_id: UUID, active: bool, clock=None) -> bool:
        """
        Flips `active` without touching resolved_date. Activating is subject
        to the same priority check as reactivation.
        """
        PatientDiagnosisService._lock_patient(patient_id)
        diagnosis = PatientDiagnosisService._get_owned(patient_id=patient_id, diagnosis_id=diagnosis_id)
        if diagnosis is None:
            return False
        if diagnosis.active == bool(active):
            return True

        if active:
            ordering.check_priority_available(
                PatientDiagnosisService._siblings(patient_id),
                patient_id=patient_id,
                priority=diagnosis.priority,
                exclude_id=diagnosis.id,
            )

        diagnosis.active = bool(active)
        return PatientDiagnosisService._save(diagnosis, ["active"], clock=clock)

    # -------------------------
    # Delete
    # -------------------------
    @staticmethod
    @transaction.atomic
    def delete_diagnosis(*, patient_id: UUID, diagnosis_id: UUID) -> bool:
        diagnosis = PatientDiagnosisService._get_owned(patient_id=patient_id, diagnosis_id=diagnosis_id)
        if diagnosis is None:
            return False
        # Patient.hospice_diagnosis is SET_NULL, so a linked designation clears itself.
        diagnosis.delete()
        return True

    @staticmethod
    @transaction.atomic
    def delete_all_for_patient(*, patient_id: UUID) -> int:
        Patient.objects.filter(id=patient_id).update(hospice_diagnosis=None)
        deleted, _ = PatientDiagnosis.objects.filter(patient_id=patient_id).delete()
        return deleted


class DiagnosticCodeService:
    """
    Catalog maintenance. Codes are unique; lookups by code live in selectors.
    """

    UPDATABLE_FIELDS = {"description", "shorthand", "billable", "common_code"}

    @staticmethod
    @transaction.atomic
    def create(
        *,
        icd_code: str,
        description: str,
        shorthand: str = "",
        billable: bool = True,
        common_code: bool | None = None,
        clock=None,
    ) -> DiagnosticCode:
        code = (icd_code or "").strip().upper()
        if not code:
            raise DomainValidationError("ICD code is required.", code="icd_code_required")

        ts = resolve_clock(clock).now()
        try:
            with transaction.atomic():
                return DiagnosticCode.objects.create(
                    icd_code=code,
                    description=description,
                    shorthand=shorthand or "",
                    billable=billable,
                    common_code=common_code,
                    created_at=ts,
                    updated_at=ts,
                )
        except IntegrityError:
            raise DomainValidationError(f"ICD code {code} already exists.", code="duplicate_icd_code")

    @staticmethod
    @transaction.atomic
    def bulk_create(*, rows: list[dict], clock=None) -> int:
        """
        Inserts catalog rows, skipping codes that already exist.
        Returns the number inserted.
        """
        ts = resolve_clock(clock).now()
        existing = set(DiagnosticCode.objects.values_list("icd_code", flat=True))
        to_insert = []
        for row in rows:
            code = (row.get("icd_code") or "").strip().upper()
            if not code or code in existing:
                continue
            existing.add(code)
            to_insert.append(
                DiagnosticCode(
                    icd_code=code,
                    description=row.get("description") or "",
                    shorthand=row.get("shorthand") or "",
                    billable=row.get("billable", True),
                    common_code=row.get("common_code"),
                    created_at=ts,
                    updated_at=ts,
                )
            )
        DiagnosticCode.objects.bulk_create(to_insert)
        return len(to_insert)

    @staticmethod
    @transaction.atomic
    def update(*, code_id: UUID, data: dict, clock=None) -> Optional[DiagnosticCode]:
        dc = DiagnosticCode.objects.select_for_update().filter(id=code_id).first()
        if dc is None:
            return None

        updates = {k: v for k, v in (data or {}).items() if k in DiagnosticCodeService.UPDATABLE_FIELDS}
        for k, v in updates.items():
            setattr(dc, k, v)

        if updates:
            dc.updated_at = resolve_clock(clock).now()
            dc.save(update_fields=sorted(updates) + ["updated_at"])
        return dc

    @staticmethod
    def set_common(*, code_id: UUID, is_common: bool, clock=None) -> bool:
        try:
            with transaction.atomic():
                updated = DiagnosticCode.objects.filter(id=code_id).update(
                    common_code=is_common,
                    updated_at=resolve_clock(clock).now(),
                )
        except DatabaseError:
            logger.exception("Failed to set common_code=%s on diagnostic code %s", is_common, code_id)
            return False
        return updated == 1

    @staticmethod
    @transaction.atomic
    def delete(*, code_id: UUID) -> bool:
        # Patient diagnoses hold the code string, not a FK; they are untouched.
        deleted, _ = DiagnosticCode.objects.filter(id=code_id).delete()
        return bool(deleted)
