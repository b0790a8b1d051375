# care_core/patients/services.py
from __future__ import annotations

import logging
from datetime import date
from typing import Optional
from uuid import UUID

from django.db import DatabaseError, IntegrityError, transaction

from care_core.audit.services import AuditService
from care_core.common.clock import resolve_clock
from care_core.common.exceptions import DuplicateUpi, PatientNotFound
from care_core.diagnoses.models import PatientDiagnosis
from care_core.diagnoses.ordering import ensure_belongs_to
from care_core.patients.identifiers import generate_upi
from care_core.patients.models import Patient

logger = logging.getLogger(__name__)


class PatientService:
    """
    Patient write-model operations.

    Notes:
    - UPI is always derived from (last_name, first_name, date_of_birth).
    - Enabling hospice never picks a hospice diagnosis; use
      link_hospice_diagnosis for that.
    - Single-flag writes report storage failures as False instead of raising.
    """

    IDENTITY_FIELDS = {"first_name", "last_name", "date_of_birth"}
    UPDATABLE_FIELDS = {
        "first_name",
        "last_name",
        "date_of_birth",
        "is_male",
        "medicare_number",
        "facility_id",
        "is_hospice",
        "on_ccm",
        "on_psych",
        "on_psy_med",
        "psy_med_review_date",
    }

    @staticmethod
    @transaction.atomic
    def create_patient(
        *,
        first_name: str,
        last_name: str,
        date_of_birth: Optional[date] = None,
        is_male: bool = False,
        facility_id: UUID | None = None,
        medicare_number: str = "",
        is_hospice: bool = False,
        on_ccm: bool = False,
        on_psych: bool = False,
        on_psy_med: bool = False,
        clock=None,
    ) -> Patient:
        upi = generate_upi(last_name, first_name, date_of_birth)
        ts = resolve_clock(clock).now()

        try:
            with transaction.atomic():
                patient = Patient.objects.create(
                    first_name=first_name,
                    last_name=last_name,
                    upi=upi,
                    date_of_birth=date_of_birth,
                    is_male=is_male,
                    facility_id=facility_id,
                    medicare_number=medicare_number or "",
                    is_hospice=is_hospice,
                    on_ccm=on_ccm,
                    on_psych=on_psych,
                    on_psy_med=on_psy_med,
                    created_at=ts,
                    updated_at=ts,
                )
        except IntegrityError:
            # UPI uniqueness is enforced by constraint; surface readable error.
            raise DuplicateUpi(upi)

        AuditService.log(
            event_code="patient.created",
            entity_type="Patient",
            entity_id=patient.id,
            metadata={"upi": upi},
            clock=clock,
        )
        return patient

    @staticmethod
    @transaction.atomic
    def update_patient(*, patient_id: UUID, data: dict, clock=None) -> Patient:
        patient = Patient.objects.select_for_update().filter(id=patient_id).first()
        if patient is None:
            raise PatientNotFound(patient_id)

        updates = {k: v for k, v in (data or {}).items() if k in PatientService.UPDATABLE_FIELDS}
        for k, v in updates.items():
            setattr(patient, k, v)

        if PatientService.IDENTITY_FIELDS & set(updates):
            patient.upi = generate_upi(patient.last_name, patient.first_name, patient.date_of_birth)

        patient.updated_at = resolve_clock(clock).now()

        try:
            with transaction.atomic():
                patient.save()
        except IntegrityError:
            raise DuplicateUpi(patient.upi)

        AuditService.log(
            event_code="patient.updated",
            entity_type="Patient",
            entity_id=patient.id,
            metadata={"updated_fields": sorted(updates.keys())},
            clock=clock,
        )
        return patient

    @staticmethod
    @transaction.atomic
    def delete_patient(*, patient_id: UUID) -> bool:
        """
        Removes the patient together with its events and diagnoses.
        """
        patient = Patient.objects.filter(id=patient_id).first()
        if patient is None:
            return False

        # Break the patient -> diagnosis link first so the cascade does not
        # have to null a row it is about to delete.
        if patient.hospice_diagnosis_id is not None:
            Patient.objects.filter(id=patient_id).update(hospice_diagnosis=None)

        patient.delete()
        logger.info("Deleted patient %s with its events and diagnoses", patient_id)
        return True

    # -------------------------
    # Care-program flags
    # -------------------------
    @staticmethod
    def _set_flags(*, patient_id: UUID, clock=None, **values) -> bool:
        try:
            with transaction.atomic():
                updated = Patient.objects.filter(id=patient_id).update(
                    updated_at=resolve_clock(clock).now(),
                    **values,
                )
        except DatabaseError:
            logger.exception("Failed to update %s on patient %s", sorted(values), patient_id)
            return False
        return updated == 1

    @staticmethod
    def set_hospice_status(*, patient_id: UUID, is_hospice: bool, clock=None) -> bool:
        # Turning hospice on without a linked diagnosis is allowed; the
        # patient then reports needs_hospice_diagnosis.
        return PatientService._set_flags(patient_id=patient_id, is_hospice=is_hospice, clock=clock)

    @staticmethod
    def set_ccm_status(*, patient_id: UUID, on_ccm: bool, clock=None) -> bool:
        return PatientService._set_flags(patient_id=patient_id, on_ccm=on_ccm, clock=clock)

    @staticmethod
    def set_psych_status(*, patient_id: UUID, on_psych: bool, clock=None) -> bool:
        return PatientService._set_flags(patient_id=patient_id, on_psych=on_psych, clock=clock)

    @staticmethod
    def set_psy_med_status(
        *,
        patient_id: UUID,
        on_psy_med: bool,
        review_date: Optional[date] = None,
        clock=None,
    ) -> bool:
        return PatientService._set_flags(
            patient_id=patient_id,
            on_psy_med=on_psy_med,
            psy_med_review_date=review_date,
            clock=clock,
        )

    # -------------------------
    # Hospice designation
    # -------------------------
    @staticmethod
    def link_hospice_diagnosis(*, patient_id: UUID, diagnosis_id: UUID | None, clock=None) -> bool:
        """
        Stores `diagnosis_id` as the patient's primary hospice diagnosis
        (None unlinks). The diagnosis must belong to the patient; a foreign
        diagnosis is rejected before anything is written.
        """
        if diagnosis_id is not None:
            diagnosis = PatientDiagnosis.objects.filter(id=diagnosis_id).first()
            if diagnosis is None:
                return False
            ensure_belongs_to(diagnosis, patient_id)

        ok = PatientService._set_flags(patient_id=patient_id, hospice_diagnosis_id=diagnosis_id, clock=clock)
        if ok:
            AuditService.log(
                event_code="patient.hospice_diagnosis_linked",
                entity_type="Patient",
                entity_id=patient_id,
                metadata={"diagnosis_id": str(diagnosis_id) if diagnosis_id else None},
                clock=clock,
            )
        return ok
