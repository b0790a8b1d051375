# care_core/patients/models.py
from django.db import models

from care_core.common.models import BaseModel
from care_core.facilities.models import Facility


class Patient(BaseModel):
    """
    Patient record. Owns its diagnoses and events (both cascade on delete).

    `upi` is derived from name + birth date by the write service and is
    never user-supplied.
    """
    first_name = models.CharField(max_length=128)
    last_name = models.CharField(max_length=128)
    upi = models.CharField(max_length=32, unique=True)

    date_of_birth = models.DateField(null=True, blank=True)
    is_male = models.BooleanField(default=False)
    medicare_number = models.CharField(max_length=32, blank=True, default="")

    facility = models.ForeignKey(
        Facility,
        on_delete=models.SET_NULL,
        related_name="patients",
        null=True,
        blank=True,
    )

    # Care-program flags (independent of each other)
    is_hospice = models.BooleanField(default=False)
    on_ccm = models.BooleanField(default=False)
    on_psych = models.BooleanField(default=False)
    on_psy_med = models.BooleanField(default=False)
    psy_med_review_date = models.DateField(null=True, blank=True)

    # Primary hospice diagnosis; linked explicitly, never auto-selected.
    hospice_diagnosis = models.ForeignKey(
        "diagnoses.PatientDiagnosis",
        on_delete=models.SET_NULL,
        related_name="+",
        null=True,
        blank=True,
    )

    class Meta:
        db_table = "patients_patient"
        indexes = [
            models.Index(fields=["last_name", "first_name"]),
            models.Index(fields=["facility", "is_hospice"]),
            models.Index(fields=["facility", "on_ccm"]),
            models.Index(fields=["facility", "on_psych"]),
            models.Index(fields=["on_psy_med", "psy_med_review_date"]),
        ]

    def __str__(self) -> str:
        return f"{self.last_name}, {self.first_name} ({self.upi})"

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    @property
    def needs_hospice_diagnosis(self) -> bool:
        """Hospice flag is on but no hospice diagnosis is linked yet."""
        return bool(self.is_hospice) and self.hospice_diagnosis_id is None
