# care_core/diagnoses/models.py
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models

from care_core.common.models import BaseModel
from care_core.patients.models import Patient

MIN_PRIORITY = 1
MAX_PRIORITY = 10


class DiagnosticCode(BaseModel):
    """
    Catalog entry for an ICD-10 code (e.g. "I10" / "HTN").
    """
    icd_code = models.CharField(max_length=16, unique=True)
    description = models.CharField(max_length=512)
    shorthand = models.CharField(max_length=64, blank=True, default="")
    billable = models.BooleanField(default=True)
    # Frequently-used marker; null when never classified.
    common_code = models.BooleanField(null=True, blank=True)

    class Meta:
        db_table = "diagnoses_diagnostic_code"
        ordering = ["icd_code"]
        indexes = [
            models.Index(fields=["billable", "icd_code"]),
            models.Index(fields=["common_code", "icd_code"]),
        ]

    def __str__(self) -> str:
        return f"{self.icd_code} {self.description}"


class PatientDiagnosis(BaseModel):
    """
    A patient's diagnosis. `icd_code` is a plain code string, not a FK into
    the catalog.

    Priority 1 is primary. Uniqueness of priority among a patient's active
    diagnoses is checked by PatientDiagnosisService, not by a constraint.
    """
    patient = models.ForeignKey(Patient, on_delete=models.CASCADE, related_name="diagnoses")

    icd_code = models.CharField(max_length=16, db_index=True)
    priority = models.PositiveSmallIntegerField(
        validators=[MinValueValidator(MIN_PRIORITY), MaxValueValidator(MAX_PRIORITY)],
    )
    is_hospice_code = models.BooleanField(default=False)

    diagnosis_date = models.DateField(null=True, blank=True)
    resolved_date = models.DateField(null=True, blank=True)
    notes = models.TextField(blank=True, default="")
    active = models.BooleanField(default=True)

    class Meta:
        db_table = "diagnoses_patient_diagnosis"
        indexes = [
            models.Index(fields=["patient", "active", "priority"]),
            models.Index(fields=["patient", "is_hospice_code"]),
        ]

    def __str__(self) -> str:
        state = "active" if self.active else "resolved"
        return f"{self.icd_code} #{self.priority} ({state})"
