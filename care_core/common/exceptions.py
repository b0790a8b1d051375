# care_core/common/exceptions.py
from __future__ import annotations

from rest_framework import status
from rest_framework.exceptions import APIException, ValidationError


class DomainValidationError(ValidationError):
    """
    Validation rejection raised by the rules core / services.
    Carries a stable machine code alongside the human message.
    """
    default_code = "validation_error"

    def __init__(self, detail=None, code=None):
        super().__init__(detail=detail, code=code or self.default_code)
        self.code = code or self.default_code


class ConflictError(APIException):
    """
    409 Conflict. Use when business rules block an action that is
    otherwise well-formed (e.g. an illegal status transition).
    """
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Conflict."
    default_code = "conflict"

    def __init__(self, detail=None, code=None):
        super().__init__(detail=detail or self.default_detail, code=code or self.default_code)
        self.code = code or self.default_code


class UnknownEnumValue(DomainValidationError):
    default_code = "unknown_enum_value"

    def __init__(self, enum_name: str, value):
        super().__init__(f"Unknown {enum_name} value: {value!r}.")
        self.enum_name = enum_name
        self.value = value


class DiagnosisOwnershipError(DomainValidationError):
    default_code = "diagnosis_not_owned"

    def __init__(self, *, diagnosis_id, patient_id):
        super().__init__(f"Diagnosis {diagnosis_id} does not belong to patient {patient_id}.")
        self.diagnosis_id = diagnosis_id
        self.patient_id = patient_id


class PriorityOutOfRange(DomainValidationError):
    default_code = "priority_out_of_range"


class PriorityConflict(DomainValidationError):
    default_code = "priority_conflict"

    def __init__(self, *, patient_id, priority: int, existing_id):
        super().__init__(f"Priority {priority} is already used by diagnosis {existing_id} for patient {patient_id}.")
        self.patient_id = patient_id
        self.priority = priority
        self.existing_id = existing_id


class DuplicateUpi(DomainValidationError):
    default_code = "duplicate_upi"

    def __init__(self, upi: str):
        super().__init__(f"UPI {upi!r} already exists.")
        self.upi = upi


class PatientNotFound(DomainValidationError):
    default_code = "patient_not_found"

    def __init__(self, patient_id):
        super().__init__(f"Patient {patient_id} not found.")
        self.patient_id = patient_id


class InvalidStatusTransition(ConflictError):
    default_code = "invalid_status_transition"

    def __init__(self, *, current, target):
        super().__init__(f"Cannot move event from {current} to {target}.")
        self.current = current
        self.target = target
