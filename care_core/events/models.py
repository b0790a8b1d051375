# care_core/events/models.py
from django.db import models

from care_core.common.enums import EnumField, EnumMapping, identity_table
from care_core.common.models import BaseModel
from care_core.patients.models import Patient


class EventType(models.TextChoices):
    FACE_TO_FACE = "FACE_TO_FACE", "F2F"
    CCM = "CCM", "CCM"                      # Chronic Care Management
    TCM = "TCM", "TCM"                      # Transitional Care Management
    HOSPICE = "HOSPICE", "G0"
    HOME_HEALTH = "HOME_HEALTH", "G01"
    FOLLOW_UP = "FOLLOW_UP", "FU"
    MEDICATION_REVIEW = "MEDICATION_REVIEW", "Meds"
    PSY = "PSY", "Psy"                      # Psychiatric services
    DNR = "DNR", "DNR"                      # Advance care planning
    OTHER = "OTHER", "Other"


class VisitType(models.TextChoices):
    NON_VISIT = "NON_VISIT", "Non-Visit"
    HOME_VISIT = "HOME_VISIT", "Home Visit"
    NURSING_FACILITY = "NURSING_FACILITY", "Nursing Facility"
    TELEHEALTH = "TELEHEALTH", "Telehealth"
    OFFICE_VISIT = "OFFICE_VISIT", "Office Visit"


class VisitLocation(models.TextChoices):
    NONE = "NONE", "None"
    PATIENT_HOME = "PATIENT_HOME", "Patient Home"
    SKILLED_NURSING = "SKILLED_NURSING", "Skilled Nursing Facility"
    ASSISTED_LIVING = "ASSISTED_LIVING", "Assisted Living Facility"
    GROUP_HOME = "GROUP_HOME", "Group Home"
    HOSPITAL = "HOSPITAL", "Hospital"
    OFFICE = "OFFICE", "Office"


class EventStatus(models.TextChoices):
    PENDING = "PENDING", "Pending"
    COMPLETED = "COMPLETED", "Completed"
    BILLED = "BILLED", "Billed"
    PAID = "PAID", "Paid"
    CANCELLED = "CANCELLED", "Cancelled"
    NO_SHOW = "NO_SHOW", "No Show"


class FollowUpRecurrence(models.TextChoices):
    NONE = "NONE", "None"
    WEEKLY = "WEEKLY", "Weekly"
    MONTHLY = "MONTHLY", "Monthly"
    QUARTERLY = "QUARTERLY", "Quarterly"
    SEMI_ANNUAL = "SEMI_ANNUAL", "Semi-Annual"
    ANNUAL = "ANNUAL", "Annual"


# Stored strings are the member names.
EVENT_TYPE_MAPPING = EnumMapping.register(EventType, identity_table(EventType))
VISIT_TYPE_MAPPING = EnumMapping.register(VisitType, identity_table(VisitType))
VISIT_LOCATION_MAPPING = EnumMapping.register(VisitLocation, identity_table(VisitLocation))
EVENT_STATUS_MAPPING = EnumMapping.register(EventStatus, identity_table(EventStatus))
FOLLOW_UP_RECURRENCE_MAPPING = EnumMapping.register(FollowUpRecurrence, identity_table(FollowUpRecurrence))


class Event(BaseModel):
    """
    Billable clinical event for one patient.

    `cpt_code` is derived once at creation (see events.billing) and is not
    re-derived on update. `event_bill_date` is independent of the clinical
    `event_datetime`.
    """
    patient = models.ForeignKey(Patient, on_delete=models.CASCADE, related_name="events")

    event_datetime = models.DateTimeField(db_index=True)
    event_bill_date = models.DateField()
    event_minutes = models.PositiveIntegerField(default=0)
    note_text = models.TextField(blank=True, default="")

    cpt_code = models.CharField(max_length=16, null=True, blank=True)
    modifier = models.CharField(max_length=8, null=True, blank=True)
    event_file = models.CharField(max_length=255, null=True, blank=True)

    event_type = EnumField(enum=EventType, db_index=True)
    visit_type = EnumField(enum=VisitType, default=VisitType.NON_VISIT)
    visit_location = EnumField(enum=VisitLocation, default=VisitLocation.NONE)
    status = EnumField(enum=EventStatus, default=EventStatus.PENDING, db_index=True)

    hosp_discharge_date = models.DateField(null=True, blank=True)
    # "Time to discharge date": follow-up anchor when set.
    ttdd_date = models.DateField(null=True, blank=True)

    # Monthly billing batch this event was rolled into (batching lives elsewhere).
    monthly_billing_id = models.BigIntegerField(null=True, blank=True, db_index=True)

    follow_up_recurrence = EnumField(enum=FollowUpRecurrence, default=FollowUpRecurrence.NONE)

    class Meta:
        db_table = "events_event"
        indexes = [
            models.Index(fields=["patient", "status"]),
            models.Index(fields=["patient", "event_type"]),
            models.Index(fields=["patient", "event_datetime"]),
            models.Index(fields=["event_type", "status"]),
            models.Index(fields=["event_bill_date", "status"]),
            models.Index(fields=["follow_up_recurrence", "event_datetime"]),
        ]

    def __str__(self) -> str:
        return f"Event({self.patient_id}, {self.event_type}, {self.status})"

    @property
    def is_billable(self) -> bool:
        from care_core.events.billing import is_billable

        return is_billable(self.event_type, self.visit_type, self.event_minutes)

    @property
    def minimum_required_minutes(self) -> int:
        from care_core.events.billing import minimum_required_minutes

        return minimum_required_minutes(self.event_type)

    @property
    def next_follow_up(self):
        from care_core.events.followups import next_follow_up

        return next_follow_up(self)
