# care_core/events/services.py
from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Iterable, Optional
from uuid import UUID

from django.db import DatabaseError, transaction
from django.utils import timezone

from care_core.audit.services import AuditService
from care_core.common.clock import resolve_clock
from care_core.common.enums import EnumMapping
from care_core.common.exceptions import PatientNotFound
from care_core.events import billing
from care_core.events.models import Event, EventStatus, EventType, FollowUpRecurrence, VisitLocation, VisitType
from care_core.events.status import apply_status
from care_core.patients.models import Patient

logger = logging.getLogger(__name__)


def _coerce(enum_cls, value):
    return EnumMapping.for_enum(enum_cls).coerce(value)


def _bill_date_for(event_datetime: datetime) -> date:
    if timezone.is_aware(event_datetime):
        return timezone.localtime(event_datetime).date()
    return event_datetime.date()


class EventService:
    """
    Event write-model operations.

    Notes:
    - cpt_code is derived once, in derive_event. update_event keeps whatever
      code the event has; recompute_procedure_code is the explicit refresh.
    - Status changes go through the configured transition table.
    """

    UPDATABLE_FIELDS = {
        "event_datetime",
        "event_bill_date",
        "event_minutes",
        "note_text",
        "cpt_code",
        "modifier",
        "event_file",
        "event_type",
        "visit_type",
        "visit_location",
        "hosp_discharge_date",
        "ttdd_date",
        "follow_up_recurrence",
    }
    ENUM_FIELDS = {
        "event_type": EventType,
        "visit_type": VisitType,
        "visit_location": VisitLocation,
        "follow_up_recurrence": FollowUpRecurrence,
    }

    @staticmethod
    def derive_event(
        *,
        patient_id: UUID,
        event_type,
        visit_type=VisitType.NON_VISIT,
        visit_location=VisitLocation.NONE,
        minutes: int = 0,
        note: str = "",
        event_datetime: Optional[datetime] = None,
        recurrence=FollowUpRecurrence.NONE,
        hosp_discharge_date: Optional[date] = None,
        ttdd_date: Optional[date] = None,
        clock=None,
    ) -> Event:
        """
        Builds an unsaved PENDING event with its default procedure code.
        event_datetime defaults to the clock's now; the bill date is the
        local calendar date of event_datetime.
        """
        event_type = _coerce(EventType, event_type)
        visit_type = _coerce(VisitType, visit_type or VisitType.NON_VISIT)
        visit_location = _coerce(VisitLocation, visit_location or VisitLocation.NONE)
        recurrence = _coerce(FollowUpRecurrence, recurrence or FollowUpRecurrence.NONE)
        minutes = minutes or 0

        ts = resolve_clock(clock).now()
        event_datetime = event_datetime or ts

        return Event(
            patient_id=patient_id,
            event_datetime=event_datetime,
            event_bill_date=_bill_date_for(event_datetime),
            event_minutes=minutes,
            note_text=note or "",
            cpt_code=billing.default_procedure_code(event_type, visit_type, minutes),
            event_type=event_type,
            visit_type=visit_type,
            visit_location=visit_location,
            status=EventStatus.PENDING,
            hosp_discharge_date=hosp_discharge_date,
            ttdd_date=ttdd_date,
            follow_up_recurrence=recurrence,
            created_at=ts,
            updated_at=ts,
        )

    @staticmethod
    @transaction.atomic
    def create_event(*, patient_id: UUID, clock=None, **kwargs) -> Event:
        if not Patient.objects.filter(id=patient_id).exists():
            raise PatientNotFound(patient_id)

        event = EventService.derive_event(patient_id=patient_id, clock=clock, **kwargs)
        event.save(force_insert=True)

        AuditService.log(
            event_code="event.created",
            entity_type="Event",
            entity_id=event.id,
            metadata={
                "patient_id": str(patient_id),
                "event_type": event.event_type.name,
                "cpt_code": event.cpt_code,
            },
            clock=clock,
        )
        logger.info("Created %s event %s for patient %s", event.event_type.name, event.id, patient_id)
        return event

    @staticmethod
    @transaction.atomic
    def update_event(*, event_id: UUID, data: dict, clock=None) -> Optional[Event]:
        event = Event.objects.select_for_update().filter(id=event_id).first()
        if event is None:
            return None

        updates = {k: v for k, v in (data or {}).items() if k in EventService.UPDATABLE_FIELDS}
        if not updates:
            return event

        for name, enum_cls in EventService.ENUM_FIELDS.items():
            if name in updates:
                updates[name] = _coerce(enum_cls, updates[name])
        if "event_minutes" in updates:
            updates["event_minutes"] = updates["event_minutes"] or 0

        for k, v in updates.items():
            setattr(event, k, v)

        event.updated_at = resolve_clock(clock).now()
        event.save(update_fields=sorted(updates) + ["updated_at"])

        AuditService.log(
            event_code="event.updated",
            entity_type="Event",
            entity_id=event.id,
            metadata={"patient_id": str(event.patient_id), "updated_fields": sorted(updates)},
            clock=clock,
        )
        return event

    @staticmethod
    @transaction.atomic
    def recompute_procedure_code(*, event_id: UUID, clock=None) -> Optional[Event]:
        event = Event.objects.select_for_update().filter(id=event_id).first()
        if event is None:
            return None

        code = billing.default_procedure_code(event.event_type, event.visit_type, event.event_minutes)
        if code == event.cpt_code:
            return event

        previous = event.cpt_code
        event.cpt_code = code
        event.updated_at = resolve_clock(clock).now()
        event.save(update_fields=["cpt_code", "updated_at"])

        AuditService.log(
            event_code="event.code_recomputed",
            entity_type="Event",
            entity_id=event.id,
            metadata={"previous_code": previous, "cpt_code": code},
            clock=clock,
        )
        return event

    @staticmethod
    @transaction.atomic
    def set_status(*, event_id: UUID, status, clock=None) -> Optional[Event]:
        """
        Raises InvalidStatusTransition for a move the configured table
        rejects. Same-status is a no-op (no write, no audit).
        """
        event = Event.objects.select_for_update().filter(id=event_id).first()
        if event is None:
            return None

        previous = event.status
        if not apply_status(event, status):
            return event

        event.updated_at = resolve_clock(clock).now()
        event.save(update_fields=["status", "updated_at"])

        AuditService.log(
            event_code="event.status_changed",
            entity_type="Event",
            entity_id=event.id,
            metadata={"from": previous.name, "to": event.status.name},
            clock=clock,
        )
        return event

    @staticmethod
    def assign_monthly_billing(*, event_ids: Iterable[UUID], monthly_billing_id: int, clock=None) -> int:
        """
        Attaches unbilled (COMPLETED, unassigned) events to a billing batch.
        Returns the number of events attached; 0 on a storage failure.
        """
        ts = resolve_clock(clock).now()
        try:
            with transaction.atomic():
                return Event.objects.filter(
                    id__in=list(event_ids),
                    status=EventStatus.COMPLETED,
                    monthly_billing_id__isnull=True,
                ).update(monthly_billing_id=monthly_billing_id, updated_at=ts)
        except DatabaseError:
            logger.exception("Failed to attach events to billing batch %s", monthly_billing_id)
            return 0

    @staticmethod
    @transaction.atomic
    def delete_event(*, event_id: UUID) -> bool:
        deleted, _ = Event.objects.filter(id=event_id).delete()
        return deleted > 0

    @staticmethod
    @transaction.atomic
    def delete_all_for_patient(*, patient_id: UUID) -> int:
        deleted, _ = Event.objects.filter(patient_id=patient_id).delete()
        return deleted
