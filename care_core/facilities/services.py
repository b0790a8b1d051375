# care_core/facilities/services.py
from __future__ import annotations

import logging
from dataclasses import dataclass, fields
from typing import Optional
from uuid import UUID

from django.db import DatabaseError, IntegrityError, transaction

from care_core.audit.services import AuditService
from care_core.common.clock import resolve_clock
from care_core.common.exceptions import DomainValidationError
from care_core.facilities.models import Facility

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FacilityUpdate:
    name: Optional[str] = None
    entity_type: Optional[str] = None

    last_name: Optional[str] = None
    first_name: Optional[str] = None
    middle_name: Optional[str] = None
    suffix: Optional[str] = None

    address1: Optional[str] = None
    address2: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None

    phone_number: Optional[str] = None
    fax_number: Optional[str] = None
    email: Optional[str] = None
    npi: Optional[str] = None
    notes: Optional[str] = None

    facility_code: Optional[str] = None
    is_active: Optional[bool] = None


class FacilityService:
    @staticmethod
    @transaction.atomic
    def create(
        *,
        name: str = "",
        facility_code: str | None = None,
        entity_type: str = "",
        last_name: str = "",
        first_name: str = "",
        middle_name: str = "",
        suffix: str = "",
        address1: str = "",
        address2: str = "",
        city: str = "",
        state: str = "",
        zip_code: str = "",
        phone_number: str = "",
        fax_number: str = "",
        email: str = "",
        npi: str = "",
        notes: str = "",
        clock=None,
    ) -> Facility:
        if not (name or "").strip() and not (last_name or "").strip():
            raise DomainValidationError("Facility needs a name or an individual last name.", code="facility_name_required")

        ts = resolve_clock(clock).now()
        try:
            with transaction.atomic():
                f = Facility.objects.create(
                    name=name or "",
                    facility_code=(facility_code or "").strip() or None,
                    entity_type=entity_type or "",
                    last_name=last_name or "",
                    first_name=first_name or "",
                    middle_name=middle_name or "",
                    suffix=suffix or "",
                    address1=address1 or "",
                    address2=address2 or "",
                    city=city or "",
                    state=state or "",
                    zip_code=zip_code or "",
                    phone_number=phone_number or "",
                    fax_number=fax_number or "",
                    email=email or "",
                    npi=npi or "",
                    notes=notes or "",
                    is_active=True,
                    created_at=ts,
                    updated_at=ts,
                )
        except IntegrityError:
            # facility_code uniqueness is enforced by constraint; surface readable error.
            raise DomainValidationError("Facility code already exists.", code="duplicate_facility_code")

        AuditService.log(
            event_code="facility.created",
            entity_type="Facility",
            entity_id=f.id,
            metadata={"facility_code": f.facility_code},
            clock=clock,
        )
        return f

    @staticmethod
    @transaction.atomic
    def update(*, facility_id: UUID, patch: FacilityUpdate, clock=None) -> Facility:
        f = Facility.objects.select_for_update().get(id=facility_id)

        changed: list[str] = []
        for fld in fields(patch):
            value = getattr(patch, fld.name)
            if value is None:
                continue
            if fld.name == "facility_code":
                value = value.strip() or None
            setattr(f, fld.name, value)
            changed.append(fld.name)

        if not changed:
            return f

        f.updated_at = resolve_clock(clock).now()
        try:
            with transaction.atomic():
                f.save(update_fields=changed + ["updated_at"])
        except IntegrityError:
            raise DomainValidationError("Facility code already exists.", code="duplicate_facility_code")
        return f

    @staticmethod
    def set_active(*, facility_id: UUID, is_active: bool, clock=None) -> bool:
        """
        Single-flag write. Storage failures are reported as False.
        """
        try:
            with transaction.atomic():
                updated = Facility.objects.filter(id=facility_id).update(
                    is_active=is_active,
                    updated_at=resolve_clock(clock).now(),
                )
        except DatabaseError:
            logger.exception("Failed to set is_active=%s on facility %s", is_active, facility_id)
            return False
        return updated == 1

    @staticmethod
    @transaction.atomic
    def delete(*, facility_id: UUID) -> bool:
        """
        Deletes the facility. Patients referencing it keep their records;
        their facility reference is nulled (on_delete=SET_NULL).
        """
        deleted, _ = Facility.objects.filter(id=facility_id).delete()
        if deleted:
            logger.info("Deleted facility %s", facility_id)
        return bool(deleted)
