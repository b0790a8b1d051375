# care_core/facilities/selectors.py
from __future__ import annotations

from typing import Optional
from uuid import UUID

from django.db.models import Q, QuerySet

from care_core.facilities.models import Facility


def all_facilities(*, active_only: bool = False) -> QuerySet[Facility]:
    qs = Facility.objects.all()
    if active_only:
        qs = qs.filter(is_active=True)
    return qs.order_by("name", "last_name", "first_name")


def get_facility(*, facility_id: UUID) -> Optional[Facility]:
    return Facility.objects.filter(id=facility_id).first()


def get_facility_by_code(*, facility_code: str) -> Optional[Facility]:
    return Facility.objects.filter(facility_code=facility_code).first()


def search_facilities(*, q: str | None = None) -> QuerySet[Facility]:
    qs = Facility.objects.all()

    qv = (q or "").strip()
    if qv:
        qs = qs.filter(
            Q(name__icontains=qv)
            | Q(last_name__icontains=qv)
            | Q(first_name__icontains=qv)
            | Q(facility_code__icontains=qv)
        )

    return qs.order_by("name", "last_name")


def facility_count(*, active_only: bool = False) -> int:
    return all_facilities(active_only=active_only).count()
