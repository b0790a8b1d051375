# care_core/facilities/models.py
from __future__ import annotations

from django.db import models

from care_core.common.models import BaseModel


class Facility(BaseModel):
    """
    A facility or individual provider where patients are seen.

    Either `name` (organisation) or the individual name parts are filled.
    Facilities do not own patients: deleting one nulls Patient.facility.
    """

    # Core identity
    name = models.CharField(max_length=255, blank=True, default="")
    entity_type = models.CharField(max_length=64, blank=True, default="")

    # Individual provider name parts (optional)
    last_name = models.CharField(max_length=128, blank=True, default="")
    first_name = models.CharField(max_length=128, blank=True, default="")
    middle_name = models.CharField(max_length=128, blank=True, default="")
    suffix = models.CharField(max_length=32, blank=True, default="")

    # Address (optional)
    address1 = models.CharField(max_length=255, blank=True, default="")
    address2 = models.CharField(max_length=255, blank=True, default="")
    city = models.CharField(max_length=128, blank=True, default="")
    state = models.CharField(max_length=64, blank=True, default="")
    zip_code = models.CharField(max_length=16, blank=True, default="")

    # Contact (optional)
    phone_number = models.CharField(max_length=32, blank=True, default="")
    fax_number = models.CharField(max_length=32, blank=True, default="")
    email = models.EmailField(blank=True, default="")

    npi = models.CharField(max_length=16, blank=True, default="")

    # Nullable so that many facilities may have no code; set codes are unique.
    facility_code = models.CharField(max_length=64, null=True, blank=True, unique=True)

    is_active = models.BooleanField(default=True, db_index=True)
    notes = models.TextField(blank=True, default="")

    class Meta:
        db_table = "facilities_facility"
        indexes = [
            models.Index(fields=["name"]),
            models.Index(fields=["is_active", "name"]),
        ]

    def __str__(self) -> str:
        return f"{self.display_name} ({self.facility_code or '-'})"

    @property
    def display_name(self) -> str:
        if self.name.strip():
            return self.name
        if self.last_name.strip():
            out = self.last_name
            if self.first_name:
                out += f", {self.first_name}"
            if self.middle_name:
                out += f" {self.middle_name}"
            if self.suffix:
                out += f", {self.suffix}"
            return out
        return "Unknown Provider"

    @property
    def formatted_address(self) -> str:
        out = ""
        if self.address1:
            out += self.address1
        if self.address2:
            out += f"\n{self.address2}"
        out += "\n"
        if self.city:
            out += f"{self.city}, "
        if self.state:
            out += f"{self.state} "
        if self.zip_code:
            out += self.zip_code
        return out.strip()
