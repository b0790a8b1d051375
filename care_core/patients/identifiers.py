# care_core/patients/identifiers.py
from __future__ import annotations

from datetime import date
from typing import Optional

UPI_FILLER = "_"
UPI_NAME_PART_LENGTH = 3


def _name_part(value: str) -> str:
    return (value or "").ljust(UPI_NAME_PART_LENGTH, UPI_FILLER)[:UPI_NAME_PART_LENGTH].lower()


def generate_upi(last_name: str, first_name: str, birth_date: Optional[date] = None) -> str:
    """
    Unique patient identifier: first 3 chars of last name + first 3 chars of
    first name (lower-cased, `_`-padded) + birth date as YYMMDD.

    Without a birth date the date part is `______`.

        >>> generate_upi("Smith", "John", date(1980, 5, 3))
        'smijoh800503'
        >>> generate_upi("Li", "Al")
        'li_al_______'

    Deterministic; collisions between different patients are possible and
    are rejected by the Patient.upi unique constraint, not here.
    """
    prefix = _name_part(last_name) + _name_part(first_name)

    if birth_date is None:
        return prefix + UPI_FILLER * 6

    return prefix + f"{birth_date.year % 100:02d}{birth_date.month:02d}{birth_date.day:02d}"
