from datetime import date

from care_core.patients.identifiers import generate_upi


def test_upi_from_names_and_birth_date():
    assert generate_upi("Smith", "John", date(1980, 5, 3)) == "smijoh800503"


def test_short_names_are_padded_and_missing_birth_date_is_filled():
    assert generate_upi("Li", "Al") == "li_al_______"


def test_upi_is_lower_case_and_deterministic():
    a = generate_upi("O'NEIL", "Bartholomew", date(2001, 12, 9))
    b = generate_upi("O'NEIL", "Bartholomew", date(2001, 12, 9))

    assert a == b == "o'nbar011209"


def test_empty_names_are_all_filler():
    assert generate_upi("", "", None) == "____________"
