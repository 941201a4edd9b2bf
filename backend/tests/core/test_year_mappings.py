"""Year Mappings — parsing, strict validation, promotion and calendar steps.

Tests:
    - Stored values degrade to defaults instead of raising
    - normalize_mappings rejects duplicates and out-of-range values
    - promote/demote saturate at the level bounds
    - academic_year_for / batch_year_for lookups
    - next_term rolls semester 2 over into the next batch year
    - Semester promotion is 1 -> 2 within a year or 2 -> 1 across years
"""

import pytest

from pecup.core.errors import InputValidationError
from pecup.core.year_mappings import (
    DEFAULT_PROGRAM_LENGTH, DEFAULT_YEAR_MAPPINGS, academic_year_for,
    batch_year_for, demote, is_sequential_promotion, next_term,
    normalize_mappings, parse_program_length, parse_stored_mappings, promote,
)


def test_parse_stored_keeps_valid_entries():
    assert parse_stored_mappings({"2024": 2, "2023": "3", "bad": 1, "2022": "x"}) == {
        2024: 2, 2023: 3,
    }


@pytest.mark.parametrize("value", [None, [], "2024:1", {}, {"x": "y"}])
def test_parse_stored_falls_back_to_defaults(value):
    assert parse_stored_mappings(value) == DEFAULT_YEAR_MAPPINGS


def test_normalize_accepts_string_keys():
    assert normalize_mappings({"2024": 1, 2023: 2.0}) == {2024: 1, 2023: 2}


@pytest.mark.parametrize("raw,message", [
    ({}, "mappings must be a non-empty object"),
    ({"1800": 1}, "Invalid batch year: 1800"),
    ({"2024": 5}, "Invalid academic year: 5"),
    ({"2024": 1.5}, "Invalid academic year: 1.5"),
    ({"2024": True}, "Invalid academic year: True"),
    ({"2024": 1, "2023": 1}, "Duplicate academic year: 1"),
])
def test_normalize_rejects(raw, message):
    with pytest.raises(InputValidationError) as exc:
        normalize_mappings(raw)
    assert exc.value.message.startswith(message)


def test_normalize_rejects_duplicate_batch_year_spellings():
    with pytest.raises(InputValidationError, match="Duplicate batch year: 2024"):
        normalize_mappings({"2024": 1, 2024: 2})


def test_promote_and_demote_saturate():
    mappings = {2025: 1, 2024: 2, 2022: 4}
    assert promote(mappings) == {2025: 2, 2024: 3, 2022: 4}
    assert demote(mappings) == {2025: 1, 2024: 1, 2022: 3}


def test_academic_year_for():
    mappings = {2024: 2}
    assert academic_year_for(mappings, 2024, 2026) == 2
    assert academic_year_for(mappings, 2027, 2026) == 1
    assert academic_year_for(mappings, 2010, 2026) == 4
    assert academic_year_for(mappings, None, 2026) == 1


def test_batch_year_for():
    assert batch_year_for({2024: 2, 2023: 3}, 3) == 2023
    with pytest.raises(InputValidationError, match="No mapping exists"):
        batch_year_for({2024: 2}, 1)
    with pytest.raises(InputValidationError, match="Invalid academic year level"):
        batch_year_for({2024: 2}, 9)


def test_parse_program_length():
    assert parse_program_length({"programLength": 5}) == 5
    assert parse_program_length({"programLength": 0}) == DEFAULT_PROGRAM_LENGTH
    assert parse_program_length({"programLength": "4"}) == DEFAULT_PROGRAM_LENGTH
    assert parse_program_length(None) == DEFAULT_PROGRAM_LENGTH


def test_next_term():
    assert next_term(2024, 1) == (2024, 2)
    assert next_term(2024, 2) == (2025, 1)


@pytest.mark.parametrize("from_number,to_number,same_year,expected", [
    (1, 2, True, True),
    (2, 1, False, True),
    (1, 2, False, False),
    (2, 1, True, False),
    (1, 1, True, False),
    (2, 2, False, False),
])
def test_is_sequential_promotion(from_number, to_number, same_year, expected):
    assert is_sequential_promotion(from_number, to_number, same_year) is expected
