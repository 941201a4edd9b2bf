"""Year Mappings — batch (admission) year to academic year level, as pure functions.

Invariants:
    - Levels are integers 1..4; batch years are integers 1900..2100
    - A stored mapping is one-to-one: no batch year or level appears twice
    - promote/demote saturate at 4 and 1 respectively
    - Unparseable stored values degrade to DEFAULT_YEAR_MAPPINGS, never raise

Design Decisions:
    - Promotion shifts the mapping instead of touching student rows: one
      upsert per academic year, no bulk update
    - current_year passed in (no clock access) so results are deterministic
"""

import logging
from collections.abc import Mapping

from pecup.core.errors import InputValidationError

logger = logging.getLogger(__name__)

MIN_LEVEL = 1
MAX_LEVEL = 4
MIN_BATCH_YEAR = 1900
MAX_BATCH_YEAR = 2100

DEFAULT_YEAR_MAPPINGS: dict[int, int] = {
    2025: 1,
    2024: 2,
    2023: 3,
    2022: 4,
    2021: 4,
}

DEFAULT_PROGRAM_LENGTH = 4


def _as_number(value: object) -> float | None:
    if isinstance(value, bool):
        return None
    try:
        number = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return None
    if number != number or number in (float("inf"), float("-inf")):
        return None
    return number


def parse_stored_mappings(value: object) -> dict[int, int]:
    """Read a JSON config value; keep valid int->int entries or fall back to defaults."""
    if not isinstance(value, Mapping):
        logger.warning("Invalid year mapping structure, using defaults")
        return dict(DEFAULT_YEAR_MAPPINGS)
    mappings: dict[int, int] = {}
    for key, raw in value.items():
        try:
            batch_year = int(key)
        except (TypeError, ValueError):
            continue
        level = _as_number(raw)
        if level is None:
            continue
        mappings[batch_year] = int(level)
    if not mappings:
        logger.warning("No valid year mappings found, using defaults")
        return dict(DEFAULT_YEAR_MAPPINGS)
    return mappings


def normalize_mappings(raw: Mapping[object, object]) -> dict[int, int]:
    """Validate an admin-supplied mapping. Raises InputValidationError."""
    if not isinstance(raw, Mapping) or not raw:
        raise InputValidationError(
            "mappings must be a non-empty object", field="mappings",
        )
    normalized: dict[int, int] = {}
    seen_levels: set[int] = set()
    for key, value in raw.items():
        try:
            batch_year = int(str(key))
        except ValueError:
            batch_year = None
        if batch_year is None or not MIN_BATCH_YEAR <= batch_year <= MAX_BATCH_YEAR:
            raise InputValidationError(
                f"Invalid batch year: {key}. Must be an integer between "
                f"{MIN_BATCH_YEAR} and {MAX_BATCH_YEAR}",
                field="mappings",
            )
        if batch_year in normalized:
            raise InputValidationError(
                f"Duplicate batch year: {batch_year}", field="mappings",
            )
        level = _as_number(value)
        if level is None or level != int(level) or not MIN_LEVEL <= level <= MAX_LEVEL:
            raise InputValidationError(
                f"Invalid academic year: {value}. Must be an integer between "
                f"{MIN_LEVEL} and {MAX_LEVEL}",
                field="mappings",
            )
        if int(level) in seen_levels:
            raise InputValidationError(
                f"Duplicate academic year: {int(level)}", field="mappings",
            )
        seen_levels.add(int(level))
        normalized[batch_year] = int(level)
    return normalized


def promote(mappings: Mapping[int, int]) -> dict[int, int]:
    return {year: min(MAX_LEVEL, level + 1) for year, level in mappings.items()}


def demote(mappings: Mapping[int, int]) -> dict[int, int]:
    return {year: max(MIN_LEVEL, level - 1) for year, level in mappings.items()}


def academic_year_for(
    mappings: Mapping[int, int], batch_year: int | None, current_year: int,
) -> int:
    """Level for a batch year; unmapped future batches are freshers, past ones final-year."""
    if not batch_year:
        return MIN_LEVEL
    if batch_year in mappings:
        return mappings[batch_year]
    return MIN_LEVEL if batch_year > current_year else MAX_LEVEL


def batch_year_for(mappings: Mapping[int, int], level: int) -> int:
    """Inverse lookup: the batch year currently at `level`."""
    if not MIN_LEVEL <= level <= MAX_LEVEL:
        raise InputValidationError("Invalid academic year level", field="level")
    for batch_year, mapped in mappings.items():
        if mapped == level:
            return batch_year
    raise InputValidationError(
        f"No mapping exists for academic year level {level}", field="level",
    )


def parse_program_length(value: object) -> int:
    """program_settings.programLength, or the default on anything malformed."""
    if not isinstance(value, Mapping):
        return DEFAULT_PROGRAM_LENGTH
    length = value.get("programLength")
    if isinstance(length, bool) or not isinstance(length, (int, float)):
        return DEFAULT_PROGRAM_LENGTH
    number = _as_number(length)
    if number is None or number <= 0:
        return DEFAULT_PROGRAM_LENGTH
    return int(number)


def next_term(batch_year: int, semester_number: int) -> tuple[int, int]:
    """Calendar progression: semester 1 -> 2 of the same year, 2 -> 1 of the next."""
    if semester_number == 1:
        return batch_year, 2
    return batch_year + 1, 1


def is_sequential_promotion(
    from_number: int, to_number: int, same_year: bool,
) -> bool:
    """Semester 1 -> 2 within a year, or 2 -> 1 into a different year."""
    if from_number == 1 and to_number == 2:
        return same_year
    if from_number == 2 and to_number == 1:
        return not same_year
    return False
