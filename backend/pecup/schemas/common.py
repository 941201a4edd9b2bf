"""Shared field validators for request schemas.

Invariants:
    - Empty strings from forms/JSON become None before type coercion
    - Calendar dates are strictly YYYY-MM-DD and must exist
"""

import re
from datetime import date

_ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def blank_to_none(v):
    if isinstance(v, str) and not v.strip():
        return None
    return v


def parse_iso_date(v, field: str):
    if v is None or isinstance(v, date):
        return v
    text = str(v).strip()
    if not _ISO_DATE.match(text):
        raise ValueError(f"{field} must be in YYYY-MM-DD format")
    try:
        return date.fromisoformat(text)
    except ValueError:
        raise ValueError(f"{field} must be a valid date")


def reject_null(v, info):
    """For partial updates: the key may be omitted but not set to null."""
    if v is None:
        raise ValueError(f"{info.field_name} cannot be null")
    return v
