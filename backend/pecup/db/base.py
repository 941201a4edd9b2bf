"""SQLAlchemy Declarative Base — shared base class for all ORM models.

Invariants:
    - All models inherit from Base
    - Base is the single source of truth for table metadata
    - to_dict() output is JSON-safe (UUIDs and dates as strings)

Design Decisions:
    - to_dict on the base: audit before/after snapshots and admin list rows
      need the same column-by-column shape for every table
"""

import uuid
from datetime import date, datetime

from sqlalchemy.orm import DeclarativeBase


def _json_safe(value):
    if isinstance(value, uuid.UUID):
        return str(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return value


class Base(DeclarativeBase):
    """Base class for all PEC.UP ORM models."""

    def to_dict(self) -> dict:
        return {
            column.key: _json_safe(getattr(self, column.key))
            for column in self.__mapper__.column_attrs
        }
