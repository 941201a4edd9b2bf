"""Academic ORM — key/value academic config and the singleton calendar.

Invariants:
    - academic_config.config_key is unique ("year_mappings", "program_settings")
    - academic_calendar has at most one row (id = 1)
    - current_semester_id always belongs to current_year_id (checked by the API)

Design Decisions:
    - JSON config_value: mappings are a small dict read whole and written whole
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    JSON, CheckConstraint, DateTime, ForeignKey, Integer, String,
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from pecup.db.base import Base

CALENDAR_ROW_ID = 1


class AcademicConfig(Base):
    __tablename__ = "academic_config"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    config_key: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    config_value: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )


class AcademicCalendar(Base):
    __tablename__ = "academic_calendar"
    __table_args__ = (
        CheckConstraint("id = 1", name="ck_academic_calendar_singleton"),
    )

    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, default=CALENDAR_ROW_ID, autoincrement=False,
    )
    current_year_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("years.id"), nullable=False,
    )
    current_semester_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("semesters.id"), nullable=False,
    )
    last_updated: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    updated_by: Mapped[str | None] = mapped_column(String(320), nullable=True)

    current_year: Mapped["Year"] = relationship("Year", lazy="selectin")
    current_semester: Mapped["Semester"] = relationship("Semester", lazy="selectin")
