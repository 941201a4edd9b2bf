"""Lookup ORM — branches, admission years, and their semesters.

Invariants:
    - branches.code and years.batch_year are unique
    - Every year owns exactly semesters 1 and 2 (created together)
    - (year_id, semester_number) is unique

Design Decisions:
    - Small reference tables joined into profiles/resources instead of
      free-text codes, so renaming a branch touches one row
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    CheckConstraint, DateTime, ForeignKey, Integer, String, UniqueConstraint,
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from pecup.db.base import Base


class Branch(Base):
    """Academic branch / department (CSE, ECE, ...)."""
    __tablename__ = "branches"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    code: Mapped[str] = mapped_column(String(20), nullable=False, unique=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )


class Year(Base):
    """Admission batch, identified by the year students joined."""
    __tablename__ = "years"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    batch_year: Mapped[int] = mapped_column(Integer, nullable=False, unique=True)
    display_name: Mapped[str] = mapped_column(String(100), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    semesters: Mapped[list["Semester"]] = relationship(
        "Semester", back_populates="year",
        cascade="all, delete-orphan", lazy="selectin",
        order_by="Semester.semester_number",
    )


class Semester(Base):
    __tablename__ = "semesters"
    __table_args__ = (
        UniqueConstraint("year_id", "semester_number", name="uq_semesters_year_number"),
        CheckConstraint("semester_number IN (1, 2)", name="ck_semesters_number"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    year_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("years.id", ondelete="CASCADE"),
        nullable=False,
    )
    semester_number: Mapped[int] = mapped_column(Integer, nullable=False)

    year: Mapped["Year"] = relationship("Year", back_populates="semesters")
