"""Semester Promotion ORM — history of bulk moves of students to their next semester.

Invariants:
    - One row per promotion request, written in the same transaction as the
      profile updates it describes
    - from/to semesters are sequential (1 -> 2 same year, 2 -> 1 next year),
      checked by the API before insert
"""

import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import DateTime, ForeignKey, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from pecup.db.base import Base


class SemesterPromotion(Base):
    __tablename__ = "semester_promotions"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    promoted_by: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("profiles.id", ondelete="CASCADE"),
        nullable=False, index=True,
    )
    from_semester_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("semesters.id", ondelete="CASCADE"),
        nullable=False,
    )
    to_semester_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("semesters.id", ondelete="CASCADE"),
        nullable=False,
    )
    branch_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("branches.id", ondelete="CASCADE"),
        nullable=False,
    )
    year_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("years.id", ondelete="CASCADE"),
        nullable=False,
    )
    promotion_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        index=True,
        default=lambda: datetime.now(timezone.utc),
    )
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    promoter: Mapped[Optional["Profile"]] = relationship("Profile", lazy="selectin")
    from_semester: Mapped["Semester"] = relationship(
        "Semester", foreign_keys=[from_semester_id], lazy="selectin",
    )
    to_semester: Mapped["Semester"] = relationship(
        "Semester", foreign_keys=[to_semester_id], lazy="selectin",
    )
    branch: Mapped["Branch"] = relationship("Branch", lazy="selectin")
    year: Mapped["Year"] = relationship("Year", lazy="selectin")
