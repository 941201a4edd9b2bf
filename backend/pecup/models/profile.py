"""Profile ORM — one row per signed-in person (students and representatives).

Invariants:
    - email is unique and stored lowercase
    - roll_number is unique when present
    - role defaults to "student"

Design Decisions:
    - Relations loaded with selectin so /profile and the user context are
      one round-trip per relation in async code (no lazy loads)
"""

import uuid
from typing import Optional
from datetime import datetime, timezone

from sqlalchemy import DateTime, ForeignKey, String
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from pecup.db.base import Base


class Profile(Base):
    __tablename__ = "profiles"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    email: Mapped[str] = mapped_column(String(320), nullable=False, unique=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False, default="")
    roll_number: Mapped[str | None] = mapped_column(
        String(50), nullable=True, unique=True,
    )
    role: Mapped[str] = mapped_column(
        String(20), nullable=False, default="student",
    )
    branch_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True), ForeignKey("branches.id"), nullable=True,
    )
    year_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True), ForeignKey("years.id"), nullable=True,
    )
    semester_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True), ForeignKey("semesters.id"), nullable=True,
    )
    section: Mapped[str | None] = mapped_column(String(20), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    branch: Mapped[Optional["Branch"]] = relationship("Branch", lazy="selectin")
    year: Mapped[Optional["Year"]] = relationship("Year", lazy="selectin")
    semester: Mapped[Optional["Semester"]] = relationship("Semester", lazy="selectin")
