"""Admin ORM — staff allowed into the admin dashboard.

Invariants:
    - email unique, lowercase
    - role is "admin" or "superadmin" (enforced by CheckConstraint)
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import CheckConstraint, DateTime, String
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from pecup.db.base import Base


class Admin(Base):
    __tablename__ = "admins"
    __table_args__ = (
        CheckConstraint("role IN ('admin', 'superadmin')", name="ck_admins_role"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    email: Mapped[str] = mapped_column(String(320), nullable=False, unique=True)
    role: Mapped[str] = mapped_column(String(20), nullable=False, default="admin")
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
