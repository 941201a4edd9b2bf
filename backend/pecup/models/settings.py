"""Settings ORM — singleton row of upload routing switches.

Invariants:
    - Exactly one row, id = 1 (CheckConstraint); created lazily on first read
"""

from datetime import datetime, timezone

from sqlalchemy import Boolean, CheckConstraint, DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from pecup.db.base import Base

SETTINGS_ROW_ID = 1


class Setting(Base):
    __tablename__ = "settings"
    __table_args__ = (
        CheckConstraint("id = 1", name="ck_settings_singleton"),
    )

    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, default=SETTINGS_ROW_ID, autoincrement=False,
    )
    drive_folder_id: Mapped[str | None] = mapped_column(String(200), nullable=True)
    storage_bucket: Mapped[str | None] = mapped_column(String(100), nullable=True)
    pdf_to_drive: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    non_pdf_to_storage: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
