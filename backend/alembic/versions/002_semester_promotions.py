"""Add semester_promotions history table.

Revision ID: 002_semester_promotions
Revises: 001_initial
Create Date: 2026-10-18

Records every bulk move of a branch/batch from one semester to the next,
with the profile that ran it.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID

revision: str = "002_semester_promotions"
down_revision: Union[str, None] = "001_initial"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "semester_promotions",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column(
            "promoted_by", UUID(as_uuid=True),
            sa.ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column(
            "from_semester_id", UUID(as_uuid=True),
            sa.ForeignKey("semesters.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column(
            "to_semester_id", UUID(as_uuid=True),
            sa.ForeignKey("semesters.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column(
            "branch_id", UUID(as_uuid=True),
            sa.ForeignKey("branches.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column(
            "year_id", UUID(as_uuid=True),
            sa.ForeignKey("years.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column(
            "promotion_date", sa.DateTime(timezone=True), nullable=False,
            server_default=sa.func.now(),
        ),
        sa.Column("notes", sa.Text, nullable=True),
        sa.Column(
            "created_at", sa.DateTime(timezone=True), nullable=False,
            server_default=sa.func.now(),
        ),
    )
    op.create_index(
        "ix_semester_promotions_promoted_by", "semester_promotions", ["promoted_by"],
    )
    op.create_index(
        "ix_semester_promotions_promotion_date", "semester_promotions", ["promotion_date"],
    )


def downgrade() -> None:
    op.drop_index("ix_semester_promotions_promotion_date", table_name="semester_promotions")
    op.drop_index("ix_semester_promotions_promoted_by", table_name="semester_promotions")
    op.drop_table("semester_promotions")
