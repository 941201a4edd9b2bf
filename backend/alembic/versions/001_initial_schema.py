"""Initial schema — lookups, profiles, admins, content, audit and config tables.

Revision ID: 001_initial
Revises: None
Create Date: 2026-10-18

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID

revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _created_at() -> sa.Column:
    return sa.Column(
        "created_at", sa.DateTime(timezone=True), nullable=False,
        server_default=sa.func.now(),
    )


def upgrade() -> None:
    op.create_table(
        "branches",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("code", sa.String(20), nullable=False, unique=True),
        _created_at(),
    )

    op.create_table(
        "years",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("batch_year", sa.Integer, nullable=False, unique=True),
        sa.Column("display_name", sa.String(100), nullable=False),
        _created_at(),
    )

    op.create_table(
        "semesters",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column(
            "year_id", UUID(as_uuid=True),
            sa.ForeignKey("years.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column("semester_number", sa.Integer, nullable=False),
        _created_at(),
        sa.UniqueConstraint("year_id", "semester_number", name="uq_semesters_year_number"),
        sa.CheckConstraint("semester_number IN (1, 2)", name="ck_semesters_number"),
    )

    op.create_table(
        "profiles",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("email", sa.String(320), nullable=False, unique=True),
        sa.Column("name", sa.String(200), nullable=False, server_default=""),
        sa.Column("roll_number", sa.String(50), nullable=True, unique=True),
        sa.Column("role", sa.String(20), nullable=False, server_default="student"),
        sa.Column("branch_id", UUID(as_uuid=True), sa.ForeignKey("branches.id"), nullable=True),
        sa.Column("year_id", UUID(as_uuid=True), sa.ForeignKey("years.id"), nullable=True),
        sa.Column("semester_id", UUID(as_uuid=True), sa.ForeignKey("semesters.id"), nullable=True),
        sa.Column("section", sa.String(20), nullable=True),
        _created_at(),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )

    op.create_table(
        "admins",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("email", sa.String(320), nullable=False, unique=True),
        sa.Column("role", sa.String(20), nullable=False, server_default="admin"),
        _created_at(),
        sa.CheckConstraint("role IN ('admin', 'superadmin')", name="ck_admins_role"),
    )

    op.create_table(
        "representatives",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column(
            "user_id", UUID(as_uuid=True),
            sa.ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column("branch_id", UUID(as_uuid=True), sa.ForeignKey("branches.id"), nullable=False),
        sa.Column("year_id", UUID(as_uuid=True), sa.ForeignKey("years.id"), nullable=False),
        sa.Column("assigned_by", sa.String(320), nullable=True),
        sa.Column("assigned_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("active", sa.Boolean, nullable=False, server_default=sa.true()),
    )
    op.create_index("ix_representatives_user_id", "representatives", ["user_id"])

    op.create_table(
        "resources",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("name", sa.String(300), nullable=False),
        sa.Column("title", sa.String(300), nullable=True),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("category", sa.String(50), nullable=False),
        sa.Column("subject", sa.String(100), nullable=False),
        sa.Column("unit", sa.Integer, nullable=False),
        sa.Column("type", sa.String(50), nullable=True),
        sa.Column("date", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("url", sa.Text, nullable=False),
        sa.Column("drive_link", sa.Text, nullable=True),
        sa.Column("is_pdf", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("file_type", sa.String(100), nullable=True),
        sa.Column("year", sa.Integer, nullable=True),
        sa.Column("branch", sa.String(20), nullable=True),
        sa.Column("semester", sa.Integer, nullable=True),
        sa.Column("branch_id", UUID(as_uuid=True), sa.ForeignKey("branches.id"), nullable=True),
        sa.Column("year_id", UUID(as_uuid=True), sa.ForeignKey("years.id"), nullable=True),
        sa.Column("semester_id", UUID(as_uuid=True), sa.ForeignKey("semesters.id"), nullable=True),
        sa.Column("archived", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column(
            "created_by", UUID(as_uuid=True),
            sa.ForeignKey("admins.id", ondelete="SET NULL"), nullable=True,
        ),
        _created_at(),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint("unit >= 1", name="ck_resources_unit_positive"),
    )
    op.create_index(
        "ix_resources_browse", "resources", ["category", "subject", "unit"],
    )

    op.create_table(
        "reminders",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("title", sa.String(300), nullable=False),
        sa.Column("due_date", sa.Date, nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("icon_type", sa.String(50), nullable=True),
        sa.Column("status", sa.String(50), nullable=True),
        sa.Column("year", sa.Integer, nullable=True),
        sa.Column("branch", sa.String(20), nullable=True),
        _created_at(),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
    )

    op.create_table(
        "recent_updates",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("title", sa.String(300), nullable=False),
        sa.Column("date", sa.String(50), nullable=True),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("year", sa.Integer, nullable=True),
        sa.Column("branch", sa.String(20), nullable=True),
        _created_at(),
    )

    op.create_table(
        "exams",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("subject", sa.String(100), nullable=False),
        sa.Column("exam_date", sa.Date, nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("year", sa.Integer, nullable=True),
        sa.Column("branch", sa.String(20), nullable=True),
        _created_at(),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
    )

    op.create_table(
        "audit_logs",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("actor_email", sa.String(320), nullable=False),
        sa.Column("actor_role", sa.String(20), nullable=False),
        sa.Column("action", sa.String(30), nullable=False),
        sa.Column("entity", sa.String(30), nullable=False),
        sa.Column("entity_id", sa.String(64), nullable=True),
        sa.Column("success", sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column("message", sa.Text, nullable=True),
        sa.Column("before_data", sa.JSON, nullable=True),
        sa.Column("after_data", sa.JSON, nullable=True),
        _created_at(),
    )
    op.create_index("ix_audit_logs_created_at", "audit_logs", ["created_at"])

    op.create_table(
        "settings",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=False),
        sa.Column("drive_folder_id", sa.String(200), nullable=True),
        sa.Column("storage_bucket", sa.String(100), nullable=True),
        sa.Column("pdf_to_drive", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("non_pdf_to_storage", sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint("id = 1", name="ck_settings_singleton"),
    )

    op.create_table(
        "academic_config",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("config_key", sa.String(100), nullable=False, unique=True),
        sa.Column("config_value", sa.JSON, nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )

    op.create_table(
        "academic_calendar",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=False),
        sa.Column("current_year_id", UUID(as_uuid=True), sa.ForeignKey("years.id"), nullable=False),
        sa.Column("current_semester_id", UUID(as_uuid=True), sa.ForeignKey("semesters.id"), nullable=False),
        sa.Column("last_updated", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_by", sa.String(320), nullable=True),
        sa.CheckConstraint("id = 1", name="ck_academic_calendar_singleton"),
    )

    op.create_table(
        "hero_texts",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("text", sa.Text, nullable=False),
        sa.Column("priority", sa.Integer, nullable=False, server_default="0"),
        sa.Column("time_limit", sa.DateTime(timezone=True), nullable=True),
        _created_at(),
    )


def downgrade() -> None:
    op.drop_table("hero_texts")
    op.drop_table("academic_calendar")
    op.drop_table("academic_config")
    op.drop_table("settings")
    op.drop_index("ix_audit_logs_created_at", table_name="audit_logs")
    op.drop_table("audit_logs")
    op.drop_table("exams")
    op.drop_table("recent_updates")
    op.drop_table("reminders")
    op.drop_index("ix_resources_browse", table_name="resources")
    op.drop_table("resources")
    op.drop_index("ix_representatives_user_id", table_name="representatives")
    op.drop_table("representatives")
    op.drop_table("admins")
    op.drop_table("profiles")
    op.drop_table("semesters")
    op.drop_table("years")
    op.drop_table("branches")
