"""Admin Reminder Endpoints — paginated list and CRUD with audit.

Invariants:
    - Listing open to staff; creating requires write permission on reminders
      (representatives inside their scope); PATCH/DELETE are admin-only
    - Only ReminderUpdate fields can change
    - Delete is permanent; the before snapshot is kept in the audit row
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from pecup.api.dependencies import require_admin, require_permission, require_staff
from pecup.core.domain_types import (
    AuditAction, AuditEntity, PermissionAction, PermissionEntity, SortOrder,
)
from pecup.core.pagination import build_meta, parse_page_params, to_int
from pecup.core.permissions import AdminContext, UserContext
from pecup.infrastructure.database import get_db
from pecup.models.announcements import Reminder
from pecup.schemas.announcements import ReminderCreate, ReminderUpdate
from pecup.services.announcements import check_target_scope
from pecup.services.audit import audit_failures, record_audit
from pecup.services.queries import fetch_page, get_or_404

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/admin/reminders", tags=["admin-reminders"])

SORTS = ("due_date", "title", "created_at")


@router.get("")
async def list_admin_reminders(
    page: str | None = Query(None),
    limit: str | None = Query(None),
    sort: str | None = Query(None),
    order: str | None = Query(None),
    status_filter: str | None = Query(None, alias="status"),
    year: str | None = Query(None),
    branch: str | None = Query(None),
    context: UserContext = Depends(require_staff),
    db: AsyncSession = Depends(get_db),
):
    params = parse_page_params(
        page, limit, sort, order,
        allowed_sorts=SORTS, default_sort="due_date", default_order=SortOrder.ASC,
    )
    query = select(Reminder).where(Reminder.deleted_at.is_(None))
    if status_filter:
        query = query.where(Reminder.status == status_filter)
    if to_int(year):
        query = query.where(Reminder.year == to_int(year))
    if branch:
        query = query.where(Reminder.branch == branch)
    rows, count = await fetch_page(db, query, params, getattr(Reminder, params.sort))
    return {"data": [r.to_dict() for r in rows], "meta": build_meta(params, count)}


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_reminder(
    body: ReminderCreate,
    context: UserContext = Depends(
        require_permission(PermissionAction.WRITE, PermissionEntity.REMINDERS),
    ),
    db: AsyncSession = Depends(get_db),
):
    await check_target_scope(db, context, body.year, body.branch)
    async with audit_failures(
        actor_email=context.email, actor_role=context.role,
        action=AuditAction.CREATE, entity=AuditEntity.REMINDER,
    ):
        reminder = Reminder(**body.model_dump())
        db.add(reminder)
        await db.flush()
        after = reminder.to_dict()
        await record_audit(
            db, actor_email=context.email, actor_role=context.role,
            action=AuditAction.CREATE, entity=AuditEntity.REMINDER,
            entity_id=reminder.id, after_data=after,
        )
        await db.commit()
    return after


@router.patch("/{reminder_id}")
async def update_reminder(
    reminder_id: UUID,
    body: ReminderUpdate,
    admin: AdminContext = Depends(require_admin()),
    db: AsyncSession = Depends(get_db),
):
    reminder = await get_or_404(db, Reminder, reminder_id, "Reminder")
    before = reminder.to_dict()
    async with audit_failures(
        actor_email=admin.email, actor_role=admin.role,
        action=AuditAction.UPDATE, entity=AuditEntity.REMINDER,
        entity_id=reminder_id,
    ):
        for key, value in body.model_dump(exclude_unset=True).items():
            setattr(reminder, key, value)
        await db.flush()
        after = reminder.to_dict()
        await record_audit(
            db, actor_email=admin.email, actor_role=admin.role,
            action=AuditAction.UPDATE, entity=AuditEntity.REMINDER,
            entity_id=reminder_id, before_data=before, after_data=after,
        )
        await db.commit()
    return after


@router.delete("/{reminder_id}")
async def delete_reminder(
    reminder_id: UUID,
    admin: AdminContext = Depends(require_admin()),
    db: AsyncSession = Depends(get_db),
):
    reminder = await get_or_404(db, Reminder, reminder_id, "Reminder")
    before = reminder.to_dict()
    async with audit_failures(
        actor_email=admin.email, actor_role=admin.role,
        action=AuditAction.DELETE, entity=AuditEntity.REMINDER,
        entity_id=reminder_id,
    ):
        await db.delete(reminder)
        await record_audit(
            db, actor_email=admin.email, actor_role=admin.role,
            action=AuditAction.DELETE, entity=AuditEntity.REMINDER,
            entity_id=reminder_id, before_data=before,
        )
        await db.commit()
    return {"success": True}
