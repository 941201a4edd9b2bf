"""Admin Exam Endpoints — paginated list and CRUD with audit.

Invariants:
    - Same access rules as reminders: staff list, scoped create, admin edit/delete
    - Delete is soft (deleted_at); deleted exams disappear from lists and 404 afterwards
"""

import logging
from datetime import datetime, timezone
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
from pecup.models.announcements import Exam
from pecup.schemas.announcements import ExamCreate, ExamUpdate
from pecup.services.announcements import check_target_scope
from pecup.services.audit import audit_failures, record_audit
from pecup.services.queries import fetch_page, get_or_404

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/admin/exams", tags=["admin-exams"])

SORTS = ("exam_date", "subject", "created_at")


@router.get("")
async def list_admin_exams(
    page: str | None = Query(None),
    limit: str | None = Query(None),
    sort: str | None = Query(None),
    order: str | None = Query(None),
    year: str | None = Query(None),
    branch: str | None = Query(None),
    context: UserContext = Depends(require_staff),
    db: AsyncSession = Depends(get_db),
):
    params = parse_page_params(
        page, limit, sort, order,
        allowed_sorts=SORTS, default_sort="exam_date", default_order=SortOrder.ASC,
    )
    query = select(Exam).where(Exam.deleted_at.is_(None))
    if to_int(year):
        query = query.where(Exam.year == to_int(year))
    if branch:
        query = query.where(Exam.branch == branch)
    rows, count = await fetch_page(db, query, params, getattr(Exam, params.sort))
    return {"data": [e.to_dict() for e in rows], "meta": build_meta(params, count)}


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_exam(
    body: ExamCreate,
    context: UserContext = Depends(
        require_permission(PermissionAction.WRITE, PermissionEntity.EXAMS),
    ),
    db: AsyncSession = Depends(get_db),
):
    await check_target_scope(db, context, body.year, body.branch)
    async with audit_failures(
        actor_email=context.email, actor_role=context.role,
        action=AuditAction.CREATE, entity=AuditEntity.EXAM,
    ):
        exam = Exam(**body.model_dump())
        db.add(exam)
        await db.flush()
        after = exam.to_dict()
        await record_audit(
            db, actor_email=context.email, actor_role=context.role,
            action=AuditAction.CREATE, entity=AuditEntity.EXAM,
            entity_id=exam.id, after_data=after,
        )
        await db.commit()
    return after


@router.patch("/{exam_id}")
async def update_exam(
    exam_id: UUID,
    body: ExamUpdate,
    admin: AdminContext = Depends(require_admin()),
    db: AsyncSession = Depends(get_db),
):
    exam = await get_or_404(db, Exam, exam_id, "Exam")
    before = exam.to_dict()
    async with audit_failures(
        actor_email=admin.email, actor_role=admin.role,
        action=AuditAction.UPDATE, entity=AuditEntity.EXAM, entity_id=exam_id,
    ):
        for key, value in body.model_dump(exclude_unset=True).items():
            setattr(exam, key, value)
        await db.flush()
        after = exam.to_dict()
        await record_audit(
            db, actor_email=admin.email, actor_role=admin.role,
            action=AuditAction.UPDATE, entity=AuditEntity.EXAM,
            entity_id=exam_id, before_data=before, after_data=after,
        )
        await db.commit()
    return after


@router.delete("/{exam_id}")
async def delete_exam(
    exam_id: UUID,
    admin: AdminContext = Depends(require_admin()),
    db: AsyncSession = Depends(get_db),
):
    exam = await get_or_404(db, Exam, exam_id, "Exam")
    before = exam.to_dict()
    async with audit_failures(
        actor_email=admin.email, actor_role=admin.role,
        action=AuditAction.SOFT_DELETE, entity=AuditEntity.EXAM, entity_id=exam_id,
    ):
        exam.deleted_at = datetime.now(timezone.utc)
        await record_audit(
            db, actor_email=admin.email, actor_role=admin.role,
            action=AuditAction.SOFT_DELETE, entity=AuditEntity.EXAM,
            entity_id=exam_id, before_data=before,
        )
        await db.commit()
    return {"success": True}
