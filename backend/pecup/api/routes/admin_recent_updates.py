"""Admin Recent-Update Endpoints — paginated list and CRUD with audit.

Invariants:
    - Same access rules as reminders: staff list, scoped create, admin edit/delete
    - date is free text shown as-is on the home page
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
from pecup.models.announcements import RecentUpdate
from pecup.schemas.announcements import RecentUpdateCreate, RecentUpdateUpdate
from pecup.services.announcements import check_target_scope
from pecup.services.audit import audit_failures, record_audit
from pecup.services.queries import fetch_page, get_or_404

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/admin/recent-updates", tags=["admin-recent-updates"])

SORTS = ("created_at", "date", "title")


@router.get("")
async def list_admin_recent_updates(
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
        allowed_sorts=SORTS, default_sort="created_at", default_order=SortOrder.DESC,
    )
    query = select(RecentUpdate)
    if to_int(year):
        query = query.where(RecentUpdate.year == to_int(year))
    if branch:
        query = query.where(RecentUpdate.branch == branch)
    rows, count = await fetch_page(
        db, query, params, getattr(RecentUpdate, params.sort),
    )
    return {"data": [u.to_dict() for u in rows], "meta": build_meta(params, count)}


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_recent_update(
    body: RecentUpdateCreate,
    context: UserContext = Depends(
        require_permission(PermissionAction.WRITE, PermissionEntity.RECENT_UPDATES),
    ),
    db: AsyncSession = Depends(get_db),
):
    await check_target_scope(db, context, body.year, body.branch)
    async with audit_failures(
        actor_email=context.email, actor_role=context.role,
        action=AuditAction.CREATE, entity=AuditEntity.RECENT_UPDATE,
    ):
        update = RecentUpdate(**body.model_dump())
        db.add(update)
        await db.flush()
        after = update.to_dict()
        await record_audit(
            db, actor_email=context.email, actor_role=context.role,
            action=AuditAction.CREATE, entity=AuditEntity.RECENT_UPDATE,
            entity_id=update.id, after_data=after,
        )
        await db.commit()
    return after


@router.patch("/{update_id}")
async def update_recent_update(
    update_id: UUID,
    body: RecentUpdateUpdate,
    admin: AdminContext = Depends(require_admin()),
    db: AsyncSession = Depends(get_db),
):
    update = await get_or_404(db, RecentUpdate, update_id, "Recent update")
    before = update.to_dict()
    async with audit_failures(
        actor_email=admin.email, actor_role=admin.role,
        action=AuditAction.UPDATE, entity=AuditEntity.RECENT_UPDATE,
        entity_id=update_id,
    ):
        for key, value in body.model_dump(exclude_unset=True).items():
            setattr(update, key, value)
        await db.flush()
        after = update.to_dict()
        await record_audit(
            db, actor_email=admin.email, actor_role=admin.role,
            action=AuditAction.UPDATE, entity=AuditEntity.RECENT_UPDATE,
            entity_id=update_id, before_data=before, after_data=after,
        )
        await db.commit()
    return after


@router.delete("/{update_id}")
async def delete_recent_update(
    update_id: UUID,
    admin: AdminContext = Depends(require_admin()),
    db: AsyncSession = Depends(get_db),
):
    update = await get_or_404(db, RecentUpdate, update_id, "Recent update")
    before = update.to_dict()
    async with audit_failures(
        actor_email=admin.email, actor_role=admin.role,
        action=AuditAction.DELETE, entity=AuditEntity.RECENT_UPDATE,
        entity_id=update_id,
    ):
        await db.delete(update)
        await record_audit(
            db, actor_email=admin.email, actor_role=admin.role,
            action=AuditAction.DELETE, entity=AuditEntity.RECENT_UPDATE,
            entity_id=update_id, before_data=before,
        )
        await db.commit()
    return {"success": True}
