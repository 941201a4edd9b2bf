"""Admin Account Endpoints — superadmin management of the admins table.

Invariants:
    - Every endpoint except bootstrap requires superadmin
    - Emails are stored and matched lowercase
    - bootstrap-superadmin only works in development, and only while the
      admins table is empty
"""

import logging

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from pecup.api.dependencies import get_identity_email, require_superadmin
from pecup.config import get_settings
from pecup.core.domain_types import AdminRole, AuditAction, AuditEntity, SortOrder
from pecup.core.errors import DuplicateEntryError, ForbiddenError, ResourceNotFoundError
from pecup.core.pagination import build_meta, parse_page_params
from pecup.core.permissions import AdminContext
from pecup.infrastructure.database import get_db
from pecup.models.admin import Admin
from pecup.schemas.admin import AdminCreate, AdminRoleUpdate
from pecup.services.audit import audit_failures, record_audit, record_failed_audit
from pecup.services.queries import fetch_page

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/admin", tags=["admin-accounts"])

SORTS = ("created_at", "email", "role")


def admin_view(row: Admin) -> dict:
    data = row.to_dict()
    return {key: data[key] for key in ("id", "email", "role", "created_at")}


async def _find_admin(db: AsyncSession, email: str) -> Admin | None:
    result = await db.execute(select(Admin).where(Admin.email == email.lower()))
    return result.scalar_one_or_none()


@router.get("/admins")
async def list_admins(
    page: str | None = Query(None),
    limit: str | None = Query(None),
    sort: str | None = Query(None),
    order: str | None = Query(None),
    admin: AdminContext = Depends(require_superadmin),
    db: AsyncSession = Depends(get_db),
):
    params = parse_page_params(
        page, limit, sort, order,
        allowed_sorts=SORTS, default_sort="created_at", default_order=SortOrder.DESC,
    )
    rows, count = await fetch_page(db, select(Admin), params, getattr(Admin, params.sort))
    return {"data": [admin_view(r) for r in rows], "meta": build_meta(params, count)}


@router.post("/admins", status_code=status.HTTP_201_CREATED)
async def add_admin(
    body: AdminCreate,
    admin: AdminContext = Depends(require_superadmin),
    db: AsyncSession = Depends(get_db),
):
    if await _find_admin(db, body.email):
        raise DuplicateEntryError("Admin already exists")
    async with audit_failures(
        actor_email=admin.email, actor_role=admin.role,
        action=AuditAction.CREATE, entity=AuditEntity.ADMIN,
    ):
        row = Admin(email=body.email, role=body.role)
        db.add(row)
        await db.flush()
        after = admin_view(row)
        await record_audit(
            db, actor_email=admin.email, actor_role=admin.role,
            action=AuditAction.CREATE, entity=AuditEntity.ADMIN,
            entity_id=row.id, after_data=after,
        )
        await db.commit()
    return after


@router.patch("/admins/{email}")
async def update_admin_role(
    email: str,
    body: AdminRoleUpdate,
    admin: AdminContext = Depends(require_superadmin),
    db: AsyncSession = Depends(get_db),
):
    row = await _find_admin(db, email)
    if row is None:
        raise ResourceNotFoundError("Admin", email.lower())
    before = admin_view(row)
    async with audit_failures(
        actor_email=admin.email, actor_role=admin.role,
        action=AuditAction.UPDATE, entity=AuditEntity.ADMIN, entity_id=row.id,
    ):
        row.role = body.role
        await db.flush()
        after = admin_view(row)
        await record_audit(
            db, actor_email=admin.email, actor_role=admin.role,
            action=AuditAction.UPDATE, entity=AuditEntity.ADMIN,
            entity_id=row.id, before_data=before, after_data=after,
        )
        await db.commit()
    return after


@router.delete("/admins/{email}")
async def remove_admin(
    email: str,
    admin: AdminContext = Depends(require_superadmin),
    db: AsyncSession = Depends(get_db),
):
    row = await _find_admin(db, email)
    if row is None:
        await record_failed_audit(
            actor_email=admin.email, actor_role=admin.role,
            action=AuditAction.DELETE, entity=AuditEntity.ADMIN,
            message="Admin not found",
        )
        raise ResourceNotFoundError("Admin", email.lower())
    before = admin_view(row)
    async with audit_failures(
        actor_email=admin.email, actor_role=admin.role,
        action=AuditAction.DELETE, entity=AuditEntity.ADMIN, entity_id=row.id,
    ):
        await db.delete(row)
        await record_audit(
            db, actor_email=admin.email, actor_role=admin.role,
            action=AuditAction.DELETE, entity=AuditEntity.ADMIN,
            entity_id=before["id"], before_data=before,
        )
        await db.commit()
    return {"success": True}


@router.post("/bootstrap-superadmin")
async def bootstrap_superadmin(
    email: str = Depends(get_identity_email),
    db: AsyncSession = Depends(get_db),
):
    if not get_settings().is_development:
        raise ForbiddenError()
    count = (await db.execute(select(func.count()).select_from(Admin))).scalar_one()
    if count > 0:
        return {"ok": True, "message": "Admins table not empty; no changes"}
    row = Admin(email=email, role=AdminRole.SUPERADMIN.value)
    db.add(row)
    await db.commit()
    logger.warning(f"Bootstrapped superadmin {email}", extra={"actor_email": email})
    return {"ok": True, "bootstrapped": {"email": row.email, "role": row.role}}
