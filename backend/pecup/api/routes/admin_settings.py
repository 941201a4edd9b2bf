"""Admin Settings Endpoints — read and update the upload-routing singleton.

Invariants:
    - superadmin only; reads are audited too
    - Only SettingsUpdate fields can change; updated_at bumps on every PUT
"""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from pecup.api.dependencies import require_superadmin
from pecup.core.domain_types import AuditAction, AuditEntity
from pecup.core.permissions import AdminContext
from pecup.infrastructure.database import get_db
from pecup.schemas.admin import SettingsUpdate
from pecup.services.app_settings import get_or_create_settings_row
from pecup.services.audit import audit_failures, record_audit

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/admin/settings", tags=["admin-settings"])


@router.get("")
async def read_settings(
    admin: AdminContext = Depends(require_superadmin),
    db: AsyncSession = Depends(get_db),
):
    row = await get_or_create_settings_row(db)
    data = row.to_dict()
    await record_audit(
        db, actor_email=admin.email, actor_role=admin.role,
        action=AuditAction.READ, entity=AuditEntity.SETTINGS,
    )
    await db.commit()
    return data


@router.put("")
async def update_settings(
    body: SettingsUpdate,
    admin: AdminContext = Depends(require_superadmin),
    db: AsyncSession = Depends(get_db),
):
    async with audit_failures(
        actor_email=admin.email, actor_role=admin.role,
        action=AuditAction.SETTINGS_UPDATE, entity=AuditEntity.SETTINGS,
    ):
        row = await get_or_create_settings_row(db)
        before = row.to_dict()
        for key, value in body.model_dump(exclude_unset=True).items():
            setattr(row, key, value)
        row.updated_at = datetime.now(timezone.utc)
        await db.flush()
        after = row.to_dict()
        await record_audit(
            db, actor_email=admin.email, actor_role=admin.role,
            action=AuditAction.SETTINGS_UPDATE, entity=AuditEntity.SETTINGS,
            before_data=before, after_data=after,
        )
        await db.commit()
    return after
