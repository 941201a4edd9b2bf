"""Audit Service — append audit_logs rows for administrative actions.

Invariants:
    - record_audit adds to the CALLER's session: the row commits or rolls back
      together with the mutation it describes
    - record_failed_audit uses its own session (the request session may be
      mid-rollback) and never raises
    - actor_role is normalized through audit_role (representative -> admin)

Design Decisions:
    - Failure rows written out-of-band via db_manager, the same way other
      out-of-request writers open sessions
    - Logging a failed audit write is enough; the API response must not change
      because the audit table is unavailable
"""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from pecup.core.domain_types import AuditAction, AuditEntity
from pecup.core.permissions import audit_role
from pecup.models.audit_log import AuditLog

logger = logging.getLogger(__name__)


def _entry(
    actor_email: str,
    actor_role: str,
    action: AuditAction,
    entity: AuditEntity,
    entity_id: Any = None,
    success: bool = True,
    message: str | None = None,
    before_data: dict | None = None,
    after_data: dict | None = None,
) -> AuditLog:
    return AuditLog(
        actor_email=actor_email,
        actor_role=audit_role(actor_role),
        action=AuditAction(action).value,
        entity=AuditEntity(entity).value,
        entity_id=str(entity_id) if entity_id is not None else None,
        success=success,
        message=message,
        before_data=before_data,
        after_data=after_data,
    )


async def record_audit(
    db: AsyncSession,
    *,
    actor_email: str,
    actor_role: str,
    action: AuditAction,
    entity: AuditEntity,
    entity_id: Any = None,
    success: bool = True,
    message: str | None = None,
    before_data: dict | None = None,
    after_data: dict | None = None,
) -> AuditLog:
    """Stage an audit row in the caller's transaction."""
    row = _entry(
        actor_email, actor_role, action, entity, entity_id,
        success, message, before_data, after_data,
    )
    db.add(row)
    logger.info(
        f"Audit {row.action} {row.entity}",
        extra={
            "actor_email": actor_email, "action": row.action,
            "entity": row.entity, "entity_id": row.entity_id,
        },
    )
    return row


async def record_failed_audit(
    *,
    actor_email: str,
    actor_role: str,
    action: AuditAction,
    entity: AuditEntity,
    entity_id: Any = None,
    message: str | None = None,
) -> None:
    """Persist a success=False row in a fresh session. Never raises."""
    from pecup.infrastructure.database import db_manager

    if not db_manager:
        logger.error("Cannot record failed audit: database not initialized")
        return
    try:
        async with db_manager.session() as db:
            db.add(_entry(
                actor_email, actor_role, action, entity, entity_id,
                success=False, message=message,
            ))
            await db.commit()
    except Exception as e:
        logger.error(f"Failed to write audit failure row: {e}", exc_info=True)


@asynccontextmanager
async def audit_failures(
    *,
    actor_email: str,
    actor_role: str,
    action: AuditAction,
    entity: AuditEntity,
    entity_id: Any = None,
) -> AsyncIterator[None]:
    """Record a success=False row for any exception in the block, then re-raise."""
    try:
        yield
    except Exception as e:
        logger.error(
            f"{AuditAction(action).value} {AuditEntity(entity).value} failed: {e}",
            extra={"actor_email": actor_email, "entity_id": entity_id},
        )
        await record_failed_audit(
            actor_email=actor_email, actor_role=actor_role,
            action=action, entity=entity, entity_id=entity_id,
            message=str(e),
        )
        raise
