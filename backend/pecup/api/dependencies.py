"""Auth Dependencies — resolve the caller from the bearer token for route handlers.

Invariants:
    - No/invalid token on a protected route -> 401; identified but not allowed -> 403
    - Optional identity never fails the request: a bad token is anonymous
    - Admin role comes from the admins table, content permissions from the
      profile role matrix (core/permissions.py)

Design Decisions:
    - Dependency factories (require_admin(min_role), require_permission(action,
      entity)) so each route states its rule in its signature
    - AUTHORIZED_EMAILS only grants superadmin in development, with a warning,
      for bootstrapping a fresh database
"""

import logging

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from pecup.config import get_settings
from pecup.core.domain_types import AdminRole, PermissionAction, PermissionEntity
from pecup.core.errors import ForbiddenError, UnauthorizedError
from pecup.core.permissions import (
    AdminContext, UserContext, check_permission, role_satisfies,
)
from pecup.infrastructure.database import get_db
from pecup.infrastructure.tokens import decode_identity_token
from pecup.models.admin import Admin
from pecup.services.user_context import load_user_context

logger = logging.getLogger(__name__)

_bearer = HTTPBearer(auto_error=False)


def _decode(credentials: HTTPAuthorizationCredentials) -> str:
    settings = get_settings()
    return decode_identity_token(
        credentials.credentials, settings.auth_jwt_secret, settings.auth_jwt_algorithm,
    )


async def get_identity_email(
    credentials: HTTPAuthorizationCredentials | None = Depends(_bearer),
) -> str:
    if credentials is None:
        raise UnauthorizedError()
    return _decode(credentials)


async def get_optional_email(
    credentials: HTTPAuthorizationCredentials | None = Depends(_bearer),
) -> str | None:
    if credentials is None:
        return None
    try:
        return _decode(credentials)
    except UnauthorizedError:
        logger.info("Ignoring invalid bearer token on public endpoint")
        return None


async def get_user_context(
    email: str = Depends(get_identity_email),
    db: AsyncSession = Depends(get_db),
) -> UserContext:
    """Profile-backed caller; 401 when the email has no profile."""
    context = await load_user_context(db, email)
    if context is None:
        raise UnauthorizedError()
    return context


async def get_optional_user_context(
    email: str | None = Depends(get_optional_email),
    db: AsyncSession = Depends(get_db),
) -> UserContext | None:
    if email is None:
        return None
    return await load_user_context(db, email)


async def resolve_admin(db: AsyncSession, email: str) -> AdminContext | None:
    """Admin row for email, or the development fallback; None when neither applies."""
    result = await db.execute(select(Admin).where(Admin.email == email))
    admin = result.scalar_one_or_none()
    if admin is not None:
        return AdminContext(email=admin.email, role=AdminRole(admin.role))
    settings = get_settings()
    if settings.is_development and email in settings.authorized_emails:
        logger.warning(
            f"Granting development superadmin to {email} (AUTHORIZED_EMAILS)",
            extra={"actor_email": email},
        )
        return AdminContext(email=email, role=AdminRole.SUPERADMIN)
    return None


def require_admin(min_role: AdminRole = AdminRole.ADMIN):
    async def dependency(
        email: str = Depends(get_identity_email),
        db: AsyncSession = Depends(get_db),
    ) -> AdminContext:
        admin = await resolve_admin(db, email)
        if admin is None or not role_satisfies(admin.role, min_role):
            raise ForbiddenError()
        return admin

    return dependency


def require_permission(action: PermissionAction, entity: PermissionEntity):
    async def dependency(
        context: UserContext = Depends(get_user_context),
    ) -> UserContext:
        check_permission(context, action, entity)
        return context

    return dependency


async def require_staff(
    context: UserContext = Depends(get_user_context),
) -> UserContext:
    """Admin list endpoints: admins, superadmins and representatives."""
    if not context.is_staff:
        raise ForbiddenError()
    return context


require_superadmin = require_admin(AdminRole.SUPERADMIN)
