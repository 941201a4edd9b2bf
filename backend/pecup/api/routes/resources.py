"""Public Resource Endpoints — browsing and short-lived secure links.

Invariants:
    - Archived and soft-deleted resources are never listed; soft-deleted ones
      are never linked
    - Secure URLs are only minted for resources inside the caller's filter
      (students: own branch/year/semester; representatives: assignments;
      admins: everything); anything else is indistinguishable from missing
    - Secure-URL responses are never cached
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import JSONResponse, RedirectResponse
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from pecup.api.dependencies import get_user_context
from pecup.config import get_settings
from pecup.core.errors import ForbiddenError, InputValidationError, ResourceNotFoundError
from pecup.core.pagination import to_int
from pecup.core.permissions import UserContext, matches_filter, resource_filter
from pecup.infrastructure.database import get_db
from pecup.infrastructure.tokens import create_file_token, decode_file_token
from pecup.models.resource import Resource

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1", tags=["resources"])

NO_STORE_HEADERS = {
    "Cache-Control": "no-store, max-age=0, must-revalidate",
    "Pragma": "no-cache",
}


def public_view(resource: Resource) -> dict:
    return {
        "id": str(resource.id),
        "name": resource.name,
        "description": resource.description or "",
        "date": resource.date.isoformat() if resource.date else "",
        "type": resource.type or "",
        "url": resource.url,
    }


@router.get("/resources")
async def list_resources(
    category: str | None = Query(None),
    subject: str | None = Query(None),
    unit: str | None = Query(None),
    db: AsyncSession = Depends(get_db),
):
    if not category or not subject or not unit:
        raise InputValidationError(
            "Missing required query parameters: category, subject, unit",
        )
    unit_number = to_int(unit)
    if unit_number is None or unit_number <= 0:
        raise InputValidationError("Invalid unit number", field="unit")

    result = await db.execute(
        select(Resource)
        .where(
            func.lower(Resource.category) == category.strip().lower(),
            func.lower(Resource.subject) == subject.strip().lower(),
            Resource.unit == unit_number,
            Resource.archived.is_(False),
            Resource.deleted_at.is_(None),
        )
        .order_by(Resource.date.desc()),
    )
    return [public_view(r) for r in result.scalars().all()]


@router.get("/resources/{resource_id}/secure-url")
async def create_secure_url(
    resource_id: UUID,
    request: Request,
    context: UserContext = Depends(get_user_context),
    db: AsyncSession = Depends(get_db),
):
    resource = await db.get(Resource, resource_id)
    if (
        resource is None
        or resource.deleted_at is not None
        or not matches_filter(
            resource_filter(context),
            resource.branch_id, resource.year_id, resource.semester_id,
        )
    ):
        logger.warning(
            f"Secure URL denied for {context.email}",
            extra={"actor_email": context.email, "entity_id": resource_id},
        )
        raise ForbiddenError("Access denied or resource not found")

    settings = get_settings()
    token, expires_at = create_file_token(
        resource.id, resource.url, settings.auth_jwt_secret,
        settings.secure_url_ttl_seconds, settings.auth_jwt_algorithm,
    )
    return JSONResponse(
        content={
            "secureUrl": str(request.url_for("open_secure_file", token=token)),
            "expiresAt": expires_at.isoformat(),
            "expiresInSeconds": settings.secure_url_ttl_seconds,
        },
        headers=NO_STORE_HEADERS,
    )


@router.get("/secure-file/{token}", name="open_secure_file")
async def open_secure_file(token: str, db: AsyncSession = Depends(get_db)):
    settings = get_settings()
    claims = decode_file_token(token, settings.auth_jwt_secret, settings.auth_jwt_algorithm)
    resource_id = claims["resource_id"]
    try:
        resource = await db.get(Resource, UUID(resource_id))
    except (TypeError, ValueError):
        raise ForbiddenError("Invalid or expired token")
    if resource is None or resource.deleted_at is not None:
        raise ResourceNotFoundError("Resource", str(resource_id))
    return RedirectResponse(claims["url"], status_code=307, headers=NO_STORE_HEADERS)
