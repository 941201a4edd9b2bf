"""Admin Resource Endpoints — list, create, update and delete resources.

Invariants:
    - Listing is open to staff; representatives only see their assigned
      branch/year ids
    - Create accepts multipart (with "file") or JSON (with "url")
    - Representatives create, update and delete only inside an active
      assignment; on create, branch/year ids default to their first assignment
    - branch_id/year_id/semester_id follow the branch code, batch year and
      semester number: resolved on create, re-resolved when PATCH changes them
    - 413/415 are raised before anything is uploaded
    - Every mutation writes an audit row; failures write a success=False row
    - DELETE hard-deletes only when the underlying object is gone, otherwise
      it soft-deletes and reports softDeleted

Design Decisions:
    - Google Drive is read-only from here: Drive links are stored as URLs,
      never uploaded to or removed
    - On PATCH with a file the old storage object is removed before the new
      upload; a failed removal aborts the update (502)
"""

import logging
from datetime import datetime, timezone
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from pecup.api.dependencies import require_permission, require_staff
from pecup.api.request_body import parse_model, read_payload
from pecup.config import get_settings
from pecup.core.domain_types import (
    AuditAction, AuditEntity, PermissionAction, PermissionEntity, Role, SortOrder,
)
from pecup.core.errors import (
    ForbiddenError, InputValidationError,
)
from pecup.core.file_urls import is_drive_link, looks_like_pdf, parse_storage_path
from pecup.core.pagination import build_meta, parse_page_params, to_int
from pecup.core.permissions import UserContext, has_scope, resource_filter
from pecup.infrastructure.database import get_db
from pecup.infrastructure.storage_client import StorageClient, get_storage_client
from pecup.models.admin import Admin
from pecup.models.resource import Resource
from pecup.schemas.resource import ResourceCreate, ResourceUpdate
from pecup.services.app_settings import upload_bucket
from pecup.services.queries import fetch_page, get_or_404
from pecup.services.audit import audit_failures, record_audit
from pecup.services.lookups import LookupService
from pecup.services.resource_uploads import (
    check_upload, remove_underlying, store_upload,
)

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/admin/resources", tags=["admin-resources"])

SORTS = ("date", "name", "created_at")
LIST_COLUMNS = (
    "id", "name", "category", "subject", "unit", "type", "date", "is_pdf",
    "url", "year", "branch", "archived", "semester",
)
SCOPE_FORBIDDEN = "Forbidden: Cannot manage resources for this branch/year"


def list_view(resource: Resource) -> dict:
    data = resource.to_dict()
    return {key: data[key] for key in LIST_COLUMNS}


def check_resource_scope(context: UserContext, branch_id, year_id) -> None:
    if context.role == Role.REPRESENTATIVE and not has_scope(context, branch_id, year_id):
        raise ForbiddenError(SCOPE_FORBIDDEN)


async def _read_upload(upload) -> tuple[bytes, str, str | None]:
    data = await upload.read()
    return data, upload.filename or "upload", upload.content_type


async def relinked_ids(db: AsyncSession, resource: Resource, changes: dict) -> dict:
    """Lookup ids behind whichever of branch/year/semester a PATCH touches."""
    lookups = LookupService(db)
    ids = {}
    if "branch" in changes:
        ids["branch_id"] = await lookups.branch_id_by_code(changes["branch"])
    if "year" in changes:
        ids["year_id"] = await lookups.year_id_by_batch_year(changes["year"])
    if "year" in changes or "semester" in changes:
        ids["semester_id"] = await lookups.semester_id(
            ids.get("year_id", resource.year_id),
            changes.get("semester", resource.semester),
        )
    return ids


@router.get("")
async def list_admin_resources(
    page: str | None = Query(None),
    limit: str | None = Query(None),
    sort: str | None = Query(None),
    order: str | None = Query(None),
    subject: str | None = Query(None),
    category: str | None = Query(None),
    unit: str | None = Query(None),
    year: str | None = Query(None),
    semester: str | None = Query(None),
    branch: str | None = Query(None),
    archived: str | None = Query(None),
    context: UserContext = Depends(require_staff),
    db: AsyncSession = Depends(get_db),
):
    params = parse_page_params(
        page, limit, sort, order,
        allowed_sorts=SORTS, default_sort="date", default_order=SortOrder.DESC,
        max_limit=1000 if get_settings().is_development else 200,
    )
    query = select(Resource).where(Resource.deleted_at.is_(None))
    if subject:
        query = query.where(Resource.subject.ilike(f"%{subject}%"))
    if category:
        query = query.where(Resource.category == category)
    for column, raw in ((Resource.unit, unit), (Resource.year, year), (Resource.semester, semester)):
        value = to_int(raw)
        if value is not None:
            query = query.where(column == value)
    if branch:
        query = query.where(Resource.branch == branch)
    if archived == "true":
        query = query.where(Resource.archived.is_(True))
    elif archived == "false":
        query = query.where(Resource.archived.is_(False))

    rules = resource_filter(context)
    if rules.branch_ids is not None:
        query = query.where(Resource.branch_id.in_(rules.branch_ids))
    if rules.year_ids is not None:
        query = query.where(Resource.year_id.in_(rules.year_ids))

    rows, count = await fetch_page(db, query, params, getattr(Resource, params.sort))
    return {"data": [list_view(r) for r in rows], "meta": build_meta(params, count)}


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_resource(
    request: Request,
    context: UserContext = Depends(
        require_permission(PermissionAction.WRITE, PermissionEntity.RESOURCES),
    ),
    db: AsyncSession = Depends(get_db),
    storage: StorageClient = Depends(get_storage_client),
):
    payload, upload = await read_payload(request)
    body = parse_model(ResourceCreate, payload)

    branch_id, year_id = body.branch_id, body.year_id
    if context.role == Role.REPRESENTATIVE:
        if (not branch_id or not year_id) and context.representatives:
            first = context.representatives[0]
            branch_id = branch_id or first.branch_id
            year_id = year_id or first.year_id
        if not branch_id or not year_id:
            raise InputValidationError(
                "Branch and year must be specified for representatives",
            )
        check_resource_scope(context, branch_id, year_id)

    file_bytes = None
    if upload is not None:
        settings = get_settings()
        file_bytes, filename, client_mime = await _read_upload(upload)
        mime = check_upload(
            file_bytes, filename, client_mime,
            max_bytes=settings.max_upload_bytes,
            allowed_mimes=settings.allowed_upload_mime_types,
            allowed_extensions=settings.allowed_upload_extensions,
        )
    elif not body.url:
        raise InputValidationError("Either file or url is required")

    async with audit_failures(
        actor_email=context.email, actor_role=context.role,
        action=AuditAction.CREATE, entity=AuditEntity.RESOURCE,
    ):
        if file_bytes is not None:
            stored = await store_upload(
                storage, bucket=await upload_bucket(db),
                data=file_bytes, filename=filename, mime=mime,
            )
            url, is_pdf, file_type = stored.url, stored.is_pdf, stored.file_type
        else:
            url, is_pdf, file_type = body.url, looks_like_pdf(body.url), None

        lookups = LookupService(db)
        branch_id = branch_id or await lookups.branch_id_by_code(body.branch)
        year_id = year_id or await lookups.year_id_by_batch_year(body.year)
        semester_id = body.semester_id or await lookups.semester_id(
            year_id, body.semester,
        )
        created_by = (
            await db.execute(select(Admin.id).where(Admin.email == context.email))
        ).scalar_one_or_none()

        resource = Resource(
            category=body.category,
            subject=body.subject,
            unit=body.unit,
            name=body.name,
            title=body.title or body.name,
            description=body.description,
            type=body.type,
            year=body.year,
            branch=body.branch,
            semester=body.semester,
            archived=body.archived,
            url=url,
            is_pdf=is_pdf,
            file_type=file_type,
            drive_link=url if is_drive_link(url) else None,
            branch_id=branch_id,
            year_id=year_id,
            semester_id=semester_id,
            created_by=created_by,
        )
        db.add(resource)
        await db.flush()
        after = resource.to_dict()
        await record_audit(
            db, actor_email=context.email, actor_role=context.role,
            action=AuditAction.CREATE, entity=AuditEntity.RESOURCE,
            entity_id=resource.id, after_data=after,
        )
        await db.commit()
    return after


@router.patch("/{resource_id}")
async def update_resource(
    resource_id: UUID,
    request: Request,
    context: UserContext = Depends(
        require_permission(PermissionAction.WRITE, PermissionEntity.RESOURCES),
    ),
    db: AsyncSession = Depends(get_db),
    storage: StorageClient = Depends(get_storage_client),
):
    resource = await get_or_404(db, Resource, resource_id, "Resource")
    check_resource_scope(context, resource.branch_id, resource.year_id)
    payload, upload = await read_payload(request)
    changes = parse_model(ResourceUpdate, payload).model_dump(exclude_unset=True)
    changes.update(await relinked_ids(db, resource, changes))
    # Representatives may not move a resource out of their scope either
    check_resource_scope(
        context,
        changes.get("branch_id", resource.branch_id),
        changes.get("year_id", resource.year_id),
    )
    before = resource.to_dict()

    async with audit_failures(
        actor_email=context.email, actor_role=context.role,
        action=AuditAction.UPDATE, entity=AuditEntity.RESOURCE,
        entity_id=resource_id,
    ):
        if upload is not None:
            settings = get_settings()
            data, filename, client_mime = await _read_upload(upload)
            mime = check_upload(
                data, filename, client_mime,
                max_bytes=settings.max_upload_bytes,
                allowed_mimes=settings.allowed_upload_mime_types,
                allowed_extensions=settings.allowed_upload_extensions,
            )
            location = parse_storage_path(resource.url)
            if location is not None:
                await storage.remove(*location)
            stored = await store_upload(
                storage, bucket=await upload_bucket(db),
                data=data, filename=filename, mime=mime,
            )
            changes.update(
                url=stored.url, is_pdf=stored.is_pdf,
                file_type=stored.file_type, drive_link=None,
            )

        for key, value in changes.items():
            setattr(resource, key, value)
        resource.updated_at = datetime.now(timezone.utc)
        await db.flush()
        after = resource.to_dict()
        await record_audit(
            db, actor_email=context.email, actor_role=context.role,
            action=AuditAction.UPDATE, entity=AuditEntity.RESOURCE,
            entity_id=resource.id, before_data=before, after_data=after,
        )
        await db.commit()
    return after


@router.delete("/{resource_id}")
async def delete_resource(
    resource_id: UUID,
    context: UserContext = Depends(
        require_permission(PermissionAction.DELETE, PermissionEntity.RESOURCES),
    ),
    db: AsyncSession = Depends(get_db),
    storage: StorageClient = Depends(get_storage_client),
):
    resource = await get_or_404(db, Resource, resource_id, "Resource")
    check_resource_scope(context, resource.branch_id, resource.year_id)
    before = resource.to_dict()
    removed = await remove_underlying(storage, resource.url)

    if removed:
        await db.delete(resource)
        await record_audit(
            db, actor_email=context.email, actor_role=context.role,
            action=AuditAction.DELETE, entity=AuditEntity.RESOURCE,
            entity_id=resource_id, before_data=before,
        )
        await db.commit()
        return {"success": True}

    resource.deleted_at = datetime.now(timezone.utc)
    await record_audit(
        db, actor_email=context.email, actor_role=context.role,
        action=AuditAction.SOFT_DELETE, entity=AuditEntity.RESOURCE,
        entity_id=resource_id, before_data=before, success=False,
        message="Blob deletion failed; soft-deleted row",
    )
    await db.commit()
    return {"success": True, "softDeleted": True}
