"""Student Endpoints — admin listing and creation of student profiles.

Invariants:
    - Both endpoints need an admin
    - Listing is newest first, limit capped at 100; search matches name,
      email or roll number case-insensitively
    - academic_year (1-4) filters by the batch year currently mapped to that level
    - Created students are profiles with role "student"; email and roll number
      stay unique (400 naming which one clashed)
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from pecup.api.dependencies import require_admin
from pecup.core.domain_types import AuditAction, AuditEntity, Role, SortOrder
from pecup.core.errors import DuplicateEntryError
from pecup.core.pagination import build_meta, parse_page_params, to_int
from pecup.core.permissions import AdminContext
from pecup.infrastructure.database import get_db
from pecup.models.lookups import Year
from pecup.models.profile import Profile
from pecup.schemas.students import StudentCreate
from pecup.services.academic_config import academic_config
from pecup.services.audit import audit_failures, record_audit
from pecup.services.lookups import check_lookup_ids
from pecup.services.queries import fetch_page

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/students", tags=["students"])


def student_view(profile: Profile) -> dict:
    data = profile.to_dict()
    data["branch"] = (
        {"name": profile.branch.name, "code": profile.branch.code}
        if profile.branch else None
    )
    data["year"] = (
        {"batch_year": profile.year.batch_year, "display_name": profile.year.display_name}
        if profile.year else None
    )
    data["semester"] = profile.semester.semester_number if profile.semester else None
    return data


@router.get("")
async def list_students(
    page: str | None = Query(None),
    limit: str | None = Query(None),
    branch_id: UUID | None = Query(None),
    year_id: UUID | None = Query(None),
    semester_id: UUID | None = Query(None),
    section: str | None = Query(None),
    search: str | None = Query(None),
    academic_year: str | None = Query(None),
    admin: AdminContext = Depends(require_admin()),
    db: AsyncSession = Depends(get_db),
):
    params = parse_page_params(
        page, limit, None, None,
        allowed_sorts=("created_at",), default_sort="created_at",
        default_order=SortOrder.DESC,
    )
    query = select(Profile).where(Profile.role == Role.STUDENT.value)
    for column, value in (
        (Profile.branch_id, branch_id),
        (Profile.year_id, year_id),
        (Profile.semester_id, semester_id),
        (Profile.section, section),
    ):
        if value:
            query = query.where(column == value)
    if search:
        pattern = f"%{search}%"
        query = query.where(or_(
            Profile.name.ilike(pattern),
            Profile.email.ilike(pattern),
            Profile.roll_number.ilike(pattern),
        ))
    level = to_int(academic_year)
    if level is not None:
        batch_year = await academic_config.batch_year_for(db, level)
        query = query.join(Year, Profile.year_id == Year.id).where(
            Year.batch_year == batch_year,
        )

    rows, count = await fetch_page(db, query, params, Profile.created_at)
    meta = build_meta(params, count)
    return {
        "students": [student_view(p) for p in rows],
        "total": count,
        "page": meta["page"],
        "limit": meta["limit"],
        "totalPages": meta["totalPages"],
    }


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_student(
    body: StudentCreate,
    admin: AdminContext = Depends(require_admin()),
    db: AsyncSession = Depends(get_db),
):
    await check_lookup_ids(db, body.branch_id, body.year_id, body.semester_id)
    taken = (
        await db.execute(
            select(Profile.email, Profile.roll_number).where(or_(
                Profile.email == body.email,
                Profile.roll_number == body.roll_number,
            )),
        )
    ).first()
    if taken is not None:
        if taken.email == body.email:
            raise DuplicateEntryError("Email already exists")
        raise DuplicateEntryError("Roll number already exists")

    async with audit_failures(
        actor_email=admin.email, actor_role=admin.role,
        action=AuditAction.CREATE, entity=AuditEntity.STUDENT,
    ):
        student = Profile(role=Role.STUDENT.value, **body.model_dump())
        db.add(student)
        await db.flush()
        await db.refresh(student, ["branch", "year", "semester"])
        view = student_view(student)
        await record_audit(
            db, actor_email=admin.email, actor_role=admin.role,
            action=AuditAction.CREATE, entity=AuditEntity.STUDENT,
            entity_id=student.id, after_data=student.to_dict(),
        )
        await db.commit()
    logger.info(f"{admin.email} created student {student.email}")
    return {"student": view}
