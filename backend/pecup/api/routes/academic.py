"""Academic Endpoints — year mappings and the singleton academic calendar.

Invariants:
    - Reading mappings needs an admin; changing them needs a superadmin
    - Manual mapping updates are strictly validated (normalize_mappings);
      promote/demote shift every level by one, capped to 1..4
    - The calendar's semester always belongs to its year
    - Every change writes an audit row in the same transaction

Design Decisions:
    - Mapping keys are returned as strings, matching how they are stored
    - Progressing past semester 2 needs the next batch year to exist already;
      it is never created implicitly
"""

import logging
from collections import Counter
from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from pecup.api.dependencies import require_admin, require_superadmin
from pecup.core import year_mappings as ym
from pecup.core.domain_types import AuditAction, AuditEntity, Role
from pecup.core.errors import InputValidationError, ResourceNotFoundError
from pecup.core.permissions import AdminContext
from pecup.infrastructure.database import get_db
from pecup.models.academic import CALENDAR_ROW_ID, AcademicCalendar
from pecup.models.lookups import Semester, Year
from pecup.models.profile import Profile
from pecup.schemas.academic import CalendarAction, CalendarUpdate, YearMappingsUpdate
from pecup.services.academic_config import academic_config
from pecup.services.audit import audit_failures, record_audit

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1", tags=["academic"])


def _as_json(mappings: dict[int, int]) -> dict[str, int]:
    return {str(year): level for year, level in sorted(mappings.items())}


def _changes(old: dict[int, int], new: dict[int, int]) -> list[dict]:
    return [
        {
            "batch_year": year,
            "old_academic_year": old[year],
            "new_academic_year": new.get(year),
        }
        for year in sorted(old)
    ]


def calendar_view(calendar: AcademicCalendar | None) -> dict | None:
    if calendar is None:
        return None
    data = calendar.to_dict()
    data["current_year"] = calendar.current_year.to_dict() if calendar.current_year else None
    data["current_semester"] = (
        calendar.current_semester.to_dict() if calendar.current_semester else None
    )
    return data


# ─── Year mappings ───────────────────────────────────────────────

@router.get("/admin/year-mappings")
async def get_year_mappings(
    admin: AdminContext = Depends(require_admin()),
    db: AsyncSession = Depends(get_db),
):
    mappings = await academic_config.get_year_mappings(db)
    result = await db.execute(select(Profile).where(Profile.role == Role.STUDENT.value))
    distribution: Counter = Counter()
    students = result.scalars().all()
    for student in students:
        if student.year is None:
            distribution["unknown"] += 1
        else:
            distribution[str(mappings.get(student.year.batch_year, ym.MAX_LEVEL))] += 1
    return {
        "mappings": _as_json(mappings),
        "student_distribution": dict(distribution),
        "total_students": len(students),
        "program_length": await academic_config.get_program_length(db),
    }


@router.put("/admin/year-mappings")
async def put_year_mappings(
    body: YearMappingsUpdate,
    admin: AdminContext = Depends(require_superadmin),
    db: AsyncSession = Depends(get_db),
):
    before = await academic_config.get_year_mappings(db)
    async with audit_failures(
        actor_email=admin.email, actor_role=admin.role,
        action=AuditAction.UPDATE, entity=AuditEntity.YEAR_MAPPINGS,
    ):
        new = await academic_config.update_year_mappings(db, body.mappings)
        await record_audit(
            db, actor_email=admin.email, actor_role=admin.role,
            action=AuditAction.UPDATE, entity=AuditEntity.YEAR_MAPPINGS,
            before_data=_as_json(before), after_data=_as_json(new),
        )
        await db.commit()
    return {
        "success": True,
        "message": "Year mappings updated successfully",
        "new_mappings": _as_json(new),
    }


async def _shift(db: AsyncSession, admin: AdminContext, action: AuditAction) -> dict:
    promoting = action == AuditAction.PROMOTE
    async with audit_failures(
        actor_email=admin.email, actor_role=admin.role,
        action=action, entity=AuditEntity.YEAR_MAPPINGS,
    ):
        if promoting:
            old, new = await academic_config.promote_all(db)
        else:
            old, new = await academic_config.demote_all(db)
        await record_audit(
            db, actor_email=admin.email, actor_role=admin.role,
            action=action, entity=AuditEntity.YEAR_MAPPINGS,
            before_data=_as_json(old), after_data=_as_json(new),
        )
        await db.commit()
    verb = "promoted" if promoting else "demoted"
    return {
        "success": True,
        "message": f"All students {verb} successfully",
        "old_mappings": _as_json(old),
        "new_mappings": _as_json(new),
        "changes": _changes(old, new),
    }


@router.post("/admin/year-mappings/promote")
async def promote_year_mappings(
    admin: AdminContext = Depends(require_superadmin),
    db: AsyncSession = Depends(get_db),
):
    return await _shift(db, admin, AuditAction.PROMOTE)


@router.post("/admin/year-mappings/demote")
async def demote_year_mappings(
    admin: AdminContext = Depends(require_superadmin),
    db: AsyncSession = Depends(get_db),
):
    return await _shift(db, admin, AuditAction.DEMOTE)


# ─── Academic calendar ───────────────────────────────────────────

@router.get("/academic-calendar")
async def get_academic_calendar(db: AsyncSession = Depends(get_db)):
    calendar = await db.get(AcademicCalendar, CALENDAR_ROW_ID)
    return {"calendar": calendar_view(calendar)}


@router.post("/academic-calendar")
async def set_academic_calendar(
    body: CalendarUpdate,
    admin: AdminContext = Depends(require_admin()),
    db: AsyncSession = Depends(get_db),
):
    semester = (
        await db.execute(
            select(Semester).where(
                Semester.id == body.current_semester_id,
                Semester.year_id == body.current_year_id,
            ),
        )
    ).scalar_one_or_none()
    year = await db.get(Year, body.current_year_id)
    if semester is None or year is None:
        raise InputValidationError("Invalid year and semester combination")

    calendar = await db.get(AcademicCalendar, CALENDAR_ROW_ID)
    before = calendar.to_dict() if calendar else None
    async with audit_failures(
        actor_email=admin.email, actor_role=admin.role,
        action=AuditAction.UPDATE, entity=AuditEntity.ACADEMIC_CALENDAR,
    ):
        if calendar is None:
            calendar = AcademicCalendar(id=CALENDAR_ROW_ID)
            db.add(calendar)
        _move_calendar(calendar, year, semester, admin.email)
        await db.flush()
        await record_audit(
            db, actor_email=admin.email, actor_role=admin.role,
            action=AuditAction.UPDATE, entity=AuditEntity.ACADEMIC_CALENDAR,
            entity_id=CALENDAR_ROW_ID, before_data=before, after_data=calendar.to_dict(),
        )
        await db.commit()
    return {"calendar": calendar_view(calendar)}


@router.put("/academic-calendar")
async def progress_academic_calendar(
    body: CalendarAction,
    admin: AdminContext = Depends(require_superadmin),
    db: AsyncSession = Depends(get_db),
):
    calendar = await db.get(AcademicCalendar, CALENDAR_ROW_ID)
    if calendar is None:
        raise ResourceNotFoundError("Academic calendar", str(CALENDAR_ROW_ID))

    batch_year, number = ym.next_term(
        calendar.current_year.batch_year, calendar.current_semester.semester_number,
    )
    if batch_year == calendar.current_year.batch_year:
        year = calendar.current_year
    else:
        year = (
            await db.execute(select(Year).where(Year.batch_year == batch_year))
        ).scalar_one_or_none()
        if year is None:
            raise InputValidationError(
                "Next academic year not found. Please create it first.",
            )
    semester = next((s for s in year.semesters if s.semester_number == number), None)
    if semester is None:
        raise InputValidationError(
            f"Semester {number} of {year.batch_year} not found. Please create it first.",
        )

    before = calendar.to_dict()
    async with audit_failures(
        actor_email=admin.email, actor_role=admin.role,
        action=AuditAction.UPDATE, entity=AuditEntity.ACADEMIC_CALENDAR,
        entity_id=CALENDAR_ROW_ID,
    ):
        _move_calendar(calendar, year, semester, admin.email)
        await db.flush()
        await record_audit(
            db, actor_email=admin.email, actor_role=admin.role,
            action=AuditAction.UPDATE, entity=AuditEntity.ACADEMIC_CALENDAR,
            entity_id=CALENDAR_ROW_ID, before_data=before, after_data=calendar.to_dict(),
            message=body.action,
        )
        await db.commit()
    logger.info(f"Academic calendar moved to {year.batch_year} semester {number}")
    return {
        "calendar": calendar_view(calendar),
        "message": "Semester progressed successfully",
    }


def _move_calendar(
    calendar: AcademicCalendar, year: Year, semester: Semester, email: str,
) -> None:
    calendar.current_year = year
    calendar.current_semester = semester
    calendar.last_updated = datetime.now(timezone.utc)
    calendar.updated_by = email
