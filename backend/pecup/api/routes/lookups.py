"""Lookup Endpoints — branches, admission years and subject lists.

Invariants:
    - Reads are public; creating branches/years requires an admin
    - A year is always created together with its semesters 1 and 2
    - The process-wide lookup cache is cleared after every create
    - Subject codes come from non-deleted resources in the requested context

Design Decisions:
    - Duplicates checked up front for a specific message; the unique
      constraint still backs it (IntegrityError -> 400 in the session manager)
    - Missing subject context is inferred from the caller's profile, and the
      semester from the calendar month (August onwards is semester 2)
"""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from pecup.api.dependencies import get_optional_user_context, require_admin
from pecup.core.errors import DuplicateEntryError, InputValidationError
from pecup.core.lookup_cache import lookup_cache
from pecup.core.pagination import to_int
from pecup.core.permissions import AdminContext, UserContext
from pecup.infrastructure.database import get_db
from pecup.models.lookups import Branch, Semester, Year
from pecup.models.resource import Resource
from pecup.schemas.lookups import BranchCreate, YearCreate

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1", tags=["lookups"])


def _year_dict(year: Year) -> dict:
    data = year.to_dict()
    data["semesters"] = [s.to_dict() for s in year.semesters]
    return data


def subject_entry(code: str) -> dict:
    return {"code": code, "name": code.upper().replace("_", " ")}


def semester_for_month(month: int) -> int:
    return 2 if month >= 8 else 1


@router.get("/branches")
async def list_branches(db: AsyncSession = Depends(get_db)):
    result = await db.execute(select(Branch).order_by(Branch.code))
    return {"branches": [b.to_dict() for b in result.scalars().all()]}


@router.post("/branches", status_code=status.HTTP_201_CREATED)
async def create_branch(
    body: BranchCreate,
    admin: AdminContext = Depends(require_admin()),
    db: AsyncSession = Depends(get_db),
):
    existing = await db.execute(select(Branch.id).where(Branch.code == body.code))
    if existing.scalar_one_or_none():
        raise DuplicateEntryError("Branch code already exists")
    branch = Branch(name=body.name, code=body.code)
    db.add(branch)
    await db.commit()
    lookup_cache.clear()
    logger.info(f"Branch {branch.code} created by {admin.email}")
    return {"branch": branch.to_dict()}


@router.get("/years")
async def list_years(db: AsyncSession = Depends(get_db)):
    result = await db.execute(select(Year).order_by(Year.batch_year.desc()))
    return {"years": [_year_dict(y) for y in result.scalars().all()]}


@router.post("/years", status_code=status.HTTP_201_CREATED)
async def create_year(
    body: YearCreate,
    admin: AdminContext = Depends(require_admin()),
    db: AsyncSession = Depends(get_db),
):
    existing = await db.execute(
        select(Year.id).where(Year.batch_year == body.batch_year),
    )
    if existing.scalar_one_or_none():
        raise DuplicateEntryError("Batch year already exists")
    year = Year(
        batch_year=body.batch_year,
        display_name=body.display_name,
        semesters=[Semester(semester_number=1), Semester(semester_number=2)],
    )
    db.add(year)
    await db.commit()
    lookup_cache.clear()
    logger.info(f"Year {year.batch_year} created by {admin.email}")
    return {"year": _year_dict(year)}


@router.get("/subjects")
async def list_subjects(
    year: str | None = Query(None),
    branch: str | None = Query(None),
    semester: str | None = Query(None),
    context: UserContext | None = Depends(get_optional_user_context),
    db: AsyncSession = Depends(get_db),
):
    if context is not None:
        year = year or (str(context.year) if context.year else None)
        branch = branch or context.branch
    if not semester:
        semester = str(semester_for_month(datetime.now(timezone.utc).month))

    batch_year, semester_number = to_int(year), to_int(semester)
    if batch_year is None or not branch or semester_number is None:
        raise InputValidationError("Missing context (year/branch/semester).")

    result = await db.execute(
        select(Resource.subject).where(
            Resource.year == batch_year,
            Resource.branch == branch,
            Resource.semester == semester_number,
            Resource.deleted_at.is_(None),
        ),
    )
    codes = sorted({(s or "").lower() for s in result.scalars().all()} - {""})
    return {"subjects": [subject_entry(code) for code in codes]}
