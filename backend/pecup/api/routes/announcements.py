"""Public Announcement Endpoints — reminders and recent updates for the home page.

Invariants:
    - Soft-deleted reminders are never returned
    - Missing year/branch are taken from the caller's profile when a valid
      token is present; anonymous callers see unfiltered lists
    - Recent updates are filtered only when BOTH year and branch are known,
      and capped at the newest RECENT_UPDATES_LIMIT
"""

import logging
import re

from fastapi import APIRouter, Depends, Query
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from pecup.api.dependencies import get_optional_user_context
from pecup.core.errors import InputValidationError
from pecup.core.permissions import UserContext
from pecup.infrastructure.database import get_db
from pecup.models.announcements import RecentUpdate, Reminder

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1", tags=["announcements"])

RECENT_UPDATES_LIMIT = 10
_DIGITS = re.compile(r"^\d+$")


def _with_profile_defaults(
    context: UserContext | None, year: str | None, branch: str | None,
) -> tuple[str | None, str | None]:
    if context is None or (year and branch):
        return year, branch
    return (
        year or (str(context.year) if context.year else None),
        branch or context.branch,
    )


@router.get("/reminders")
async def list_reminders(
    status_filter: str | None = Query(None, alias="status"),
    year: str | None = Query(None),
    branch: str | None = Query(None),
    context: UserContext | None = Depends(get_optional_user_context),
    db: AsyncSession = Depends(get_db),
):
    if year and not _DIGITS.match(year):
        raise InputValidationError("Invalid year parameter", field="year")
    year, branch = _with_profile_defaults(context, year, branch)

    query = (
        select(Reminder)
        .where(Reminder.deleted_at.is_(None))
        .order_by(Reminder.due_date.asc())
    )
    if status_filter and status_filter.strip():
        query = query.where(Reminder.status == status_filter.strip())
    if year:
        query = query.where(Reminder.year == int(year))
    if branch:
        query = query.where(Reminder.branch == branch)

    result = await db.execute(query)
    return [
        {
            "id": str(r.id),
            "title": r.title,
            "due_date": r.due_date.isoformat(),
            "description": r.description or "",
            "icon_type": r.icon_type or "",
            "status": r.status or "",
        }
        for r in result.scalars().all()
    ]


@router.get("/recent-updates")
async def list_recent_updates(
    year: str | None = Query(None),
    branch: str | None = Query(None),
    context: UserContext | None = Depends(get_optional_user_context),
    db: AsyncSession = Depends(get_db),
):
    year, branch = _with_profile_defaults(context, year, branch)
    query = (
        select(RecentUpdate)
        .order_by(RecentUpdate.created_at.desc())
        .limit(RECENT_UPDATES_LIMIT)
    )
    if year and branch and _DIGITS.match(year):
        query = query.where(
            RecentUpdate.year == int(year), RecentUpdate.branch == branch,
        )
    result = await db.execute(query)
    return [
        {
            "id": str(u.id),
            "title": u.title,
            "date": u.date or "",
            "description": u.description or "",
            "year": u.year,
            "branch": u.branch,
        }
        for u in result.scalars().all()
    ]
