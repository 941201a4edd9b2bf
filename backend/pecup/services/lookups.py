"""Lookup Service — resolve branch codes, batch years and semester numbers to ids.

Invariants:
    - Falsy input returns None without touching the database
    - Positive results are memoized in the process-wide LookupCache
    - check_lookup_ids validates a branch/year/semester triple before a
      profile row is written
"""

import logging
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from pecup.core.errors import InputValidationError
from pecup.core.lookup_cache import LookupCache, lookup_cache
from pecup.models.lookups import Branch, Semester, Year

logger = logging.getLogger(__name__)


class LookupService:
    def __init__(self, db: AsyncSession, cache: LookupCache = lookup_cache):
        self.db = db
        self.cache = cache

    async def branch_id_by_code(self, code: str | None) -> UUID | None:
        if not code:
            return None
        cached = self.cache.get_branch(code)
        if cached:
            return cached
        result = await self.db.execute(select(Branch.id).where(Branch.code == code))
        branch_id = result.scalar_one_or_none()
        self.cache.put_branch(code, branch_id)
        return branch_id

    async def year_id_by_batch_year(self, batch_year: int | None) -> UUID | None:
        if not batch_year:
            return None
        cached = self.cache.get_year(batch_year)
        if cached:
            return cached
        result = await self.db.execute(
            select(Year.id).where(Year.batch_year == batch_year),
        )
        year_id = result.scalar_one_or_none()
        self.cache.put_year(batch_year, year_id)
        return year_id

    async def semester_id(self, year_id: UUID | None, number: int | None) -> UUID | None:
        if not year_id or not number:
            return None
        cached = self.cache.get_semester(year_id, number)
        if cached:
            return cached
        result = await self.db.execute(
            select(Semester.id).where(
                Semester.year_id == year_id, Semester.semester_number == number,
            ),
        )
        semester_id = result.scalar_one_or_none()
        self.cache.put_semester(year_id, number, semester_id)
        return semester_id


async def check_lookup_ids(
    db: AsyncSession, branch_id: UUID, year_id: UUID, semester_id: UUID,
) -> None:
    """400 naming the field unless all three ids exist and the semester is the year's."""
    if await db.get(Branch, branch_id) is None:
        raise InputValidationError("Invalid branch ID", field="branch_id")
    if await db.get(Year, year_id) is None:
        raise InputValidationError("Invalid year ID", field="year_id")
    semester = await db.get(Semester, semester_id)
    if semester is None or semester.year_id != year_id:
        raise InputValidationError("Invalid semester ID", field="semester_id")
