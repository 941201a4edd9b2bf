"""Fix Resource Semester — reassign the semester of every resource for a subject.

Usage:
    python -m pecup.scripts.fix_resource_semester dwdm 1 [--year 2023] [--dry-run]

Invariants:
    - Subject codes match case-insensitively; soft-deleted rows are skipped
    - With --year, only that batch is touched and semester_id is set to the
      matching lookup row as well
"""

import argparse
import asyncio
import logging
from datetime import datetime, timezone

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from pecup.config import get_settings
from pecup.db.session import create_session_factory
from pecup.infrastructure.observability import setup_logging
from pecup.models.lookups import Semester, Year
from pecup.models.resource import Resource

logger = logging.getLogger(__name__)


async def fix_semester(
    db: AsyncSession,
    subject: str,
    semester_number: int,
    batch_year: int | None = None,
    dry_run: bool = False,
) -> int:
    """Returns the number of resources whose semester changed."""
    semester_id = None
    if batch_year is not None:
        result = await db.execute(
            select(Semester.id)
            .join(Year, Semester.year_id == Year.id)
            .where(
                Year.batch_year == batch_year,
                Semester.semester_number == semester_number,
            ),
        )
        semester_id = result.scalar_one_or_none()
        if semester_id is None:
            raise SystemExit(
                f"No semester {semester_number} for batch {batch_year}; "
                "run seed_lookups first",
            )

    query = select(Resource).where(
        func.lower(Resource.subject) == subject.lower(),
        Resource.deleted_at.is_(None),
    )
    if batch_year is not None:
        query = query.where(Resource.year == batch_year)

    changed = 0
    now = datetime.now(timezone.utc)
    for resource in (await db.execute(query)).scalars().all():
        stale = resource.semester != semester_number or (
            semester_id is not None and resource.semester_id != semester_id
        )
        if not stale:
            continue
        changed += 1
        logger.info(
            f"{resource.id} {resource.name!r}: semester "
            f"{resource.semester} -> {semester_number}",
        )
        if dry_run:
            continue
        resource.semester = semester_number
        if semester_id is not None:
            resource.semester_id = semester_id
        resource.updated_at = now

    if dry_run:
        await db.rollback()
    else:
        await db.commit()
    return changed


async def main(args: argparse.Namespace) -> None:
    settings = get_settings()
    setup_logging(settings.log_level, "text")
    session_factory = create_session_factory(settings.database_url)
    async with session_factory() as db:
        changed = await fix_semester(
            db, args.subject, args.semester, args.year, args.dry_run,
        )
    verb = "would change" if args.dry_run else "changed"
    print(f"{changed} resource(s) {verb}")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("subject", help="subject code, e.g. dwdm")
    parser.add_argument("semester", type=int, choices=(1, 2))
    parser.add_argument("--year", type=int, help="restrict to one batch year")
    parser.add_argument("--dry-run", action="store_true")
    asyncio.run(main(parser.parse_args()))
