"""Seed Lookups — default branches, batch years and their semesters.

Usage: python -m pecup.scripts.seed_lookups [--years 2021 2022 2023 2024]

Invariants:
    - Existing rows are left untouched; running twice inserts nothing new
    - Every seeded year ends up with semesters 1 and 2
"""

import argparse
import asyncio
import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from pecup.config import get_settings
from pecup.db.session import create_session_factory
from pecup.infrastructure.observability import setup_logging
from pecup.models.lookups import Branch, Semester, Year

logger = logging.getLogger(__name__)

DEFAULT_BRANCHES = [
    ("CSE", "Computer Science Engineering"),
    ("AIML", "Artificial Intelligence & Machine Learning"),
    ("DS", "Data Science"),
    ("AI", "Artificial Intelligence"),
    ("ECE", "Electronics & Communication Engineering"),
    ("EEE", "Electrical & Electronics Engineering"),
    ("MEC", "Mechanical Engineering"),
    ("CE", "Civil Engineering"),
]

DEFAULT_BATCH_YEARS = [2021, 2022, 2023, 2024]


def display_name(batch_year: int) -> str:
    return f"{batch_year}-{(batch_year + 1) % 100:02d} Batch"


async def seed_branches(db: AsyncSession) -> int:
    existing = set((await db.execute(select(Branch.code))).scalars().all())
    added = 0
    for code, name in DEFAULT_BRANCHES:
        if code not in existing:
            db.add(Branch(code=code, name=name))
            added += 1
    return added


async def seed_years(db: AsyncSession, batch_years: list[int]) -> tuple[int, int]:
    """Returns (years added, semesters added)."""
    result = await db.execute(select(Year))
    by_batch = {y.batch_year: y for y in result.scalars().all()}
    years_added = semesters_added = 0
    for batch_year in sorted(set(batch_years)):
        year = by_batch.get(batch_year)
        if year is None:
            year = Year(batch_year=batch_year, display_name=display_name(batch_year))
            db.add(year)
            years_added += 1
        present = {s.semester_number for s in year.semesters}
        for number in (1, 2):
            if number not in present:
                year.semesters.append(Semester(semester_number=number))
                semesters_added += 1
    return years_added, semesters_added


async def seed(db: AsyncSession, batch_years: list[int]) -> dict[str, int]:
    branches = await seed_branches(db)
    years, semesters = await seed_years(db, batch_years)
    await db.commit()
    return {"branches": branches, "years": years, "semesters": semesters}


async def main(batch_years: list[int]) -> None:
    settings = get_settings()
    setup_logging(settings.log_level, "text")
    session_factory = create_session_factory(settings.database_url)
    async with session_factory() as db:
        counts = await seed(db, batch_years)
    logger.info(
        f"Seeded {counts['branches']} branches, {counts['years']} years, "
        f"{counts['semesters']} semesters",
    )


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument(
        "--years", type=int, nargs="+", default=DEFAULT_BATCH_YEARS,
        help="batch (admission) years to create",
    )
    args = parser.parse_args()
    asyncio.run(main(args.years))
