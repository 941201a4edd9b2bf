"""User Context — load role, lookups and representative assignments for an email.

Invariants:
    - Returns None when the email has no profile (caller decides 401 vs anonymous)
    - Only active representative rows are loaded
    - year is the admission batch year, branch the branch code
"""

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from pecup.core.domain_types import Role
from pecup.core.permissions import RepresentativeAssignment, UserContext
from pecup.models.profile import Profile
from pecup.models.representative import Representative

logger = logging.getLogger(__name__)


async def get_profile_by_email(db: AsyncSession, email: str) -> Profile | None:
    result = await db.execute(select(Profile).where(Profile.email == email.lower()))
    return result.scalar_one_or_none()


async def load_user_context(db: AsyncSession, email: str) -> UserContext | None:
    profile = await get_profile_by_email(db, email)
    if profile is None:
        return None

    assignments: list[RepresentativeAssignment] = []
    if profile.role == Role.REPRESENTATIVE:
        result = await db.execute(
            select(Representative).where(
                Representative.user_id == profile.id,
                Representative.active.is_(True),
            ),
        )
        assignments = [
            RepresentativeAssignment(
                branch_id=rep.branch_id,
                year_id=rep.year_id,
                active=rep.active,
                branch_code=rep.branch.code if rep.branch else "",
                batch_year=rep.year.batch_year if rep.year else 0,
            )
            for rep in result.scalars().all()
        ]

    return UserContext(
        id=profile.id,
        email=profile.email,
        name=profile.name,
        role=profile.role,
        year=profile.year.batch_year if profile.year else None,
        branch=profile.branch.code if profile.branch else None,
        branch_id=profile.branch_id,
        year_id=profile.year_id,
        semester_id=profile.semester_id,
        representatives=assignments,
    )
