"""Profile Endpoints — the caller's own profile, read and upsert.

Invariants:
    - Identity comes from the bearer token; a profile is always keyed by that email
    - GET returns {"profile": null} rather than 404 when nothing is stored
    - year in the response is the academic level (1-4), not the batch year
    - Roll numbers are unique across profiles (400 on conflict)

Design Decisions:
    - Lookup ids checked before writing so a bad id reads as a 400 with the
      offending field, instead of a generic foreign-key failure
    - Role is never taken from the body; new profiles start as students
"""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from pecup.api.dependencies import get_identity_email
from pecup.core.domain_types import Role
from pecup.core.errors import DuplicateEntryError
from pecup.infrastructure.database import get_db
from pecup.models.profile import Profile
from pecup.schemas.profile import ProfileUpsert
from pecup.services.academic_config import academic_config
from pecup.services.lookups import check_lookup_ids
from pecup.services.user_context import get_profile_by_email

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/profile", tags=["profile"])


async def profile_view(db: AsyncSession, profile: Profile) -> dict:
    data = profile.to_dict()
    batch_year = profile.year.batch_year if profile.year else None
    data["year"] = await academic_config.academic_year_for(db, batch_year)
    data["batch_year"] = batch_year
    data["branch"] = profile.branch.code if profile.branch else "Unknown"
    data["branch_name"] = profile.branch.name if profile.branch else None
    data["semester"] = (
        profile.semester.semester_number if profile.semester else None
    )
    data["role"] = profile.role or Role.STUDENT.value
    return data


@router.get("")
async def get_profile(
    email: str = Depends(get_identity_email),
    db: AsyncSession = Depends(get_db),
):
    profile = await get_profile_by_email(db, email)
    if profile is None:
        return {"profile": None}
    return {"profile": await profile_view(db, profile)}


@router.post("")
async def upsert_profile(
    body: ProfileUpsert,
    email: str = Depends(get_identity_email),
    db: AsyncSession = Depends(get_db),
):
    await check_lookup_ids(db, body.branch_id, body.year_id, body.semester_id)

    clash = await db.execute(
        select(Profile.id).where(
            Profile.roll_number == body.roll_number,
            Profile.email != email,
        ),
    )
    if clash.scalar_one_or_none() is not None:
        raise DuplicateEntryError("Roll number or email already exists")

    profile = await get_profile_by_email(db, email)
    if profile is None:
        profile = Profile(email=email, role=Role.STUDENT.value)
        db.add(profile)
        logger.info(f"Creating profile for {email}")
    else:
        profile.updated_at = datetime.now(timezone.utc)

    for field, value in body.model_dump().items():
        setattr(profile, field, value)
    await db.flush()
    await db.refresh(profile, ["branch", "year", "semester"])
    view = await profile_view(db, profile)
    await db.commit()
    return {"profile": view}
