"""Users Count Endpoint — public headline figure for the landing page."""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from pecup.infrastructure.database import get_db
from pecup.models.admin import Admin
from pecup.models.profile import Profile

router = APIRouter(prefix="/api/v1", tags=["stats"])


@router.get("/users-count")
async def users_count(db: AsyncSession = Depends(get_db)):
    profiles = (await db.execute(select(func.count(Profile.id)))).scalar_one()
    admins = (await db.execute(select(func.count(Admin.id)))).scalar_one()
    return {
        "totalUsers": profiles + admins,
        "breakdown": {"profiles": profiles, "admins": admins},
        "lastUpdated": datetime.now(timezone.utc).isoformat(),
    }
