"""Hero Text Endpoint — banner lines for the landing page.

Invariants:
    - Always 200 with a non-empty list of strings
    - Expired texts (time_limit in the past) are never returned
"""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from sqlalchemy import or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from pecup.infrastructure.database import get_db
from pecup.models.hero_text import HeroText

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1", tags=["hero"])

FALLBACK_HERO_TEXTS = ["for any errors, report them in Whatsapp Group"]


@router.get("/hero")
async def list_hero_texts(db: AsyncSession = Depends(get_db)) -> list[str]:
    now = datetime.now(timezone.utc)
    try:
        result = await db.execute(
            select(HeroText.text)
            .where(or_(HeroText.time_limit.is_(None), HeroText.time_limit > now))
            .order_by(HeroText.priority.asc()),
        )
        texts = list(result.scalars().all())
    except SQLAlchemyError as e:
        logger.warning(f"Hero texts unavailable, serving fallback: {e}")
        return list(FALLBACK_HERO_TEXTS)
    return texts or list(FALLBACK_HERO_TEXTS)
