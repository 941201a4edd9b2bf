"""Academic Config Service — TTL-cached year mappings and program settings.

Invariants:
    - Reads are served from memory for academic_config_cache_seconds
    - Every write clears the cache before returning
    - Manual updates go through normalize_mappings (strict); promote/demote
      store the shifted mapping as-is, since capping at 4 (or 1) makes
      repeated levels expected
    - Stored keys are strings (JSON object keys); in memory they are ints

Design Decisions:
    - One process-wide instance: mappings change a few times a year, a
      five-minute staleness window across workers is acceptable
    - Clock injectable for tests
"""

import logging
import time
from collections.abc import Callable, Mapping
from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from pecup.config import get_settings
from pecup.core import year_mappings as ym
from pecup.models.academic import AcademicConfig

logger = logging.getLogger(__name__)

YEAR_MAPPINGS_KEY = "year_mappings"
PROGRAM_SETTINGS_KEY = "program_settings"


class AcademicConfigService:
    def __init__(
        self, ttl_seconds: float = 300, clock: Callable[[], float] = time.monotonic,
    ):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._mappings: dict[int, int] | None = None
        self._mappings_expiry = 0.0
        self._program_length: int | None = None
        self._program_expiry = 0.0

    def clear_cache(self) -> None:
        self._mappings = None
        self._mappings_expiry = 0.0
        self._program_length = None
        self._program_expiry = 0.0

    async def _read(self, db: AsyncSession, key: str) -> AcademicConfig | None:
        result = await db.execute(
            select(AcademicConfig).where(AcademicConfig.config_key == key),
        )
        return result.scalar_one_or_none()

    async def get_year_mappings(self, db: AsyncSession) -> dict[int, int]:
        now = self._clock()
        if self._mappings is not None and now < self._mappings_expiry:
            return dict(self._mappings)
        row = await self._read(db, YEAR_MAPPINGS_KEY)
        if row is None or not row.config_value:
            logger.info("Using default year mappings")
            mappings = dict(ym.DEFAULT_YEAR_MAPPINGS)
        else:
            mappings = ym.parse_stored_mappings(row.config_value)
        self._mappings = mappings
        self._mappings_expiry = now + self.ttl_seconds
        return dict(mappings)

    async def store_year_mappings(
        self, db: AsyncSession, mappings: Mapping[int, int],
    ) -> dict[int, int]:
        """Upsert the mapping row in the caller's transaction."""
        value = {str(year): level for year, level in sorted(mappings.items())}
        row = await self._read(db, YEAR_MAPPINGS_KEY)
        if row is None:
            db.add(AcademicConfig(config_key=YEAR_MAPPINGS_KEY, config_value=value))
        else:
            row.config_value = value
            row.updated_at = datetime.now(timezone.utc)
        await db.flush()
        self.clear_cache()
        return dict(mappings)

    async def update_year_mappings(
        self, db: AsyncSession, raw: Mapping[object, object],
    ) -> dict[int, int]:
        return await self.store_year_mappings(db, ym.normalize_mappings(raw))

    async def promote_all(self, db: AsyncSession) -> tuple[dict[int, int], dict[int, int]]:
        old = await self.get_year_mappings(db)
        new = await self.store_year_mappings(db, ym.promote(old))
        logger.info(f"Promoted year mappings: {old} -> {new}")
        return old, new

    async def demote_all(self, db: AsyncSession) -> tuple[dict[int, int], dict[int, int]]:
        old = await self.get_year_mappings(db)
        new = await self.store_year_mappings(db, ym.demote(old))
        logger.info(f"Demoted year mappings: {old} -> {new}")
        return old, new

    async def get_program_length(self, db: AsyncSession) -> int:
        now = self._clock()
        if self._program_length is not None and now < self._program_expiry:
            return self._program_length
        row = await self._read(db, PROGRAM_SETTINGS_KEY)
        if row is None:
            logger.warning("Using default program settings")
        length = ym.parse_program_length(row.config_value if row else None)
        self._program_length = length
        self._program_expiry = now + self.ttl_seconds
        return length

    async def academic_year_for(self, db: AsyncSession, batch_year: int | None) -> int:
        mappings = await self.get_year_mappings(db)
        return ym.academic_year_for(
            mappings, batch_year, datetime.now(timezone.utc).year,
        )

    async def batch_year_for(self, db: AsyncSession, level: int) -> int:
        return ym.batch_year_for(await self.get_year_mappings(db), level)


academic_config = AcademicConfigService(get_settings().academic_config_cache_seconds)
