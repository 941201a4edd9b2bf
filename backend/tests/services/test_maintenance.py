"""Maintenance — lookup seeding, semester fix-up script and the academic config cache.

Tests:
    - seed() creates the default branches/years/semesters and is idempotent
    - fix_semester() rewrites matching rows, honors --year and --dry-run
    - AcademicConfigService serves cached mappings until the TTL expires
      and clears the cache on every write
"""

import pytest
from sqlalchemy import func, select

from pecup.core.errors import InputValidationError
from pecup.core.year_mappings import DEFAULT_YEAR_MAPPINGS
from pecup.models.academic import AcademicConfig
from pecup.models.lookups import Branch, Semester, Year
from pecup.models.resource import Resource
from pecup.scripts.fix_resource_semester import fix_semester
from pecup.scripts.seed_lookups import DEFAULT_BRANCHES, display_name, seed
from pecup.services.academic_config import YEAR_MAPPINGS_KEY, AcademicConfigService


async def _count(db, model) -> int:
    return (await db.execute(select(func.count()).select_from(model))).scalar_one()


# ==============================================================================
# seed_lookups
# ==============================================================================


def test_display_name():
    assert display_name(2024) == "2024-25 Batch"
    assert display_name(2099) == "2099-00 Batch"


async def test_seed_is_idempotent(test_session_factory):
    async with test_session_factory() as db:
        first = await seed(db, [2023, 2024])
    async with test_session_factory() as db:
        second = await seed(db, [2023, 2024])
        assert await _count(db, Branch) == len(DEFAULT_BRANCHES)
        assert await _count(db, Year) == 2
        assert await _count(db, Semester) == 4

    assert first == {"branches": len(DEFAULT_BRANCHES), "years": 2, "semesters": 4}
    assert second == {"branches": 0, "years": 0, "semesters": 0}


async def test_seed_fills_missing_semesters(test_session_factory):
    async with test_session_factory() as db:
        db.add(Year(batch_year=2022, display_name="2022-23 Batch",
                    semesters=[Semester(semester_number=1)]))
        await db.commit()
    async with test_session_factory() as db:
        counts = await seed(db, [2022])
    assert counts["years"] == 0
    assert counts["semesters"] == 1


# ==============================================================================
# fix_resource_semester
# ==============================================================================


@pytest.fixture
async def dwdm_resources(test_db, lookups):
    rows = [
        Resource(name="u1", category="notes", subject="dwdm", unit=1,
                 url="https://example.com/1.pdf", year=2024, semester=2),
        Resource(name="u2", category="notes", subject="DWDM", unit=2,
                 url="https://example.com/2.pdf", year=2023, semester=2),
        Resource(name="other", category="notes", subject="dbms", unit=1,
                 url="https://example.com/3.pdf", year=2024, semester=2),
    ]
    test_db.add_all(rows)
    await test_db.commit()
    return {
        "ids": {r.name: r.id for r in rows},
        "y2024_s1": lookups["y2024_s1"].id,
    }


async def _semesters(session_factory):
    async with session_factory() as db:
        result = await db.execute(
            select(Resource.name, Resource.semester, Resource.semester_id),
        )
        return {name: (semester, sid) for name, semester, sid in result.all()}


async def test_fix_semester_dry_run_changes_nothing(test_session_factory, dwdm_resources):
    async with test_session_factory() as db:
        changed = await fix_semester(db, "DwDm", 1, dry_run=True)
    assert changed == 2
    assert (await _semesters(test_session_factory))["u1"][0] == 2


async def test_fix_semester_all_years(test_session_factory, dwdm_resources):
    async with test_session_factory() as db:
        assert await fix_semester(db, "dwdm", 1) == 2
    rows = await _semesters(test_session_factory)
    assert rows["u1"][0] == 1
    assert rows["u2"][0] == 1
    assert rows["other"][0] == 2

    async with test_session_factory() as db:
        assert await fix_semester(db, "dwdm", 1) == 0


async def test_fix_semester_single_batch_sets_lookup(test_session_factory, dwdm_resources):
    async with test_session_factory() as db:
        assert await fix_semester(db, "dwdm", 1, batch_year=2024) == 1
    rows = await _semesters(test_session_factory)
    assert rows["u1"] == (1, dwdm_resources["y2024_s1"])
    assert rows["u2"][0] == 2


async def test_fix_semester_unknown_batch_exits(test_session_factory, dwdm_resources):
    async with test_session_factory() as db:
        with pytest.raises(SystemExit):
            await fix_semester(db, "dwdm", 1, batch_year=2030)


# ==============================================================================
# AcademicConfigService
# ==============================================================================


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


async def test_mappings_default_then_cached(test_db):
    clock = FakeClock()
    service = AcademicConfigService(ttl_seconds=60, clock=clock)
    assert await service.get_year_mappings(test_db) == DEFAULT_YEAR_MAPPINGS

    test_db.add(AcademicConfig(config_key=YEAR_MAPPINGS_KEY, config_value={"2026": 1}))
    await test_db.commit()
    assert await service.get_year_mappings(test_db) == DEFAULT_YEAR_MAPPINGS

    clock.now += 61
    assert await service.get_year_mappings(test_db) == {2026: 1}


async def test_update_clears_cache_and_stores_string_keys(test_db):
    service = AcademicConfigService(ttl_seconds=60, clock=FakeClock())
    await service.get_year_mappings(test_db)
    await service.update_year_mappings(test_db, {"2025": 1, "2024": 2})
    await test_db.commit()

    assert await service.get_year_mappings(test_db) == {2025: 1, 2024: 2}
    row = (await test_db.execute(select(AcademicConfig))).scalar_one()
    assert row.config_value == {"2024": 2, "2025": 1}


async def test_update_rejects_invalid_mapping(test_db):
    service = AcademicConfigService(clock=FakeClock())
    with pytest.raises(InputValidationError):
        await service.update_year_mappings(test_db, {"2024": 7})


async def test_promote_then_demote(test_db):
    service = AcademicConfigService(clock=FakeClock())
    await service.update_year_mappings(test_db, {"2025": 1, "2022": 4})
    old, new = await service.promote_all(test_db)
    assert old == {2025: 1, 2022: 4}
    assert new == {2025: 2, 2022: 4}
    _, demoted = await service.demote_all(test_db)
    assert demoted == {2025: 1, 2022: 3}


async def test_program_length_default_and_cached(test_db):
    clock = FakeClock()
    service = AcademicConfigService(ttl_seconds=60, clock=clock)
    assert await service.get_program_length(test_db) == 4
    test_db.add(AcademicConfig(config_key="program_settings", config_value={"programLength": 5}))
    await test_db.commit()
    assert await service.get_program_length(test_db) == 4
    clock.now += 61
    assert await service.get_program_length(test_db) == 5
