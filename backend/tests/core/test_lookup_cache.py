"""Lookup Cache — positive hits only, cleared all at once."""

from uuid import uuid4

from pecup.core.lookup_cache import LookupCache


def test_stores_hits_and_ignores_misses():
    cache = LookupCache()
    branch_id, year_id, semester_id = uuid4(), uuid4(), uuid4()
    cache.put_branch("CSE", branch_id)
    cache.put_branch("XYZ", None)
    cache.put_year(2024, year_id)
    cache.put_semester(year_id, 1, semester_id)

    assert cache.get_branch("CSE") == branch_id
    assert cache.get_branch("XYZ") is None
    assert "XYZ" not in cache.branches
    assert cache.get_year(2024) == year_id
    assert cache.get_semester(year_id, 1) == semester_id


def test_clear_drops_everything():
    cache = LookupCache()
    year_id = uuid4()
    cache.put_branch("CSE", uuid4())
    cache.put_year(2024, year_id)
    cache.put_semester(year_id, 2, uuid4())
    cache.clear()
    assert cache.get_branch("CSE") is None
    assert cache.get_year(2024) is None
    assert cache.get_semester(year_id, 2) is None
