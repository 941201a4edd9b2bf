"""Lookup Cache — in-process memo for branch/year/semester id lookups.

Invariants:
    - Only positive hits are stored; a miss is re-queried next time
    - clear() drops all three maps at once
"""

from uuid import UUID


class LookupCache:
    """Three small maps keyed the way lookup tables are queried."""

    def __init__(self) -> None:
        self.branches: dict[str, UUID] = {}
        self.years: dict[int, UUID] = {}
        self.semesters: dict[tuple[UUID, int], UUID] = {}

    def get_branch(self, code: str) -> UUID | None:
        return self.branches.get(code)

    def put_branch(self, code: str, branch_id: UUID | None) -> None:
        if branch_id is not None:
            self.branches[code] = branch_id

    def get_year(self, batch_year: int) -> UUID | None:
        return self.years.get(batch_year)

    def put_year(self, batch_year: int, year_id: UUID | None) -> None:
        if year_id is not None:
            self.years[batch_year] = year_id

    def get_semester(self, year_id: UUID, number: int) -> UUID | None:
        return self.semesters.get((year_id, number))

    def put_semester(self, year_id: UUID, number: int, semester_id: UUID | None) -> None:
        if semester_id is not None:
            self.semesters[(year_id, number)] = semester_id

    def clear(self) -> None:
        self.branches.clear()
        self.years.clear()
        self.semesters.clear()


# Process-wide instance; routes that create branches/years clear it.
lookup_cache = LookupCache()
