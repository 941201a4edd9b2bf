"""Query Helpers — 404 lookups and paginated admin listings.

Invariants:
    - Soft-deleted rows (deleted_at set) count as missing
    - Listings count before paginating, over the same filtered query
"""

from uuid import UUID

from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from pecup.core.errors import ResourceNotFoundError
from pecup.core.pagination import PageParams


async def get_or_404(db: AsyncSession, model, row_id: UUID, label: str):
    row = await db.get(model, row_id)
    if row is None or getattr(row, "deleted_at", None) is not None:
        raise ResourceNotFoundError(label, str(row_id))
    return row


async def fetch_page(
    db: AsyncSession, query: Select, params: PageParams, sort_column,
) -> tuple[list, int]:
    count = (
        await db.execute(select(func.count()).select_from(query.subquery()))
    ).scalar_one()
    ordered = query.order_by(
        sort_column.asc() if params.ascending else sort_column.desc(),
    )
    rows = (
        await db.execute(ordered.offset(params.offset).limit(params.limit))
    ).scalars().all()
    return list(rows), count
