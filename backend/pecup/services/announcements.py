"""Announcement Scope — where representatives may post reminders, updates and exams.

Invariants:
    - Admins pass unconditionally
    - Representatives must target a (year, branch) that resolves to lookup
      ids inside one of their active assignments
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from pecup.core.domain_types import Role
from pecup.core.errors import ForbiddenError, InputValidationError
from pecup.core.permissions import UserContext, has_scope
from pecup.services.lookups import LookupService

logger = logging.getLogger(__name__)


async def check_target_scope(
    db: AsyncSession, context: UserContext, year: int | None, branch: str | None,
) -> None:
    if context.role != Role.REPRESENTATIVE:
        return
    if not year or not branch:
        raise InputValidationError("Representatives must specify year and branch")
    lookups = LookupService(db)
    branch_id = await lookups.branch_id_by_code(branch)
    year_id = await lookups.year_id_by_batch_year(year)
    if not branch_id or not year_id:
        raise InputValidationError("Invalid branch or year")
    if not has_scope(context, branch_id, year_id):
        logger.warning(
            f"{context.email} targeted {branch}/{year} outside assignments",
            extra={"actor_email": context.email},
        )
        raise ForbiddenError("Forbidden: outside your assigned scope")
