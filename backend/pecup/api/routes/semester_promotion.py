"""Semester Promotion Endpoints — move a branch/batch of students to their next semester.

Invariants:
    - Admins promote any branch/year; representatives only inside an active
      assignment; students never
    - Only sequential moves: semester 1 -> 2 of the same year, or 2 -> 1 of a
      different year (the batch's year_id follows the target semester)
    - Profile updates, the history row and the audit row commit together
    - History: admins see everything, representatives their assignments,
      students get 403

Design Decisions:
    - Students are profiles with role "student"; there is no separate table
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from pecup.api.dependencies import get_user_context
from pecup.core import year_mappings as ym
from pecup.core.domain_types import AuditAction, AuditEntity, Role
from pecup.core.errors import (
    ForbiddenError, InputValidationError, ResourceNotFoundError,
)
from pecup.core.permissions import UserContext, can_promote_semester, resource_filter
from pecup.infrastructure.database import get_db
from pecup.models.lookups import Semester
from pecup.models.profile import Profile
from pecup.models.semester_promotion import SemesterPromotion
from pecup.schemas.academic import SemesterPromotionCreate
from pecup.services.audit import audit_failures, record_audit

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/semester-promotion", tags=["academic"])


def promotion_view(promotion: SemesterPromotion) -> dict:
    data = promotion.to_dict()
    promoter = promotion.promoter
    data["promoter"] = (
        {"id": str(promoter.id), "email": promoter.email, "name": promoter.name,
         "role": promoter.role}
        if promoter else None
    )
    data["from_semester"] = promotion.from_semester.semester_number
    data["to_semester"] = promotion.to_semester.semester_number
    data["branch"] = {"name": promotion.branch.name, "code": promotion.branch.code}
    data["year"] = {
        "batch_year": promotion.year.batch_year,
        "display_name": promotion.year.display_name,
    }
    return data


@router.post("")
async def promote_semester(
    body: SemesterPromotionCreate,
    context: UserContext = Depends(get_user_context),
    db: AsyncSession = Depends(get_db),
):
    if not can_promote_semester(context, body.branch_id, body.year_id):
        raise ForbiddenError("Forbidden: Cannot promote semester for this branch/year")

    source = await db.get(Semester, body.from_semester_id)
    target = await db.get(Semester, body.to_semester_id)
    if source is None or target is None:
        raise InputValidationError("Invalid semester IDs")
    same_year = source.year_id == target.year_id
    if not ym.is_sequential_promotion(
        source.semester_number, target.semester_number, same_year,
    ):
        raise InputValidationError(
            "Invalid semester promotion: must be sequential "
            "(1->2 same year, or 2->1 next year)",
        )

    cohort = (
        Profile.role == Role.STUDENT.value,
        Profile.branch_id == body.branch_id,
        Profile.year_id == body.year_id,
        Profile.semester_id == body.from_semester_id,
    )
    student_ids = (await db.execute(select(Profile.id).where(*cohort))).scalars().all()
    if not student_ids:
        raise ResourceNotFoundError(
            "Students",
            message="No students found for promotion in the specified criteria",
        )

    async with audit_failures(
        actor_email=context.email, actor_role=context.role,
        action=AuditAction.PROMOTE_SEMESTER, entity=AuditEntity.SEMESTER_PROMOTIONS,
    ):
        moved = {"semester_id": target.id}
        if not same_year:
            moved["year_id"] = target.year_id
        await db.execute(
            update(Profile).where(Profile.id.in_(student_ids)).values(**moved),
        )
        promotion = SemesterPromotion(
            promoted_by=context.id,
            from_semester_id=source.id,
            to_semester_id=target.id,
            branch_id=body.branch_id,
            year_id=body.year_id,
            notes=body.notes,
        )
        db.add(promotion)
        await db.flush()
        await record_audit(
            db, actor_email=context.email, actor_role=context.role,
            action=AuditAction.PROMOTE_SEMESTER, entity=AuditEntity.SEMESTER_PROMOTIONS,
            entity_id=promotion.id,
            message=(
                f"Promoted {len(student_ids)} students from semester "
                f"{source.semester_number} to {target.semester_number}"
            ),
            after_data={
                "branch_id": str(body.branch_id),
                "year_id": str(body.year_id),
                "from_semester_id": str(source.id),
                "to_semester_id": str(target.id),
                "students_count": len(student_ids),
                "notes": body.notes,
            },
        )
        await db.commit()
    logger.info(
        f"{context.email} promoted {len(student_ids)} students "
        f"to semester {target.semester_number}",
    )
    return {
        "success": True,
        "promotedCount": len(student_ids),
        "promotion": {"id": str(promotion.id)},
    }


@router.get("")
async def list_promotions(
    branch_id: UUID | None = Query(None),
    year_id: UUID | None = Query(None),
    context: UserContext = Depends(get_user_context),
    db: AsyncSession = Depends(get_db),
):
    if not context.is_staff:
        raise ForbiddenError()
    query = select(SemesterPromotion).order_by(SemesterPromotion.promotion_date.desc())
    rules = resource_filter(context)
    if rules.branch_ids is not None:
        query = query.where(SemesterPromotion.branch_id.in_(rules.branch_ids))
    if rules.year_ids is not None:
        query = query.where(SemesterPromotion.year_id.in_(rules.year_ids))
    if branch_id:
        query = query.where(SemesterPromotion.branch_id == branch_id)
    if year_id:
        query = query.where(SemesterPromotion.year_id == year_id)
    rows = (await db.execute(query)).scalars().all()
    return {"promotions": [promotion_view(p) for p in rows]}
