"""Academic Schemas — year mappings, the academic calendar and semester promotion."""

from typing import Any, Literal
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from pecup.schemas.common import blank_to_none


class YearMappingsUpdate(BaseModel):
    """Keys are batch years, values academic levels; validated by normalize_mappings."""
    mappings: dict[str, Any]


class CalendarUpdate(BaseModel):
    current_year_id: UUID
    current_semester_id: UUID


class CalendarAction(BaseModel):
    action: Literal["progress_semester"]


class SemesterPromotionCreate(BaseModel):
    branch_id: UUID
    year_id: UUID
    from_semester_id: UUID
    to_semester_id: UUID
    notes: str | None = Field(None, max_length=1000)

    @field_validator("notes", mode="before")
    @classmethod
    def empty_is_none(cls, v):
        return blank_to_none(v)
