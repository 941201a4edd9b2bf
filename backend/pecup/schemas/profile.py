"""Profile Schemas — self-service profile upsert."""

from uuid import UUID

from pydantic import BaseModel, Field, field_validator


class ProfileUpsert(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    roll_number: str = Field(min_length=1, max_length=50)
    branch_id: UUID
    year_id: UUID
    semester_id: UUID
    section: str | None = Field(None, max_length=20)

    @field_validator("name", "roll_number")
    @classmethod
    def strip(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("must not be blank")
        return v
