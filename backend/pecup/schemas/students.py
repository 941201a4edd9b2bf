"""Student Schemas — admin-created student profiles."""

from uuid import UUID

from pydantic import BaseModel, EmailStr, Field, field_validator

from pecup.schemas.common import blank_to_none


class StudentCreate(BaseModel):
    roll_number: str = Field(min_length=1, max_length=20)
    name: str = Field(min_length=1, max_length=100)
    email: EmailStr
    branch_id: UUID
    year_id: UUID
    semester_id: UUID
    section: str | None = Field(None, max_length=20)

    @field_validator("roll_number", "name", mode="before")
    @classmethod
    def strip(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator("email")
    @classmethod
    def lowercase(cls, v: str) -> str:
        return v.lower()

    @field_validator("section", mode="before")
    @classmethod
    def empty_is_none(cls, v):
        return blank_to_none(v)
