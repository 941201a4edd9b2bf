"""Resource Schemas — admin create (JSON body) and partial update.

Invariants:
    - category, subject and name are stripped before the length checks, so a
      whitespace-only value is rejected like an empty one
    - subject is lowercased on the way in
    - unit must be a positive integer
    - Multipart requests are mapped onto the same models by the route
"""

from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from pecup.schemas.common import blank_to_none, reject_null


class _ResourceFields(BaseModel):
    @field_validator(
        "year", "semester", "branch", "description", "type",
        "branch_id", "year_id", "semester_id",
        mode="before", check_fields=False,
    )
    @classmethod
    def empty_is_none(cls, v):
        return blank_to_none(v)

    @field_validator("category", "subject", "name", mode="before", check_fields=False)
    @classmethod
    def strip_text(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator("subject", check_fields=False)
    @classmethod
    def lowercase_subject(cls, v: str | None) -> str | None:
        return v.lower() if v is not None else v


class ResourceCreate(_ResourceFields):
    category: str = Field(min_length=1, max_length=50)
    subject: str = Field(min_length=1, max_length=100)
    unit: int = Field(ge=1)
    name: str = Field(min_length=1, max_length=300)
    url: str | None = None
    title: str | None = None
    description: str | None = None
    type: str | None = None
    year: int | None = None
    branch: str | None = None
    semester: int | None = None
    archived: bool = False
    branch_id: UUID | None = None
    year_id: UUID | None = None
    semester_id: UUID | None = None


class ResourceUpdate(_ResourceFields):
    category: str | None = Field(None, min_length=1, max_length=50)
    subject: str | None = Field(None, min_length=1, max_length=100)
    unit: int | None = Field(None, ge=1)
    name: str | None = Field(None, min_length=1, max_length=300)
    description: str | None = None
    type: str | None = None
    year: int | None = None
    branch: str | None = None
    semester: int | None = None
    archived: bool | None = None

    @field_validator("category", "subject", "unit", "name", "archived")
    @classmethod
    def not_null(cls, v, info):
        return reject_null(v, info)
