"""Lookup Schemas — branch and admission-year creation."""

from pydantic import BaseModel, Field, field_validator


class BranchCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    code: str = Field(min_length=1, max_length=20)

    @field_validator("name", "code")
    @classmethod
    def strip(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("must not be blank")
        return v


class YearCreate(BaseModel):
    batch_year: int = Field(ge=2020, le=2030)
    display_name: str = Field(min_length=1, max_length=100)
