"""Announcement Schemas — reminders, recent updates and exams.

Invariants:
    - Create schemas require the fields each table cannot do without
    - Update schemas list exactly the fields an admin may change; unknown
      keys are ignored, unset keys are left untouched (exclude_unset)
    - year is a batch year; "" and null both clear it
"""

from datetime import date

from pydantic import BaseModel, Field, field_validator

from pecup.schemas.common import blank_to_none, parse_iso_date, reject_null


class _Targeted(BaseModel):
    year: int | None = None
    branch: str | None = None

    @field_validator("year", "branch", mode="before")
    @classmethod
    def empty_is_none(cls, v):
        return blank_to_none(v)


class ReminderCreate(_Targeted):
    title: str = Field(min_length=1, max_length=300)
    due_date: date
    description: str | None = None
    icon_type: str | None = None
    status: str | None = None

    @field_validator("title")
    @classmethod
    def strip_title(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("title is required")
        return v

    @field_validator("due_date", mode="before")
    @classmethod
    def check_due_date(cls, v):
        return parse_iso_date(v, "due_date")


class ReminderUpdate(_Targeted):
    title: str | None = Field(None, min_length=1, max_length=300)
    due_date: date | None = None
    description: str | None = None
    icon_type: str | None = None
    status: str | None = None

    @field_validator("due_date", mode="before")
    @classmethod
    def check_due_date(cls, v):
        return parse_iso_date(v, "due_date")

    @field_validator("title", "due_date")
    @classmethod
    def not_null(cls, v, info):
        return reject_null(v, info)


class RecentUpdateCreate(_Targeted):
    title: str = Field(min_length=1, max_length=300)
    date: str | None = Field(None, max_length=50)
    description: str | None = None


class RecentUpdateUpdate(_Targeted):
    title: str | None = Field(None, min_length=1, max_length=300)
    date: str | None = Field(None, max_length=50)
    description: str | None = None

    @field_validator("title")
    @classmethod
    def not_null(cls, v, info):
        return reject_null(v, info)


class ExamCreate(_Targeted):
    subject: str = Field(min_length=1, max_length=100)
    exam_date: date
    description: str | None = None

    @field_validator("exam_date", mode="before")
    @classmethod
    def check_exam_date(cls, v):
        return parse_iso_date(v, "exam_date")


class ExamUpdate(_Targeted):
    subject: str | None = Field(None, min_length=1, max_length=100)
    exam_date: date | None = None
    description: str | None = None

    @field_validator("exam_date", mode="before")
    @classmethod
    def check_exam_date(cls, v):
        return parse_iso_date(v, "exam_date")

    @field_validator("subject", "exam_date")
    @classmethod
    def not_null(cls, v, info):
        return reject_null(v, info)
