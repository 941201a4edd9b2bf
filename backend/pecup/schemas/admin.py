"""Admin Schemas — admin accounts and the settings singleton."""

from typing import Literal

from pydantic import BaseModel, EmailStr, field_validator

from pecup.schemas.common import reject_null


class AdminCreate(BaseModel):
    email: EmailStr
    role: Literal["admin", "superadmin"] = "admin"

    @field_validator("email")
    @classmethod
    def lowercase(cls, v: str) -> str:
        return v.lower()


class AdminRoleUpdate(BaseModel):
    role: Literal["admin", "superadmin"]


class SettingsUpdate(BaseModel):
    """Only these four keys are writable; anything else in the body is ignored."""
    drive_folder_id: str | None = None
    storage_bucket: str | None = None
    pdf_to_drive: bool | None = None
    non_pdf_to_storage: bool | None = None

    @field_validator("pdf_to_drive", "non_pdf_to_storage")
    @classmethod
    def not_null(cls, v, info):
        return reject_null(v, info)
