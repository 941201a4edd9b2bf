"""App Settings — the singleton upload-routing row.

Invariants:
    - At most one row (id = SETTINGS_ROW_ID)
    - Readers that must not write (uploads) get None when the row is missing;
      the settings endpoints create it with defaults on first access
"""

from sqlalchemy.ext.asyncio import AsyncSession

from pecup.config import get_settings
from pecup.models.settings import SETTINGS_ROW_ID, Setting


async def get_settings_row(db: AsyncSession) -> Setting | None:
    return await db.get(Setting, SETTINGS_ROW_ID)


async def get_or_create_settings_row(db: AsyncSession) -> Setting:
    row = await get_settings_row(db)
    if row is None:
        row = Setting(id=SETTINGS_ROW_ID, pdf_to_drive=False, non_pdf_to_storage=True)
        db.add(row)
        await db.flush()
    return row


async def upload_bucket(db: AsyncSession) -> str:
    row = await get_settings_row(db)
    if row is not None and row.storage_bucket:
        return row.storage_bucket
    return get_settings().storage_default_bucket
