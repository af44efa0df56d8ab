"""CRUD operations for legal documents."""

from datetime import date

from sqlalchemy.ext.asyncio import AsyncSession

from sfs_app.schemas.document import CurrencySchema
from sfs_pipeline.currency import check_currency


async def get_document_currency(
    session: AsyncSession,
    document_id: str,
    provision_ref: str | None = None,
    as_of: date | None = None,
) -> CurrencySchema | None:
    """Return currency information, or None if the document is unknown."""
    result = await check_currency(session, document_id, provision_ref, as_of)
    if result is None:
        return None
    return CurrencySchema.model_validate(result)
