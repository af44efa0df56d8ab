"""Document endpoints."""

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from sfs_app.api.v1.params import identifier_param, optional_date_param
from sfs_app.crud.document import get_document_currency
from sfs_app.models.base import get_async_session
from sfs_app.schemas.document import CurrencySchema

router = APIRouter()


@router.get("/{document_id}/currency")
async def document_currency(
    document_id: str,
    provision_ref: str | None = Query(None, description="Provision to check"),
    as_of_date: str | None = Query(None, description="Date (YYYY-MM-DD)"),
    session: AsyncSession = Depends(get_async_session),
) -> CurrencySchema:
    """Check whether a statute (and optionally a provision) is in force."""
    document_id = identifier_param(document_id, "document_id")
    as_of = optional_date_param(as_of_date, "as_of_date")
    result = await get_document_currency(session, document_id, provision_ref, as_of)
    if result is None:
        raise HTTPException(status_code=404, detail=f"Document {document_id} not found")
    return result
