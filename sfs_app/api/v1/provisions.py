"""Provision endpoints: point-in-time reads, history and diffs."""

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from sfs_app.api.v1.params import date_param, identifier_param, optional_date_param
from sfs_app.crud.provision import (
    get_provision,
    get_provision_diff,
    get_provision_history,
)
from sfs_app.models.base import get_async_session
from sfs_app.schemas.provision import (
    ProvisionDiffSchema,
    ProvisionHistorySchema,
    ProvisionVersionSchema,
)

router = APIRouter()


@router.get("/{document_id}/{provision_ref}/history")
async def provision_history(
    document_id: str,
    provision_ref: str,
    session: AsyncSession = Depends(get_async_session),
) -> ProvisionHistorySchema:
    """Return every stored wording of a provision, oldest first."""
    document_id = identifier_param(document_id, "document_id")
    provision_ref = identifier_param(provision_ref, "provision_ref")
    result = await get_provision_history(session, document_id, provision_ref)
    if result is None:
        raise HTTPException(status_code=404, detail=f"Document {document_id} not found")
    return result


@router.get("/{document_id}/{provision_ref}/diff")
async def provision_diff(
    document_id: str,
    provision_ref: str,
    from_date: str = Query(..., description="Start date (YYYY-MM-DD)"),
    to_date: str | None = Query(None, description="End date (YYYY-MM-DD), default today"),
    session: AsyncSession = Depends(get_async_session),
) -> ProvisionDiffSchema:
    """Diff a provision's wording between two dates."""
    document_id = identifier_param(document_id, "document_id")
    provision_ref = identifier_param(provision_ref, "provision_ref")
    start = date_param(from_date, "from_date")
    end = optional_date_param(to_date, "to_date")

    result = await get_provision_diff(session, document_id, provision_ref, start, end)
    if result is None:
        raise HTTPException(
            status_code=404,
            detail=f"No versions of {provision_ref} in {document_id} to compare",
        )
    return result


@router.get("/{document_id}/{provision_ref}")
async def provision_at_date(
    document_id: str,
    provision_ref: str,
    as_of_date: str | None = Query(None, description="Date (YYYY-MM-DD), default today"),
    include_amendments: bool = Query(False, description="Attach promoted amendments"),
    session: AsyncSession = Depends(get_async_session),
) -> ProvisionVersionSchema:
    """Return a provision as it read on a date.

    A known document with no wording on the date returns status "future" or
    "not_found" rather than an error.
    """
    document_id = identifier_param(document_id, "document_id")
    provision_ref = identifier_param(provision_ref, "provision_ref")
    as_of = optional_date_param(as_of_date, "as_of_date")

    result = await get_provision(
        session, document_id, provision_ref, as_of, include_amendments=include_amendments
    )
    if result is None:
        raise HTTPException(status_code=404, detail=f"Document {document_id} not found")
    return result
