"""Change feed endpoint."""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from sfs_app.api.v1.params import date_param
from sfs_app.crud.provision import get_changes_since
from sfs_app.models.base import get_async_session
from sfs_app.schemas.provision import ChangesResponseSchema

router = APIRouter()


@router.get("")
async def list_changes(
    since: str = Query(..., description="Earliest effective date (YYYY-MM-DD)"),
    document_id: str | None = Query(None, description="Restrict to one SFS number"),
    limit: int | None = Query(None, description="Maximum results (clamped to 1..200)"),
    session: AsyncSession = Depends(get_async_session),
) -> ChangesResponseSchema:
    """List provision versions that took effect on or after a date."""
    return await get_changes_since(
        session, date_param(since, "since"), document_id=document_id, limit=limit
    )
