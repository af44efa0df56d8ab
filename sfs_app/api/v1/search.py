"""Full-text search endpoint."""

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from sfs_app.api.v1.params import optional_date_param
from sfs_app.crud.search import search_provisions
from sfs_app.models.base import get_async_session
from sfs_app.schemas.search import SearchResultsSchema

router = APIRouter()


@router.get("")
async def search(
    query: str = Query(..., description="Search text or FTS5 query"),
    as_of_date: str | None = Query(None, description="Search wording in force on this date"),
    document_id: str | None = Query(None, description="Restrict to one SFS number"),
    status: str | None = Query(None, description="Restrict to a document status"),
    limit: int | None = Query(None, description="Maximum results (clamped to 1..50)"),
    session: AsyncSession = Depends(get_async_session),
) -> SearchResultsSchema:
    """Search provisions, optionally as they read on a past date."""
    as_of = optional_date_param(as_of_date, "as_of_date")
    try:
        return await search_provisions(
            session,
            query,
            as_of=as_of,
            document_id=document_id,
            status=status,
            limit=limit,
        )
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e)) from e
