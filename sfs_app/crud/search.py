"""CRUD operations for provision search."""

from datetime import date

from sqlalchemy.ext.asyncio import AsyncSession

from sfs_app.schemas.search import SearchHitSchema, SearchResultsSchema
from sfs_pipeline.search.versioned_search import ProvisionSearchService


async def search_provisions(
    session: AsyncSession,
    query: str,
    as_of: date | None = None,
    document_id: str | None = None,
    status: str | None = None,
    limit: int | None = None,
) -> SearchResultsSchema:
    """Search provisions, optionally as they read on ``as_of``.

    Raises:
        ValueError: Unknown status or a query FTS5 cannot parse.
    """
    hits = await ProvisionSearchService(session).search(
        query,
        as_of=as_of,
        document_id=document_id,
        status=status,
        limit=limit,
    )
    return SearchResultsSchema(
        query=query,
        as_of_date=as_of,
        total=len(hits),
        results=[SearchHitSchema.model_validate(hit) for hit in hits],
    )
