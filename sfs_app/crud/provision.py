"""CRUD operations for provision versions."""

from datetime import date

from sqlalchemy.ext.asyncio import AsyncSession

from sfs_app.schemas.provision import (
    ChangesResponseSchema,
    ProvisionChangeSchema,
    ProvisionDiffSchema,
    ProvisionHistorySchema,
    ProvisionVersionSchema,
)
from sfs_pipeline.versions.version_store import ProvisionVersionService


async def get_provision(
    session: AsyncSession,
    document_id: str,
    provision_ref: str,
    as_of: date | None = None,
    include_amendments: bool = False,
) -> ProvisionVersionSchema | None:
    """Return a provision as of a date (today if not given).

    Returns None if the document is unknown. A known document without a
    wording on the date yields a schema with status "future" or "not_found".
    """
    service = ProvisionVersionService(session)
    resolved = await service.resolve_document_id(document_id)
    if resolved is None:
        return None

    state = await service.get_provision_at_date(
        resolved,
        provision_ref,
        as_of or date.today(),
        include_amendments=include_amendments,
    )
    return ProvisionVersionSchema.model_validate(state)


async def get_provision_history(
    session: AsyncSession, document_id: str, provision_ref: str
) -> ProvisionHistorySchema | None:
    history = await ProvisionVersionService(session).get_provision_history(
        document_id, provision_ref
    )
    if history is None:
        return None
    return ProvisionHistorySchema.model_validate(history)


async def get_provision_diff(
    session: AsyncSession,
    document_id: str,
    provision_ref: str,
    from_date: date,
    to_date: date | None = None,
) -> ProvisionDiffSchema | None:
    result = await ProvisionVersionService(session).diff(
        document_id, provision_ref, from_date, to_date
    )
    if result is None:
        return None
    return ProvisionDiffSchema.model_validate(result)


async def get_changes_since(
    session: AsyncSession,
    since: date,
    document_id: str | None = None,
    limit: int | None = None,
) -> ChangesResponseSchema:
    """Return provision versions effective on or after ``since``."""
    changes = await ProvisionVersionService(session).changes_since(
        since, document_id=document_id, limit=limit
    )
    return ChangesResponseSchema(
        since=since,
        total=len(changes),
        changes=[ProvisionChangeSchema.model_validate(c) for c in changes],
    )
