"""Is a statute, or one of its provisions, in force?"""

import logging
from dataclasses import dataclass, field
from datetime import date, datetime

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from sfs_app.models.document import LegalDocument
from sfs_app.models.enums import CurrencyStatus, DocumentStatus, DocumentType
from sfs_app.models.provision import LegalProvision, LegalProvisionVersion
from sfs_pipeline.legal_parser.metadata import parse_iso_date_in

logger = logging.getLogger(__name__)

_STATUS_WARNINGS = {
    DocumentStatus.REPEALED: "This statute has been repealed (upphävd)",
    DocumentStatus.AMENDED: "This statute has been amended since last ingestion",
    DocumentStatus.NOT_YET_IN_FORCE: "This statute has not yet entered into force",
}

HISTORICAL_LOOKUP_WARNING = (
    "Historical lookups use provision validity windows where available; "
    "some statutes only have current consolidated wording."
)


@dataclass
class CurrencyResult:
    document_id: str
    title: str
    status: str
    type: str
    issued_date: date | None
    in_force_date: date | None
    last_updated: datetime | None
    is_current: bool
    as_of_date: date | None = None
    status_as_of: CurrencyStatus | None = None
    is_in_force_as_of: bool | None = None
    provision_exists: bool | None = None
    warnings: list[str] = field(default_factory=list)


def status_as_of(document: LegalDocument, as_of: date) -> CurrencyStatus:
    """In force, repealed or not yet in force on ``as_of``.

    The start is the in-force date (issue date if unknown); the end is the
    repeal date recorded in the document description.
    """
    started_on = document.in_force_date or document.issued_date
    repealed_on = parse_iso_date_in(document.description)
    if started_on is not None and started_on > as_of:
        return CurrencyStatus.NOT_YET_IN_FORCE
    if repealed_on is not None and repealed_on <= as_of:
        return CurrencyStatus.REPEALED
    return CurrencyStatus.IN_FORCE


async def _provision_exists(
    session: AsyncSession, document_id: str, provision_ref: str, as_of: date | None
) -> bool:
    if as_of is None:
        stmt = select(LegalProvision.id).where(
            LegalProvision.document_id == document_id,
            LegalProvision.provision_ref == provision_ref,
        )
    else:
        stmt = select(LegalProvisionVersion.id).where(
            LegalProvisionVersion.document_id == document_id,
            LegalProvisionVersion.provision_ref == provision_ref,
            or_(
                LegalProvisionVersion.valid_from.is_(None),
                LegalProvisionVersion.valid_from <= as_of,
            ),
            or_(
                LegalProvisionVersion.valid_to.is_(None),
                LegalProvisionVersion.valid_to > as_of,
            ),
        )
    result = await session.execute(stmt.limit(1))
    return result.scalar_one_or_none() is not None


async def check_currency(
    session: AsyncSession,
    document_id: str,
    provision_ref: str | None = None,
    as_of: date | None = None,
) -> CurrencyResult | None:
    """Currency of a statute and optionally one provision.

    Returns None when the document is unknown.
    """
    document = await session.get(LegalDocument, document_id)
    if document is None:
        return None

    status = DocumentStatus(document.status)
    warnings = []
    if status in _STATUS_WARNINGS:
        warnings.append(_STATUS_WARNINGS[status])

    result = CurrencyResult(
        document_id=document.id,
        title=document.title,
        status=status.value,
        type=DocumentType(document.type).value,
        issued_date=document.issued_date,
        in_force_date=document.in_force_date,
        last_updated=document.updated_at,
        is_current=status == DocumentStatus.IN_FORCE,
        as_of_date=as_of,
        warnings=warnings,
    )

    if as_of is not None:
        result.status_as_of = status_as_of(document, as_of)
        result.is_in_force_as_of = result.status_as_of == CurrencyStatus.IN_FORCE
        warnings.append(HISTORICAL_LOOKUP_WARNING)

    if provision_ref:
        result.provision_exists = await _provision_exists(
            session, document.id, provision_ref, as_of
        )
        if not result.provision_exists:
            warnings.append(f'Provision "{provision_ref}" not found in this document')

    return result
