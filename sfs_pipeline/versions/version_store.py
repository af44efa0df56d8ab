"""Point-in-time queries over provision version windows.

Every wording of a provision is a row in ``legal_provision_versions`` with a
half-open validity window ``[valid_from, valid_to)``. A null ``valid_from``
means "since the beginning"; a null ``valid_to`` marks the current wording.

The read path assumes windows for one provision do not overlap (the writer
enforces that). If they do anyway, the row with the latest ``valid_from``
wins, then the highest id.
"""

import difflib
import logging
from dataclasses import dataclass, field
from datetime import date

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from sfs_app.config import settings
from sfs_app.models.amendment import StatuteAmendment
from sfs_app.models.document import LegalDocument
from sfs_app.models.enums import AmendmentType, VersionStatus
from sfs_app.models.provision import LegalProvisionVersion, split_provision_ref
from sfs_pipeline.versions.validation import clamp_limit

logger = logging.getLogger(__name__)

# Lower bound for amendment lookups when a version has no start date
_EPOCH = date(1900, 1, 1)


@dataclass
class AmendmentRecord:
    """A promoted amendment from the change-history table."""

    amended_by_sfs: str
    amendment_date: date
    amendment_type: str
    change_summary: str | None = None


@dataclass
class ProvisionVersionState:
    """A provision as it read on a given date, or why there was no wording."""

    document_id: str
    provision_ref: str
    section: str
    content: str
    status: VersionStatus
    chapter: str | None = None
    title: str | None = None
    valid_from: date | None = None
    valid_to: date | None = None
    amendments: list[AmendmentRecord] | None = None

    @property
    def found(self) -> bool:
        return self.status in (VersionStatus.CURRENT, VersionStatus.HISTORICAL)


@dataclass
class VersionWindow:
    valid_from: date | None
    valid_to: date | None


@dataclass
class ProvisionHistory:
    """All wordings of a provision in chronological order."""

    document_id: str
    provision_ref: str
    versions: list[ProvisionVersionState] = field(default_factory=list)
    current_version: date | None = None

    @property
    def total_versions(self) -> int:
        return len(self.versions)


@dataclass
class ProvisionDiff:
    """Comparison of a provision's wording at two dates."""

    document_id: str
    provision_ref: str
    from_date: date
    to_date: date
    changed: bool
    diff: str | None
    change_summary: str
    from_version: VersionWindow | None
    to_version: VersionWindow | None
    amendments_between: list[AmendmentRecord] = field(default_factory=list)


@dataclass
class ProvisionChange:
    """A version that took effect on or after a given date."""

    document_id: str
    provision_ref: str
    provision_title: str | None
    effective_date: date | None
    superseded_date: date | None
    document_title: str
    short_name: str | None
    source_url: str | None


def _state_from_row(row: LegalProvisionVersion) -> ProvisionVersionState:
    return ProvisionVersionState(
        document_id=row.document_id,
        provision_ref=row.provision_ref,
        chapter=row.chapter,
        section=row.section,
        title=row.title,
        content=row.content,
        valid_from=row.valid_from,
        valid_to=row.valid_to,
        status=VersionStatus.CURRENT if row.valid_to is None else VersionStatus.HISTORICAL,
    )


def _missing_state(
    document_id: str,
    provision_ref: str,
    status: VersionStatus,
    valid_from: date | None = None,
) -> ProvisionVersionState:
    chapter, section = split_provision_ref(provision_ref)
    return ProvisionVersionState(
        document_id=document_id,
        provision_ref=provision_ref,
        chapter=chapter,
        section=section,
        content="",
        status=status,
        valid_from=valid_from,
    )


def generate_unified_diff(old_text: str, new_text: str, label: str) -> str:
    """Unified diff between two wordings, labelled a/<label> and b/<label>."""
    lines = difflib.unified_diff(
        old_text.splitlines(),
        new_text.splitlines(),
        fromfile=f"a/{label}",
        tofile=f"b/{label}",
        lineterm="",
    )
    return "\n".join(lines)


class ProvisionVersionService:
    """Read access to provision versions and the promoted change history."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def _version_at(
        self, document_id: str, provision_ref: str, as_of: date
    ) -> LegalProvisionVersion | None:
        stmt = (
            select(LegalProvisionVersion)
            .where(
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
            .order_by(
                LegalProvisionVersion.valid_from.desc().nulls_last(),
                LegalProvisionVersion.id.desc(),
            )
            .limit(1)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def _amendments(
        self,
        document_id: str,
        provision_ref: str,
        after: date,
        until: date | None = None,
    ) -> list[AmendmentRecord]:
        stmt = select(StatuteAmendment).where(
            StatuteAmendment.target_document_id == document_id,
            StatuteAmendment.target_provision_ref == provision_ref,
            StatuteAmendment.amendment_date > after,
        )
        if until is not None:
            stmt = stmt.where(StatuteAmendment.amendment_date <= until)
        stmt = stmt.order_by(StatuteAmendment.amendment_date, StatuteAmendment.amendment_id)

        result = await self.session.execute(stmt)
        return [
            AmendmentRecord(
                amended_by_sfs=row.amended_by_sfs,
                amendment_date=row.amendment_date,
                amendment_type=AmendmentType(row.amendment_type).value,
                change_summary=row.change_summary,
            )
            for row in result.scalars().all()
        ]

    async def get_provision_at_date(
        self,
        document_id: str,
        provision_ref: str,
        as_of: date,
        include_amendments: bool = False,
    ) -> ProvisionVersionState:
        """Resolve the wording of a provision on ``as_of``.

        Returns a state with status CURRENT or HISTORICAL when a window
        contains the date. Otherwise the status is FUTURE (the provision only
        exists later; ``valid_from`` carries its first date) or NOT_FOUND.

        Args:
            document_id: SFS number of the statute, e.g. "2018:218".
            provision_ref: Provision address, e.g. "1:3" or "5 a".
            as_of: The date to resolve.
            include_amendments: Attach promoted amendments dated after the
                start of the resolved version.
        """
        row = await self._version_at(document_id, provision_ref, as_of)

        if row is None:
            earliest_stmt = select(func.min(LegalProvisionVersion.valid_from)).where(
                LegalProvisionVersion.document_id == document_id,
                LegalProvisionVersion.provision_ref == provision_ref,
            )
            earliest = (await self.session.execute(earliest_stmt)).scalar_one_or_none()
            if earliest is not None and earliest > as_of:
                return _missing_state(
                    document_id, provision_ref, VersionStatus.FUTURE, valid_from=earliest
                )
            return _missing_state(document_id, provision_ref, VersionStatus.NOT_FOUND)

        state = _state_from_row(row)
        if include_amendments:
            state.amendments = await self._amendments(
                document_id, provision_ref, after=row.valid_from or _EPOCH
            )
        return state

    async def get_current_provision(
        self, document_id: str, provision_ref: str, today: date | None = None
    ) -> ProvisionVersionState:
        return await self.get_provision_at_date(
            document_id, provision_ref, today or date.today()
        )

    async def get_all_versions(
        self, document_id: str, provision_ref: str
    ) -> list[ProvisionVersionState]:
        """Every stored wording of a provision, oldest first."""
        stmt = (
            select(LegalProvisionVersion)
            .where(
                LegalProvisionVersion.document_id == document_id,
                LegalProvisionVersion.provision_ref == provision_ref,
            )
            .order_by(
                LegalProvisionVersion.valid_from.asc().nulls_first(),
                LegalProvisionVersion.id.asc(),
            )
        )
        result = await self.session.execute(stmt)
        return [_state_from_row(row) for row in result.scalars().all()]

    async def resolve_document_id(self, value: str) -> str | None:
        """Canonical document id for an SFS number, title or short name.

        Tries an exact id first, then a substring match on title, short name
        and English title.
        """
        exact = await self.session.execute(
            select(LegalDocument.id).where(LegalDocument.id == value)
        )
        document_id = exact.scalar_one_or_none()
        if document_id is not None:
            return document_id

        by_name = await self.session.execute(
            select(LegalDocument.id)
            .where(
                or_(
                    LegalDocument.title.contains(value, autoescape=True),
                    LegalDocument.short_name.contains(value, autoescape=True),
                    LegalDocument.title_en.contains(value, autoescape=True),
                )
            )
            .order_by(LegalDocument.id)
            .limit(1)
        )
        return by_name.scalar_one_or_none()

    async def get_provision_history(
        self, document_id: str, provision_ref: str
    ) -> ProvisionHistory | None:
        """Chronological history of a provision, or None for an unknown document."""
        resolved = await self.resolve_document_id(document_id)
        if resolved is None:
            return None

        versions = await self.get_all_versions(resolved, provision_ref)
        current = next((v for v in versions if v.valid_to is None), None)
        return ProvisionHistory(
            document_id=resolved,
            provision_ref=provision_ref,
            versions=versions,
            current_version=current.valid_from if current else None,
        )

    async def diff(
        self,
        document_id: str,
        provision_ref: str,
        from_date: date,
        to_date: date | None = None,
    ) -> ProvisionDiff | None:
        """Compare the wording in force at two dates.

        Each endpoint is resolved independently with the as-of rule. Returns
        None when the document is unknown or neither date has a wording.
        """
        resolved = await self.resolve_document_id(document_id)
        if resolved is None:
            return None

        to_date = to_date or date.today()
        from_row = await self._version_at(resolved, provision_ref, from_date)
        to_row = await self._version_at(resolved, provision_ref, to_date)
        if from_row is None and to_row is None:
            return None

        from_content = from_row.content if from_row else None
        to_content = to_row.content if to_row else None
        changed = from_content != to_content

        diff_text = None
        if changed and from_row and to_row:
            diff_text = generate_unified_diff(
                from_row.content, to_row.content, f"{resolved}_{provision_ref}"
            )

        from_window = VersionWindow(from_row.valid_from, from_row.valid_to) if from_row else None
        to_window = VersionWindow(to_row.valid_from, to_row.valid_to) if to_row else None

        if changed:
            summary = f"Text changed between {from_date.isoformat()} and {to_date.isoformat()}"
        else:
            summary = f"No changes between {from_date.isoformat()} and {to_date.isoformat()}"

        return ProvisionDiff(
            document_id=resolved,
            provision_ref=provision_ref,
            from_date=from_date,
            to_date=to_date,
            changed=changed,
            diff=diff_text,
            change_summary=summary,
            from_version=from_window,
            to_version=to_window,
            amendments_between=await self._amendments(
                resolved, provision_ref, after=from_date, until=to_date
            ),
        )

    async def changes_since(
        self,
        since: date,
        document_id: str | None = None,
        limit: int | None = None,
    ) -> list[ProvisionChange]:
        """Versions that took effect on or after ``since``, most recent first."""
        limit = clamp_limit(limit, settings.changes_default_limit, settings.changes_max_limit)

        stmt = (
            select(
                LegalProvisionVersion,
                LegalDocument.title,
                LegalDocument.short_name,
                LegalDocument.url,
            )
            .join(LegalDocument, LegalDocument.id == LegalProvisionVersion.document_id)
            .where(LegalProvisionVersion.valid_from >= since)
        )
        if document_id:
            stmt = stmt.where(LegalProvisionVersion.document_id == document_id)
        stmt = stmt.order_by(
            LegalProvisionVersion.valid_from.desc(),
            LegalProvisionVersion.id.desc(),
        ).limit(limit)

        result = await self.session.execute(stmt)
        return [
            ProvisionChange(
                document_id=version.document_id,
                provision_ref=version.provision_ref,
                provision_title=version.title,
                effective_date=version.valid_from,
                superseded_date=version.valid_to,
                document_title=document_title,
                short_name=short_name,
                source_url=url,
            )
            for version, document_title, short_name, url in result.all()
        ]
