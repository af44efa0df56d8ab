"""Write side of the version table.

Reads assume that the windows of one (document_id, provision_ref) do not
overlap and that at most one is open. This module is where that is checked:
every write goes through validate_version_windows and is refused with
VersionWindowError if it would break the partition.
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date
from typing import Protocol

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from sfs_app.models.provision import LegalProvisionVersion
from sfs_pipeline.statute_parser.segmenter import ParsedProvision

logger = logging.getLogger(__name__)


class VersionWindowError(ValueError):
    """A write would leave overlapping, inverted or multiple open windows."""


class _Window(Protocol):
    valid_from: date | None
    valid_to: date | None


def _start_key(window: _Window) -> tuple[bool, date]:
    # Null valid_from sorts first ("since the beginning")
    return (window.valid_from is not None, window.valid_from or date.min)


def validate_version_windows(windows: Iterable[_Window], label: str = "") -> None:
    """Check that windows partition time without overlap.

    Gaps between windows are allowed (a provision can be repealed and later
    reintroduced). Raises VersionWindowError on an empty or inverted window,
    more than one open window, or any overlap.
    """
    prefix = f"{label}: " if label else ""
    ordered = sorted(windows, key=_start_key)

    for window in ordered:
        if (
            window.valid_from is not None
            and window.valid_to is not None
            and window.valid_to <= window.valid_from
        ):
            raise VersionWindowError(
                f"{prefix}window [{window.valid_from}, {window.valid_to}) is empty or inverted"
            )

    open_windows = [w for w in ordered if w.valid_to is None]
    if len(open_windows) > 1:
        raise VersionWindowError(f"{prefix}{len(open_windows)} open windows, at most one allowed")

    for previous, following in zip(ordered, ordered[1:], strict=False):
        if previous.valid_to is None:
            raise VersionWindowError(
                f"{prefix}open window from {previous.valid_from} overlaps a later window"
            )
        if following.valid_from is None or previous.valid_to > following.valid_from:
            raise VersionWindowError(
                f"{prefix}window [{previous.valid_from}, {previous.valid_to}) overlaps "
                f"[{following.valid_from}, {following.valid_to})"
            )


@dataclass
class VersionSpec:
    """A wording to store together with its validity window."""

    provision: ParsedProvision
    valid_from: date | None = None
    valid_to: date | None = None


@dataclass
class _PlannedWindow:
    valid_from: date | None
    valid_to: date | None


def _version_row(
    document_id: str,
    provision: ParsedProvision,
    valid_from: date | None,
    valid_to: date | None = None,
) -> LegalProvisionVersion:
    return LegalProvisionVersion(
        document_id=document_id,
        provision_ref=provision.provision_ref,
        chapter=provision.chapter,
        section=provision.section,
        title=provision.title,
        content=provision.content,
        valid_from=valid_from,
        valid_to=valid_to,
    )


class VersionWriter:
    """Validated writes to ``legal_provision_versions``.

    The writer flushes but never commits; the caller owns the transaction.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def _existing(self, document_id: str, provision_ref: str) -> list[LegalProvisionVersion]:
        result = await self.session.execute(
            select(LegalProvisionVersion)
            .where(
                LegalProvisionVersion.document_id == document_id,
                LegalProvisionVersion.provision_ref == provision_ref,
            )
            .order_by(LegalProvisionVersion.id)
        )
        return list(result.scalars().all())

    async def replace_versions(
        self, document_id: str, versions: list[VersionSpec]
    ) -> list[LegalProvisionVersion]:
        """Replace the whole history of one provision.

        All specs must address the same provision. Nothing is written if the
        windows are invalid.
        """
        if not versions:
            return []
        refs = {spec.provision.provision_ref for spec in versions}
        if len(refs) != 1:
            raise VersionWindowError(f"replace_versions got several provisions: {sorted(refs)}")
        provision_ref = refs.pop()
        validate_version_windows(versions, label=f"{document_id} {provision_ref}")

        await self.session.execute(
            delete(LegalProvisionVersion).where(
                LegalProvisionVersion.document_id == document_id,
                LegalProvisionVersion.provision_ref == provision_ref,
            )
        )
        rows = [
            _version_row(document_id, spec.provision, spec.valid_from, spec.valid_to)
            for spec in versions
        ]
        self.session.add_all(rows)
        await self.session.flush()
        logger.debug(f"Replaced {len(rows)} versions of {document_id} {provision_ref}")
        return rows

    async def append_version(
        self,
        document_id: str,
        provision: ParsedProvision,
        valid_from: date | None,
    ) -> LegalProvisionVersion:
        """Store a new wording from ``valid_from`` on, closing the open window there."""
        label = f"{document_id} {provision.provision_ref}"
        existing = await self._existing(document_id, provision.provision_ref)
        if existing and valid_from is None:
            raise VersionWindowError(f"{label}: an undated wording cannot follow stored history")

        planned = [
            _PlannedWindow(
                row.valid_from,
                valid_from if row.valid_to is None else row.valid_to,
            )
            for row in existing
        ]
        planned.append(_PlannedWindow(valid_from, None))
        validate_version_windows(planned, label=label)

        for row in existing:
            if row.valid_to is None:
                row.valid_to = valid_from
        new_row = _version_row(document_id, provision, valid_from)
        self.session.add(new_row)
        await self.session.flush()
        return new_row

    async def close_version(
        self, document_id: str, provision_ref: str, valid_to: date
    ) -> LegalProvisionVersion | None:
        """End the open window of a provision that no longer exists.

        Returns the closed row, or None if nothing was open.
        """
        label = f"{document_id} {provision_ref}"
        existing = await self._existing(document_id, provision_ref)
        open_row = next((row for row in existing if row.valid_to is None), None)
        if open_row is None:
            return None

        planned = [
            _PlannedWindow(row.valid_from, valid_to if row is open_row else row.valid_to)
            for row in existing
        ]
        validate_version_windows(planned, label=label)

        open_row.valid_to = valid_to
        await self.session.flush()
        return open_row
