"""Ingest statute text into the current and version tables.

One run takes the raw text of a consolidated statute, segments it, replaces
the statute's rows in ``legal_provisions`` and updates the version history:

- a provision whose wording changed gets a new window from ``valid_from``;
  the previous window is closed at the same date,
- an unchanged provision keeps its open window,
- a provision that disappeared has its open window closed at ``valid_from``.

All version writes go through VersionWriter, so an ingestion that would
leave overlapping windows fails with VersionWindowError and is rolled back.
"""

import logging
from dataclasses import dataclass, field
from datetime import date

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from sfs_app.models.document import LegalDocument
from sfs_app.models.enums import DocumentStatus, DocumentType
from sfs_app.models.provision import LegalProvision, LegalProvisionVersion
from sfs_pipeline.legal_parser.amendment_parser import is_valid_sfs_number
from sfs_pipeline.legal_parser.metadata import (
    document_metadata_from_header,
    extract_html_metadata,
)
from sfs_pipeline.statute_parser.fallback import select_provisions
from sfs_pipeline.statute_parser.segmenter import ParseDiagnostics, ParsedProvision
from sfs_pipeline.versions.validation import require_identifier
from sfs_pipeline.versions.version_writer import VersionWriter

logger = logging.getLogger(__name__)


@dataclass
class StatuteDocument:
    """Document-level fields supplied by the caller."""

    id: str
    title: str
    type: DocumentType = DocumentType.STATUTE
    title_en: str | None = None
    short_name: str | None = None
    status: DocumentStatus | None = None
    issued_date: date | None = None
    in_force_date: date | None = None
    url: str | None = None
    description: str | None = None


@dataclass
class IngestResult:
    """Summary of one ingestion run."""

    document_id: str
    provisions: int = 0
    new_versions: int = 0
    changed_versions: int = 0
    unchanged_versions: int = 0
    closed_versions: int = 0
    unclosed_versions: int = 0
    used_fallback: bool = False
    diagnostics: ParseDiagnostics = field(default_factory=ParseDiagnostics)


class StatuteIngestor:
    """Writes one statute's provisions and version windows."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.writer = VersionWriter(session)

    async def _upsert_document(self, document: StatuteDocument) -> LegalDocument:
        row = await self.session.get(LegalDocument, document.id)
        if row is None:
            row = LegalDocument(
                id=document.id, title=document.title, status=DocumentStatus.IN_FORCE
            )
            self.session.add(row)

        row.type = document.type
        row.title = document.title
        # Without a status from the caller or a header, keep the stored one
        if document.status is not None:
            row.status = document.status
        for name in (
            "title_en",
            "short_name",
            "issued_date",
            "in_force_date",
            "url",
            "description",
        ):
            value = getattr(document, name)
            if value is not None:
                setattr(row, name, value)
        await self.session.flush()
        return row

    @staticmethod
    def _apply_header(document: StatuteDocument, document_html: str) -> None:
        header = document_metadata_from_header(extract_html_metadata(document_html))
        if document.status is None:
            document.status = header.status
        document.issued_date = document.issued_date or header.issued_date
        document.in_force_date = document.in_force_date or header.in_force_date
        document.description = document.description or header.description

    async def ingest_text(
        self,
        document: StatuteDocument,
        raw_text: str,
        valid_from: date | None = None,
        document_html: str | None = None,
    ) -> IngestResult:
        """Segment ``raw_text`` and store it as the statute's wording from ``valid_from``.

        Args:
            document: Document fields; missing ones may be filled from the
                HTML header.
            raw_text: Consolidated statute text.
            valid_from: Date the wording took effect. Required once the
                statute already has version history.
            document_html: Optional Riksdagen HTML for header metadata.

        Raises:
            ValueError: Invalid document id.
            VersionWindowError: The version history would become inconsistent.
        """
        document_id = require_identifier("document_id", document.id)
        if document.type == DocumentType.STATUTE and not is_valid_sfs_number(document_id):
            raise ValueError(f"Invalid SFS number: {document_id!r}. Expected YYYY:NNN.")
        document.id = document_id

        if document_html:
            self._apply_header(document, document_html)

        selected = select_provisions(raw_text)
        result = IngestResult(
            document_id=document_id,
            provisions=len(selected.provisions),
            used_fallback=selected.used_fallback,
            diagnostics=selected.diagnostics,
        )

        try:
            await self._upsert_document(document)
            await self._replace_current(document_id, selected.provisions)
            await self._update_versions(document_id, selected.provisions, valid_from, result)
            await self.session.commit()
        except Exception:
            logger.exception(f"Error ingesting SFS {document_id}")
            await self.session.rollback()
            raise

        diagnostics = selected.diagnostics
        logger.info(
            f"Ingested SFS {document_id}: {result.provisions} provisions, "
            f"{result.new_versions} new, {result.changed_versions} changed, "
            f"{result.unchanged_versions} unchanged, {result.closed_versions} closed"
        )
        if diagnostics.ignored_chapter_markers or diagnostics.suppressed_section_candidates:
            logger.info(
                f"Parser diagnostics for SFS {document_id}: "
                f"ignored chapters={diagnostics.ignored_chapter_markers}, "
                f"suppressed section candidates={diagnostics.suppressed_section_candidates}"
            )
        return result

    async def _replace_current(
        self, document_id: str, provisions: list[ParsedProvision]
    ) -> None:
        await self.session.execute(
            delete(LegalProvision).where(LegalProvision.document_id == document_id)
        )
        self.session.add_all(
            LegalProvision(
                document_id=document_id,
                provision_ref=provision.provision_ref,
                chapter=provision.chapter,
                section=provision.section,
                title=provision.title,
                content=provision.content,
            )
            for provision in provisions
        )
        await self.session.flush()

    async def _update_versions(
        self,
        document_id: str,
        provisions: list[ParsedProvision],
        valid_from: date | None,
        result: IngestResult,
    ) -> None:
        open_rows = await self.session.execute(
            select(LegalProvisionVersion).where(
                LegalProvisionVersion.document_id == document_id,
                LegalProvisionVersion.valid_to.is_(None),
            )
        )
        open_by_ref = {row.provision_ref: row for row in open_rows.scalars().all()}

        for provision in provisions:
            current = open_by_ref.pop(provision.provision_ref, None)
            if current is not None and (
                current.content == provision.content and current.title == provision.title
            ):
                result.unchanged_versions += 1
                continue

            await self.writer.append_version(document_id, provision, valid_from)
            if current is None:
                result.new_versions += 1
            else:
                result.changed_versions += 1

        # Whatever is still open no longer appears in the text
        for provision_ref in sorted(open_by_ref):
            if valid_from is None:
                logger.warning(
                    f"SFS {document_id} {provision_ref} is gone from the text "
                    f"but no date was given to close its window"
                )
                result.unclosed_versions += 1
                continue
            await self.writer.close_version(document_id, provision_ref, valid_from)
            result.closed_versions += 1
