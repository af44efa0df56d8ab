"""CLI for segmenting, ingesting and querying Swedish statutes."""

import argparse
import asyncio
import json
import logging
import sys
from dataclasses import asdict
from datetime import date
from pathlib import Path

from sfs_pipeline.legal_parser.amendment_parser import (
    AmendmentExtractor,
    normalize_sfs_number,
)
from sfs_pipeline.statute_parser.fallback import select_provisions
from sfs_pipeline.statute_parser.segmenter import segment
from sfs_pipeline.versions.validation import (
    parse_iso_date,
    parse_optional_date,
    require_identifier,
)

logging.basicConfig(
    level=logging.INFO,
    format="%(levelname)-5.5s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


def _print_json(value: object) -> None:
    print(json.dumps(value, ensure_ascii=False, indent=2, default=str))


def _read_text(path: Path) -> str:
    return path.read_text(encoding="utf-8")


def parse_amendment_dates(values: list[str] | None) -> dict[str, date]:
    """Parse repeated ``SFS=YYYY-MM-DD`` arguments.

    Raises:
        ValueError: Malformed pair, SFS number or date.
    """
    dates: dict[str, date] = {}
    for value in values or []:
        sfs, sep, day = value.partition("=")
        if not sep:
            raise ValueError(f"Expected SFS=YYYY-MM-DD, got {value!r}")
        normalized = normalize_sfs_number(sfs)
        if normalized is None:
            raise ValueError(f"Invalid SFS number: {sfs!r}")
        dates[normalized] = parse_iso_date(day, f"date for {normalized}")
    return dates


# =============================================================================
# Schema
# =============================================================================


async def init_db_command() -> int:
    """Create tables and full-text indexes.

    Returns:
        0 on success.
    """
    from sfs_app.models.base import engine
    from sfs_app.models.fts import init_db

    await init_db(engine)
    await engine.dispose()
    return 0


# =============================================================================
# Parsing (no database)
# =============================================================================


def segment_command(path: Path, as_json: bool = False, strict: bool = False) -> int:
    """Segment a statute text file and print its provisions.

    Args:
        path: Plain-text statute.
        as_json: Print JSON instead of a summary.
        strict: Use only the structural segmenter, never the fallback parser.

    Returns:
        0 on success.
    """
    raw_text = _read_text(path)
    if strict:
        result = segment(raw_text)
        provisions, diagnostics, used_fallback = result.provisions, result.diagnostics, False
    else:
        selected = select_provisions(raw_text)
        provisions = selected.provisions
        diagnostics = selected.diagnostics
        used_fallback = selected.used_fallback

    if as_json:
        _print_json(
            {
                "provisions": [
                    {**asdict(p), "provision_ref": p.provision_ref} for p in provisions
                ],
                "diagnostics": diagnostics.as_dict(),
                "used_fallback": used_fallback,
            }
        )
        return 0

    print(f"\n{path.name}: {len(provisions)} provisions")
    for provision in provisions:
        title = f"  [{provision.title}]" if provision.title else ""
        print(f"  {provision.provision_ref:<10}{title} {provision.content[:70]}")

    print("\nDiagnostics")
    print(f"  Ignored chapter markers:       {diagnostics.ignored_chapter_markers}")
    print(f"  Suppressed section candidates: {diagnostics.suppressed_section_candidates}")
    for reason, count in sorted(diagnostics.suppression_reasons.items()):
        print(f"    {reason}: {count}")
    print(f"  Unattributed lines:            {diagnostics.unattributed_lines}")
    if used_fallback:
        print("  Fallback parser used")
    return 0


def amendments_command(path: Path, as_json: bool = False) -> int:
    """Extract amendment references per provision from a statute text file.

    Returns:
        0 on success.
    """
    provisions = select_provisions(_read_text(path)).provisions
    extracted = AmendmentExtractor().extract_all(provisions)

    if as_json:
        _print_json([asdict(p) for p in extracted])
        return 0

    if not extracted:
        print(f"\nNo amendment references found in {path.name}")
        return 0

    total = sum(len(p.amendments) for p in extracted)
    print(f"\n{path.name}: {total} amendment references in {len(extracted)} provisions")
    for provision in extracted:
        print(f"\n  {provision.provision_ref}")
        for reference in provision.amendments:
            print(
                f"    {reference.amendment_type.value:<13} SFS {reference.amended_by_sfs}"
                f"  ({reference.position.value})"
            )
    return 0


# =============================================================================
# Ingestion
# =============================================================================


async def ingest_command(
    path: Path,
    document_id: str,
    title: str,
    valid_from: str | None = None,
    html_path: Path | None = None,
    short_name: str | None = None,
) -> int:
    """Ingest a statute text file into the current and version tables.

    Returns:
        0 on success, 1 on failure.
    """
    from sfs_app.models.base import async_session_maker
    from sfs_pipeline.ingestion import StatuteDocument, StatuteIngestor
    from sfs_pipeline.versions.version_writer import VersionWindowError

    document = StatuteDocument(
        id=require_identifier("document_id", document_id),
        title=require_identifier("title", title),
        short_name=short_name,
    )
    effective = parse_optional_date(valid_from, "valid_from")
    raw_text = _read_text(path)
    document_html = html_path.read_text(encoding="utf-8") if html_path else None

    async with async_session_maker() as session:
        ingestor = StatuteIngestor(session)
        try:
            result = await ingestor.ingest_text(
                document, raw_text, valid_from=effective, document_html=document_html
            )
        except VersionWindowError as e:
            logger.error(f"Failed to ingest SFS {document.id}: {e}")
            return 1

    print(f"\nIngested SFS {result.document_id}")
    print(f"  Provisions:         {result.provisions}")
    print(f"  New versions:       {result.new_versions}")
    print(f"  Changed versions:   {result.changed_versions}")
    print(f"  Unchanged versions: {result.unchanged_versions}")
    print(f"  Closed versions:    {result.closed_versions}")
    if result.unclosed_versions:
        print(f"  Left open (no date): {result.unclosed_versions}")
    if result.used_fallback:
        print("  Fallback parser used")
    return 0


async def promote_amendments_command(
    document_id: str,
    dates: list[str] | None = None,
    html_path: Path | None = None,
) -> int:
    """Promote amendment facts from stored provisions into the change history.

    Args:
        document_id: SFS number of the amended statute.
        dates: ``SFS=YYYY-MM-DD`` pairs giving each amending act's date.
        html_path: Optional Riksdagen HTML; a statute-level repeal in its
            header is recorded as well.

    Returns:
        0 on success, 1 on failure.
    """
    from sfs_app.models.base import async_session_maker
    from sfs_app.models.document import LegalDocument
    from sfs_pipeline.legal_parser.metadata import (
        extract_html_metadata,
        extract_metadata_amendments,
    )
    from sfs_pipeline.versions.amendment_promotion import AmendmentPromoter

    document_id = require_identifier("document_id", document_id)
    amendment_dates = parse_amendment_dates(dates)

    async with async_session_maker() as session:
        if await session.get(LegalDocument, document_id) is None:
            logger.error(f"Unknown document: {document_id}")
            return 1

        promoter = AmendmentPromoter(session)
        report = await promoter.promote_document(document_id, amendment_dates)
        repeal_recorded = False
        if html_path:
            metadata = extract_metadata_amendments(
                extract_html_metadata(html_path.read_text(encoding="utf-8"))
            )
            repeal_recorded = await promoter.promote_statute_repeal(document_id, metadata)
        await session.commit()

    print(f"\nPromoted amendments for SFS {document_id}")
    print(f"  Written:          {report.promoted}")
    print(f"  Already present:  {report.already_present}")
    print(f"  Skipped (no date): {report.skipped_without_date}")
    if report.undated_sfs:
        print(f"  Acts without a date: {', '.join(report.undated_sfs)}")
    if repeal_recorded:
        print("  Statute repeal recorded")
    return 0


# =============================================================================
# Queries
# =============================================================================


async def at_date_command(
    document_id: str,
    provision_ref: str,
    as_of: str | None = None,
    include_amendments: bool = False,
) -> int:
    """Print a provision as it read on a date (today by default).

    Returns:
        0 when a wording was found, 1 otherwise.
    """
    from sfs_app.models.base import async_session_maker
    from sfs_pipeline.versions.version_store import ProvisionVersionService

    document_id = require_identifier("document_id", document_id)
    provision_ref = require_identifier("provision_ref", provision_ref)
    as_of_date = parse_optional_date(as_of, "as_of") or date.today()

    async with async_session_maker() as session:
        service = ProvisionVersionService(session)
        state = await service.get_provision_at_date(
            document_id, provision_ref, as_of_date, include_amendments=include_amendments
        )

    print(
        f"\nSFS {document_id} {provision_ref} as of {as_of_date.isoformat()}: "
        f"{state.status.value}"
    )
    if not state.found:
        if state.valid_from:
            print(f"  First in force {state.valid_from.isoformat()}")
        return 1

    window_to = state.valid_to.isoformat() if state.valid_to else "open"
    window_from = state.valid_from.isoformat() if state.valid_from else "start"
    print(f"  Valid {window_from} .. {window_to}")
    if state.title:
        print(f"  {state.title}")
    print(f"\n{state.content}")
    for amendment in state.amendments or []:
        print(f"  {amendment.amendment_date.isoformat()}  {amendment.change_summary}")
    return 0


async def history_command(document_id: str, provision_ref: str) -> int:
    """Print every stored wording of a provision.

    Returns:
        0 on success, 1 if the document is unknown.
    """
    from sfs_app.models.base import async_session_maker
    from sfs_pipeline.versions.version_store import ProvisionVersionService

    document_id = require_identifier("document_id", document_id)
    provision_ref = require_identifier("provision_ref", provision_ref)

    async with async_session_maker() as session:
        history = await ProvisionVersionService(session).get_provision_history(
            document_id, provision_ref
        )

    if history is None:
        logger.error(f"Unknown document: {document_id}")
        return 1

    print(
        f"\nSFS {history.document_id} {history.provision_ref}: "
        f"{history.total_versions} versions"
    )
    for version in history.versions:
        window_from = version.valid_from.isoformat() if version.valid_from else "start"
        window_to = version.valid_to.isoformat() if version.valid_to else "open"
        print(f"  {window_from} .. {window_to}  {version.content[:70]}")
    return 0


async def diff_command(
    document_id: str,
    provision_ref: str,
    from_date: str,
    to_date: str | None = None,
) -> int:
    """Print the unified diff of a provision between two dates.

    Returns:
        0 on success, 1 if there is nothing to compare.
    """
    from sfs_app.models.base import async_session_maker
    from sfs_pipeline.versions.version_store import ProvisionVersionService

    document_id = require_identifier("document_id", document_id)
    provision_ref = require_identifier("provision_ref", provision_ref)
    start = parse_iso_date(from_date, "from_date")
    end = parse_optional_date(to_date, "to_date")

    async with async_session_maker() as session:
        result = await ProvisionVersionService(session).diff(
            document_id, provision_ref, start, end
        )

    if result is None:
        logger.error(f"No versions of {provision_ref} in {document_id} to compare")
        return 1

    print(f"\n{result.change_summary}")
    if result.diff:
        print(result.diff)
    for amendment in result.amendments_between:
        print(f"  {amendment.amendment_date.isoformat()}  {amendment.change_summary}")
    return 0


async def changes_command(
    since: str,
    document_id: str | None = None,
    limit: int | None = None,
) -> int:
    """List provision versions that took effect on or after a date.

    Returns:
        0 on success.
    """
    from sfs_app.models.base import async_session_maker
    from sfs_pipeline.versions.version_store import ProvisionVersionService

    since_date = parse_iso_date(since, "since")

    async with async_session_maker() as session:
        changes = await ProvisionVersionService(session).changes_since(
            since_date, document_id=document_id, limit=limit
        )

    if not changes:
        print(f"\nNo changes since {since_date.isoformat()}")
        return 0

    print(f"\nChanges since {since_date.isoformat()} ({len(changes)})")
    for change in changes:
        effective = change.effective_date.isoformat() if change.effective_date else "?"
        name = change.short_name or change.document_title
        print(f"  {effective}  SFS {change.document_id} {change.provision_ref:<10} {name}")
    return 0


async def search_command(
    query: str,
    as_of: str | None = None,
    document_id: str | None = None,
    status: str | None = None,
    limit: int | None = None,
) -> int:
    """Full-text search over provisions, optionally as of a date.

    Returns:
        0 on success.
    """
    from sfs_app.models.base import async_session_maker
    from sfs_pipeline.search.versioned_search import ProvisionSearchService

    as_of_date = parse_optional_date(as_of, "as_of")

    async with async_session_maker() as session:
        hits = await ProvisionSearchService(session).search(
            query,
            as_of=as_of_date,
            document_id=document_id,
            status=status,
            limit=limit,
        )

    if not hits:
        print(f"\nNo results for {query!r}")
        return 0

    print(f"\nResults for {query!r} ({len(hits)})")
    for hit in hits:
        print(f"\n  SFS {hit.document_id} {hit.provision_ref}  {hit.document_title}")
        print(f"    {hit.snippet}")
    return 0


async def currency_command(
    document_id: str,
    provision_ref: str | None = None,
    as_of: str | None = None,
) -> int:
    """Report whether a statute (and optionally a provision) is in force.

    Returns:
        0 on success, 1 if the document is unknown.
    """
    from sfs_app.models.base import async_session_maker
    from sfs_pipeline.currency import check_currency

    document_id = require_identifier("document_id", document_id)
    as_of_date = parse_optional_date(as_of, "as_of")

    async with async_session_maker() as session:
        result = await check_currency(session, document_id, provision_ref, as_of_date)

    if result is None:
        logger.error(f"Unknown document: {document_id}")
        return 1

    print(f"\nSFS {result.document_id}: {result.title}")
    print(f"  Status:  {result.status}")
    if result.status_as_of:
        print(f"  As of {result.as_of_date.isoformat()}: {result.status_as_of.value}")
    if result.provision_exists is not None:
        print(f"  Provision {provision_ref} exists: {result.provision_exists}")
    for warning in result.warnings:
        print(f"  ! {warning}")
    return 0


def main() -> int:
    """Main entry point for CLI."""
    parser = argparse.ArgumentParser(description="Swedish statute (SFS) pipeline CLI")
    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    subparsers.add_parser("init-db", help="Create tables and full-text indexes")

    # Segment command
    segment_parser = subparsers.add_parser(
        "segment", help="Segment a statute text file into provisions"
    )
    segment_parser.add_argument("path", type=Path, help="Plain-text statute file")
    segment_parser.add_argument("--json", action="store_true", help="Print JSON output")
    segment_parser.add_argument(
        "--strict",
        action="store_true",
        help="Use only the structural segmenter (no fallback)",
    )

    # Amendments command
    amendments_parser = subparsers.add_parser(
        "amendments", help="Extract amendment references from a statute text file"
    )
    amendments_parser.add_argument("path", type=Path, help="Plain-text statute file")
    amendments_parser.add_argument("--json", action="store_true", help="Print JSON output")

    # Ingest command
    ingest_parser = subparsers.add_parser("ingest", help="Ingest a statute text file")
    ingest_parser.add_argument("path", type=Path, help="Plain-text statute file")
    ingest_parser.add_argument(
        "--document", required=True, help="SFS number (e.g., 2018:218)"
    )
    ingest_parser.add_argument("--title", required=True, help="Statute title")
    ingest_parser.add_argument("--short-name", help="Short name (e.g., DSL)")
    ingest_parser.add_argument(
        "--valid-from",
        help="Date this wording took effect (YYYY-MM-DD)",
    )
    ingest_parser.add_argument(
        "--html",
        type=Path,
        help="Riksdagen HTML document for header metadata",
    )

    # Promote amendments command
    promote_parser = subparsers.add_parser(
        "promote-amendments",
        help="Write extracted amendment facts to the change history",
    )
    promote_parser.add_argument("--document", required=True, help="SFS number")
    promote_parser.add_argument(
        "--date",
        action="append",
        dest="dates",
        metavar="SFS=YYYY-MM-DD",
        help="Date an amending act took effect (repeatable)",
    )
    promote_parser.add_argument(
        "--html",
        type=Path,
        help="Riksdagen HTML document; records a statute-level repeal",
    )

    # At-date command
    at_date_parser = subparsers.add_parser(
        "at-date", help="Show a provision as it read on a date"
    )
    at_date_parser.add_argument("document_id", help="SFS number")
    at_date_parser.add_argument("provision_ref", help="Provision (e.g., 1:3 or 5 a)")
    at_date_parser.add_argument("--as-of", help="Date (YYYY-MM-DD, default: today)")
    at_date_parser.add_argument(
        "--amendments",
        action="store_true",
        help="Include promoted amendments",
    )

    # History command
    history_parser = subparsers.add_parser("history", help="List all versions of a provision")
    history_parser.add_argument("document_id", help="SFS number, title or short name")
    history_parser.add_argument("provision_ref", help="Provision (e.g., 1:3 or 5 a)")

    # Diff command
    diff_parser = subparsers.add_parser("diff", help="Diff a provision between two dates")
    diff_parser.add_argument("document_id", help="SFS number, title or short name")
    diff_parser.add_argument("provision_ref", help="Provision (e.g., 1:3 or 5 a)")
    diff_parser.add_argument("--from", dest="from_date", required=True, help="YYYY-MM-DD")
    diff_parser.add_argument("--to", dest="to_date", help="YYYY-MM-DD (default: today)")

    # Changes command
    changes_parser = subparsers.add_parser(
        "changes", help="List provision versions effective since a date"
    )
    changes_parser.add_argument("--since", required=True, help="YYYY-MM-DD")
    changes_parser.add_argument("--document", help="Restrict to one SFS number")
    changes_parser.add_argument("--limit", type=int, help="Maximum results")

    # Search command
    search_parser = subparsers.add_parser("search", help="Full-text search over provisions")
    search_parser.add_argument("query", help="Search text or FTS5 query")
    search_parser.add_argument("--as-of", help="Search wording in force on this date")
    search_parser.add_argument("--document", help="Restrict to one SFS number")
    search_parser.add_argument("--status", help="Restrict to a document status")
    search_parser.add_argument("--limit", type=int, help="Maximum results")

    # Currency command
    currency_parser = subparsers.add_parser(
        "currency", help="Check whether a statute is in force"
    )
    currency_parser.add_argument("document_id", help="SFS number")
    currency_parser.add_argument("--provision", help="Provision to check")
    currency_parser.add_argument("--as-of", help="Date (YYYY-MM-DD)")

    args = parser.parse_args()

    try:
        if args.command == "init-db":
            return asyncio.run(init_db_command())

        elif args.command == "segment":
            return segment_command(args.path, as_json=args.json, strict=args.strict)

        elif args.command == "amendments":
            return amendments_command(args.path, as_json=args.json)

        elif args.command == "ingest":
            return asyncio.run(
                ingest_command(
                    path=args.path,
                    document_id=args.document,
                    title=args.title,
                    valid_from=args.valid_from,
                    html_path=args.html,
                    short_name=args.short_name,
                )
            )

        elif args.command == "promote-amendments":
            return asyncio.run(
                promote_amendments_command(
                    document_id=args.document,
                    dates=args.dates,
                    html_path=args.html,
                )
            )

        elif args.command == "at-date":
            return asyncio.run(
                at_date_command(
                    document_id=args.document_id,
                    provision_ref=args.provision_ref,
                    as_of=args.as_of,
                    include_amendments=args.amendments,
                )
            )

        elif args.command == "history":
            return asyncio.run(history_command(args.document_id, args.provision_ref))

        elif args.command == "diff":
            return asyncio.run(
                diff_command(
                    document_id=args.document_id,
                    provision_ref=args.provision_ref,
                    from_date=args.from_date,
                    to_date=args.to_date,
                )
            )

        elif args.command == "changes":
            return asyncio.run(
                changes_command(
                    since=args.since,
                    document_id=args.document,
                    limit=args.limit,
                )
            )

        elif args.command == "search":
            return asyncio.run(
                search_command(
                    query=args.query,
                    as_of=args.as_of,
                    document_id=args.document,
                    status=args.status,
                    limit=args.limit,
                )
            )

        elif args.command == "currency":
            return asyncio.run(
                currency_command(
                    document_id=args.document_id,
                    provision_ref=args.provision,
                    as_of=args.as_of,
                )
            )

        else:
            parser.print_help()
            return 1

    except ValueError as e:
        logger.error(str(e))
        return 1


if __name__ == "__main__":
    sys.exit(main())
