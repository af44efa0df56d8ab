"""Statute-level metadata from the header of a Riksdagen HTML document.

Riksdagen renders the document header as bold keys followed by values::

    <b>SFS nr</b>: 1998:204<br>
    <b>Upphävd</b>: 2018-05-25<br>
    <b>Författningen har upphävts genom</b>: SFS 2018:218<br>
"""

import logging
import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import date

from lxml import etree, html

from sfs_app.models.enums import DocumentStatus
from sfs_pipeline.legal_parser.patterns import ISO_DATE_PATTERN, SFS_NUMBER_PATTERN

logger = logging.getLogger(__name__)

# Only the header is relevant; the body can be megabytes of statute text
HEADER_CHARS = 3000

REPEAL_DATE_KEY = "Upphävd"
REPEALED_BY_KEY = "Författningen har upphävts genom"
ISSUED_KEY = "Utfärdad"
IN_FORCE_KEY = "Ikraft"

_WHITESPACE = re.compile(r"\s+")


def _normalize(text: str) -> str:
    return _WHITESPACE.sub(" ", text).strip()


def extract_html_metadata(document_html: str | None) -> dict[str, str]:
    """Collect ``<b>Key</b>: value<br>`` pairs from the document header."""
    if not document_html or not document_html.strip():
        return {}

    header = document_html[:HEADER_CHARS]
    try:
        tree = html.fromstring(header)
    except (etree.ParserError, ValueError) as exc:
        logger.warning(f"Could not parse document header: {exc}")
        return {}

    metadata: dict[str, str] = {}
    for bold in tree.iter("b"):
        key = _normalize(bold.text_content())
        tail = bold.tail or ""
        if not key or ":" in key or not tail.lstrip().startswith(":"):
            continue
        following = bold.getnext()
        if following is not None and following.tag != "br":
            continue
        value = _normalize(tail.lstrip()[1:])
        if value:
            metadata[key] = value
    return metadata


@dataclass
class StatuteMetadataAmendments:
    """Repeal facts and SFS references found in the document header."""

    repealed_by_sfs: str | None = None
    repealed_date: date | None = None
    repeal_description: str | None = None
    referenced_sfs: list[str] = field(default_factory=list)


def parse_iso_date_in(value: str | None) -> date | None:
    """First well-formed ISO date inside ``value``, or None."""
    if not value:
        return None
    match = ISO_DATE_PATTERN.search(value)
    if not match:
        return None
    try:
        return date.fromisoformat(match.group(1))
    except ValueError:
        return None


def extract_metadata_amendments(fields: Mapping[str, str]) -> StatuteMetadataAmendments:
    """Repeal date, repealing act and every SFS number mentioned in the header."""
    result = StatuteMetadataAmendments()
    result.repealed_date = parse_iso_date_in(fields.get(REPEAL_DATE_KEY))

    repealed_by = fields.get(REPEALED_BY_KEY)
    if repealed_by:
        sfs = SFS_NUMBER_PATTERN.search(repealed_by)
        if sfs:
            result.repealed_by_sfs = sfs.group(1)
            result.referenced_sfs.append(sfs.group(1))
        result.repeal_description = repealed_by

    for value in fields.values():
        for match in SFS_NUMBER_PATTERN.finditer(value):
            if match.group(1) not in result.referenced_sfs:
                result.referenced_sfs.append(match.group(1))

    return result


@dataclass
class DocumentMetadata:
    """Document fields derived from the header."""

    status: DocumentStatus = DocumentStatus.IN_FORCE
    issued_date: date | None = None
    in_force_date: date | None = None
    description: str | None = None


def document_metadata_from_header(fields: Mapping[str, str]) -> DocumentMetadata:
    """Derive status, dates and the repeal description of a statute."""
    amendments = extract_metadata_amendments(fields)
    metadata = DocumentMetadata(
        issued_date=parse_iso_date_in(fields.get(ISSUED_KEY)),
        in_force_date=parse_iso_date_in(fields.get(IN_FORCE_KEY)),
    )
    if REPEAL_DATE_KEY in fields:
        metadata.status = DocumentStatus.REPEALED
        parts = [
            f"Upphävd {amendments.repealed_date.isoformat()}"
            if amendments.repealed_date
            else "Upphävd"
        ]
        if amendments.repeal_description:
            parts.append(f"genom {amendments.repeal_description}")
        metadata.description = " ".join(parts)
    return metadata
