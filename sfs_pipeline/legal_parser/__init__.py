"""Amendment extraction from Swedish statute text.

This package finds amendment notes ("Lag (2021:1174).", "Upphävd genom
lag (...)") in provision text, reads statute-level repeal metadata from
Riksdagen document headers, and parses the headings of amending acts.
"""

from sfs_pipeline.legal_parser.amendment_parser import (
    AmendmentExtractor,
    AmendmentReference,
    AmendmentSection,
    ProvisionAmendments,
    extract_amendment_references,
    extract_effective_date,
    is_valid_sfs_number,
    normalize_sfs_number,
    parse_amending_statute,
    parse_statute_amendments,
)
from sfs_pipeline.legal_parser.metadata import (
    DocumentMetadata,
    StatuteMetadataAmendments,
    document_metadata_from_header,
    extract_html_metadata,
    extract_metadata_amendments,
)
from sfs_pipeline.legal_parser.patterns import AmendmentPattern

__all__ = [
    "AmendmentExtractor",
    "AmendmentPattern",
    "AmendmentReference",
    "AmendmentSection",
    "DocumentMetadata",
    "ProvisionAmendments",
    "StatuteMetadataAmendments",
    "document_metadata_from_header",
    "extract_amendment_references",
    "extract_effective_date",
    "extract_html_metadata",
    "extract_metadata_amendments",
    "is_valid_sfs_number",
    "normalize_sfs_number",
    "parse_amending_statute",
    "parse_statute_amendments",
]
