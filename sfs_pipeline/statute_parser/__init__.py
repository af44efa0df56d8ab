"""Segmentation of raw statute text into addressable provisions."""

from sfs_pipeline.statute_parser.fallback import (
    DedupeResult,
    SelectedProvisions,
    dedupe_by_provision_ref,
    is_chaptered_statute,
    parse_statute_text,
    select_provisions,
)
from sfs_pipeline.statute_parser.segmenter import (
    ParsedProvision,
    ParseDiagnostics,
    SegmentationResult,
    SuppressionReason,
    section_ordinal,
    segment,
)

__all__ = [
    "DedupeResult",
    "ParseDiagnostics",
    "ParsedProvision",
    "SegmentationResult",
    "SelectedProvisions",
    "SuppressionReason",
    "dedupe_by_provision_ref",
    "is_chaptered_statute",
    "parse_statute_text",
    "section_ordinal",
    "segment",
    "select_provisions",
]
