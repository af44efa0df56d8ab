"""Plain statute segmentation and strict/plain result selection.

The plain parser applies every chapter and section marker as it appears. It
is used as a second opinion: for some statutes the conservative segmenter
suppresses so many candidates that the plain result covers the text
noticeably better.
"""

import logging
import math
import re
from dataclasses import dataclass, field

from sfs_pipeline.statute_parser.segmenter import (
    CHAPTER_PATTERN,
    ParsedProvision,
    ParseDiagnostics,
    segment,
)

logger = logging.getLogger(__name__)

_PLAIN_SECTION_PATTERN = re.compile(r"^(\d+\s*[a-z]?)\s*§\s*(.*)")
# Heading line: one capitalised word followed by lowercase words
RUBRIK_PATTERN = re.compile(r"^[A-ZÅÄÖ][a-zåäöé]+(?: [a-zåäöé]+)*$")

_PROVISION_START = re.compile(r"^[A-ZÅÄÖ0-9]")
_CONTINUATION_START = re.compile(r"^[a-zåäö§,.;:)\]-]")
_LAW_NOTE_SUFFIX = re.compile(r"Lag \(\d{4}:\d+\)\.?$")

# Fallback is only considered when the strict run suppressed at least this many
# candidates and the plain run wins by both an absolute and a relative margin.
FALLBACK_MIN_SUPPRESSED = 20
FALLBACK_MIN_GAIN = 10
FALLBACK_MIN_RATIO = 1.25


def parse_statute_text(text: str) -> list[ParsedProvision]:
    """Segment statute text without any suppression rules."""
    provisions: list[ParsedProvision] = []
    chapter: str | None = None
    section: str | None = None
    title: str | None = None
    content: list[str] = []

    def flush() -> None:
        nonlocal section, title, content
        if section and content:
            provisions.append(
                ParsedProvision(
                    chapter=chapter,
                    section=section,
                    title=title,
                    content=" ".join(content),
                )
            )
        section = None
        title = None
        content = []

    for raw_line in text.split("\n"):
        line = raw_line.strip()
        if not line:
            continue

        chapter_match = CHAPTER_PATTERN.match(line)
        if chapter_match:
            flush()
            chapter = chapter_match.group(1)
            continue

        section_match = _PLAIN_SECTION_PATTERN.match(line)
        if section_match:
            flush()
            section = re.sub(r"\s+", " ", section_match.group(1)).strip()
            remainder = section_match.group(2).strip()
            if remainder:
                content.append(remainder)
            continue

        if section and not content and RUBRIK_PATTERN.match(line):
            title = line
            continue

        if section:
            content.append(line)

    flush()
    return provisions


def is_chaptered_statute(text: str) -> bool:
    """True when any line is a chapter marker ("1 kap. ...")."""
    return any(CHAPTER_PATTERN.match(line.strip()) for line in text.splitlines())


def quality_score(provision: ParsedProvision) -> int:
    """Heuristic score for choosing between two provisions with the same ref."""
    content = provision.content.strip()
    score = 0
    if _PROVISION_START.match(content):
        score += 4
    if _CONTINUATION_START.match(content):
        score -= 4
    if len(content) >= 40:
        score += 1
    if len(content) >= 120:
        score += 1
    if _LAW_NOTE_SUFFIX.search(content):
        score += 1
    return score


def _preferred(existing: ParsedProvision, candidate: ParsedProvision) -> ParsedProvision:
    existing_score = quality_score(existing)
    candidate_score = quality_score(candidate)
    if existing_score != candidate_score:
        return candidate if candidate_score > existing_score else existing
    if len(candidate.content) != len(existing.content):
        return candidate if len(candidate.content) > len(existing.content) else existing
    return existing


@dataclass
class DedupeResult:
    """Provisions with one entry per provision_ref, in first-seen order."""

    provisions: list[ParsedProvision] = field(default_factory=list)
    duplicate_refs: int = 0
    replacements: int = 0


def dedupe_by_provision_ref(provisions: list[ParsedProvision]) -> DedupeResult:
    """Keep the best-scoring provision for every provision_ref."""
    by_ref: dict[str, ParsedProvision] = {}
    result = DedupeResult()

    for provision in provisions:
        ref = provision.provision_ref
        existing = by_ref.get(ref)
        if existing is None:
            by_ref[ref] = provision
            continue

        result.duplicate_refs += 1
        preferred = _preferred(existing, provision)
        if preferred is not existing:
            by_ref[ref] = preferred
            result.replacements += 1

    # dicts keep insertion order, and replacing a value keeps its slot
    result.provisions = list(by_ref.values())
    return result


@dataclass
class SelectedProvisions:
    """Outcome of running both parsers over one statute text."""

    provisions: list[ParsedProvision]
    diagnostics: ParseDiagnostics
    used_fallback: bool
    strict_count: int
    fallback_count: int
    duplicate_refs: int = 0
    replacements: int = 0


def should_use_fallback(
    diagnostics: ParseDiagnostics, strict_count: int, fallback_count: int
) -> bool:
    return (
        diagnostics.ignored_chapter_markers == 0
        and diagnostics.suppressed_section_candidates >= FALLBACK_MIN_SUPPRESSED
        and fallback_count >= strict_count + FALLBACK_MIN_GAIN
        and fallback_count >= math.ceil(strict_count * FALLBACK_MIN_RATIO)
    )


def select_provisions(raw_text: str) -> SelectedProvisions:
    """Segment with both parsers and keep the more trustworthy result.

    The strict segmenter wins unless it ignored no chapter markers, suppressed
    many section candidates, and the plain parser found materially more
    provisions.
    """
    strict = segment(raw_text)
    strict_deduped = dedupe_by_provision_ref(strict.provisions)
    fallback_deduped = dedupe_by_provision_ref(parse_statute_text(raw_text))

    strict_count = len(strict_deduped.provisions)
    fallback_count = len(fallback_deduped.provisions)
    use_fallback = should_use_fallback(strict.diagnostics, strict_count, fallback_count)
    chosen = fallback_deduped if use_fallback else strict_deduped

    if use_fallback:
        logger.info(
            f"Parser fallback activated: strict={strict_count}, "
            f"fallback={fallback_count}, "
            f"suppressed={strict.diagnostics.suppressed_section_candidates}"
        )
    if chosen.duplicate_refs:
        logger.info(
            f"De-duplicated {chosen.duplicate_refs} duplicate refs "
            f"(replaced {chosen.replacements} with better candidates)"
        )

    return SelectedProvisions(
        provisions=chosen.provisions,
        diagnostics=strict.diagnostics,
        used_fallback=use_fallback,
        strict_count=strict_count,
        fallback_count=fallback_count,
        duplicate_refs=chosen.duplicate_refs,
        replacements=chosen.replacements,
    )
