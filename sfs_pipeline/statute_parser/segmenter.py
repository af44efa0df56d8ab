"""Segment raw Swedish statute text into chapter/section addressed provisions.

Consolidated statute dumps carry line-break artifacts, stray table-of-contents
fragments and inline cross-references that look like new sections
("...enligt 2 § ska tillämpas..."). The segmenter makes a single pass over the
lines and is conservative about structure:

- Chapter markers ("3 kap. Titel") are held as pending and only activated when
  the following section restarts numbering at 1, or when no chapter is active
  yet. Lines seen while a chapter is pending are held back so they can be
  attributed correctly once the marker is accepted or rejected.
- Text that reaches no provision (preamble prose, body text under a chapter
  heading) is counted in the diagnostics as unattributed.
- Section markers ("5 §", "5 a §") are candidates. Each candidate is checked
  against five suppression rules; a suppressed line is kept as content of the
  open provision instead of starting a new one.

Nothing here raises on malformed input. Worst case the result is empty and the
diagnostics show what was rejected.
"""

import enum
import logging
import re
from collections import Counter
from dataclasses import dataclass, field

from sfs_app.models.provision import provision_ref_for

logger = logging.getLogger(__name__)

CHAPTER_PATTERN = re.compile(r"^(\d+)\s*kap\.\s*(.*)$")
SECTION_PATTERN = re.compile(r"^(\d+\s*[a-z]?)\s*§\s*(.*)$", re.IGNORECASE)
LAW_NOTE_PATTERN = re.compile(r"^Lag \(\d{4}:\d+\)\.?$")

_ORDINAL_PATTERN = re.compile(r"^(\d+)(?:\s*([a-z]))?$", re.IGNORECASE)
_LEADING_NUMBER = re.compile(r"^(\d+)")
_MARKER_PREFIX = re.compile(r"^\d+\s*(kap\.|§)")
_UPPERCASE_START = re.compile(r"^[A-ZÅÄÖ]")
_LOWERCASE_START = re.compile(r"^[a-zåäö]")
_WHITESPACE = re.compile(r"\s+")

# Numeric jump between two unchaptered sections that marks an enumeration
# list ("5 a, 6 h, 11, 15 och 39 §") rather than the next provision.
FLAT_JUMP_THRESHOLD = 8
MAX_TITLE_LENGTH = 100


class SuppressionReason(enum.StrEnum):
    """Why a section-like line was not accepted as a new provision."""

    DUPLICATE_REF = "duplicate_ref"
    OUT_OF_ORDER_CURRENT = "out_of_order_current"
    OUT_OF_ORDER_HISTORY = "out_of_order_history"
    INLINE_REFERENCE = "inline_reference"
    FLAT_ENUMERATION_JUMP = "flat_enumeration_jump"


@dataclass
class ParsedProvision:
    """A provision segmented out of statute text.

    The provision_ref is always derived from chapter and section.
    """

    section: str
    content: str
    chapter: str | None = None
    title: str | None = None

    @property
    def provision_ref(self) -> str:
        return provision_ref_for(self.chapter, self.section)


@dataclass
class ParseDiagnostics:
    """Counters for a single segmentation run, used for data-quality monitoring."""

    ignored_chapter_markers: int = 0
    suppressed_section_candidates: int = 0
    suppression_reasons: Counter[SuppressionReason] = field(default_factory=Counter)
    # Non-blank lines that ended up in no provision (preamble text, orphaned titles)
    unattributed_lines: int = 0

    def record_suppression(self, reason: SuppressionReason) -> None:
        self.suppressed_section_candidates += 1
        self.suppression_reasons[reason] += 1

    def as_dict(self) -> dict:
        return {
            "ignored_chapter_markers": self.ignored_chapter_markers,
            "suppressed_section_candidates": self.suppressed_section_candidates,
            "suppression_reasons": {
                str(reason): count for reason, count in self.suppression_reasons.items()
            },
            "unattributed_lines": self.unattributed_lines,
        }


@dataclass
class SegmentationResult:
    """Provisions in document order plus the diagnostics of the run."""

    provisions: list[ParsedProvision]
    diagnostics: ParseDiagnostics

    @property
    def provision_refs(self) -> list[str]:
        return [p.provision_ref for p in self.provisions]


@dataclass
class _SegmenterState:
    provisions: list[ParsedProvision] = field(default_factory=list)
    diagnostics: ParseDiagnostics = field(default_factory=ParseDiagnostics)
    seen_refs: set[str] = field(default_factory=set)
    last_ordinal_by_chapter: dict[str, int] = field(default_factory=dict)

    current_chapter: str | None = None
    pending_chapter: str | None = None
    # Non-marker lines seen while a chapter marker is pending
    held_lines: list[str] = field(default_factory=list)

    current_section: str | None = None
    current_title: str | None = None
    pending_title: str | None = None
    content: list[str] = field(default_factory=list)


def normalize_section(section: str) -> str:
    """Collapse whitespace and lowercase a section number ("5  A" -> "5 a")."""
    return _WHITESPACE.sub(" ", section).strip().lower()


def section_number(section: str) -> int | None:
    match = _LEADING_NUMBER.match(section)
    return int(match.group(1)) if match else None


def section_ordinal(section: str) -> int | None:
    """Sortable ordinal for a section number.

    A letter suffix is a fractional offset so that "5 a" (501) sorts after
    "5" (500) and before "6" (600).
    """
    match = _ORDINAL_PATTERN.match(section)
    if not match:
        return None
    base = int(match.group(1)) * 100
    suffix = (match.group(2) or "").lower()
    if not suffix:
        return base
    return base + max(ord(suffix) - 96, 0)


def is_likely_title(line: str) -> bool:
    """Short capitalised line that is neither a marker nor a "Lag (YYYY:NNN)." note."""
    return (
        0 < len(line) < MAX_TITLE_LENGTH
        and bool(_UPPERCASE_START.match(line))
        and not _MARKER_PREFIX.match(line)
        and not LAW_NOTE_PATTERN.match(line)
    )


def _drop_line(state: _SegmenterState, line: str) -> None:
    state.diagnostics.unattributed_lines += 1
    logger.debug(f"Line not attributed to any provision: {line[:60]!r}")


def _flush(state: _SegmenterState) -> None:
    if state.current_section is not None and not state.content:
        _drop_line(state, f"{state.current_section} §")
        if state.current_title is not None:
            _drop_line(state, state.current_title)
    if state.current_section is not None and state.content:
        provision = ParsedProvision(
            chapter=state.current_chapter,
            section=state.current_section,
            title=state.current_title,
            content=_WHITESPACE.sub(" ", " ".join(state.content)).strip(),
        )
        state.provisions.append(provision)
        state.seen_refs.add(provision.provision_ref)
        if provision.chapter:
            ordinal = section_ordinal(provision.section)
            if ordinal is not None:
                state.last_ordinal_by_chapter[provision.chapter] = ordinal

    state.current_section = None
    state.current_title = None
    state.content = []


def _take_text_line(state: _SegmenterState, line: str) -> None:
    if state.current_section is None:
        # Preamble before any section: only titles survive
        if not is_likely_title(line):
            _drop_line(state, line)
            return
        if state.pending_title is not None:
            _drop_line(state, state.pending_title)
        state.pending_title = line
        return
    if not state.content and is_likely_title(line):
        if state.current_title is not None:
            _drop_line(state, state.current_title)
        state.current_title = line
        return
    state.content.append(line)


def _release_held_lines(state: _SegmenterState) -> None:
    held, state.held_lines = state.held_lines, []
    for line in held:
        _take_text_line(state, line)


def _discard_pending_chapter(state: _SegmenterState) -> None:
    """Reject the pending chapter marker and give its held lines back to the open section."""
    logger.debug(f"Ignoring chapter marker {state.pending_chapter} kap.")
    state.diagnostics.ignored_chapter_markers += 1
    state.pending_chapter = None
    _release_held_lines(state)


def _suppression_reason(
    state: _SegmenterState,
    section: str,
    remainder: str,
    chapter: str | None,
    chapter_activated: bool,
) -> SuppressionReason | None:
    # An activated chapter closes the open section, so the checks that look at
    # the open section see none.
    open_section = None if chapter_activated else state.current_section
    has_content = open_section is not None and bool(state.content)

    provision_ref = provision_ref_for(chapter, section)
    candidate_ordinal = section_ordinal(section)
    candidate_number = section_number(section)
    open_ordinal = section_ordinal(open_section) if open_section else None
    open_number = section_number(open_section) if open_section else None
    last_ordinal = state.last_ordinal_by_chapter.get(chapter) if chapter else None

    if provision_ref in state.seen_refs:
        return SuppressionReason.DUPLICATE_REF
    if (
        open_ordinal is not None
        and candidate_ordinal is not None
        and candidate_ordinal <= open_ordinal
    ):
        return SuppressionReason.OUT_OF_ORDER_CURRENT
    if (
        not chapter_activated
        and last_ordinal is not None
        and candidate_ordinal is not None
        and candidate_ordinal <= last_ordinal
    ):
        return SuppressionReason.OUT_OF_ORDER_HISTORY
    if not chapter_activated and has_content and _LOWERCASE_START.match(remainder):
        return SuppressionReason.INLINE_REFERENCE
    if (
        not chapter_activated
        and not chapter
        and has_content
        and open_number is not None
        and candidate_number is not None
        and candidate_number - open_number >= FLAT_JUMP_THRESHOLD
    ):
        return SuppressionReason.FLAT_ENUMERATION_JUMP
    return None


def _handle_section_marker(state: _SegmenterState, line: str, match: re.Match) -> None:
    section = normalize_section(match.group(1))
    remainder = match.group(2).strip()

    chapter = state.current_chapter
    chapter_accepted = False
    if state.pending_chapter is not None and (
        state.current_chapter is None or section_number(section) == 1
    ):
        chapter = state.pending_chapter
        chapter_accepted = True
    chapter_activated = chapter_accepted and chapter != state.current_chapter

    reason = _suppression_reason(state, section, remainder, chapter, chapter_activated)
    if reason is not None:
        state.diagnostics.record_suppression(reason)
        logger.debug(f"Suppressed section candidate {line[:60]!r}: {reason}")
        if state.pending_chapter is not None:
            _discard_pending_chapter(state)
        if state.current_section is not None:
            state.content.append(line)
        else:
            _drop_line(state, line)
        return

    if chapter_accepted:
        state.pending_chapter = None
        _flush(state)
        state.current_chapter = chapter
        _release_held_lines(state)
    else:
        if state.pending_chapter is not None:
            _discard_pending_chapter(state)
        _flush(state)

    state.current_section = section
    state.current_title = state.pending_title
    state.pending_title = None
    if remainder:
        state.content.append(remainder)


def segment(raw_text: str) -> SegmentationResult:
    """Split statute text into provisions.

    Args:
        raw_text: Full statute text, one logical line per physical line.

    Returns:
        SegmentationResult with provisions in document order and the
        diagnostics for this run.
    """
    state = _SegmenterState()

    for raw_line in raw_text.splitlines():
        line = raw_line.strip()
        if not line:
            continue

        chapter_match = CHAPTER_PATTERN.match(line)
        if chapter_match:
            if state.pending_chapter is not None:
                _discard_pending_chapter(state)
            state.pending_chapter = chapter_match.group(1)
            if state.pending_title is not None:
                _drop_line(state, state.pending_title)
                state.pending_title = None
            continue

        section_match = SECTION_PATTERN.match(line)
        if section_match:
            _handle_section_marker(state, line, section_match)
            continue

        if state.pending_chapter is not None:
            state.held_lines.append(line)
        else:
            _take_text_line(state, line)

    if state.pending_chapter is not None:
        _discard_pending_chapter(state)
    _flush(state)
    if state.pending_title is not None:
        _drop_line(state, state.pending_title)

    diagnostics = state.diagnostics
    if diagnostics.ignored_chapter_markers or diagnostics.suppressed_section_candidates:
        logger.debug(
            f"Segmented {len(state.provisions)} provisions "
            f"({diagnostics.ignored_chapter_markers} chapter markers ignored, "
            f"{diagnostics.suppressed_section_candidates} section candidates suppressed)"
        )
    return SegmentationResult(provisions=state.provisions, diagnostics=diagnostics)
