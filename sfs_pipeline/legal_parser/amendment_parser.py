"""Extract amendment facts from consolidated statute text.

The extractor only reports what the text says: which amending act touched a
provision and how. Turning these facts into change-history rows is a separate,
explicit step (see ``sfs_pipeline.versions.amendment_promotion``).
"""

import logging
import re
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date

from sfs_app.models.enums import AmendmentType, ReferencePosition
from sfs_pipeline.legal_parser.patterns import (
    AMENDING_HEADER_PATTERN,
    EFFECTIVE_DATE_PATTERN,
    FORCE_PATTERN,
    INLINE_PATTERNS,
    ISO_DATE_PATTERN,
    SFS_NUMBER_PATTERN,
    SUFFIX_PATTERN,
    SWEDISH_MONTHS,
    AmendmentPattern,
)
from sfs_pipeline.statute_parser.segmenter import ParsedProvision

logger = logging.getLogger(__name__)

_VALID_SFS = re.compile(r"^\d{4}:\d+$")
_PRECEDING_SECTION = re.compile(r"(\d+)\s*§")
# How far back from an "Ändringar i" heading to look for its section number
_HEADER_LOOKBEHIND = 100


@dataclass
class AmendmentReference:
    """One amending act referenced from a provision's text.

    Attributes:
        amended_by_sfs: SFS number of the amending act, e.g. "2021:1174".
        amendment_type: What the act did to the provision.
        position: Where the reference sat; a suffix note is authoritative,
            a transitional token is a weak signal.
        raw_text: The matched fragment.
    """

    amended_by_sfs: str
    amendment_type: AmendmentType
    position: ReferencePosition
    raw_text: str


@dataclass
class ProvisionAmendments:
    """All amendment references found in one provision."""

    provision_ref: str
    amendments: list[AmendmentReference] = field(default_factory=list)


@dataclass
class AmendmentSection:
    """A section of an amending act that targets another statute."""

    section_ref: str
    target_statute_id: str
    target_statute_name: str | None = None
    target_provision_ref: str | None = None
    change_type: AmendmentType = AmendmentType.AMENDED
    new_text: str | None = None
    description: str | None = None


class AmendmentExtractor:
    """Finds amendment notes in provision text.

    Attributes:
        suffix_pattern: Trailing note pattern; a match ends the search.
        inline_patterns: Patterns collected in order when there is no suffix.
    """

    def __init__(
        self,
        suffix_pattern: AmendmentPattern = SUFFIX_PATTERN,
        inline_patterns: list[AmendmentPattern] | None = None,
    ):
        self.suffix_pattern = suffix_pattern
        self.inline_patterns = INLINE_PATTERNS if inline_patterns is None else inline_patterns
        self._compiled_suffix = suffix_pattern.compile()
        self._compiled_inline = [(p, p.compile()) for p in self.inline_patterns]

    def extract(self, content: str) -> list[AmendmentReference]:
        """Extract amendment references from the text of one provision.

        A trailing "Lag (YYYY:NNN)." note is definitive and returned alone.
        Otherwise inline notes are collected pattern by pattern, and if the
        text is a transitional block every remaining SFS number is added as
        a transitional reference.
        """
        suffix = self._compiled_suffix.search(content)
        if suffix:
            return [
                AmendmentReference(
                    amended_by_sfs=suffix.group(1),
                    amendment_type=self.suffix_pattern.amendment_type,
                    position=self.suffix_pattern.position,
                    raw_text=suffix.group(0),
                )
            ]

        references: list[AmendmentReference] = []
        for pattern, compiled in self._compiled_inline:
            for match in compiled.finditer(content):
                references.append(
                    AmendmentReference(
                        amended_by_sfs=match.group(1),
                        amendment_type=pattern.amendment_type,
                        position=pattern.position,
                        raw_text=match.group(0),
                    )
                )

        if FORCE_PATTERN.search(content):
            seen = {ref.amended_by_sfs for ref in references}
            for match in SFS_NUMBER_PATTERN.finditer(content):
                sfs = match.group(1)
                if sfs in seen:
                    continue
                seen.add(sfs)
                references.append(
                    AmendmentReference(
                        amended_by_sfs=sfs,
                        amendment_type=AmendmentType.TRANSITIONAL,
                        position=ReferencePosition.TRANSITION,
                        raw_text=match.group(0),
                    )
                )

        return references

    def extract_all(self, provisions: Iterable[ParsedProvision]) -> list[ProvisionAmendments]:
        """Amendment references per provision, skipping provisions with none."""
        results = []
        for provision in provisions:
            amendments = self.extract(provision.content)
            if amendments:
                results.append(
                    ProvisionAmendments(
                        provision_ref=provision.provision_ref,
                        amendments=amendments,
                    )
                )
        return results


_default_extractor = AmendmentExtractor()


def extract_amendment_references(content: str) -> list[AmendmentReference]:
    return _default_extractor.extract(content)


def parse_statute_amendments(
    provisions: Iterable[ParsedProvision],
) -> list[ProvisionAmendments]:
    return _default_extractor.extract_all(provisions)


def parse_amending_statute(text: str) -> list[AmendmentSection]:
    """Find the "Ändringar i <lag> (YYYY:NNN)" headings of an amending act.

    The section number is taken from the first "N §" in the 100 characters
    before each heading. Only the target statute is identified; the change
    type defaults to amended.
    """
    sections: list[AmendmentSection] = []
    for match in AMENDING_HEADER_PATTERN.finditer(text):
        name = match.group(1).strip()
        statute_id = match.group(2)
        preceding = text[max(0, match.start() - _HEADER_LOOKBEHIND) : match.start()]
        section_match = _PRECEDING_SECTION.search(preceding)
        sections.append(
            AmendmentSection(
                section_ref=f"{section_match.group(1)} §" if section_match else "unknown",
                target_statute_id=statute_id,
                target_statute_name=name,
                description=f"Amendments to {name} ({statute_id})",
            )
        )
    return sections


def is_valid_sfs_number(value: str) -> bool:
    return bool(_VALID_SFS.match(value))


def normalize_sfs_number(value: str) -> str | None:
    """Pull the "YYYY:NNN" number out of strings like "SFS 2018:218"."""
    match = SFS_NUMBER_PATTERN.search(value)
    return match.group(1) if match else None


def _safe_date(year: int, month: int, day: int) -> date | None:
    try:
        return date(year, month, day)
    except ValueError:
        return None


def extract_effective_date(text: str) -> date | None:
    """Entry-into-force date from "träder i kraft den 1 juli 2021".

    Falls back to the first ISO date in the text. Impossible dates such as
    "31 februari" give None.
    """
    match = EFFECTIVE_DATE_PATTERN.search(text)
    if match:
        month = SWEDISH_MONTHS.get(match.group(2).lower())
        if month:
            return _safe_date(int(match.group(3)), month, int(match.group(1)))

    iso = ISO_DATE_PATTERN.search(text)
    if not iso:
        return None
    year, month, day = (int(part) for part in iso.group(1).split("-"))
    return _safe_date(year, month, day)
