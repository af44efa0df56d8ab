"""Regex patterns for amendment notes in consolidated Swedish statute text.

Consolidated SFS text records the history of each provision with short
standard phrases:

- "Lag (2021:1174)." at the very end of a provision: the provision has its
  current wording through that amending act.
- "Upphävd genom lag (2018:218)." / "Har upphävts genom lag (2018:218)."
- "Införd genom lag (2010:1408)."
- "Ny lydelse enligt lag (2019:233)." / "Ändrad genom lag (2019:233)."
- Transitional blocks ("Denna lag träder i kraft den 1 juli 2021") that list
  the amending acts they concern as bare SFS numbers.

Each pattern records which AmendmentType and ReferencePosition a match
produces, so the parser stays a simple loop over this table.
"""

import re
from dataclasses import dataclass

from sfs_app.models.enums import AmendmentType, ReferencePosition

# "YYYY:NNN", e.g. "2018:218"
SFS_NUMBER = r"(\d{4}:\d+)"


@dataclass
class AmendmentPattern:
    """Definition of an amendment note pattern and what a match means."""

    name: str
    amendment_type: AmendmentType
    position: ReferencePosition
    regex: str
    description: str
    flags: int = 0

    def compile(self) -> re.Pattern:
        return re.compile(self.regex, self.flags)


# Trailing amendment note. When present it is authoritative and no other
# pattern is consulted.
SUFFIX_PATTERN = AmendmentPattern(
    name="law_note_suffix",
    amendment_type=AmendmentType.AMENDED,
    position=ReferencePosition.SUFFIX,
    regex=r"Lag\s*\(" + SFS_NUMBER + r"\)\.\s*$",
    description='Trailing "Lag (YYYY:NNN)." note',
)

# Inline notes, collected in this order
INLINE_PATTERNS: list[AmendmentPattern] = [
    # Example: "2 § Upphävd genom lag (2018:218)."
    AmendmentPattern(
        name="repealed_by",
        amendment_type=AmendmentType.REPEALED,
        position=ReferencePosition.INLINE,
        regex=r"[Uu]pphävd\s+genom\s+lag\s*\(" + SFS_NUMBER + r"\)",
        description='"Upphävd genom lag (YYYY:NNN)"',
    ),
    # Example: "Införd genom lag (2010:1408)."
    AmendmentPattern(
        name="introduced_by",
        amendment_type=AmendmentType.INTRODUCED,
        position=ReferencePosition.INLINE,
        regex=r"[Ii]nförd\s+genom\s+lag\s*\(" + SFS_NUMBER + r"\)",
        description='"Införd genom lag (YYYY:NNN)"',
    ),
    # Example: "Lagen har upphävts genom lag (1998:204)."
    AmendmentPattern(
        name="has_been_repealed_by",
        amendment_type=AmendmentType.REPEALED,
        position=ReferencePosition.INLINE,
        regex=r"[Hh]ar\s+upphävts\s+genom\s+lag\s*\(" + SFS_NUMBER + r"\)",
        description='"Har upphävts genom lag (YYYY:NNN)"',
    ),
    # Example: "Ny lydelse enligt lag (2019:233)."
    AmendmentPattern(
        name="new_wording_by",
        amendment_type=AmendmentType.NEW_WORDING,
        position=ReferencePosition.INLINE,
        regex=r"[Nn]y\s+lydelse\s+enligt\s+lag\s*\(" + SFS_NUMBER + r"\)",
        description='"Ny lydelse enligt lag (YYYY:NNN)"',
    ),
    # Example: "Ändrad genom lag (2019:233)."
    AmendmentPattern(
        name="amended_by",
        amendment_type=AmendmentType.AMENDED,
        position=ReferencePosition.INLINE,
        regex=r"[Ää]ndrad\s+genom\s+lag\s*\(" + SFS_NUMBER + r"\)",
        description='"Ändrad genom lag (YYYY:NNN)"',
    ),
]

# A provision mentioning entry into force is treated as a transitional block
FORCE_PATTERN = re.compile(r"[Tt]räder\s+i\s+kraft")
SFS_NUMBER_PATTERN = re.compile(SFS_NUMBER)
ISO_DATE_PATTERN = re.compile(r"(\d{4}-\d{2}-\d{2})")

# "Ändringar i dataskyddslagen (2018:218)" heading in an amending act
AMENDING_HEADER_PATTERN = re.compile(r"Ändringar\s+i\s+([^(]+)\s*\(" + SFS_NUMBER + r"\)")

# "Denna lag träder i kraft den 1 juli 2021"
EFFECTIVE_DATE_PATTERN = re.compile(
    r"träder\s+i\s+kraft\s+den\s+(\d{1,2})\s+([a-zåäö]+)\s+(\d{4})",
    re.IGNORECASE,
)

SWEDISH_MONTHS: dict[str, int] = {
    "januari": 1,
    "februari": 2,
    "mars": 3,
    "april": 4,
    "maj": 5,
    "juni": 6,
    "juli": 7,
    "augusti": 8,
    "september": 9,
    "oktober": 10,
    "november": 11,
    "december": 12,
}
