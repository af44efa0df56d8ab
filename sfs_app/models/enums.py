"""ENUM types for the database schema and the pipeline result objects."""

import enum


class DocumentType(str, enum.Enum):
    """Type of legal document."""

    STATUTE = "statute"
    BILL = "bill"  # Proposition
    SOU = "sou"  # Statens offentliga utredningar
    DS = "ds"  # Departementsserien
    CASE_LAW = "case_law"


class DocumentStatus(str, enum.Enum):
    """Consolidation status of a legal document."""

    IN_FORCE = "in_force"
    AMENDED = "amended"
    REPEALED = "repealed"
    NOT_YET_IN_FORCE = "not_yet_in_force"


class AmendmentType(str, enum.Enum):
    """Kind of amendment fact extracted from statute text."""

    AMENDED = "amended"  # ändrad
    NEW_WORDING = "new_wording"  # ny lydelse
    INTRODUCED = "introduced"  # införd
    REPEALED = "repealed"  # upphävd
    TRANSITIONAL = "transitional"  # ikraftträdande


class ReferencePosition(str, enum.Enum):
    """Where in the provision text an amendment reference was found.

    Consumers use this as a confidence signal: a trailing suffix is
    authoritative, a transitional-block token is weak.
    """

    SUFFIX = "suffix"
    INLINE = "inline"
    TRANSITION = "transition"


class VersionStatus(str, enum.Enum):
    """Outcome of an as-of lookup for a provision."""

    CURRENT = "current"  # valid_to is null
    HISTORICAL = "historical"  # valid_to is set
    FUTURE = "future"  # only later windows exist
    NOT_FOUND = "not_found"  # no window at any date


class CurrencyStatus(str, enum.Enum):
    """Status of a statute as of a given date."""

    IN_FORCE = "in_force"
    REPEALED = "repealed"
    NOT_YET_IN_FORCE = "not_yet_in_force"
