"""Build FTS5 query expressions from free-text search input.

Explicit FTS syntax (quotes, wildcards, grouping, boolean operators) is kept
as typed. Plain input is tokenised and each token becomes a prefix term, so
"personuppgift" also matches "personuppgifter" and "personuppgifterna".
"""

import re
import unicodedata
from dataclasses import dataclass

EXPLICIT_FTS_SYNTAX = re.compile(r"[\"*():^]|\bAND\b|\bOR\b|\bNOT\b", re.IGNORECASE)
_TOKEN = re.compile(r"\w+")
# Characters FTS5 treats as syntax even inside explicit queries
_ESCAPE_CHARS = re.compile(r"[()^:]")


@dataclass
class FtsQueryVariants:
    """A precise primary expression and an optional broader fallback."""

    primary: str
    fallback: str | None = None


def extract_tokens(query: str) -> list[str]:
    """NFC-normalised word tokens longer than one character."""
    normalized = unicodedata.normalize("NFC", query)
    return [token for token in _TOKEN.findall(normalized) if len(token) > 1]


def escape_explicit_query(query: str) -> str:
    return _ESCAPE_CHARS.sub(lambda m: f'"{m.group(0)}"', query)


def build_fts_query_variants(query: str) -> FtsQueryVariants:
    """Primary and fallback FTS5 expressions for a search string.

    Plain input with two or more tokens gets a prefix-AND primary
    ("dataskydd* personuppgift*") and a prefix-OR fallback
    ("dataskydd* OR personuppgift*"). An empty primary means there is
    nothing to search for.
    """
    trimmed = query.strip()
    if not trimmed:
        return FtsQueryVariants(primary="")

    if EXPLICIT_FTS_SYNTAX.search(trimmed):
        return FtsQueryVariants(primary=escape_explicit_query(trimmed))

    tokens = extract_tokens(trimmed)
    if not tokens:
        return FtsQueryVariants(primary="")

    primary = " ".join(f"{token}*" for token in tokens)
    if len(tokens) == 1:
        return FtsQueryVariants(primary=primary)
    return FtsQueryVariants(
        primary=primary,
        fallback=" OR ".join(f"{token}*" for token in tokens),
    )
