"""Full-text search over provisions, optionally as of a past date.

Without a date the search runs against ``provisions_fts`` (current wording)
and keeps FTS5's bm25 ranking and highlighted snippets. With a date it runs
against ``provision_versions_fts``, keeps only rows whose validity window
contains the date, and reduces each (document_id, provision_ref) to its
latest matching version. bm25 scores are not date-aware, so as-of hits carry
relevance 0.0 and a plain text prefix as snippet.
"""

import logging
from dataclasses import dataclass
from datetime import date

from sqlalchemy import text
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from sfs_app.config import settings
from sfs_app.models.enums import DocumentStatus
from sfs_pipeline.search.fts_query import build_fts_query_variants
from sfs_pipeline.versions.validation import clamp_limit

logger = logging.getLogger(__name__)

# SQLite messages for a MATCH expression it cannot parse
_FTS_QUERY_ERRORS = (
    "fts5",
    "unterminated string",
    "unknown special query",
    "syntax error",
)

_CURRENT_SQL = """
    SELECT
        lp.id,
        lp.document_id,
        ld.title AS document_title,
        lp.provision_ref,
        lp.chapter,
        lp.section,
        lp.title,
        snippet(provisions_fts, 0, '>>>', '<<<', '...', {snippet_tokens}) AS snippet,
        bm25(provisions_fts) AS relevance,
        lpv.valid_from,
        lpv.valid_to
    FROM provisions_fts
    JOIN legal_provisions lp ON lp.id = provisions_fts.rowid
    JOIN legal_documents ld ON ld.id = lp.document_id
    LEFT JOIN legal_provision_versions lpv
        ON lpv.document_id = lp.document_id
        AND lpv.provision_ref = lp.provision_ref
        AND lpv.valid_to IS NULL
    WHERE provisions_fts MATCH :query
    {filters}
    ORDER BY relevance, lp.id
    LIMIT :limit
"""

_AS_OF_SQL = """
    WITH ranked_versions AS (
        SELECT
            lpv.id,
            lpv.document_id,
            ld.title AS document_title,
            lpv.provision_ref,
            lpv.chapter,
            lpv.section,
            lpv.title,
            substr(lpv.content, 1, {snippet_chars}) AS snippet,
            0.0 AS relevance,
            lpv.valid_from,
            lpv.valid_to,
            row_number() OVER (
                PARTITION BY lpv.document_id, lpv.provision_ref
                ORDER BY COALESCE(lpv.valid_from, '0000-01-01') DESC, lpv.id DESC
            ) AS version_rank
        FROM provision_versions_fts
        JOIN legal_provision_versions lpv ON lpv.id = provision_versions_fts.rowid
        JOIN legal_documents ld ON ld.id = lpv.document_id
        WHERE provision_versions_fts MATCH :query
          AND (lpv.valid_from IS NULL OR lpv.valid_from <= :as_of)
          AND (lpv.valid_to IS NULL OR lpv.valid_to > :as_of)
        {filters}
    )
    SELECT
        id, document_id, document_title, provision_ref, chapter, section,
        title, snippet, relevance, valid_from, valid_to
    FROM ranked_versions
    WHERE version_rank = 1
    ORDER BY relevance, document_id, id
    LIMIT :limit
"""


@dataclass
class SearchHit:
    """One matching provision with its validity window."""

    document_id: str
    document_title: str
    provision_ref: str
    chapter: str | None
    section: str
    title: str | None
    snippet: str
    relevance: float
    valid_from: date | None = None
    valid_to: date | None = None


def _to_date(value: str | date | None) -> date | None:
    # Raw SQL returns the stored ISO strings
    if value is None or isinstance(value, date):
        return value
    return date.fromisoformat(value)


class ProvisionSearchService:
    """Date-aware provision search."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def search(
        self,
        query: str,
        as_of: date | None = None,
        document_id: str | None = None,
        status: str | None = None,
        limit: int | None = None,
    ) -> list[SearchHit]:
        """Search provisions, optionally as they read on ``as_of``.

        The precise query is tried first; if it finds nothing and a broader
        variant exists, that is tried next.

        Args:
            query: Free text or explicit FTS5 syntax.
            as_of: Resolve wording in force on this date instead of today.
            document_id: Restrict to one statute.
            status: Restrict to statutes with this DocumentStatus value.
            limit: Maximum hits, clamped to the configured range.

        Raises:
            ValueError: Unknown status or a query FTS5 cannot parse.
        """
        variants = build_fts_query_variants(query or "")
        if not variants.primary:
            return []
        if status is not None and status not in {s.value for s in DocumentStatus}:
            raise ValueError(f"Unknown document status: {status!r}")

        limit = clamp_limit(limit, settings.search_default_limit, settings.search_max_limit)
        table_alias = "lpv" if as_of else "lp"
        filters = []
        params: dict[str, object] = {"limit": limit}
        if document_id:
            filters.append(f"AND {table_alias}.document_id = :document_id")
            params["document_id"] = document_id
        if status:
            filters.append("AND ld.status = :status")
            params["status"] = status

        if as_of:
            sql = _AS_OF_SQL.format(
                snippet_chars=int(settings.as_of_snippet_chars),
                filters="\n        ".join(filters),
            )
            params["as_of"] = as_of.isoformat()
        else:
            sql = _CURRENT_SQL.format(
                snippet_tokens=int(settings.snippet_tokens),
                filters="\n    ".join(filters),
            )

        hits = await self._run(sql, variants.primary, params)
        if not hits and variants.fallback:
            logger.debug(f"No hits for {variants.primary!r}, retrying {variants.fallback!r}")
            hits = await self._run(sql, variants.fallback, params)
        return hits

    async def _run(self, sql: str, fts_query: str, params: dict[str, object]) -> list[SearchHit]:
        try:
            result = await self.session.execute(text(sql), {**params, "query": fts_query})
        except OperationalError as exc:
            message = str(exc.orig).lower()
            if any(marker in message for marker in _FTS_QUERY_ERRORS):
                raise ValueError(f"Invalid search query {fts_query!r}: {exc.orig}") from exc
            raise

        return [
            SearchHit(
                document_id=row.document_id,
                document_title=row.document_title,
                provision_ref=row.provision_ref,
                chapter=row.chapter,
                section=row.section,
                title=row.title,
                snippet=row.snippet or "",
                relevance=float(row.relevance),
                valid_from=_to_date(row.valid_from),
                valid_to=_to_date(row.valid_to),
            )
            for row in result.all()
        ]
