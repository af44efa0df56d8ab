"""Tests for current and as-of provision search."""

from datetime import date

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from sfs_pipeline.ingestion import StatuteDocument, StatuteIngestor
from sfs_pipeline.search import ProvisionSearchService

ORIGINAL_TEXT = """
1 kap. Inledande bestämmelser
1 § Denna lag kompletterar dataskyddsförordningen.
2 § Tillsynsmyndigheten är Datainspektionen.
"""

AMENDED_TEXT = """
1 kap. Inledande bestämmelser
1 § Denna lag kompletterar dataskyddsförordningen.
2 § Tillsynsmyndigheten är Integritetsskyddsmyndigheten. Lag (2020:1010).
3 § Sanktionsavgifter beslutas av tillsynsmyndigheten.
"""


async def _load(session: AsyncSession) -> None:
    ingestor = StatuteIngestor(session)
    document = StatuteDocument(id="2018:218", title="Dataskyddslagen")
    await ingestor.ingest_text(document, ORIGINAL_TEXT, valid_from=date(2018, 5, 25))
    await ingestor.ingest_text(
        StatuteDocument(id="2018:218", title="Dataskyddslagen"),
        AMENDED_TEXT,
        valid_from=date(2021, 1, 1),
    )
    await ingestor.ingest_text(
        StatuteDocument(id="1998:204", title="Personuppgiftslag"),
        "1 § Tillsynsmyndigheten är Datainspektionen.",
        valid_from=date(1998, 10, 24),
    )


class TestCurrentSearch:
    """Searching the current wording."""

    @pytest.mark.asyncio
    async def test_finds_current_wording(self, session: AsyncSession) -> None:
        """Current search matches the wording in force."""
        await _load(session)
        hits = await ProvisionSearchService(session).search("integritetsskydd")

        assert len(hits) == 1
        hit = hits[0]
        assert hit.document_id == "2018:218"
        assert hit.document_title == "Dataskyddslagen"
        assert hit.provision_ref == "1:2"
        assert hit.chapter == "1"
        assert ">>>" in hit.snippet
        assert hit.valid_from == date(2021, 1, 1)
        assert hit.valid_to is None

    @pytest.mark.asyncio
    async def test_old_wording_not_in_current(self, session: AsyncSession) -> None:
        """Superseded wording is absent from current search."""
        await _load(session)
        hits = await ProvisionSearchService(session).search(
            "datainspektionen", document_id="2018:218"
        )
        assert hits == []

    @pytest.mark.asyncio
    async def test_fallback_to_any_term(self, session: AsyncSession) -> None:
        """No AND match falls back to OR over the terms."""
        await _load(session)
        hits = await ProvisionSearchService(session).search(
            "sanktionsavgifter dataskyddsombud", document_id="2018:218"
        )
        assert [hit.provision_ref for hit in hits] == ["1:3"]

    @pytest.mark.asyncio
    async def test_document_filter(self, session: AsyncSession) -> None:
        """Results can be restricted to one document."""
        await _load(session)
        service = ProvisionSearchService(session)

        everywhere = await service.search("tillsynsmyndigheten")
        only_1998 = await service.search("tillsynsmyndigheten", document_id="1998:204")

        assert {hit.document_id for hit in everywhere} == {"2018:218", "1998:204"}
        assert [hit.document_id for hit in only_1998] == ["1998:204"]

    @pytest.mark.asyncio
    async def test_status_filter(self, session: AsyncSession) -> None:
        """Results can be restricted by document status."""
        await _load(session)
        hits = await ProvisionSearchService(session).search(
            "tillsynsmyndigheten", status="repealed"
        )
        assert hits == []

    @pytest.mark.asyncio
    async def test_limit(self, session: AsyncSession) -> None:
        """Result count honours the limit."""
        await _load(session)
        hits = await ProvisionSearchService(session).search("tillsynsmyndigheten", limit=1)
        assert len(hits) == 1


class TestAsOfSearch:
    """Searching the wording in force on a past date."""

    @pytest.mark.asyncio
    async def test_finds_historical_wording(self, session: AsyncSession) -> None:
        """As-of search matches the wording valid at that date."""
        await _load(session)
        hits = await ProvisionSearchService(session).search(
            "datainspektionen", as_of=date(2019, 6, 1), document_id="2018:218"
        )

        assert len(hits) == 1
        hit = hits[0]
        assert hit.provision_ref == "1:2"
        assert hit.relevance == 0.0
        assert hit.snippet.startswith("Tillsynsmyndigheten är Datainspektionen")
        assert hit.valid_from == date(2018, 5, 25)
        assert hit.valid_to == date(2021, 1, 1)

    @pytest.mark.asyncio
    async def test_window_end_is_exclusive(self, session: AsyncSession) -> None:
        """Wording is not found on its valid_to date."""
        await _load(session)
        service = ProvisionSearchService(session)

        on_change = await service.search(
            "datainspektionen", as_of=date(2021, 1, 1), document_id="2018:218"
        )
        new_wording = await service.search(
            "integritetsskyddsmyndigheten", as_of=date(2021, 1, 1)
        )

        assert on_change == []
        assert [hit.provision_ref for hit in new_wording] == ["1:2"]

    @pytest.mark.asyncio
    async def test_before_any_version(self, session: AsyncSession) -> None:
        """A date before every window finds nothing."""
        await _load(session)
        hits = await ProvisionSearchService(session).search(
            "dataskyddsförordningen", as_of=date(2010, 1, 1)
        )
        assert hits == []

    @pytest.mark.asyncio
    async def test_one_hit_per_provision(self, session: AsyncSession) -> None:
        """Each provision appears at most once."""
        await _load(session)
        hits = await ProvisionSearchService(session).search(
            "dataskyddsförordningen", as_of=date(2022, 1, 1)
        )
        assert [(hit.document_id, hit.provision_ref) for hit in hits] == [("2018:218", "1:1")]


class TestSearchInput:
    @pytest.mark.asyncio
    async def test_empty_query(self, session: AsyncSession) -> None:
        """Blank queries are rejected."""
        assert await ProvisionSearchService(session).search("  ") == []

    @pytest.mark.asyncio
    async def test_unknown_status(self, session: AsyncSession) -> None:
        """Unknown status filter is rejected."""
        with pytest.raises(ValueError, match="Unknown document status"):
            await ProvisionSearchService(session).search("lag", status="gällande")

    @pytest.mark.asyncio
    async def test_unbalanced_quote(self, session: AsyncSession) -> None:
        """An unterminated phrase is a query error, not a database error."""
        with pytest.raises(ValueError, match="Invalid search query"):
            await ProvisionSearchService(session).search('"personuppgift')

    @pytest.mark.asyncio
    async def test_leading_wildcard(self, session: AsyncSession) -> None:
        """A bare leading wildcard is a query error, not a database error."""
        with pytest.raises(ValueError, match="Invalid search query"):
            await ProvisionSearchService(session).search("*foo")

    @pytest.mark.asyncio
    async def test_dangling_operator(self, session: AsyncSession) -> None:
        """Trailing operator is reported as an invalid query."""
        with pytest.raises(ValueError, match="Invalid search query"):
            await ProvisionSearchService(session).search("personuppgift AND")
