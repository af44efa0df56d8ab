"""Tests for point-in-time provision queries."""

from datetime import date

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from sfs_app.models.amendment import StatuteAmendment
from sfs_app.models.document import LegalDocument
from sfs_app.models.enums import AmendmentType, VersionStatus
from sfs_pipeline.statute_parser.segmenter import ParsedProvision
from sfs_pipeline.versions.version_store import (
    ProvisionVersionService,
    generate_unified_diff,
)
from sfs_pipeline.versions.version_writer import VersionWriter

GDPR_START = date(2018, 5, 25)
AMENDED_ON = date(2021, 1, 1)

ORIGINAL_WORDING = (
    "Denna lag kompletterar EU:s dataskyddsförordning.\n"
    "Tillsynsmyndigheten är Datainspektionen."
)
AMENDED_WORDING = (
    "Denna lag kompletterar EU:s dataskyddsförordning.\n"
    "Tillsynsmyndigheten är Integritetsskyddsmyndigheten."
)


async def _make_history(session: AsyncSession) -> None:
    """2018:218 1:1 with one wording from 2018-05-25 and a new one from 2021-01-01."""
    session.add(
        LegalDocument(
            id="2018:218",
            title="Lag med kompletterande bestämmelser till EU:s dataskyddsförordning",
            short_name="Dataskyddslagen",
            url="https://www.riksdagen.se/sv/dokument-och-lagar/dokument/sfs-2018-218",
        )
    )
    writer = VersionWriter(session)
    await writer.append_version(
        "2018:218", ParsedProvision(section="1", chapter="1", content=ORIGINAL_WORDING), GDPR_START
    )
    await writer.append_version(
        "2018:218", ParsedProvision(section="1", chapter="1", content=AMENDED_WORDING), AMENDED_ON
    )
    await session.commit()


class TestGenerateUnifiedDiff:
    def test_labels_and_changes(self) -> None:
        """Unified diff carries labels and changed lines."""
        diff = generate_unified_diff("a\nb", "a\nc", "2018:218_1:1")
        assert "--- a/2018:218_1:1" in diff
        assert "+++ b/2018:218_1:1" in diff
        assert "-b" in diff
        assert "+c" in diff

    def test_identical_texts(self) -> None:
        """Identical texts give an empty diff."""
        assert generate_unified_diff("a", "a", "x") == ""


class TestProvisionAtDate:
    """Tests for as-of resolution."""

    @pytest.mark.asyncio
    async def test_as_of_boundaries(self, session: AsyncSession) -> None:
        """valid_from is inclusive and valid_to exclusive."""
        await _make_history(session)
        service = ProvisionVersionService(session)

        on_start = await service.get_provision_at_date("2018:218", "1:1", GDPR_START)
        assert on_start.status == VersionStatus.HISTORICAL
        assert on_start.content == ORIGINAL_WORDING
        assert on_start.valid_to == AMENDED_ON

        day_before = await service.get_provision_at_date("2018:218", "1:1", date(2020, 12, 31))
        assert day_before.content == ORIGINAL_WORDING

        on_amendment = await service.get_provision_at_date("2018:218", "1:1", AMENDED_ON)
        assert on_amendment.status == VersionStatus.CURRENT
        assert on_amendment.content == AMENDED_WORDING
        assert on_amendment.valid_from == AMENDED_ON
        assert on_amendment.valid_to is None
        assert on_amendment.found

    @pytest.mark.asyncio
    async def test_before_first_version_is_future(self, session: AsyncSession) -> None:
        """A date before the first window reports a future version."""
        await _make_history(session)
        service = ProvisionVersionService(session)

        state = await service.get_provision_at_date("2018:218", "1:1", date(2018, 5, 24))

        assert state.status == VersionStatus.FUTURE
        assert state.valid_from == GDPR_START
        assert state.content == ""
        assert state.chapter == "1"
        assert state.section == "1"
        assert not state.found

    @pytest.mark.asyncio
    async def test_unknown_provision_is_not_found(self, session: AsyncSession) -> None:
        """Unknown provision gives not found."""
        await _make_history(session)
        service = ProvisionVersionService(session)

        state = await service.get_provision_at_date("2018:218", "9 a", date(2022, 1, 1))

        assert state.status == VersionStatus.NOT_FOUND
        assert state.chapter is None
        assert state.section == "9 a"

    @pytest.mark.asyncio
    async def test_current_provision(self, session: AsyncSession) -> None:
        """Without a date the open window is returned."""
        await _make_history(session)
        state = await ProvisionVersionService(session).get_current_provision(
            "2018:218", "1:1", today=date(2024, 1, 1)
        )
        assert state.content == AMENDED_WORDING

    @pytest.mark.asyncio
    async def test_include_amendments(self, session: AsyncSession) -> None:
        """Amendments are attached on request."""
        await _make_history(session)
        session.add_all(
            [
                StatuteAmendment(
                    target_document_id="2018:218",
                    target_provision_ref="1:1",
                    amended_by_sfs="2020:1010",
                    amendment_date=date(2020, 6, 1),
                    amendment_type=AmendmentType.AMENDED,
                    change_summary="Ändrad genom SFS 2020:1010",
                ),
                StatuteAmendment(
                    target_document_id="2018:218",
                    target_provision_ref="1:1",
                    amended_by_sfs="2017:1",
                    amendment_date=date(2017, 1, 1),
                    amendment_type=AmendmentType.AMENDED,
                ),
            ]
        )
        await session.commit()

        state = await ProvisionVersionService(session).get_provision_at_date(
            "2018:218", "1:1", date(2019, 1, 1), include_amendments=True
        )

        assert state.amendments is not None
        assert [a.amended_by_sfs for a in state.amendments] == ["2020:1010"]
        assert state.amendments[0].amendment_type == "amended"


class TestHistoryAndDiff:
    """Tests for history, diff and resolve_document_id."""

    @pytest.mark.asyncio
    async def test_history(self, session: AsyncSession) -> None:
        """History lists every version oldest first."""
        await _make_history(session)
        history = await ProvisionVersionService(session).get_provision_history(
            "2018:218", "1:1"
        )

        assert history is not None
        assert history.total_versions == 2
        assert [v.valid_from for v in history.versions] == [GDPR_START, AMENDED_ON]
        assert history.current_version == AMENDED_ON

    @pytest.mark.asyncio
    async def test_history_unknown_document(self, session: AsyncSession) -> None:
        await _make_history(session)
        service = ProvisionVersionService(session)
        assert await service.get_provision_history("1999:1", "1:1") is None

    @pytest.mark.asyncio
    async def test_resolve_document_id(self, session: AsyncSession) -> None:
        """Documents resolve by SFS number or by name."""
        await _make_history(session)
        service = ProvisionVersionService(session)

        assert await service.resolve_document_id("2018:218") == "2018:218"
        assert await service.resolve_document_id("Dataskyddslagen") == "2018:218"
        assert await service.resolve_document_id("kompletterande bestämmelser") == "2018:218"
        assert await service.resolve_document_id("100%") is None

    @pytest.mark.asyncio
    async def test_diff_within_one_window_is_unchanged(self, session: AsyncSession) -> None:
        """Two dates in the same window give no changes."""
        await _make_history(session)
        result = await ProvisionVersionService(session).diff(
            "2018:218", "1:1", date(2019, 1, 1), date(2019, 6, 1)
        )

        assert result is not None
        assert not result.changed
        assert result.diff is None
        assert result.change_summary == "No changes between 2019-01-01 and 2019-06-01"

    @pytest.mark.asyncio
    async def test_diff_across_amendment(self, session: AsyncSession) -> None:
        """Dates on both sides of an amendment give a diff."""
        await _make_history(session)
        result = await ProvisionVersionService(session).diff(
            "Dataskyddslagen", "1:1", date(2019, 1, 1), date(2022, 1, 1)
        )

        assert result is not None
        assert result.document_id == "2018:218"
        assert result.changed
        assert "-Tillsynsmyndigheten är Datainspektionen." in result.diff
        assert "+Tillsynsmyndigheten är Integritetsskyddsmyndigheten." in result.diff
        assert result.change_summary == "Text changed between 2019-01-01 and 2022-01-01"
        assert result.from_version.valid_to == AMENDED_ON
        assert result.to_version.valid_from == AMENDED_ON

    @pytest.mark.asyncio
    async def test_diff_from_before_first_version(self, session: AsyncSession) -> None:
        """Diff from before the first version treats the old text as empty."""
        await _make_history(session)
        result = await ProvisionVersionService(session).diff(
            "2018:218", "1:1", date(2000, 1, 1), date(2019, 1, 1)
        )

        assert result is not None
        assert result.changed
        assert result.diff is None
        assert result.from_version is None

    @pytest.mark.asyncio
    async def test_diff_without_any_version(self, session: AsyncSession) -> None:
        """Diff of an unknown provision gives None."""
        await _make_history(session)
        result = await ProvisionVersionService(session).diff(
            "2018:218", "7:1", date(2019, 1, 1), date(2022, 1, 1)
        )
        assert result is None


class TestChangesSince:
    @pytest.mark.asyncio
    async def test_changes_since(self, session: AsyncSession) -> None:
        """Versions that took effect after the date are listed."""
        await _make_history(session)
        changes = await ProvisionVersionService(session).changes_since(date(2020, 1, 1))

        assert len(changes) == 1
        assert changes[0].provision_ref == "1:1"
        assert changes[0].effective_date == AMENDED_ON
        assert changes[0].superseded_date is None
        assert changes[0].short_name == "Dataskyddslagen"

    @pytest.mark.asyncio
    async def test_most_recent_first_and_limit(self, session: AsyncSession) -> None:
        """Changes are newest first and honour the limit."""
        await _make_history(session)
        service = ProvisionVersionService(session)

        changes = await service.changes_since(date(2018, 1, 1))
        assert [c.effective_date for c in changes] == [AMENDED_ON, GDPR_START]

        limited = await service.changes_since(date(2018, 1, 1), limit=0)
        assert len(limited) == 1

    @pytest.mark.asyncio
    async def test_filter_by_document(self, session: AsyncSession) -> None:
        """Changes can be restricted to one document."""
        await _make_history(session)
        changes = await ProvisionVersionService(session).changes_since(
            date(2018, 1, 1), document_id="2010:800"
        )
        assert changes == []
