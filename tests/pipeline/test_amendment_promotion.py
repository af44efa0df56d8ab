"""Tests for promoting extracted amendment facts into the change history."""

from datetime import date

import pytest
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from sfs_app.models.amendment import StatuteAmendment
from sfs_app.models.enums import AmendmentType, ReferencePosition
from sfs_pipeline.ingestion import StatuteDocument, StatuteIngestor
from sfs_pipeline.legal_parser.amendment_parser import (
    AmendmentReference,
    ProvisionAmendments,
)
from sfs_pipeline.legal_parser.metadata import StatuteMetadataAmendments
from sfs_pipeline.versions.amendment_promotion import (
    AmendmentPromoter,
    change_summary_for,
)

STATUTE_TEXT = """
1 kap. Allmänna bestämmelser
1 § Denna lag gäller för behandling av personuppgifter. Lag (2021:1174).
2 § Upphävd genom lag (2019:5).
3 § Lagen gäller i hela riket.
"""


async def _ingest(session: AsyncSession) -> None:
    await StatuteIngestor(session).ingest_text(
        StatuteDocument(id="2018:218", title="Dataskyddslagen"),
        STATUTE_TEXT,
        valid_from=date(2018, 5, 25),
    )


async def _stored(session: AsyncSession) -> list[StatuteAmendment]:
    result = await session.execute(
        select(StatuteAmendment).order_by(StatuteAmendment.amendment_id)
    )
    return list(result.scalars().all())


class TestChangeSummary:
    def test_labels(self) -> None:
        """Change summary names the amendment type and SFS number."""
        reference = AmendmentReference(
            amended_by_sfs="2019:5",
            amendment_type=AmendmentType.REPEALED,
            position=ReferencePosition.INLINE,
            raw_text="Upphävd genom lag (2019:5)",
        )
        assert change_summary_for(reference) == "Upphävd genom SFS 2019:5"


class TestAmendmentPromoter:
    """Tests for AmendmentPromoter."""

    @pytest.mark.asyncio
    async def test_nothing_written_without_promotion(self, session: AsyncSession) -> None:
        """Ingestion alone stores no amendment rows."""
        await _ingest(session)
        assert await _stored(session) == []

    @pytest.mark.asyncio
    async def test_promote_document_skips_undated_facts(self, session: AsyncSession) -> None:
        """Facts without an effective date are counted and skipped."""
        await _ingest(session)
        report = await AmendmentPromoter(session).promote_document(
            "2018:218", {"2021:1174": date(2022, 1, 1)}
        )

        assert report.promoted == 1
        assert report.skipped_without_date == 1
        assert report.undated_sfs == ["2019:5"]

        stored = await _stored(session)
        assert len(stored) == 1
        assert stored[0].target_provision_ref == "1:1"
        assert stored[0].amended_by_sfs == "2021:1174"
        assert stored[0].amendment_date == date(2022, 1, 1)
        assert stored[0].change_summary == "Ändrad genom SFS 2021:1174"

    @pytest.mark.asyncio
    async def test_promotion_is_idempotent(self, session: AsyncSession) -> None:
        """Promoting the same facts twice stores them once."""
        await _ingest(session)
        promoter = AmendmentPromoter(session)
        dates = {"2021:1174": date(2022, 1, 1), "2019:5": date(2019, 7, 1)}

        first = await promoter.promote_document("2018:218", dates)
        second = await promoter.promote_document("2018:218", dates)

        assert first.promoted == 2
        assert second.promoted == 0
        assert second.already_present == 2
        assert len(await _stored(session)) == 2

    @pytest.mark.asyncio
    async def test_promote_explicit_facts(self, session: AsyncSession) -> None:
        """Caller supplied facts are promoted as given."""
        await _ingest(session)
        facts = [
            ProvisionAmendments(
                provision_ref="1:3",
                amendments=[
                    AmendmentReference(
                        amended_by_sfs="2020:1",
                        amendment_type=AmendmentType.NEW_WORDING,
                        position=ReferencePosition.INLINE,
                        raw_text="Ny lydelse enligt lag (2020:1)",
                    )
                ],
            )
        ]
        report = await AmendmentPromoter(session).promote(
            "2018:218", facts, {"2020:1": date(2020, 7, 1)}
        )

        assert report.promoted == 1
        stored = await _stored(session)
        assert stored[0].amendment_type == AmendmentType.NEW_WORDING
        assert stored[0].position == ReferencePosition.INLINE

    @pytest.mark.asyncio
    async def test_statute_repeal(self, session: AsyncSession) -> None:
        """Header repeal facts are stored as a statute level repeal."""
        await _ingest(session)
        promoter = AmendmentPromoter(session)
        metadata = StatuteMetadataAmendments(
            repealed_by_sfs="2025:100",
            repealed_date=date(2025, 7, 1),
            repeal_description="SFS 2025:100",
        )

        assert await promoter.promote_statute_repeal("2018:218", metadata)
        assert not await promoter.promote_statute_repeal("2018:218", metadata)

        stored = await _stored(session)
        assert len(stored) == 1
        assert stored[0].target_provision_ref is None
        assert stored[0].amendment_type == AmendmentType.REPEALED

    @pytest.mark.asyncio
    async def test_statute_repeal_needs_date(self, session: AsyncSession) -> None:
        """Repeal without a date is not recorded."""
        await _ingest(session)
        metadata = StatuteMetadataAmendments(repealed_by_sfs="2025:100")
        assert not await AmendmentPromoter(session).promote_statute_repeal(
            "2018:218", metadata
        )
