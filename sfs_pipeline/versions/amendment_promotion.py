"""Promote extracted amendment facts into the change-history table.

Extraction and storage are separate steps: the extractor only reports
which acts a provision's text mentions, and nothing writes
``statute_amendments`` unless this step is run. Amendment dates are not in
the consolidated text, so the caller supplies them per amending act; facts
without a known date are reported and skipped.
"""

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import date

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from sfs_app.models.amendment import StatuteAmendment
from sfs_app.models.enums import AmendmentType
from sfs_app.models.provision import LegalProvision
from sfs_pipeline.legal_parser.amendment_parser import (
    AmendmentExtractor,
    AmendmentReference,
    ProvisionAmendments,
)
from sfs_pipeline.legal_parser.metadata import StatuteMetadataAmendments

logger = logging.getLogger(__name__)

_TYPE_LABELS = {
    AmendmentType.AMENDED: "Ändrad",
    AmendmentType.NEW_WORDING: "Ny lydelse",
    AmendmentType.INTRODUCED: "Införd",
    AmendmentType.REPEALED: "Upphävd",
    AmendmentType.TRANSITIONAL: "Ikraftträdande",
}


def change_summary_for(reference: AmendmentReference) -> str:
    return f"{_TYPE_LABELS[reference.amendment_type]} genom SFS {reference.amended_by_sfs}"


@dataclass
class PromotionReport:
    """What a promotion run wrote and what it had to leave out."""

    document_id: str
    promoted: int = 0
    already_present: int = 0
    skipped_without_date: int = 0
    undated_sfs: list[str] = field(default_factory=list)

    def record_undated(self, sfs: str) -> None:
        self.skipped_without_date += 1
        if sfs not in self.undated_sfs:
            self.undated_sfs.append(sfs)


class AmendmentPromoter:
    """Writes StatuteAmendment rows for the facts it is given.

    Promotion is idempotent: a fact already stored for the same provision,
    amending act and type is not written twice. The promoter flushes but
    never commits.
    """

    def __init__(self, session: AsyncSession, extractor: AmendmentExtractor | None = None):
        self.session = session
        self.extractor = extractor or AmendmentExtractor()

    async def _exists(
        self,
        document_id: str,
        provision_ref: str | None,
        amended_by_sfs: str,
        amendment_type: AmendmentType,
    ) -> bool:
        ref_clause = (
            StatuteAmendment.target_provision_ref.is_(None)
            if provision_ref is None
            else StatuteAmendment.target_provision_ref == provision_ref
        )
        result = await self.session.execute(
            select(StatuteAmendment.amendment_id)
            .where(
                StatuteAmendment.target_document_id == document_id,
                ref_clause,
                StatuteAmendment.amended_by_sfs == amended_by_sfs,
                StatuteAmendment.amendment_type == amendment_type,
            )
            .limit(1)
        )
        return result.scalar_one_or_none() is not None

    async def promote(
        self,
        document_id: str,
        provisions: Iterable[ProvisionAmendments],
        amendment_date_by_sfs: Mapping[str, date],
    ) -> PromotionReport:
        """Store the given amendment facts for one document.

        Args:
            document_id: SFS number of the amended statute.
            provisions: Extracted facts per provision.
            amendment_date_by_sfs: Date each amending act took effect.
        """
        report = PromotionReport(document_id=document_id)

        for provision in provisions:
            for reference in provision.amendments:
                amendment_date = amendment_date_by_sfs.get(reference.amended_by_sfs)
                if amendment_date is None:
                    report.record_undated(reference.amended_by_sfs)
                    continue
                if await self._exists(
                    document_id,
                    provision.provision_ref,
                    reference.amended_by_sfs,
                    reference.amendment_type,
                ):
                    report.already_present += 1
                    continue

                self.session.add(
                    StatuteAmendment(
                        target_document_id=document_id,
                        target_provision_ref=provision.provision_ref,
                        amended_by_sfs=reference.amended_by_sfs,
                        amendment_date=amendment_date,
                        amendment_type=reference.amendment_type,
                        position=reference.position,
                        raw_text=reference.raw_text,
                        change_summary=change_summary_for(reference),
                    )
                )
                report.promoted += 1

        await self.session.flush()
        if report.undated_sfs:
            logger.warning(
                f"{document_id}: skipped {report.skipped_without_date} facts without a date "
                f"(acts {', '.join(report.undated_sfs)})"
            )
        logger.info(
            f"{document_id}: promoted {report.promoted} amendment facts "
            f"({report.already_present} already present)"
        )
        return report

    async def promote_document(
        self, document_id: str, amendment_date_by_sfs: Mapping[str, date]
    ) -> PromotionReport:
        """Extract facts from the stored current provisions and promote them."""
        result = await self.session.execute(
            select(LegalProvision)
            .where(LegalProvision.document_id == document_id)
            .order_by(LegalProvision.id)
        )
        extracted = []
        for row in result.scalars().all():
            amendments = self.extractor.extract(row.content)
            if amendments:
                extracted.append(
                    ProvisionAmendments(provision_ref=row.provision_ref, amendments=amendments)
                )
        return await self.promote(document_id, extracted, amendment_date_by_sfs)

    async def promote_statute_repeal(
        self, document_id: str, metadata: StatuteMetadataAmendments
    ) -> bool:
        """Record a whole-statute repeal from header metadata.

        Returns True if a row was written. Needs both the repealing act and
        the repeal date.
        """
        if not metadata.repealed_by_sfs or not metadata.repealed_date:
            return False
        if await self._exists(
            document_id, None, metadata.repealed_by_sfs, AmendmentType.REPEALED
        ):
            return False

        self.session.add(
            StatuteAmendment(
                target_document_id=document_id,
                target_provision_ref=None,
                amended_by_sfs=metadata.repealed_by_sfs,
                amendment_date=metadata.repealed_date,
                amendment_type=AmendmentType.REPEALED,
                raw_text=metadata.repeal_description,
                change_summary=f"Upphävd genom SFS {metadata.repealed_by_sfs}",
            )
        )
        await self.session.flush()
        logger.info(f"{document_id}: recorded repeal by SFS {metadata.repealed_by_sfs}")
        return True
