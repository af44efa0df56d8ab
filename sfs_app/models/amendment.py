"""StatuteAmendment model: amendment facts promoted into the change history.

Rows are written only by the explicit promotion step
(``sfs_pipeline.versions.amendment_promotion``). Extracted references that
were never promoted do not appear here.
"""

from datetime import date

from sqlalchemy import Date, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from sfs_app.models.base import Base, TimestampMixin, enum_column
from sfs_app.models.enums import AmendmentType, ReferencePosition


class StatuteAmendment(Base, TimestampMixin):
    """A promoted amendment of a provision by another statute."""

    __tablename__ = "statute_amendments"

    amendment_id: Mapped[int] = mapped_column(Integer, primary_key=True)
    target_document_id: Mapped[str] = mapped_column(
        String(50),
        ForeignKey("legal_documents.id", ondelete="CASCADE"),
        nullable=False,
    )
    target_provision_ref: Mapped[str | None] = mapped_column(
        String(50), nullable=True, doc="Null when the whole statute is affected"
    )
    amended_by_sfs: Mapped[str] = mapped_column(String(50), nullable=False)
    amendment_date: Mapped[date] = mapped_column(Date, nullable=False)
    amendment_type: Mapped[str] = mapped_column(
        enum_column(AmendmentType, "amendment_type_enum"),
        nullable=False,
    )
    position: Mapped[str | None] = mapped_column(
        enum_column(ReferencePosition, "reference_position_enum"),
        nullable=True,
    )
    raw_text: Mapped[str | None] = mapped_column(
        Text, nullable=True, doc="Matched fragment, kept for audit"
    )
    change_summary: Mapped[str | None] = mapped_column(Text, nullable=True)

    __table_args__ = (
        Index(
            "idx_statute_amendments_target",
            "target_document_id",
            "target_provision_ref",
        ),
        Index("idx_statute_amendments_date", "amendment_date"),
    )

    def __repr__(self) -> str:
        return (
            f"<StatuteAmendment({self.target_document_id} "
            f"{self.target_provision_ref or '*'} by {self.amended_by_sfs})>"
        )
