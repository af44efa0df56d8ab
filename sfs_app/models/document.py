"""LegalDocument model: a statute or other legal document identified by SFS number."""

from datetime import date
from typing import TYPE_CHECKING

from sqlalchemy import Date, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from sfs_app.models.base import Base, TimestampMixin, enum_column
from sfs_app.models.enums import DocumentStatus, DocumentType

if TYPE_CHECKING:
    from sfs_app.models.provision import LegalProvision, LegalProvisionVersion


class LegalDocument(Base, TimestampMixin):
    """A legal document (statute, bill, SOU, Ds or case).

    Keyed by its stable identifier, e.g. "2018:218" for Dataskyddslagen.
    """

    __tablename__ = "legal_documents"

    id: Mapped[str] = mapped_column(String(50), primary_key=True)
    type: Mapped[str] = mapped_column(
        enum_column(DocumentType, "document_type_enum"),
        default=DocumentType.STATUTE.value,
        nullable=False,
    )
    title: Mapped[str] = mapped_column(Text, nullable=False)
    title_en: Mapped[str | None] = mapped_column(Text, nullable=True)
    short_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    status: Mapped[str] = mapped_column(
        enum_column(DocumentStatus, "document_status_enum"),
        default=DocumentStatus.IN_FORCE.value,
        nullable=False,
    )
    issued_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    in_force_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    url: Mapped[str | None] = mapped_column(Text, nullable=True)
    description: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
        doc='Free-text status note, e.g. "Upphävd 2018-05-25 genom SFS 2018:218"',
    )

    provisions: Mapped[list["LegalProvision"]] = relationship(
        back_populates="document",
        cascade="all, delete-orphan",
    )
    versions: Mapped[list["LegalProvisionVersion"]] = relationship(
        back_populates="document",
        cascade="all, delete-orphan",
    )

    __table_args__ = (Index("idx_legal_documents_status", "status"),)

    def __repr__(self) -> str:
        return f"<LegalDocument(SFS {self.id})>"
