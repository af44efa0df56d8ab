"""Provision models: the current wording table and the version history table.

Both tables hold the same provision fields. ``legal_provisions`` keeps only
the wording in force today (one row per document and provision_ref), while
``legal_provision_versions`` keeps every wording with its half-open validity
window ``[valid_from, valid_to)``.
"""

from datetime import date
from typing import TYPE_CHECKING

from sqlalchemy import (
    Date,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from sfs_app.models.base import Base

if TYPE_CHECKING:
    from sfs_app.models.document import LegalDocument


def provision_ref_for(chapter: str | None, section: str) -> str:
    """Build the canonical provision address from chapter and section."""
    return f"{chapter}:{section}" if chapter else section


def split_provision_ref(provision_ref: str) -> tuple[str | None, str]:
    """Inverse of provision_ref_for: "3:5" -> ("3", "5"), "5 a" -> (None, "5 a")."""
    if ":" in provision_ref:
        chapter, section = provision_ref.split(":", 1)
        return chapter, section
    return None, provision_ref


class LegalProvision(Base):
    """The current wording of a single provision."""

    __tablename__ = "legal_provisions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    document_id: Mapped[str] = mapped_column(
        String(50),
        ForeignKey("legal_documents.id", ondelete="CASCADE"),
        nullable=False,
    )
    provision_ref: Mapped[str] = mapped_column(
        String(50), nullable=False, doc='e.g., "3:5", "5 a"'
    )
    chapter: Mapped[str | None] = mapped_column(String(20), nullable=True)
    section: Mapped[str] = mapped_column(String(20), nullable=False)
    title: Mapped[str | None] = mapped_column(Text, nullable=True)
    content: Mapped[str] = mapped_column(Text, nullable=False)

    document: Mapped["LegalDocument"] = relationship(back_populates="provisions")

    __table_args__ = (
        UniqueConstraint(
            "document_id",
            "provision_ref",
            name="uq_legal_provisions_document_ref",
        ),
        Index("idx_provisions_doc", "document_id"),
        Index("idx_provisions_chapter", "document_id", "chapter"),
    )

    def __repr__(self) -> str:
        return f"<LegalProvision(SFS {self.document_id} {self.provision_ref})>"


class LegalProvisionVersion(Base):
    """One immutable wording of a provision, valid over ``[valid_from, valid_to)``.

    A null ``valid_from`` means "since the beginning of time"; a null
    ``valid_to`` marks the current wording. Windows for one
    (document_id, provision_ref) must not overlap; the ingestion writer
    enforces this, the read path assumes it.
    """

    __tablename__ = "legal_provision_versions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    document_id: Mapped[str] = mapped_column(
        String(50),
        ForeignKey("legal_documents.id", ondelete="CASCADE"),
        nullable=False,
    )
    provision_ref: Mapped[str] = mapped_column(String(50), nullable=False)
    chapter: Mapped[str | None] = mapped_column(String(20), nullable=True)
    section: Mapped[str] = mapped_column(String(20), nullable=False)
    title: Mapped[str | None] = mapped_column(Text, nullable=True)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    valid_from: Mapped[date | None] = mapped_column(
        Date, nullable=True, doc="Inclusive start; null = since the beginning"
    )
    valid_to: Mapped[date | None] = mapped_column(
        Date, nullable=True, doc="Exclusive end; null = still current"
    )

    document: Mapped["LegalDocument"] = relationship(back_populates="versions")

    __table_args__ = (
        Index("idx_provision_versions_doc_ref", "document_id", "provision_ref"),
        Index("idx_provision_versions_valid_from", "valid_from"),
    )

    @property
    def is_current(self) -> bool:
        return self.valid_to is None

    def __repr__(self) -> str:
        return (
            f"<LegalProvisionVersion("
            f"SFS {self.document_id} {self.provision_ref}, "
            f"{self.valid_from}..{self.valid_to}"
            f")>"
        )
