"""SQLAlchemy models for the SFS law database."""

from sfs_app.models.amendment import StatuteAmendment
from sfs_app.models.base import Base, TimestampMixin, async_session_maker, get_async_session
from sfs_app.models.document import LegalDocument
from sfs_app.models.enums import (
    AmendmentType,
    CurrencyStatus,
    DocumentStatus,
    DocumentType,
    ReferencePosition,
    VersionStatus,
)
from sfs_app.models.fts import init_db
from sfs_app.models.provision import (
    LegalProvision,
    LegalProvisionVersion,
    provision_ref_for,
    split_provision_ref,
)

__all__ = [
    # Base
    "Base",
    "TimestampMixin",
    "async_session_maker",
    "get_async_session",
    "init_db",
    # Enums
    "AmendmentType",
    "CurrencyStatus",
    "DocumentStatus",
    "DocumentType",
    "ReferencePosition",
    "VersionStatus",
    # Documents and provisions
    "LegalDocument",
    "LegalProvision",
    "LegalProvisionVersion",
    "provision_ref_for",
    "split_provision_ref",
    # Change history
    "StatuteAmendment",
]
