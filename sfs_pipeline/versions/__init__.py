"""Temporal version store: point-in-time reads, validated writes, promotion."""

from sfs_pipeline.versions.amendment_promotion import AmendmentPromoter, PromotionReport
from sfs_pipeline.versions.validation import (
    clamp_limit,
    parse_iso_date,
    parse_optional_date,
    require_identifier,
)
from sfs_pipeline.versions.version_store import (
    AmendmentRecord,
    ProvisionChange,
    ProvisionDiff,
    ProvisionHistory,
    ProvisionVersionService,
    ProvisionVersionState,
    VersionWindow,
)
from sfs_pipeline.versions.version_writer import (
    VersionSpec,
    VersionWindowError,
    VersionWriter,
    validate_version_windows,
)

__all__ = [
    "AmendmentPromoter",
    "AmendmentRecord",
    "PromotionReport",
    "ProvisionChange",
    "ProvisionDiff",
    "ProvisionHistory",
    "ProvisionVersionService",
    "ProvisionVersionState",
    "VersionSpec",
    "VersionWindow",
    "VersionWindowError",
    "VersionWriter",
    "clamp_limit",
    "parse_iso_date",
    "parse_optional_date",
    "require_identifier",
    "validate_version_windows",
]
