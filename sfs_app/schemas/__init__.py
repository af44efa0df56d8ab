"""Pydantic schemas module.

This module contains Pydantic models used for:
- API response validation
- Data transfer between the pipeline services and the API

Naming convention:
- Schema suffix to distinguish from SQLAlchemy models and pipeline dataclasses
"""

from sfs_app.schemas.document import CurrencySchema
from sfs_app.schemas.provision import (
    AmendmentRecordSchema,
    ChangesResponseSchema,
    ProvisionChangeSchema,
    ProvisionDiffSchema,
    ProvisionHistorySchema,
    ProvisionVersionSchema,
    VersionWindowSchema,
)
from sfs_app.schemas.search import SearchHitSchema, SearchResultsSchema

__all__ = [
    "AmendmentRecordSchema",
    "ChangesResponseSchema",
    "CurrencySchema",
    "ProvisionChangeSchema",
    "ProvisionDiffSchema",
    "ProvisionHistorySchema",
    "ProvisionVersionSchema",
    "SearchHitSchema",
    "SearchResultsSchema",
    "VersionWindowSchema",
]
