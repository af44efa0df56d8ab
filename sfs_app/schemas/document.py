"""Pydantic schemas for document-level endpoints."""

from datetime import date, datetime

from pydantic import BaseModel, Field

from sfs_app.models.enums import CurrencyStatus


class CurrencySchema(BaseModel):
    """Whether a statute, and optionally one of its provisions, is in force."""

    document_id: str
    title: str
    status: str = Field(..., description="Consolidation status from the last ingestion")
    type: str
    issued_date: date | None = None
    in_force_date: date | None = None
    last_updated: datetime | None = None
    is_current: bool
    as_of_date: date | None = None
    status_as_of: CurrencyStatus | None = None
    is_in_force_as_of: bool | None = None
    provision_exists: bool | None = None
    warnings: list[str] = Field(default_factory=list)

    model_config = {"from_attributes": True}
