"""Pydantic schemas for provision version endpoints."""

from datetime import date

from pydantic import BaseModel, Field

from sfs_app.models.enums import VersionStatus


class AmendmentRecordSchema(BaseModel):
    """A promoted amendment affecting a provision."""

    amended_by_sfs: str = Field(..., description="Amending act, e.g. '2021:1174'")
    amendment_date: date
    amendment_type: str
    change_summary: str | None = None

    model_config = {"from_attributes": True}


class ProvisionVersionSchema(BaseModel):
    """A provision as it read on a given date."""

    document_id: str = Field(..., description="SFS number, e.g. '2018:218'")
    provision_ref: str = Field(..., description="Provision address, e.g. '1:3' or '5 a'")
    chapter: str | None = None
    section: str
    title: str | None = None
    content: str
    status: VersionStatus
    valid_from: date | None = Field(
        None, description="Start of the validity window (inclusive)"
    )
    valid_to: date | None = Field(
        None, description="End of the validity window (exclusive); null if current"
    )
    amendments: list[AmendmentRecordSchema] | None = None

    model_config = {"from_attributes": True}


class ProvisionHistorySchema(BaseModel):
    """All wordings of a provision, oldest first."""

    document_id: str
    provision_ref: str
    versions: list[ProvisionVersionSchema] = Field(default_factory=list)
    current_version: date | None = Field(
        None, description="valid_from of the open window"
    )
    total_versions: int = 0

    model_config = {"from_attributes": True}


class VersionWindowSchema(BaseModel):
    valid_from: date | None = None
    valid_to: date | None = None

    model_config = {"from_attributes": True}


class ProvisionDiffSchema(BaseModel):
    """Comparison of a provision's wording at two dates."""

    document_id: str
    provision_ref: str
    from_date: date
    to_date: date
    changed: bool
    diff: str | None = Field(None, description="Unified diff when both sides exist")
    change_summary: str
    from_version: VersionWindowSchema | None = None
    to_version: VersionWindowSchema | None = None
    amendments_between: list[AmendmentRecordSchema] = Field(default_factory=list)

    model_config = {"from_attributes": True}


class ProvisionChangeSchema(BaseModel):
    """A provision version that took effect on or after a date."""

    document_id: str
    provision_ref: str
    provision_title: str | None = None
    effective_date: date | None = None
    superseded_date: date | None = None
    document_title: str
    short_name: str | None = None
    source_url: str | None = None

    model_config = {"from_attributes": True}


class ChangesResponseSchema(BaseModel):
    since: date
    total: int
    changes: list[ProvisionChangeSchema] = Field(default_factory=list)
