"""Query parameter parsing shared by the v1 endpoints.

Dates arrive as strings so that malformed values produce a 422 with the
same message the CLI prints, instead of FastAPI's generic validation error.
"""

from datetime import date

from fastapi import HTTPException

from sfs_pipeline.versions.validation import (
    parse_iso_date,
    parse_optional_date,
    require_identifier,
)


def date_param(value: str, field_name: str) -> date:
    try:
        return parse_iso_date(value, field_name)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e)) from e


def optional_date_param(value: str | None, field_name: str) -> date | None:
    try:
        return parse_optional_date(value, field_name)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e)) from e


def identifier_param(value: str | None, field_name: str) -> str:
    try:
        return require_identifier(field_name, value)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e)) from e
