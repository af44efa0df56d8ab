"""Request-shape validation for version and search queries.

All helpers raise ValueError before any query runs. Callers map that to an
HTTP 422 or a CLI error.
"""

import re
from datetime import date

_ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def parse_iso_date(value: str | date, field_name: str = "date") -> date:
    """Parse a strict ``YYYY-MM-DD`` string."""
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not _ISO_DATE.match(value):
        raise ValueError(f"Invalid {field_name}: {value!r}. Expected YYYY-MM-DD.")
    try:
        return date.fromisoformat(value)
    except ValueError as exc:
        raise ValueError(f"Invalid {field_name}: {value!r}. {exc}") from exc


def parse_optional_date(value: str | date | None, field_name: str = "date") -> date | None:
    if value is None or value == "":
        return None
    return parse_iso_date(value, field_name)


def require_identifier(name: str, value: str | None) -> str:
    """Return ``value`` stripped, or raise if it is missing or blank."""
    if value is None or not value.strip():
        raise ValueError(f"{name} is required")
    return value.strip()


def clamp_limit(limit: int | None, default: int, maximum: int) -> int:
    """Clamp a result limit into ``1..maximum``; None means ``default``."""
    if limit is None:
        return default
    return min(max(limit, 1), maximum)
