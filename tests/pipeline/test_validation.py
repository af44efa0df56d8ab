"""Tests for request validation helpers."""

from datetime import date

import pytest

from sfs_pipeline.versions.validation import (
    clamp_limit,
    parse_iso_date,
    parse_optional_date,
    require_identifier,
)


class TestParseIsoDate:
    def test_valid(self) -> None:
        """YYYY-MM-DD parses to a date."""
        assert parse_iso_date("2021-01-01") == date(2021, 1, 1)

    def test_date_passthrough(self) -> None:
        assert parse_iso_date(date(2021, 1, 1)) == date(2021, 1, 1)

    @pytest.mark.parametrize(
        "value",
        ["2021-1-1", "01/01/2021", "2021-01-01T00:00", "", "20210101", "2021-02-30"],
    )
    def test_rejects_malformed(self, value: str) -> None:
        """Anything but a real YYYY-MM-DD date is rejected."""
        with pytest.raises(ValueError, match="as_of"):
            parse_iso_date(value, "as_of")

    def test_optional(self) -> None:
        """Missing or blank dates give None."""
        assert parse_optional_date(None) is None
        assert parse_optional_date("") is None
        assert parse_optional_date("2018-05-25") == date(2018, 5, 25)


class TestRequireIdentifier:
    def test_strips(self) -> None:
        """Identifiers are stripped."""
        assert require_identifier("document_id", " 2018:218 ") == "2018:218"

    @pytest.mark.parametrize("value", [None, "", "   "])
    def test_rejects_blank(self, value: str | None) -> None:
        """Missing or blank identifiers are rejected."""
        with pytest.raises(ValueError, match="document_id is required"):
            require_identifier("document_id", value)


class TestClampLimit:
    def test_default(self) -> None:
        assert clamp_limit(None, 10, 50) == 10

    def test_bounds(self) -> None:
        """Limits are clamped into range."""
        assert clamp_limit(0, 10, 50) == 1
        assert clamp_limit(-5, 10, 50) == 1
        assert clamp_limit(500, 10, 50) == 50
        assert clamp_limit(25, 10, 50) == 25
