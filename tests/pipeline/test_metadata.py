"""Tests for Riksdagen header metadata extraction."""

from datetime import date

from sfs_app.models.enums import DocumentStatus
from sfs_pipeline.legal_parser.metadata import (
    document_metadata_from_header,
    extract_html_metadata,
    extract_metadata_amendments,
    parse_iso_date_in,
)

REPEALED_HEADER = (
    "<div>"
    "<b>SFS nr</b>: 1998:204<br>"
    "<b>Utfärdad</b>: 1998-04-29<br>"
    "<b>Ikraft</b>: 1998-10-24<br>"
    "<b>Upphävd</b>: 2018-05-25<br>"
    "<b>Författningen har upphävts genom</b>: SFS 2018:218<br>"
    "</div>"
)


class TestExtractHtmlMetadata:
    """Tests for extract_html_metadata."""

    def test_key_value_pairs(self) -> None:
        """Bold keys followed by a colon and line break become fields."""
        fields = extract_html_metadata(REPEALED_HEADER)
        assert fields == {
            "SFS nr": "1998:204",
            "Utfärdad": "1998-04-29",
            "Ikraft": "1998-10-24",
            "Upphävd": "2018-05-25",
            "Författningen har upphävts genom": "SFS 2018:218",
        }

    def test_bold_without_colon_is_ignored(self) -> None:
        """Bold text without a colon is not a field."""
        fields = extract_html_metadata(
            "<div><b>Rubrik</b> text<br><b>SFS nr</b>: 2018:218<br></div>"
        )
        assert fields == {"SFS nr": "2018:218"}

    def test_bold_not_followed_by_line_break_is_ignored(self) -> None:
        """A value must end at a line break."""
        fields = extract_html_metadata("<div><b>Not</b>: se <i>nedan</i><br></div>")
        assert fields == {}

    def test_empty_input(self) -> None:
        assert extract_html_metadata(None) == {}
        assert extract_html_metadata("   ") == {}


class TestMetadataAmendments:
    def test_repeal_facts(self) -> None:
        """Upphävd and its statute become repeal facts."""
        result = extract_metadata_amendments(extract_html_metadata(REPEALED_HEADER))
        assert result.repealed_by_sfs == "2018:218"
        assert result.repealed_date == date(2018, 5, 25)
        assert result.repeal_description == "SFS 2018:218"
        assert result.referenced_sfs == ["2018:218", "1998:204"]

    def test_in_force_statute(self) -> None:
        """Statute without a repeal gives no facts."""
        result = extract_metadata_amendments({"SFS nr": "2018:218"})
        assert result.repealed_by_sfs is None
        assert result.repealed_date is None
        assert result.referenced_sfs == ["2018:218"]


class TestDocumentMetadata:
    def test_repealed_statute(self) -> None:
        """Repealed header gives repealed status and a description."""
        metadata = document_metadata_from_header(extract_html_metadata(REPEALED_HEADER))
        assert metadata.status == DocumentStatus.REPEALED
        assert metadata.issued_date == date(1998, 4, 29)
        assert metadata.in_force_date == date(1998, 10, 24)
        assert metadata.description == "Upphävd 2018-05-25 genom SFS 2018:218"

    def test_statute_in_force(self) -> None:
        """Header without a repeal gives in force status."""
        metadata = document_metadata_from_header({"Utfärdad": "2018-04-19"})
        assert metadata.status == DocumentStatus.IN_FORCE
        assert metadata.description is None


class TestParseIsoDateIn:
    def test_finds_date_in_text(self) -> None:
        """First ISO date in the text is returned."""
        assert parse_iso_date_in("Upphävd 2018-05-25 genom SFS 2018:218") == date(2018, 5, 25)

    def test_invalid_or_missing(self) -> None:
        assert parse_iso_date_in("2018-02-30") is None
        assert parse_iso_date_in("ingen") is None
        assert parse_iso_date_in(None) is None
