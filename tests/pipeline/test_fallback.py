"""Tests for the plain parser, de-duplication and strict/plain selection."""

from sfs_pipeline.statute_parser.fallback import (
    dedupe_by_provision_ref,
    is_chaptered_statute,
    parse_statute_text,
    quality_score,
    select_provisions,
    should_use_fallback,
)
from sfs_pipeline.statute_parser.segmenter import ParsedProvision, ParseDiagnostics


def _lowercase_statute(sections: int) -> str:
    """A flat statute whose sections all start in lowercase after the first."""
    lines = ["1 § Början av lagen."]
    lines.extend(f"{n} § text för paragraf nummer {n}." for n in range(2, sections + 1))
    return "\n".join(lines)


class TestParseStatuteText:
    """Tests for the plain parser."""

    def test_applies_every_marker(self) -> None:
        """Plain parser starts a provision at every section marker."""
        text = "1 kap. A\n1 § Ett.\n2 § två.\n1 § igen."
        provisions = parse_statute_text(text)
        assert [p.provision_ref for p in provisions] == ["1:1", "1:2", "1:1"]

    def test_heading_after_marker_becomes_title(self) -> None:
        """Short heading after an empty marker becomes the title."""
        provisions = parse_statute_text("1 §\nDefinitioner\nI denna lag avses ...")
        assert provisions[0].title == "Definitioner"
        assert provisions[0].content == "I denna lag avses ..."

    def test_text_before_first_section_is_dropped(self) -> None:
        """Text before the first section is not kept."""
        provisions = parse_statute_text("Förord\n1 § Text.")
        assert len(provisions) == 1
        assert provisions[0].content == "Text."


class TestIsChapteredStatute:
    def test_detects_chapter_marker_on_any_line(self) -> None:
        """A chapter marker anywhere makes the statute chaptered."""
        assert is_chaptered_statute("Inledning\n1 kap. Allmänt\n1 § Text.")

    def test_flat_statute(self) -> None:
        """Statute without chapter markers is flat."""
        assert not is_chaptered_statute("1 § Text.\n2 § Mer text.")


class TestDedupe:
    """Tests for dedupe_by_provision_ref."""

    def test_quality_score_prefers_complete_provisions(self) -> None:
        """Titled provisions with more content score higher."""
        fragment = ParsedProvision(section="1", content="och fortsätter.")
        full = ParsedProvision(
            section="1",
            content="Denna bestämmelse gäller för alla myndigheter i landet. Lag (2021:1174).",
        )
        assert quality_score(full) > quality_score(fragment)

    def test_replaces_worse_candidate_and_keeps_position(self) -> None:
        """Better duplicate replaces the earlier one in place."""
        provisions = [
            ParsedProvision(section="1", content="och fortsätter."),
            ParsedProvision(section="2", content="Andra paragrafen."),
            ParsedProvision(
                section="1",
                content="Denna bestämmelse gäller för alla myndigheter i landet.",
            ),
        ]
        result = dedupe_by_provision_ref(provisions)

        assert [p.provision_ref for p in result.provisions] == ["1", "2"]
        assert result.provisions[0].content.startswith("Denna bestämmelse")
        assert result.duplicate_refs == 1
        assert result.replacements == 1

    def test_tie_keeps_first(self) -> None:
        """Equal scores keep the first candidate."""
        first = ParsedProvision(section="1", content="Text A.")
        second = ParsedProvision(section="1", content="Text B.")
        result = dedupe_by_provision_ref([first, second])
        assert result.provisions == [first]
        assert result.replacements == 0


class TestSelectProvisions:
    """Tests for choosing between the strict and the plain result."""

    def test_strict_result_by_default(self) -> None:
        """Clean text keeps the strict segmentation."""
        selected = select_provisions("1 § Ett.\n2 § Två.\n1 § återges.\n3 § Tre.")
        assert not selected.used_fallback
        assert [p.provision_ref for p in selected.provisions] == ["1", "2", "3"]

    def test_falls_back_when_strict_suppresses_too_much(self) -> None:
        """Heavy suppression with a large gain switches to the fallback."""
        selected = select_provisions(_lowercase_statute(31))

        assert selected.used_fallback
        assert selected.strict_count == 1
        assert selected.fallback_count == 31
        assert selected.diagnostics.suppressed_section_candidates == 30
        assert len(selected.provisions) == 31

    def test_small_gain_keeps_strict(self) -> None:
        """Fallback needs a minimum gain in provisions."""
        diagnostics = ParseDiagnostics(suppressed_section_candidates=25)
        assert not should_use_fallback(diagnostics, strict_count=40, fallback_count=45)

    def test_ignored_chapters_block_fallback(self) -> None:
        """Ignored chapter markers keep the strict result."""
        diagnostics = ParseDiagnostics(
            ignored_chapter_markers=1, suppressed_section_candidates=50
        )
        assert not should_use_fallback(diagnostics, strict_count=1, fallback_count=50)

    def test_ratio_and_gain_both_required(self) -> None:
        """Fallback needs both the gain and the ratio."""
        diagnostics = ParseDiagnostics(suppressed_section_candidates=20)
        # Gain of 10 but below 1.25x
        assert not should_use_fallback(diagnostics, strict_count=100, fallback_count=110)
        assert should_use_fallback(diagnostics, strict_count=100, fallback_count=125)
