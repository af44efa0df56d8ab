"""Tests for the offline CLI commands."""

import json
from datetime import date
from pathlib import Path

import pytest

from sfs_pipeline.cli import amendments_command, parse_amendment_dates, segment_command

STATUTE_TEXT = """
1 kap. Inledande bestämmelser
1 § Denna lag kompletterar dataskyddsförordningen. Lag (2021:1174).
2 § Upphävd genom lag (2019:5).
"""


class TestParseAmendmentDates:
    def test_pairs(self) -> None:
        """SFS=date pairs parse into a mapping."""
        assert parse_amendment_dates(["2021:1174=2022-01-01", "SFS 2019:5=2019-07-01"]) == {
            "2021:1174": date(2022, 1, 1),
            "2019:5": date(2019, 7, 1),
        }

    def test_none(self) -> None:
        assert parse_amendment_dates(None) == {}

    def test_missing_separator(self) -> None:
        """Pair without an equals sign is rejected."""
        with pytest.raises(ValueError, match="Expected SFS=YYYY-MM-DD"):
            parse_amendment_dates(["2021:1174"])

    def test_bad_sfs(self) -> None:
        """Pair with an invalid SFS number is rejected."""
        with pytest.raises(ValueError, match="Invalid SFS number"):
            parse_amendment_dates(["lagen=2022-01-01"])

    def test_bad_date(self) -> None:
        """Pair with a non-ISO date names the offending SFS number."""
        with pytest.raises(ValueError, match="2021:1174"):
            parse_amendment_dates(["2021:1174=1 januari 2022"])


class TestOfflineCommands:
    def _write(self, tmp_path: Path) -> Path:
        path = tmp_path / "2018-218.txt"
        path.write_text(STATUTE_TEXT, encoding="utf-8")
        return path

    def test_segment_json(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        """Segment command prints provisions and diagnostics as JSON."""
        assert segment_command(self._write(tmp_path), as_json=True) == 0

        output = json.loads(capsys.readouterr().out)
        assert [p["provision_ref"] for p in output["provisions"]] == ["1:1", "1:2"]
        assert output["diagnostics"]["suppressed_section_candidates"] == 0
        assert output["used_fallback"] is False

    def test_segment_summary(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        """Segment command prints a text summary."""
        assert segment_command(self._write(tmp_path), strict=True) == 0
        assert "2018-218.txt: 2 provisions" in capsys.readouterr().out

    def test_amendments_json(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        """Amendments command prints references per provision."""
        assert amendments_command(self._write(tmp_path), as_json=True) == 0

        output = json.loads(capsys.readouterr().out)
        assert [(p["provision_ref"], p["amendments"][0]["amended_by_sfs"]) for p in output] == [
            ("1:1", "2021:1174"),
            ("1:2", "2019:5"),
        ]
        assert output[1]["amendments"][0]["amendment_type"] == "repealed"
