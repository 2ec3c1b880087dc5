"""Tests for source validation."""

import io
from pathlib import Path

from rich.console import Console

from catalogstats.config import IngestionConfig
from catalogstats.exceptions import SchemaErrorKind
from catalogstats.validation import ConsoleReporter, SourceValidator, ValidationResult


def _render(result: ValidationResult) -> str:
    buffer = io.StringIO()
    ConsoleReporter(Console(file=buffer, width=140, color_system=None)).print_result(result)
    return buffer.getvalue()


class TestSourceValidator:
    """Tests for SourceValidator."""

    def test_sample_source(self, sample_csv: Path) -> None:
        """Test counts for the sample catalog."""
        result = SourceValidator(IngestionConfig()).validate(sample_csv)

        assert result.exists
        assert result.total_rows == 10
        assert result.valid_rows == 9
        assert result.skipped_rows == 1
        assert result.missing_columns == []
        assert result.rejections_by_kind == {SchemaErrorKind.FIELD_COUNT: 1}
        assert not result.would_abort

    def test_would_abort(self, sample_csv: Path) -> None:
        """Test that validation predicts an aborted load without raising."""
        result = SourceValidator(IngestionConfig(max_bad_records=0)).validate(sample_csv)
        assert result.would_abort
        assert result.valid_rows == 9

    def test_missing_file(self, tmp_path: Path) -> None:
        """Test that a missing source is reported, not raised."""
        result = SourceValidator(IngestionConfig()).validate(tmp_path / "missing.csv")
        assert not result.exists
        assert result.total_rows == 0

    def test_missing_columns(self, write_csv) -> None:
        """Test that header gaps are listed by canonical name."""
        path = write_csv(
            ["1,Men,Apparel,Topwear,Tshirts,Tee"],
            header="id,gender,masterCategory,subCategory,articleType,productDisplayName",
        )
        result = SourceValidator(IngestionConfig()).validate(path)
        assert result.missing_columns == ["base_colour", "season", "year", "usage"]
        assert result.rejections_by_kind == {SchemaErrorKind.MISSING_COLUMN: 1}

    def test_sample_is_capped(self, write_csv) -> None:
        """Test that only the first rejections are kept as samples."""
        path = write_csv(["x,Men"] * 30)
        result = SourceValidator(IngestionConfig()).validate(path)
        assert result.skipped_rows == 30
        assert len(result.sample_rejections) == 10
        assert result.sample_rejections[0].line_number == 2


class TestConsoleReporter:
    """Tests for ConsoleReporter output."""

    def test_pass(self, write_csv) -> None:
        """Test output for a clean source."""
        path = write_csv(["1,Men,Apparel,Topwear,Tshirts,Blue,Summer,2012,Casual,Tee 299"])
        text = _render(SourceValidator(IngestionConfig()).validate(path))
        assert "Source Validation Results" in text
        assert "Pass" in text
        assert "Rejections by Kind" not in text

    def test_with_skips(self, sample_csv: Path) -> None:
        """Test output listing rejection kinds and samples."""
        text = _render(SourceValidator(IngestionConfig()).validate(sample_csv))
        assert "Loadable (with skips)" in text
        assert "field_count" in text
        assert "Expected 10 fields, got 11" in text

    def test_missing(self, tmp_path: Path) -> None:
        """Test output for a missing source."""
        text = _render(SourceValidator(IngestionConfig()).validate(tmp_path / "gone.csv"))
        assert "Missing:" in text
