"""Tests for configuration system."""

from pathlib import Path
from typing import Any

import pytest
from pydantic import ValidationError

from catalogstats.config import (
    ClassificationConfig,
    DataPathsConfig,
    IngestionConfig,
    LoggingConfig,
    OutputFormat,
    PartitioningConfig,
    PriceBand,
    WriteMode,
    config_from_dict,
    load_config,
)


class TestDataPathsConfig:
    """Tests for DataPathsConfig."""

    def test_resolve_relative_to_root(self) -> None:
        """Test relative paths are resolved against data_root."""
        config = DataPathsConfig(data_root=Path("/data"), source=Path("styles.csv"))
        assert config.resolve("source") == Path("/data/styles.csv")

    def test_resolve_absolute_path_unchanged(self) -> None:
        """Test absolute paths are returned as-is."""
        config = DataPathsConfig(data_root=Path("/data"), source=Path("/elsewhere/styles.csv"))
        assert config.resolve("source") == Path("/elsewhere/styles.csv")

    def test_resolve_unconfigured_path(self) -> None:
        """Test resolving an unset optional path raises."""
        config = DataPathsConfig(source=Path("styles.csv"))
        with pytest.raises(ValueError, match="not configured"):
            config.resolve("store")


class TestIngestionConfig:
    """Tests for IngestionConfig."""

    def test_defaults(self) -> None:
        """Test default parsing settings and skip limit."""
        config = IngestionConfig()
        assert config.delimiter == ","
        assert config.max_bad_records == 10
        assert config.write_mode == WriteMode.REPLACE

    def test_negative_skip_limit_rejected(self) -> None:
        """Test that a negative max_bad_records raises error."""
        with pytest.raises(ValidationError):
            IngestionConfig(max_bad_records=-1)

    def test_multichar_delimiter_rejected(self) -> None:
        """Test that delimiters must be a single character."""
        with pytest.raises(ValidationError):
            IngestionConfig(delimiter="||")

    def test_frozen(self) -> None:
        """Test that config objects are immutable."""
        config = IngestionConfig()
        with pytest.raises(ValidationError):
            config.max_bad_records = 3  # type: ignore[misc]


class TestClassificationConfig:
    """Tests for ClassificationConfig."""

    def test_default_bands(self) -> None:
        """Test the default Budget / Mid-Range / Premium bands."""
        config = ClassificationConfig()
        assert [(b.below, b.label) for b in config.bands] == [
            (500, "Budget"),
            (1500, "Mid-Range"),
        ]
        assert config.top_label == "Premium"
        assert config.unknown_label == "Unknown"

    def test_unordered_bands_rejected(self) -> None:
        """Test that band thresholds must increase."""
        with pytest.raises(ValidationError, match="strictly increasing"):
            ClassificationConfig(
                bands=[PriceBand(below=1500, label="Mid"), PriceBand(below=500, label="Low")]
            )

    def test_duplicate_thresholds_rejected(self) -> None:
        """Test that equal thresholds are rejected."""
        with pytest.raises(ValidationError, match="strictly increasing"):
            ClassificationConfig(
                bands=[PriceBand(below=500, label="A"), PriceBand(below=500, label="B")]
            )


class TestPartitioningConfig:
    """Tests for PartitioningConfig."""

    def test_valid_ranges(self) -> None:
        """Test creating half-open year ranges."""
        config = PartitioningConfig(ranges=[(2010, 2012), (2012, 2015)])
        assert config.field == "year"
        assert config.ranges == [(2010, 2012), (2012, 2015)]

    def test_empty_range_rejected(self) -> None:
        """Test that lo >= hi raises error."""
        with pytest.raises(ValidationError, match="lower bound"):
            PartitioningConfig(ranges=[(2015, 2015)])


class TestLoggingConfig:
    """Tests for LoggingConfig."""

    def test_level_normalized(self) -> None:
        """Test that level names are upper-cased."""
        assert LoggingConfig(level="debug").level == "DEBUG"

    def test_unknown_level_rejected(self) -> None:
        """Test that unknown levels raise error."""
        with pytest.raises(ValidationError, match="Unknown log level"):
            LoggingConfig(level="verbose")


class TestConfigFromDict:
    """Tests for building PipelineConfig from a mapping."""

    def test_minimal_config(self) -> None:
        """Test that project and data.source are enough."""
        config = config_from_dict({"project": "demo", "data": {"source": "styles.csv"}})
        assert config.project == "demo"
        assert config.source_path == Path("data/styles.csv")
        assert config.store_path == Path("output/demo/store/products.csv")
        assert config.partitions_dir == Path("output/demo/partitions")
        assert config.reports_dir == Path("output/demo/reports")
        assert config.report.output_format == OutputFormat.TABLE

    def test_explicit_store_path(self) -> None:
        """Test that data.store overrides the derived store path."""
        config = config_from_dict(
            {
                "project": "demo",
                "data": {"root": "/srv/data", "source": "styles.csv", "store": "store.csv"},
            }
        )
        assert config.store_path == Path("/srv/data/store.csv")

    def test_missing_project(self) -> None:
        """Test that a missing project raises error."""
        with pytest.raises(ValueError, match="project"):
            config_from_dict({"data": {"source": "styles.csv"}})

    def test_missing_source(self) -> None:
        """Test that a missing data.source raises error."""
        with pytest.raises(ValueError, match="data.source"):
            config_from_dict({"project": "demo", "data": {}})

    def test_project_with_separator_rejected(self) -> None:
        """Test that project names cannot escape the output directory."""
        with pytest.raises(ValidationError, match="path separators"):
            config_from_dict({"project": "../demo", "data": {"source": "styles.csv"}})

    def test_bands_and_ranges_from_yaml_shapes(self, base_config: dict[str, Any]) -> None:
        """Test that YAML list shapes are converted to typed models."""
        base_config["classification"] = {
            "bands": [{"below": 100, "label": "Cheap"}, {"below": 1000, "label": "Fair"}],
            "top_label": "Dear",
        }
        config = config_from_dict(base_config)
        assert config.classification.bands[0] == PriceBand(below=100, label="Cheap")
        assert config.partitioning.ranges == [(2010, 2012), (2012, 2015), (2015, 2020)]


class TestLoadConfig:
    """Tests for YAML config loading."""

    def test_load_minimal_config(self, tmp_path: Path) -> None:
        """Test loading a minimal config file."""
        config_path = tmp_path / "catalog.yaml"
        config_path.write_text(
            "project: spring\ndata:\n  source: styles.csv\n", encoding="utf-8"
        )

        config = load_config(config_path)
        assert config.project == "spring"
        assert config.ingestion.max_bad_records == 10

    def test_inherits_sibling_base(self, tmp_path: Path) -> None:
        """Test that base.yaml next to the config is merged underneath it."""
        (tmp_path / "base.yaml").write_text(
            "ingestion:\n  max_bad_records: 3\n  delimiter: ';'\nreport:\n  top_n: 7\n",
            encoding="utf-8",
        )
        config_path = tmp_path / "catalog.yaml"
        config_path.write_text(
            "project: spring\ndata:\n  source: styles.csv\ningestion:\n  max_bad_records: 20\n",
            encoding="utf-8",
        )

        config = load_config(config_path)
        assert config.ingestion.max_bad_records == 20  # Override wins
        assert config.ingestion.delimiter == ";"  # Inherited
        assert config.report.top_n == 7

    def test_explicit_base_path(self, tmp_path: Path) -> None:
        """Test passing a base config explicitly."""
        base_path = tmp_path / "defaults.yaml"
        base_path.write_text("project: from-base\ndata:\n  source: a.csv\n", encoding="utf-8")
        config_path = tmp_path / "catalog.yaml"
        config_path.write_text("data:\n  source: b.csv\n", encoding="utf-8")

        config = load_config(config_path, base_path=base_path)
        assert config.project == "from-base"
        assert config.data_paths.source == Path("b.csv")

    def test_env_var_interpolation(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test environment variable interpolation with defaults."""
        monkeypatch.setenv("TEST_CATALOG_ROOT", "/mnt/catalog")
        monkeypatch.delenv("TEST_UNSET_LEVEL", raising=False)

        config_path = tmp_path / "catalog.yaml"
        config_path.write_text(
            "project: env\n"
            "data:\n"
            "  root: ${TEST_CATALOG_ROOT:./data}\n"
            "  source: styles.csv\n"
            "logging:\n"
            "  level: ${TEST_UNSET_LEVEL:warning}\n",
            encoding="utf-8",
        )

        config = load_config(config_path)
        assert config.source_path == Path("/mnt/catalog/styles.csv")
        assert config.logging.level == "WARNING"

    def test_shipped_configs_load(self) -> None:
        """Test that the configs in the repository are valid."""
        config_path = Path(__file__).parent.parent / "configs" / "fashion.yaml"
        config = load_config(config_path)
        assert config.project == "fashion"
        assert config.ingestion.max_bad_records == 50
        assert len(config.partitioning.ranges) == 4
        assert [b.label for b in config.classification.bands] == ["Budget", "Mid-Range"]
