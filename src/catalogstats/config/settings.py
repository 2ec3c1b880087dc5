"""
Typed configuration models using Pydantic.

All configuration is defined here with explicit typing and validation.
No hardcoded thresholds or paths in processing code.
"""

from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class WriteMode(str, Enum):
    """How a successful load is applied to the product store."""

    REPLACE = "replace"  # Swap the whole snapshot
    APPEND = "append"  # Union with the existing snapshot, last write wins


class OutputFormat(str, Enum):
    """Output format for rendered reports."""

    TABLE = "table"
    JSON = "json"
    CSV = "csv"


class DataPathsConfig(BaseModel):
    """Data file paths configuration.

    Relative paths are resolved against data_root.
    """

    model_config = ConfigDict(frozen=True)

    data_root: Path = Field(
        default=Path("./data"), description="Root directory for all data files"
    )
    source: Path = Field(description="Delimited product catalog file")
    store: Path | None = Field(
        default=None,
        description="Store snapshot path (defaults to output/{project}/store)",
    )

    def resolve(self, path_attr: str) -> Path:
        """Resolve a relative path against data_root."""
        rel_path = getattr(self, path_attr)
        if rel_path is None:
            msg = f"Path '{path_attr}' is not configured"
            raise ValueError(msg)
        if rel_path.is_absolute():
            return rel_path
        return self.data_root / rel_path


class IngestionConfig(BaseModel):
    """Delimited-file parsing and bad-row tolerance."""

    model_config = ConfigDict(frozen=True)

    delimiter: str = Field(default=",", min_length=1, max_length=1)
    quotechar: str = Field(default='"', min_length=1, max_length=1)
    encoding: str = Field(default="utf-8")
    # Counted per load() call, not cumulatively across loads
    max_bad_records: int = Field(
        default=10, ge=0, description="Rows that may be skipped before aborting"
    )
    write_mode: WriteMode = Field(default=WriteMode.REPLACE)


class PriceBand(BaseModel):
    """One threshold band: values strictly below `below` get `label`."""

    model_config = ConfigDict(frozen=True)

    below: float = Field(gt=0)
    label: str = Field(min_length=1)


class ClassificationConfig(BaseModel):
    """Numeric-token classification of a free-text column."""

    model_config = ConfigDict(frozen=True)

    source_column: str = Field(default="display_name")
    output_column: str = Field(default="price_bucket")
    bands: list[PriceBand] = Field(
        default_factory=lambda: [
            PriceBand(below=500, label="Budget"),
            PriceBand(below=1500, label="Mid-Range"),
        ]
    )
    top_label: str = Field(
        default="Premium", description="Label for values above every band"
    )
    unknown_label: str = Field(
        default="Unknown", description="Label for text without a numeric token"
    )

    @field_validator("bands")
    @classmethod
    def validate_band_order(cls, v: list[PriceBand]) -> list[PriceBand]:
        """Ensure band thresholds are strictly increasing."""
        thresholds = [band.below for band in v]
        if thresholds != sorted(set(thresholds)):
            msg = f"Band thresholds must be strictly increasing, got: {thresholds}"
            raise ValueError(msg)
        return v


class PartitioningConfig(BaseModel):
    """Range bucketing of the store by a numeric field."""

    model_config = ConfigDict(frozen=True)

    field: str = Field(default="year")
    ranges: list[tuple[int, int]] = Field(
        default_factory=list, description="Half-open [lo, hi) bucket ranges"
    )

    @field_validator("ranges")
    @classmethod
    def validate_ranges(cls, v: list[tuple[int, int]]) -> list[tuple[int, int]]:
        """Ensure every range has lo < hi."""
        for lo, hi in v:
            if lo >= hi:
                msg = f"Range lower bound must be below upper bound, got: ({lo}, {hi})"
                raise ValueError(msg)
        return v


class ReportConfig(BaseModel):
    """Report rendering and analysis suite settings."""

    model_config = ConfigDict(frozen=True)

    output_format: OutputFormat = Field(default=OutputFormat.TABLE)
    top_n: int = Field(default=5, ge=1, description="Rows kept per ranking partition")
    max_workers: int = Field(default=4, ge=1, le=32)


class LoggingConfig(BaseModel):
    """Logging configuration."""

    model_config = ConfigDict(frozen=True)

    level: str = Field(default="INFO")
    json_output: bool = Field(default=False)

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        """Ensure the level is a known logging level name."""
        allowed = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in allowed:
            msg = f"Unknown log level: {v!r}"
            raise ValueError(msg)
        return v.upper()


class OutputConfig(BaseModel):
    """Output paths configuration.

    Structure: ./output/{project}/store, ./output/{project}/partitions, etc.
    """

    model_config = ConfigDict(frozen=True)

    output_root: Path = Field(
        default=Path("./output"), description="Root directory for all outputs"
    )


class PipelineConfig(BaseModel):
    """Complete pipeline configuration.

    The project name drives the output directory structure: ./output/{project}/
    """

    model_config = ConfigDict(frozen=True)

    project: str = Field(min_length=1, description="Project identifier")

    data_paths: DataPathsConfig
    ingestion: IngestionConfig = Field(default_factory=IngestionConfig)
    classification: ClassificationConfig = Field(default_factory=ClassificationConfig)
    partitioning: PartitioningConfig = Field(default_factory=PartitioningConfig)
    report: ReportConfig = Field(default_factory=ReportConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)

    @model_validator(mode="after")
    def validate_project_name(self) -> "PipelineConfig":
        """Project names become directory names."""
        if "/" in self.project or "\\" in self.project:
            msg = f"Project name must not contain path separators: {self.project!r}"
            raise ValueError(msg)
        return self

    @property
    def source_path(self) -> Path:
        """Resolved path of the delimited source file."""
        return self.data_paths.resolve("source")

    @property
    def store_path(self) -> Path:
        """Path of the persisted store snapshot."""
        if self.data_paths.store is not None:
            return self.data_paths.resolve("store")
        return self.output.output_root / self.project / "store" / "products.csv"

    @property
    def partitions_dir(self) -> Path:
        """Path to the partitioned view output directory."""
        return self.output.output_root / self.project / "partitions"

    @property
    def reports_dir(self) -> Path:
        """Path to rendered report output directory."""
        return self.output.output_root / self.project / "reports"
