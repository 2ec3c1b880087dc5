"""
Dry-run validation of catalog sources.

Parses a source against the product column contract without touching
the store and summarizes what a load would accept and skip.
"""

from collections import Counter
from dataclasses import dataclass, field
from pathlib import Path

from catalogstats.config.settings import IngestionConfig
from catalogstats.exceptions import SchemaErrorKind
from catalogstats.ingestion.loader import RowRejection, parse_source
from catalogstats.schemas.registry import SchemaRegistry
from catalogstats.utils.logging import get_logger

log = get_logger(__name__)

SAMPLE_SIZE = 10


@dataclass
class ValidationResult:
    """Result of validating a single source."""

    source: Path
    exists: bool
    total_rows: int = 0
    valid_rows: int = 0
    missing_columns: list[str] = field(default_factory=list)
    rejections_by_kind: dict[SchemaErrorKind, int] = field(default_factory=dict)
    sample_rejections: list[RowRejection] = field(default_factory=list)
    max_bad_records: int = 0

    @property
    def skipped_rows(self) -> int:
        """Rows a load would skip."""
        return self.total_rows - self.valid_rows

    @property
    def would_abort(self) -> bool:
        """Whether a load of this source would exceed the skip limit."""
        return self.skipped_rows > self.max_bad_records


class SourceValidator:
    """Validates delimited catalog sources against the schema registry."""

    def __init__(self, config: IngestionConfig) -> None:
        """
        Initialize source validator.

        Args:
            config: Ingestion configuration (parsing settings, skip limit).
        """
        self.config = config

    def validate(self, source: Path) -> ValidationResult:
        """
        Validate every row of a source.

        Args:
            source: Path of the delimited file.

        Returns:
            ValidationResult summarizing accepted and rejected rows.
        """
        if not source.exists():
            log.warning("Source file not found", path=str(source))
            return ValidationResult(
                source=source,
                exists=False,
                max_bad_records=self.config.max_bad_records,
            )

        outcome = parse_source(source, self.config, max_bad_records=None)
        missing = [
            name for name in SchemaRegistry.column_names() if name not in outcome.header
        ]

        result = ValidationResult(
            source=source,
            exists=True,
            total_rows=outcome.total_rows,
            valid_rows=len(outcome.records),
            missing_columns=missing,
            rejections_by_kind=dict(Counter(r.kind for r in outcome.rejections)),
            sample_rejections=outcome.rejections[:SAMPLE_SIZE],
            max_bad_records=self.config.max_bad_records,
        )

        log.info(
            "Validated source",
            path=str(source),
            rows=result.total_rows,
            valid=result.valid_rows,
            skipped=result.skipped_rows,
            would_abort=result.would_abort,
        )
        return result
