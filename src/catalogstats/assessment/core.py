"""
Store audit checks.

Verifies that a loaded snapshot honours the product record contract
and that the load's row accounting is exact.
"""

from dataclasses import dataclass, field
from enum import Enum

import pandas as pd
import pandera.pandas as pa

from catalogstats.ingestion.loader import LoadResult
from catalogstats.schemas.registry import SchemaRegistry
from catalogstats.store.product_store import ProductStore
from catalogstats.utils.logging import get_logger

log = get_logger(__name__)


class CheckStatus(Enum):
    """Status of an individual check."""

    PASS = "pass"
    WARN = "warn"
    FAIL = "fail"
    SKIP = "skip"


@dataclass
class CheckResult:
    """
    Result of a single audit check.

    Attributes:
        name: Check name.
        status: Pass/warn/fail/skip.
        message: Human-readable description.
        details: Optional additional details.
        n_checked: Number of rows checked.
        n_failed: Number of rows failing.
        sample_failures: Sample of failure cases for debugging.
    """

    name: str
    status: CheckStatus
    message: str
    details: str | None = None
    n_checked: int = 0
    n_failed: int = 0
    sample_failures: pd.DataFrame | None = None


@dataclass
class AuditResult:
    """
    Result of a full store audit.

    Attributes:
        store_rows: Rows in the audited snapshot.
        fingerprint: Content hash of the audited snapshot.
        checks: List of individual check results.
    """

    store_rows: int
    fingerprint: str
    checks: list[CheckResult] = field(default_factory=list)

    @property
    def overall_status(self) -> CheckStatus:
        """Determine overall status from individual checks."""
        if any(c.status == CheckStatus.FAIL for c in self.checks):
            return CheckStatus.FAIL
        if any(c.status == CheckStatus.WARN for c in self.checks):
            return CheckStatus.WARN
        if all(c.status == CheckStatus.SKIP for c in self.checks):
            return CheckStatus.SKIP
        return CheckStatus.PASS

    @property
    def n_passed(self) -> int:
        """Count checks that passed."""
        return sum(1 for c in self.checks if c.status == CheckStatus.PASS)

    @property
    def n_failed(self) -> int:
        """Count checks that failed."""
        return sum(1 for c in self.checks if c.status == CheckStatus.FAIL)

    @property
    def n_warned(self) -> int:
        """Count checks with warnings."""
        return sum(1 for c in self.checks if c.status == CheckStatus.WARN)


class StoreAuditor:
    """Runs audit checks over a product store snapshot."""

    def __init__(self, null_year_warn_share: float = 0.05) -> None:
        """
        Initialize auditor.

        Args:
            null_year_warn_share: Warn when more than this share of records
                has no year.
        """
        self.null_year_warn_share = null_year_warn_share

    def run(
        self,
        store: ProductStore,
        load_result: LoadResult | None = None,
    ) -> AuditResult:
        """
        Run all audit checks.

        Args:
            store: Store to audit.
            load_result: Result of the load that produced the snapshot, if known.

        Returns:
            AuditResult with one CheckResult per check.
        """
        frame = store.frame
        result = AuditResult(store_rows=len(frame), fingerprint=store.fingerprint())

        result.checks.append(self._check_schema(frame))
        result.checks.append(self._check_unique_ids(frame))
        result.checks.append(self._check_null_sentinels(frame))
        result.checks.append(self._check_row_accounting(load_result))
        result.checks.append(self._check_year_coverage(frame))

        log.info(
            "Audit complete",
            status=result.overall_status.value,
            passed=result.n_passed,
            failed=result.n_failed,
            warned=result.n_warned,
        )
        return result

    def _check_schema(self, frame: pd.DataFrame) -> CheckResult:
        """Validate the snapshot against the product record schema."""
        try:
            SchemaRegistry.validate(frame, "product_record")
        except pa.errors.SchemaError as e:
            return CheckResult(
                name="Schema",
                status=CheckStatus.FAIL,
                message="Snapshot violates the product record schema",
                details=str(e).split("\n")[0][:200],
                n_checked=len(frame),
                sample_failures=e.failure_cases
                if isinstance(e.failure_cases, pd.DataFrame)
                else None,
            )
        return CheckResult(
            name="Schema",
            status=CheckStatus.PASS,
            message="Snapshot matches the product record schema",
            n_checked=len(frame),
        )

    def _check_unique_ids(self, frame: pd.DataFrame) -> CheckResult:
        """Every id must appear once."""
        duplicated = frame[frame["id"].duplicated(keep=False)]
        if duplicated.empty:
            return CheckResult(
                name="Unique ids",
                status=CheckStatus.PASS,
                message="All product ids are unique",
                n_checked=len(frame),
            )
        return CheckResult(
            name="Unique ids",
            status=CheckStatus.FAIL,
            message=f"{duplicated['id'].nunique()} ids appear more than once",
            n_checked=len(frame),
            n_failed=len(duplicated),
            sample_failures=duplicated.head(10),
        )

    def _check_null_sentinels(self, frame: pd.DataFrame) -> CheckResult:
        """Unknown values must be null, never blank strings."""
        text_columns = [c for c in frame.columns if pd.api.types.is_string_dtype(frame[c])]
        blank = pd.Series(False, index=frame.index)
        for column in text_columns:
            values = frame[column].astype("string")
            blank |= (values.str.strip() == "").fillna(False).astype(bool)

        n_blank = int(blank.sum())
        if n_blank == 0:
            return CheckResult(
                name="Null sentinels",
                status=CheckStatus.PASS,
                message="No blank strings stand in for unknown values",
                n_checked=len(frame),
            )
        return CheckResult(
            name="Null sentinels",
            status=CheckStatus.FAIL,
            message=f"{n_blank} rows hold blank strings instead of nulls",
            n_checked=len(frame),
            n_failed=n_blank,
            sample_failures=frame[blank].head(10),
        )

    def _check_row_accounting(self, load_result: LoadResult | None) -> CheckResult:
        """records_loaded + records_skipped must equal the rows read."""
        if load_result is None:
            return CheckResult(
                name="Row accounting",
                status=CheckStatus.SKIP,
                message="No load result available",
            )

        lr = load_result
        accounted = lr.records_loaded + lr.records_skipped
        if accounted != lr.total_rows:
            return CheckResult(
                name="Row accounting",
                status=CheckStatus.FAIL,
                message=f"{accounted} rows accounted for, {lr.total_rows} read",
                n_checked=lr.total_rows,
                n_failed=abs(lr.total_rows - accounted),
            )
        if lr.records_skipped:
            return CheckResult(
                name="Row accounting",
                status=CheckStatus.WARN,
                message=f"{lr.records_loaded} loaded, {lr.records_skipped} skipped",
                details=", ".join(
                    f"{kind.value}={n}" for kind, n in lr.rejections_by_kind.items()
                ),
                n_checked=lr.total_rows,
                n_failed=lr.records_skipped,
            )
        return CheckResult(
            name="Row accounting",
            status=CheckStatus.PASS,
            message=f"All {lr.records_loaded} rows loaded",
            n_checked=lr.total_rows,
        )

    def _check_year_coverage(self, frame: pd.DataFrame) -> CheckResult:
        """Records without a year are invisible to year-partitioned views."""
        if frame.empty:
            return CheckResult(
                name="Year coverage",
                status=CheckStatus.SKIP,
                message="Store is empty",
            )

        n_null = int(frame["year"].isna().sum())
        share = n_null / len(frame)
        status = CheckStatus.WARN if share > self.null_year_warn_share else CheckStatus.PASS
        return CheckResult(
            name="Year coverage",
            status=status,
            message=f"{n_null} records ({share:.1%}) have no year",
            n_checked=len(frame),
            n_failed=n_null,
        )
