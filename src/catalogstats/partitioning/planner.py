"""
Partition planner: range bucketing of the product store.

Reorganizes a snapshot into buckets keyed by half-open [lo, hi) ranges
of a numeric field (year by default), so time-filtered queries scan
only the buckets they overlap.
"""

from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path

import numpy as np
import pandas as pd

from catalogstats.schemas.registry import SchemaRegistry
from catalogstats.utils.logging import get_logger

log = get_logger(__name__)


@dataclass(frozen=True, order=True)
class BucketRange:
    """Half-open range [lo, hi) of the bucket field."""

    lo: int
    hi: int

    def __post_init__(self) -> None:
        if self.lo >= self.hi:
            msg = f"Bucket range needs lo < hi, got [{self.lo}, {self.hi})"
            raise ValueError(msg)

    @property
    def label(self) -> str:
        """Directory-safe label, e.g. '2010_2015'."""
        return f"{self.lo}_{self.hi}"

    def overlaps(self, lo: int | None, hi: int | None) -> bool:
        """Whether this range intersects [lo, hi) (None bounds are open)."""
        lower_ok = hi is None or self.lo < hi
        upper_ok = lo is None or self.hi > lo
        return lower_ok and upper_ok


@dataclass
class PartitionedView:
    """
    A derived copy of the store bucketed by ranges of one field.

    Attributes:
        bucket_field: Bucket field name.
        buckets: Bucket range -> records, in range declaration order.
        n_null: Records dropped for a null bucket field.
        n_out_of_range: Records dropped for matching no range.
    """

    bucket_field: str
    buckets: dict[BucketRange, pd.DataFrame]
    n_null: int = 0
    n_out_of_range: int = 0
    template: pd.DataFrame = field(default_factory=pd.DataFrame, repr=False)

    def __len__(self) -> int:
        return sum(len(df) for df in self.buckets.values())

    @property
    def bucket_sizes(self) -> dict[str, int]:
        """Records per bucket label."""
        return {bucket.label: len(df) for bucket, df in self.buckets.items()}

    def frame(self) -> pd.DataFrame:
        """All included records."""
        return self._concat(list(self.buckets.values()))

    def covers(self, lo: int | None, hi: int | None) -> bool:
        """
        Whether the bucket ranges together span all of [lo, hi).

        Only then does scan(lo, hi) return every store record in the
        window. Open bounds are never covered.
        """
        if lo is None or hi is None:
            return False
        cursor = lo
        for bucket in sorted(self.buckets):
            if bucket.hi <= cursor:
                continue
            if bucket.lo > cursor:
                return False
            cursor = bucket.hi
            if cursor >= hi:
                return True
        return cursor >= hi

    def scan(self, lo: int | None = None, hi: int | None = None) -> pd.DataFrame:
        """
        Records with lo <= field < hi, reading only overlapping buckets.

        Args:
            lo: Inclusive lower bound (None: unbounded).
            hi: Exclusive upper bound (None: unbounded).

        Returns:
            Matching records.
        """
        selected = [
            df for bucket, df in self.buckets.items() if bucket.overlaps(lo, hi)
        ]
        log.debug(
            "Scanning partitioned view",
            lo=lo,
            hi=hi,
            buckets_read=len(selected),
            buckets_total=len(self.buckets),
        )
        frame = self._concat(selected)
        if frame.empty:
            return frame

        values = frame[self.bucket_field]
        mask = pd.Series(True, index=frame.index)
        if lo is not None:
            mask &= (values >= lo).fillna(False).astype(bool)
        if hi is not None:
            mask &= (values < hi).fillna(False).astype(bool)
        return frame[mask]

    def write(self, directory: Path) -> list[Path]:
        """
        Persist one CSV per bucket as <field>=<lo>_<hi>/part.csv.

        Args:
            directory: Output directory (created if missing).

        Returns:
            Paths of the written files.
        """
        paths = []
        for bucket, df in self.buckets.items():
            bucket_dir = directory / f"{self.bucket_field}={bucket.label}"
            bucket_dir.mkdir(parents=True, exist_ok=True)
            path = bucket_dir / "part.csv"
            df.to_csv(path, index=False)
            paths.append(path)
        log.info("Wrote partitioned view", directory=str(directory), files=len(paths))
        return paths

    def _concat(self, frames: list[pd.DataFrame]) -> pd.DataFrame:
        non_empty = [df for df in frames if not df.empty]
        if not non_empty:
            return self.template.copy()
        return pd.concat(non_empty, ignore_index=True)


def build_partitioned_view(
    frame: pd.DataFrame,
    bucket_field: str,
    ranges: Sequence[tuple[int, int]],
) -> PartitionedView:
    """
    Assign each record to the first range containing its bucket field.

    Records with a null bucket field, or outside every range, are dropped
    from the view (counted and logged, not an error).

    Args:
        frame: Product frame.
        bucket_field: Numeric column to bucket by.
        ranges: Half-open (lo, hi) ranges; earlier ranges win on overlap.

    Returns:
        PartitionedView with one frame per range.

    Raises:
        KeyError: If bucket_field is not a column.
        ValueError: If a range has lo >= hi.
    """
    if bucket_field not in frame.columns:
        msg = f"Bucket field not found: {bucket_field!r}"
        raise KeyError(msg)

    bucket_ranges = [BucketRange(int(lo), int(hi)) for lo, hi in ranges]
    values = frame[bucket_field]
    is_null = values.isna().to_numpy()

    conditions = [
        ((values >= bucket.lo) & (values < bucket.hi)).fillna(False).to_numpy(dtype=bool)
        for bucket in bucket_ranges
    ]
    # np.select picks the first true condition, so earlier ranges win
    assignment = (
        np.select(conditions, list(range(len(bucket_ranges))), default=-1)
        if conditions
        else np.full(len(frame), -1)
    )

    included = assignment >= 0
    SchemaRegistry.validate(
        pd.DataFrame({"bucket": [bucket_ranges[i].label for i in assignment[included]]}),
        "partitioned_view",
    )

    buckets = {
        bucket: frame[assignment == i].reset_index(drop=True)
        for i, bucket in enumerate(bucket_ranges)
    }
    n_null = int(is_null.sum())
    n_out_of_range = int((~included & ~is_null).sum())

    view = PartitionedView(
        bucket_field=bucket_field,
        buckets=buckets,
        n_null=n_null,
        n_out_of_range=n_out_of_range,
        template=frame.iloc[0:0].copy(),
    )
    log.info(
        "Built partitioned view",
        field=bucket_field,
        buckets=view.bucket_sizes,
        dropped_null=n_null,
        dropped_out_of_range=n_out_of_range,
    )
    return view
