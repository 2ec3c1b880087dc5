"""
Aggregation engine: grouped counts, percentage of total, and rankings.

All queries are read-only over an immutable frame, so one engine may
serve several queries concurrently.
"""

from collections import defaultdict
from collections.abc import Sequence
from typing import TYPE_CHECKING, Literal

import pandas as pd

from catalogstats.aggregation.classification import Classifier
from catalogstats.aggregation.filters import RowFilter
from catalogstats.aggregation.results import (
    AggregationResult,
    key_sort_value,
    percentage,
    to_python,
)
from catalogstats.utils.logging import get_logger

if TYPE_CHECKING:
    from catalogstats.partitioning.planner import PartitionedView
    from catalogstats.store.product_store import ProductStore

log = get_logger(__name__)

GroupOrder = Literal["count", "key"]


class AggregationEngine:
    """
    Runs grouped queries over a product frame.

    Result ordering:
        group_by: descending count, ties broken by key ascending
            (order="key" gives ascending key order for time series).
        rank: partition ascending, then rank, then key ascending.
    Null key values sort after every non-null value.
    """

    def __init__(self, frame: pd.DataFrame) -> None:
        """
        Initialize engine.

        Args:
            frame: Product frame to query. Not modified.
        """
        self._frame = frame

    @classmethod
    def from_store(cls, store: "ProductStore") -> "AggregationEngine":
        """Query the current snapshot of a store."""
        return cls(store.frame)

    @classmethod
    def from_view(
        cls,
        view: "PartitionedView",
        lo: int | None = None,
        hi: int | None = None,
    ) -> "AggregationEngine":
        """
        Query a partitioned view, scanning only buckets overlapping [lo, hi).

        Args:
            view: Partitioned view.
            lo: Inclusive lower bound on the bucket field (None: unbounded).
            hi: Exclusive upper bound on the bucket field (None: unbounded).
        """
        return cls(view.scan(lo, hi))

    @property
    def frame(self) -> pd.DataFrame:
        """The frame queried by this engine."""
        return self._frame

    def __len__(self) -> int:
        return len(self._frame)

    def with_classification(
        self,
        classifier: Classifier,
        column: str,
        output_column: str,
    ) -> "AggregationEngine":
        """
        Return a new engine whose frame carries a derived bucket column.

        Args:
            classifier: Classifier mapping text to bucket labels.
            column: Text column to classify.
            output_column: Name of the derived column.
        """
        return AggregationEngine(classifier.apply(self._frame, column, output_column))

    def count(self, row_filter: RowFilter | None = None) -> int:
        """Number of rows passing the filter."""
        return len(self._select(row_filter))

    def group_by(
        self,
        fields: Sequence[str],
        row_filter: RowFilter | None = None,
        *,
        exclude_nulls: bool = False,
        order: GroupOrder = "count",
    ) -> list[AggregationResult]:
        """
        Count rows per distinct combination of field values.

        Percentage = 100 * group count / population, rounded to 2 decimals
        half-up. The population is every row passing the filter, minus
        rows with a null key component when exclude_nulls is set.

        Args:
            fields: Columns forming the group key. Empty gives one total group.
            row_filter: Optional row filter applied first.
            exclude_nulls: Drop rows with a null key component.
            order: "count" (descending count) or "key" (ascending key).

        Returns:
            One AggregationResult per group; empty if no rows match.

        Raises:
            KeyError: If a field is not a column of the frame.
        """
        fields = tuple(fields)
        frame = self._select(row_filter)
        self._check_fields(fields)
        if exclude_nulls and fields:
            frame = frame.dropna(subset=list(fields))

        total = len(frame)
        if total == 0:
            return []
        if not fields:
            return [AggregationResult(fields=(), key=(), count=total, percentage=100.0)]

        groups = _count_groups(frame, fields)
        if order == "key":
            groups.sort(key=lambda item: key_sort_value(item[0]))
        else:
            groups.sort(key=lambda item: (-item[1], key_sort_value(item[0])))

        results = [
            AggregationResult(
                fields=fields,
                key=key,
                count=n,
                percentage=percentage(n, total),
            )
            for key, n in groups
        ]
        log.debug("Grouped", fields=list(fields), population=total, groups=len(results))
        return results

    def rank(
        self,
        fields: Sequence[str],
        partition_by: Sequence[str] | None = None,
        row_filter: RowFilter | None = None,
        *,
        exclude_nulls: bool = False,
        top_n: int | None = None,
    ) -> list[AggregationResult]:
        """
        Rank groups by count within each partition.

        Standard competition ranking: equal counts share a rank and the
        next rank skips by the size of the tie group (1, 1, 3). The
        percentage is the group's share of its partition.

        Args:
            fields: Columns forming the ranked key.
            partition_by: Columns forming the partition key (None: one partition).
            row_filter: Optional row filter applied first.
            exclude_nulls: Drop rows with a null key or partition component.
            top_n: Keep only results with rank <= top_n.

        Returns:
            Ranked results ordered by partition, rank, key.

        Raises:
            KeyError: If a field is not a column of the frame.
            ValueError: If fields and partition_by overlap.
        """
        fields = tuple(fields)
        partition_fields = tuple(partition_by or ())
        overlap = set(fields) & set(partition_fields)
        if overlap:
            msg = f"Fields used both as key and partition: {sorted(overlap)}"
            raise ValueError(msg)
        if not fields:
            msg = "rank() needs at least one key field"
            raise ValueError(msg)

        frame = self._select(row_filter)
        all_fields = partition_fields + fields
        self._check_fields(all_fields)
        if exclude_nulls:
            frame = frame.dropna(subset=list(all_fields))
        if frame.empty:
            return []

        partitions: dict[tuple, list[tuple[tuple, int]]] = defaultdict(list)
        n_partition = len(partition_fields)
        for full_key, n in _count_groups(frame, all_fields):
            partitions[full_key[:n_partition]].append((full_key[n_partition:], n))

        results: list[AggregationResult] = []
        for partition in sorted(partitions, key=key_sort_value):
            groups = partitions[partition]
            groups.sort(key=lambda item: (-item[1], key_sort_value(item[0])))
            partition_total = sum(n for _, n in groups)

            current_rank = 0
            previous_count: int | None = None
            for position, (key, n) in enumerate(groups, start=1):
                if n != previous_count:
                    current_rank = position
                    previous_count = n
                if top_n is not None and current_rank > top_n:
                    break
                results.append(
                    AggregationResult(
                        fields=fields,
                        key=key,
                        count=n,
                        percentage=percentage(n, partition_total),
                        rank=current_rank,
                        partition_fields=partition_fields,
                        partition=partition,
                    )
                )

        log.debug(
            "Ranked",
            fields=list(fields),
            partition_by=list(partition_fields),
            partitions=len(partitions),
            results=len(results),
        )
        return results

    def _select(self, row_filter: RowFilter | None) -> pd.DataFrame:
        """Apply an optional filter."""
        if row_filter is None:
            return self._frame
        mask = row_filter(self._frame)
        return self._frame[mask.fillna(False).astype(bool)]

    def _check_fields(self, fields: Sequence[str]) -> None:
        """Raise KeyError for fields that are not columns."""
        missing = [f for f in fields if f not in self._frame.columns]
        if missing:
            msg = f"Unknown fields: {missing}. Available: {list(self._frame.columns)}"
            raise KeyError(msg)


def _count_groups(frame: pd.DataFrame, fields: Sequence[str]) -> list[tuple[tuple, int]]:
    """Count rows per key, keeping null keys as None."""
    sizes = frame.groupby(list(fields), dropna=False, sort=False).size()
    groups = []
    for key, n in sizes.items():
        values = key if isinstance(key, tuple) else (key,)
        groups.append((tuple(to_python(v) for v in values), int(n)))
    return groups
