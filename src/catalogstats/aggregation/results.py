"""
Aggregation result types and rounding rules.
"""

from collections.abc import Hashable
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

import pandas as pd

from catalogstats.schemas.registry import SchemaRegistry

NULL_LABEL = "(null)"

_CENT = Decimal("0.01")


def percentage(count: int, total: int) -> float:
    """
    Percentage of count in total, rounded to 2 decimals half-up.

    Args:
        count: Group size.
        total: Population size.

    Returns:
        100 * count / total, or 0.0 for an empty population.
    """
    if total == 0:
        return 0.0
    value = Decimal(count) * 100 / Decimal(total)
    return float(value.quantize(_CENT, rounding=ROUND_HALF_UP))


def to_python(value: Hashable) -> Hashable:
    """Convert a pandas/numpy scalar to a plain Python value (NA -> None)."""
    if value is None or value is pd.NA:
        return None
    try:
        if pd.isna(value):
            return None
    except (TypeError, ValueError):
        pass
    if hasattr(value, "item"):
        return value.item()
    return value


def key_sort_value(key: tuple) -> tuple:
    """Sort key for group keys: ascending, None after every value."""
    return tuple((v is None, v) for v in key)


@dataclass(frozen=True)
class AggregationResult:
    """
    One group of a grouped query.

    Attributes:
        fields: Names of the key components.
        key: Group values, None for null.
        count: Rows in the group.
        percentage: Share of the population in percent (2 decimals).
        rank: Competition rank within the partition (ranking queries only).
        partition_fields: Names of the partition components.
        partition: Partition values (ranking queries only).
    """

    fields: tuple[str, ...]
    key: tuple
    count: int
    percentage: float
    rank: int | None = None
    partition_fields: tuple[str, ...] = ()
    partition: tuple = ()

    @property
    def label(self) -> str:
        """Human-readable group label, e.g. 'Men / Tshirts'."""
        return " / ".join(NULL_LABEL if v is None else str(v) for v in self.key)

    @property
    def partition_label(self) -> str:
        """Human-readable partition label ('' when unpartitioned)."""
        return " / ".join(NULL_LABEL if v is None else str(v) for v in self.partition)

    def as_dict(self) -> dict[str, object]:
        """Flat mapping of partition values, key values and measures."""
        row: dict[str, object] = dict(zip(self.partition_fields, self.partition))
        row.update(zip(self.fields, self.key))
        row["count"] = self.count
        row["percentage"] = self.percentage
        if self.rank is not None:
            row["rank"] = self.rank
        return row


def results_to_frame(results: list[AggregationResult]) -> pd.DataFrame:
    """
    Tabulate results, one row per group, preserving order.

    Args:
        results: Aggregation results.

    Returns:
        DataFrame with partition columns, key columns, count, percentage
        and (for rankings) rank.
    """
    if not results:
        return pd.DataFrame(columns=["count", "percentage"])
    df = pd.DataFrame([r.as_dict() for r in results])
    return SchemaRegistry.validate(df, "aggregation_result")
