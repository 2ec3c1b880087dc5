"""
Row filters for aggregation queries.

A filter is any callable mapping the product frame to a boolean mask.
"""

from collections.abc import Callable

import pandas as pd

RowFilter = Callable[[pd.DataFrame], pd.Series]


def where(**equals: object) -> RowFilter:
    """Keep rows whose columns equal the given values (None matches null)."""

    def _filter(df: pd.DataFrame) -> pd.Series:
        mask = pd.Series(True, index=df.index)
        for column, value in equals.items():
            if value is None:
                mask &= df[column].isna()
            else:
                mask &= (df[column] == value).fillna(False).astype(bool)
        return mask

    return _filter


def is_not_null(*columns: str) -> RowFilter:
    """Keep rows where every given column is non-null."""

    def _filter(df: pd.DataFrame) -> pd.Series:
        return df[list(columns)].notna().all(axis=1)

    return _filter


def year_between(lo: int, hi: int, column: str = "year") -> RowFilter:
    """Keep rows with lo <= year < hi (null years never match)."""

    def _filter(df: pd.DataFrame) -> pd.Series:
        values = df[column]
        return ((values >= lo) & (values < hi)).fillna(False).astype(bool)

    return _filter


def all_of(*filters: RowFilter) -> RowFilter:
    """Combine filters with logical AND."""

    def _filter(df: pd.DataFrame) -> pd.Series:
        mask = pd.Series(True, index=df.index)
        for row_filter in filters:
            mask &= row_filter(df)
        return mask

    return _filter
