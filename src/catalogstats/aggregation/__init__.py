"""
Aggregation engine for grouped counts, shares and rankings.
"""

from catalogstats.aggregation.classification import (
    UNKNOWN,
    Classifier,
    NumericTokenClassifier,
    PatternClassifier,
    extract_numeric_token,
)
from catalogstats.aggregation.engine import AggregationEngine
from catalogstats.aggregation.filters import (
    RowFilter,
    all_of,
    is_not_null,
    where,
    year_between,
)
from catalogstats.aggregation.results import (
    AggregationResult,
    percentage,
    results_to_frame,
)

__all__ = [
    "UNKNOWN",
    "AggregationEngine",
    "AggregationResult",
    "Classifier",
    "NumericTokenClassifier",
    "PatternClassifier",
    "RowFilter",
    "all_of",
    "extract_numeric_token",
    "is_not_null",
    "percentage",
    "results_to_frame",
    "where",
    "year_between",
]
