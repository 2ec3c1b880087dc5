"""
Classification of free-text columns into buckets.

Applied before grouping to derive a categorical column from text.
Classification never fails: text that matches no rule lands in the
unknown bucket.
"""

import re
from abc import ABC, abstractmethod

import pandas as pd

from catalogstats.config.settings import ClassificationConfig
from catalogstats.utils.logging import get_logger

log = get_logger(__name__)

UNKNOWN = "Unknown"

NUMERIC_TOKEN = re.compile(r"\d+(?:\.\d+)?")


def extract_numeric_token(text: str | None) -> float | None:
    """
    Extract the first numeric token from text.

    Args:
        text: Free text, e.g. 'Shirt 450'.

    Returns:
        The first number found, or None if there is none.
    """
    if text is None or pd.isna(text):
        return None
    match = NUMERIC_TOKEN.search(str(text))
    if match is None:
        return None
    return float(match.group())


class Classifier(ABC):
    """Maps one text value to a bucket label."""

    unknown_label: str = UNKNOWN

    @abstractmethod
    def classify(self, value: str | None) -> str:
        """Return the bucket label for a value."""
        ...

    @property
    @abstractmethod
    def labels(self) -> list[str]:
        """All labels this classifier can emit, unknown last."""
        ...

    def apply(
        self,
        df: pd.DataFrame,
        column: str,
        output_column: str,
    ) -> pd.DataFrame:
        """
        Add a bucket column derived from a text column.

        Args:
            df: Product frame.
            column: Name of input column.
            output_column: Name for output column.

        Returns:
            Copy of df with the output column added.

        Raises:
            KeyError: If the input column does not exist.
        """
        if column not in df.columns:
            msg = f"Classification column not found: {column!r}"
            raise KeyError(msg)

        df = df.copy()
        df[output_column] = df[column].astype(object).map(self.classify).astype("string")

        log.debug(
            "Applied classification",
            classifier=type(self).__name__,
            column=column,
            buckets=df[output_column].value_counts().to_dict(),
        )
        return df


class NumericTokenClassifier(Classifier):
    """
    Buckets text by its first numeric token and ascending thresholds.

    A value strictly below a band's threshold gets that band's label;
    values at or above every threshold get the top label.
    """

    def __init__(
        self,
        bands: list[tuple[float, str]],
        top_label: str,
        unknown_label: str = UNKNOWN,
    ) -> None:
        """
        Initialize classifier.

        Args:
            bands: (threshold, label) pairs with increasing thresholds.
            top_label: Label for values at or above the last threshold.
            unknown_label: Label for text without a numeric token.
        """
        thresholds = [threshold for threshold, _ in bands]
        if thresholds != sorted(thresholds):
            msg = f"Band thresholds must be increasing, got: {thresholds}"
            raise ValueError(msg)
        self.bands = list(bands)
        self.top_label = top_label
        self.unknown_label = unknown_label

    @classmethod
    def from_config(cls, config: ClassificationConfig) -> "NumericTokenClassifier":
        """Build a classifier from the classification config section."""
        return cls(
            bands=[(band.below, band.label) for band in config.bands],
            top_label=config.top_label,
            unknown_label=config.unknown_label,
        )

    def classify(self, value: str | None) -> str:
        number = extract_numeric_token(value)
        if number is None:
            return self.unknown_label
        for threshold, label in self.bands:
            if number < threshold:
                return label
        return self.top_label

    @property
    def labels(self) -> list[str]:
        return [label for _, label in self.bands] + [self.top_label, self.unknown_label]


class PatternClassifier(Classifier):
    """Buckets text by the first matching regex (pattern -> category)."""

    def __init__(
        self,
        mapping: dict[str, str],
        unknown_label: str = UNKNOWN,
        *,
        ignore_case: bool = True,
    ) -> None:
        flags = re.IGNORECASE if ignore_case else 0
        self.rules = [
            (re.compile(pattern, flags), label) for pattern, label in mapping.items()
        ]
        self.unknown_label = unknown_label

    def classify(self, value: str | None) -> str:
        if value is None or pd.isna(value):
            return self.unknown_label
        text = str(value)
        for pattern, label in self.rules:
            if pattern.search(text):
                return label
        return self.unknown_label

    @property
    def labels(self) -> list[str]:
        seen = dict.fromkeys(label for _, label in self.rules)
        return [*seen, self.unknown_label]
