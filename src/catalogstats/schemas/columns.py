"""
Column contract for product catalog rows.

Defines the ordered column specs and the pure row validator used by
the loader. Column naming conventions:

Source header (catalog export format):
    id                  - Unique product identifier
    gender              - Target gender (Men, Women, Boys, Girls, Unisex)
    masterCategory      - Top-level category (Apparel, Footwear, ...)
    subCategory         - Second-level category (Topwear, Shoes, ...)
    articleType         - Article type (Tshirts, Casual Shoes, ...)
    baseColour          - Dominant colour
    season              - Season (Fall, Summer, Winter, Spring)
    year                - Catalog year
    usage               - Usage occasion (Casual, Sports, Formal, ...)
    productDisplayName  - Free-text display name

Canonical (internal snake_case names) are listed in PRODUCT_COLUMNS.
"""

import math
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum

from catalogstats.exceptions import (
    MissingColumnError,
    NullInNonNullableColumnError,
    TypeMismatchError,
)


class ColumnType(str, Enum):
    """Logical column types supported by the row validator."""

    INT = "int"
    STR = "str"


@dataclass(frozen=True)
class ColumnSpec:
    """Name, type and nullability of one product column."""

    name: str
    dtype: ColumnType
    nullable: bool
    source_name: str


PRODUCT_COLUMNS: tuple[ColumnSpec, ...] = (
    ColumnSpec("id", ColumnType.INT, False, "id"),
    ColumnSpec("gender", ColumnType.STR, False, "gender"),
    ColumnSpec("master_category", ColumnType.STR, False, "masterCategory"),
    ColumnSpec("sub_category", ColumnType.STR, False, "subCategory"),
    ColumnSpec("article_type", ColumnType.STR, False, "articleType"),
    ColumnSpec("base_colour", ColumnType.STR, True, "baseColour"),
    ColumnSpec("season", ColumnType.STR, True, "season"),
    ColumnSpec("year", ColumnType.INT, True, "year"),
    ColumnSpec("usage", ColumnType.STR, True, "usage"),
    ColumnSpec("display_name", ColumnType.STR, False, "productDisplayName"),
)

PRODUCT_COLUMN_NAMES: tuple[str, ...] = tuple(spec.name for spec in PRODUCT_COLUMNS)

# Integer columns are stored as int64
INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1

# Source header -> canonical name
HEADER_MAPPING: dict[str, str] = {
    spec.source_name: spec.name for spec in PRODUCT_COLUMNS
} | {
    "baseColor": "base_colour",
    "base_color": "base_colour",
    "displayName": "display_name",
}


@dataclass(frozen=True)
class ProductRecord:
    """One validated catalog row. Optional fields are None, never ''."""

    id: int
    gender: str
    master_category: str
    sub_category: str
    article_type: str
    base_colour: str | None
    season: str | None
    year: int | None
    usage: str | None
    display_name: str


def normalize_header(header: list[str]) -> list[str]:
    """
    Map source header names to canonical column names.

    Unknown names are kept (stripped) so extra columns can be ignored
    by the validator.

    Args:
        header: Raw header fields.

    Returns:
        Canonical header fields, same length and order.
    """
    normalized = []
    for name in header:
        stripped = name.strip().lstrip("\ufeff")
        normalized.append(HEADER_MAPPING.get(stripped, stripped))
    return normalized


def _parse_int(column: str, value: str) -> int:
    """Parse integer text, accepting integral floats such as '2012.0'."""
    try:
        number = int(value)
    except ValueError:
        number = _parse_integral_float(column, value)
    if not INT64_MIN <= number <= INT64_MAX:
        msg = f"Column '{column}' value {value!r} is out of the int64 range"
        raise TypeMismatchError(column, msg)
    return number


def _parse_integral_float(column: str, value: str) -> int:
    try:
        as_float = float(value)
    except ValueError:
        msg = f"Column '{column}' expects an integer, got {value!r}"
        raise TypeMismatchError(column, msg) from None
    if not math.isfinite(as_float) or not as_float.is_integer():
        msg = f"Column '{column}' expects an integer, got {value!r}"
        raise TypeMismatchError(column, msg)
    return int(as_float)


def validate_row(row: Mapping[str, str | None]) -> ProductRecord:
    """
    Validate one row against the column contract.

    Pure function: no logging, no side effects.

    Args:
        row: Mapping of canonical column name to raw text value.

    Returns:
        ProductRecord with coerced values and explicit nulls.

    Raises:
        MissingColumnError: A column is absent from the row.
        NullInNonNullableColumnError: A required value is blank.
        TypeMismatchError: A value cannot be coerced to its column type.
    """
    values: dict[str, int | str | None] = {}

    for spec in PRODUCT_COLUMNS:
        if spec.name not in row:
            msg = f"Missing column '{spec.name}'"
            raise MissingColumnError(spec.name, msg)

        raw = row[spec.name]
        text = raw.strip() if raw is not None else ""

        if text == "":
            if not spec.nullable:
                msg = f"Column '{spec.name}' must not be null"
                raise NullInNonNullableColumnError(spec.name, msg)
            values[spec.name] = None
            continue

        if spec.dtype is ColumnType.INT:
            values[spec.name] = _parse_int(spec.name, text)
        else:
            values[spec.name] = text

    return ProductRecord(**values)
