"""
Schema definitions for product catalog data.

All data contracts are defined here: the ordered row contract used
during ingestion and the Pandera models used for frame validation.
"""

from catalogstats.schemas.columns import (
    PRODUCT_COLUMN_NAMES,
    PRODUCT_COLUMNS,
    ColumnSpec,
    ColumnType,
    ProductRecord,
    normalize_header,
    validate_row,
)
from catalogstats.schemas.output import AggregationResultSchema, PartitionedViewSchema
from catalogstats.schemas.product import ProductRecordSchema
from catalogstats.schemas.registry import DataRole, SchemaRegistry

__all__ = [
    "PRODUCT_COLUMNS",
    "PRODUCT_COLUMN_NAMES",
    "AggregationResultSchema",
    "ColumnSpec",
    "ColumnType",
    "DataRole",
    "PartitionedViewSchema",
    "ProductRecord",
    "ProductRecordSchema",
    "SchemaRegistry",
    "normalize_header",
    "validate_row",
]
