"""
Data ingestion layer for loading product catalogs with row validation.

All raw data loading happens through this module to ensure
consistent validation and exact row accounting at the system boundary.
"""

from catalogstats.ingestion.loader import (
    LoadResult,
    ParseOutcome,
    ProductLoader,
    RowRejection,
    load_products,
    parse_source,
)
from catalogstats.ingestion.reader import DelimitedSource, RawRow

__all__ = [
    "DelimitedSource",
    "LoadResult",
    "ParseOutcome",
    "ProductLoader",
    "RawRow",
    "RowRejection",
    "load_products",
    "parse_source",
]
