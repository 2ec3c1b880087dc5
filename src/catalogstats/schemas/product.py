"""
Pandera schema for the product store.

The store holds one row per product id; optional columns carry
explicit nulls (pd.NA), never empty strings.
"""

import pandas as pd
import pandera.pandas as pa
from pandera.typing import Series


class ProductRecordSchema(pa.DataFrameModel):
    """
    Schema for the loaded product catalog.

    Mirrors PRODUCT_COLUMNS in schemas.columns with frame-level checks
    (uniqueness, non-blank strings) that a single row cannot express.
    """

    id: Series[int] = pa.Field(unique=True, description="Unique product identifier")
    gender: Series[pd.StringDtype] = pa.Field(
        str_length={"min_value": 1}, description="Target gender"
    )
    master_category: Series[pd.StringDtype] = pa.Field(
        str_length={"min_value": 1}, description="Top-level category"
    )
    sub_category: Series[pd.StringDtype] = pa.Field(
        str_length={"min_value": 1}, description="Second-level category"
    )
    article_type: Series[pd.StringDtype] = pa.Field(
        str_length={"min_value": 1}, description="Article type"
    )
    base_colour: Series[pd.StringDtype] = pa.Field(
        nullable=True, str_length={"min_value": 1}, description="Dominant colour"
    )
    season: Series[pd.StringDtype] = pa.Field(
        nullable=True, str_length={"min_value": 1}, description="Season"
    )
    year: Series[pd.Int64Dtype] = pa.Field(nullable=True, description="Catalog year")
    usage: Series[pd.StringDtype] = pa.Field(
        nullable=True, str_length={"min_value": 1}, description="Usage occasion"
    )
    display_name: Series[pd.StringDtype] = pa.Field(
        str_length={"min_value": 1}, description="Free-text display name"
    )

    class Config:
        """Schema configuration."""

        name = "ProductRecordSchema"
        strict = False  # Allow derived columns such as price_bucket
        coerce = True
