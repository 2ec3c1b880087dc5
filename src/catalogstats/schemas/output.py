"""
Pandera schemas for pipeline outputs.

Defines contracts for aggregation results in tabular form.
"""

from typing import Optional

import pandas as pd
import pandera.pandas as pa
from pandera.typing import Series


class AggregationResultSchema(pa.DataFrameModel):
    """
    Schema for aggregation results exported as a table.

    Group key columns vary per query and are not declared here.
    """

    count: Series[int] = pa.Field(ge=0, description="Rows in the group")
    percentage: Series[float] = pa.Field(
        ge=0.0, le=100.0, description="Share of the population in percent"
    )
    # Present for ranking queries only
    rank: Optional[Series[pd.Int64Dtype]] = pa.Field(
        nullable=True, ge=1, description="Competition rank within the partition"
    )

    class Config:
        """Schema configuration."""

        name = "AggregationResultSchema"
        strict = False
        coerce = True


class PartitionedViewSchema(pa.DataFrameModel):
    """
    Schema for the bucket assignment column of a partitioned view.

    Every included record carries the label of exactly one bucket.
    """

    bucket: Series[str] = pa.Field(description="Bucket label, e.g. '2010_2015'")

    class Config:
        """Schema configuration."""

        name = "PartitionedViewSchema"
        strict = False
        coerce = True
