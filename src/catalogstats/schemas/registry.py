"""
Schema registry for versioning and discovery.

Provides centralized access to the row contract and all frame-level
schema definitions with version tracking.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, ClassVar

import pandera.pandas as pa

from catalogstats.schemas.columns import (
    PRODUCT_COLUMNS,
    ColumnSpec,
    ProductRecord,
    validate_row,
)
from catalogstats.schemas.output import AggregationResultSchema, PartitionedViewSchema
from catalogstats.schemas.product import ProductRecordSchema

if TYPE_CHECKING:
    import pandas as pd


class DataRole(Enum):
    """Classification of data products by their role in the pipeline."""

    STORE = "store"  # Loaded, immutable snapshot
    DERIVED = "derived"  # Reorganized copies of the store
    OUTPUT = "output"  # Aggregation outputs


@dataclass(frozen=True)
class SchemaInfo:
    """Metadata about a registered schema."""

    name: str
    schema: type[pa.DataFrameModel]
    version: str
    role: DataRole
    description: str


class SchemaRegistry:
    """
    Centralized registry for all data schemas.

    Holds the ordered product column contract used for row validation
    and the Pandera models used for frame validation.
    """

    _version = "1.0.0"

    _columns: ClassVar[tuple[ColumnSpec, ...]] = PRODUCT_COLUMNS

    _schemas: ClassVar[dict[str, SchemaInfo]] = {
        "product_record": SchemaInfo(
            name="product_record",
            schema=ProductRecordSchema,
            version="1.0.0",
            role=DataRole.STORE,
            description="Loaded product catalog, one row per product id",
        ),
        "partitioned_view": SchemaInfo(
            name="partitioned_view",
            schema=PartitionedViewSchema,
            version="1.0.0",
            role=DataRole.DERIVED,
            description="Product records bucketed by year range",
        ),
        "aggregation_result": SchemaInfo(
            name="aggregation_result",
            schema=AggregationResultSchema,
            version="1.0.0",
            role=DataRole.OUTPUT,
            description="Grouped counts, percentages and ranks",
        ),
    }

    @classmethod
    def registry_version(cls) -> str:
        """Get the registry version."""
        return cls._version

    @classmethod
    def columns(cls) -> tuple[ColumnSpec, ...]:
        """Ordered (name, type, nullable) specs of the product record."""
        return cls._columns

    @classmethod
    def column_names(cls) -> list[str]:
        """Canonical product column names in contract order."""
        return [spec.name for spec in cls._columns]

    @classmethod
    def validate_row(cls, row: Mapping[str, str | None]) -> ProductRecord:
        """
        Validate a single raw row against the product column contract.

        Args:
            row: Mapping of canonical column name to raw text value.

        Returns:
            Validated ProductRecord.

        Raises:
            catalogstats.exceptions.SchemaError: If the row violates the contract.
        """
        return validate_row(row)

    @classmethod
    def get(cls, name: str) -> type[pa.DataFrameModel]:
        """
        Get a schema by name.

        Args:
            name: Schema identifier.

        Returns:
            The Pandera DataFrameModel class.

        Raises:
            KeyError: If schema not found.
        """
        return cls.get_info(name).schema

    @classmethod
    def get_info(cls, name: str) -> SchemaInfo:
        """
        Get full schema info by name.

        Args:
            name: Schema identifier.

        Returns:
            SchemaInfo with metadata.
        """
        if name not in cls._schemas:
            available = ", ".join(cls._schemas.keys())
            msg = f"Unknown schema '{name}'. Available: {available}"
            raise KeyError(msg)
        return cls._schemas[name]

    @classmethod
    def list_schemas(cls) -> list[str]:
        """List all registered schema names."""
        return list(cls._schemas.keys())

    @classmethod
    def list_by_role(cls, role: DataRole) -> list[str]:
        """List schemas filtered by their data role."""
        return [name for name, info in cls._schemas.items() if info.role == role]

    @classmethod
    def validate(cls, df: "pd.DataFrame", schema_name: str) -> "pd.DataFrame":
        """
        Validate a DataFrame against a registered schema.

        Args:
            df: DataFrame to validate.
            schema_name: Name of schema to validate against.

        Returns:
            Validated DataFrame.

        Raises:
            pandera.errors.SchemaError: If validation fails.
        """
        schema = cls.get(schema_name)
        return schema.validate(df)
