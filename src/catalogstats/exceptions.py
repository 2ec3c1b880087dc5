"""
Exception types raised by the pipeline.

Row-level schema errors are recovered by the loader; a LoadAborted
error is the only ingestion failure surfaced to callers.
"""

from enum import Enum


class SchemaErrorKind(str, Enum):
    """Classification of row-level schema violations."""

    MISSING_COLUMN = "missing_column"
    TYPE_MISMATCH = "type_mismatch"
    NULL_IN_NON_NULLABLE_COLUMN = "null_in_non_nullable_column"
    FIELD_COUNT = "field_count"  # Structural: row width differs from header
    ENCODING = "encoding"  # Structural: bytes not valid in the source encoding


class SchemaError(ValueError):
    """A single row violates the product column contract."""

    kind: SchemaErrorKind

    def __init__(self, column: str | None, message: str) -> None:
        super().__init__(message)
        self.column = column


class MissingColumnError(SchemaError):
    """A required column is absent from the row."""

    kind = SchemaErrorKind.MISSING_COLUMN


class TypeMismatchError(SchemaError):
    """A value cannot be coerced to the column type."""

    kind = SchemaErrorKind.TYPE_MISMATCH


class NullInNonNullableColumnError(SchemaError):
    """A non-nullable column holds a blank or missing value."""

    kind = SchemaErrorKind.NULL_IN_NON_NULLABLE_COLUMN


class FieldCountError(SchemaError):
    """The row has a different number of fields than the header."""

    kind = SchemaErrorKind.FIELD_COUNT


class EncodingError(SchemaError):
    """The row holds bytes that do not decode in the source encoding."""

    kind = SchemaErrorKind.ENCODING


class LoadAborted(RuntimeError):
    """
    Raised when a load skips more rows than the configured maximum.

    The store is left untouched. Counts reflect the rows read up to
    and including the row that crossed the limit.
    """

    def __init__(
        self,
        records_loaded: int,
        records_skipped: int,
        max_bad_records: int,
    ) -> None:
        self.records_loaded = records_loaded
        self.records_skipped = records_skipped
        self.max_bad_records = max_bad_records
        super().__init__(
            f"Load aborted: {records_skipped} rows skipped, "
            f"limit is {max_bad_records} ({records_loaded} rows accepted before abort)"
        )
