"""
In-memory product store with atomic CSV persistence.

The store is write-once-then-read-only per load cycle: a load builds a
complete replacement frame and swaps it in with a single assignment,
so readers never observe a half-applied batch.
"""

from collections.abc import Iterable
from dataclasses import asdict
from pathlib import Path

import pandas as pd

from catalogstats.config.settings import WriteMode
from catalogstats.schemas.columns import PRODUCT_COLUMNS, ColumnType, ProductRecord
from catalogstats.schemas.registry import SchemaRegistry
from catalogstats.utils.hashing import hash_dataframe
from catalogstats.utils.logging import get_logger

log = get_logger(__name__)

# pandas dtypes per logical column type; nullable extension types keep
# "unknown" (pd.NA) distinct from any real value
_PANDAS_DTYPES: dict[ColumnType, dict[bool, str]] = {
    ColumnType.INT: {False: "int64", True: "Int64"},
    ColumnType.STR: {False: "string", True: "string"},
}

STORE_DTYPES: dict[str, str] = {
    spec.name: _PANDAS_DTYPES[spec.dtype][spec.nullable] for spec in PRODUCT_COLUMNS
}


def empty_frame() -> pd.DataFrame:
    """Return an empty frame with the product store columns and dtypes."""
    return pd.DataFrame(
        {name: pd.Series(dtype=dtype) for name, dtype in STORE_DTYPES.items()}
    )


def records_to_frame(records: Iterable[ProductRecord]) -> pd.DataFrame:
    """
    Build a typed product frame from validated records.

    Args:
        records: Validated product records.

    Returns:
        DataFrame with store dtypes, in input order.
    """
    rows = [asdict(record) for record in records]
    if not rows:
        return empty_frame()
    df = pd.DataFrame.from_records(rows, columns=list(STORE_DTYPES))
    return df.astype(STORE_DTYPES)


class ProductStore:
    """
    Immutable snapshot of the product catalog.

    Mutation happens only through commit(), which validates the new
    snapshot before swapping it in. The `frame` property hands out
    copies so callers cannot alter the snapshot.
    """

    def __init__(self, path: Path | None = None) -> None:
        """
        Initialize an empty store.

        Args:
            path: Optional CSV path the store persists to on commit.
        """
        self.path = path
        self._frame = empty_frame()

    def __len__(self) -> int:
        return len(self._frame)

    @property
    def is_empty(self) -> bool:
        """Whether the store holds no records."""
        return self._frame.empty

    @property
    def frame(self) -> pd.DataFrame:
        """A copy of the current snapshot."""
        return self._frame.copy()

    def fingerprint(self) -> str:
        """Content hash of the current snapshot."""
        return hash_dataframe(self._frame)

    def commit(self, batch: pd.DataFrame, mode: WriteMode = WriteMode.REPLACE) -> int:
        """
        Apply a validated batch to the store.

        Duplicate ids resolve as last write wins, both within the batch
        and between the existing snapshot and an appended batch.

        Args:
            batch: Typed product frame (see records_to_frame).
            mode: Replace the snapshot or append to it.

        Returns:
            Number of rows superseded by a later row with the same id.

        Raises:
            pandera.errors.SchemaError: If the resulting snapshot is invalid.
        """
        if mode is WriteMode.APPEND and not self._frame.empty:
            combined = pd.concat([self._frame, batch], ignore_index=True)
        else:
            combined = batch

        deduplicated = combined.drop_duplicates(subset="id", keep="last")
        n_replaced = len(combined) - len(deduplicated)
        if n_replaced:
            log.info("Resolved duplicate ids (last write wins)", replaced=n_replaced)

        snapshot = SchemaRegistry.validate(
            deduplicated.reset_index(drop=True), "product_record"
        )

        if self.path is not None:
            self._write(snapshot, self.path)

        self._frame = snapshot
        log.info("Committed store snapshot", mode=mode.value, rows=len(snapshot))
        return n_replaced

    def save(self, path: Path) -> Path:
        """Persist the current snapshot to a CSV file."""
        return self._write(self._frame, path)

    @staticmethod
    def _write(df: pd.DataFrame, path: Path) -> Path:
        """Write atomically: temp file in the target directory, then rename."""
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = path.with_suffix(path.suffix + ".tmp")
        df.to_csv(tmp_path, index=False)
        tmp_path.replace(path)
        log.debug("Wrote store snapshot", path=str(path), rows=len(df))
        return path

    @classmethod
    def open(cls, path: Path) -> "ProductStore":
        """
        Open a persisted store, or an empty one if the file is absent.

        Args:
            path: CSV snapshot path.

        Returns:
            ProductStore bound to `path`.
        """
        store = cls(path)
        if not path.exists():
            log.info("No store snapshot yet", path=str(path))
            return store

        df = pd.read_csv(
            path,
            dtype=STORE_DTYPES,
            keep_default_na=False,
            na_values=[""],
        )
        store._frame = SchemaRegistry.validate(df, "product_record")
        log.info("Opened store snapshot", path=str(path), rows=len(store._frame))
        return store
