"""
Deterministic hashing utilities.

Provides content hashes for source files so every load can be traced
back to the exact bytes it read.
"""

import hashlib
from pathlib import Path

import pandas as pd

_CHUNK_SIZE = 1 << 20


def hash_file(path: Path) -> str:
    """
    Compute the SHA-256 digest of a file's contents.

    Args:
        path: File to hash.

    Returns:
        Hex digest string.
    """
    hasher = hashlib.sha256()
    with path.open("rb") as f:
        for chunk in iter(lambda: f.read(_CHUNK_SIZE), b""):
            hasher.update(chunk)
    return hasher.hexdigest()


def hash_text(text: str) -> str:
    """Compute the SHA-256 digest of a text payload (UTF-8 encoded)."""
    return hashlib.sha256(text.encode("utf-8")).hexdigest()


def hash_dataframe(df: pd.DataFrame) -> str:
    """
    Compute a deterministic hash of a DataFrame's values and columns.

    Row order matters; index values do not.

    Args:
        df: DataFrame to hash.

    Returns:
        Hex digest string.
    """
    hasher = hashlib.sha256()
    hasher.update(",".join(map(str, df.columns)).encode("utf-8"))
    row_hashes = pd.util.hash_pandas_object(df, index=False)
    hasher.update(row_hashes.to_numpy().tobytes())
    return hasher.hexdigest()
