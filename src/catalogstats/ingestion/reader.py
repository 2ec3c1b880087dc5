"""
Delimited source reading.

Tokenizes a delimited text source row by row so that every physical
record can be accounted for individually (accepted or skipped).
"""

import csv
import io
import re
from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path
from typing import TextIO

from catalogstats.utils.hashing import hash_file, hash_text

Source = Path | str | TextIO

# Lone surrogates left by errors="surrogateescape"
ESCAPED_BYTE = re.compile("[\udc80-\udcff]")


@dataclass(frozen=True)
class RawRow:
    """One tokenized data row (header excluded)."""

    row_number: int  # 1-based, counts data rows only
    line_number: int  # Physical line where the record ends
    fields: list[str]

    @property
    def has_undecodable_bytes(self) -> bool:
        """True if any field holds bytes escaped during decoding."""
        return any(ESCAPED_BYTE.search(value) for value in self.fields)


def _is_blank(fields: list[str]) -> bool:
    return not fields or (len(fields) == 1 and not fields[0].strip())


@dataclass
class DelimitedSource:
    """
    A delimited text source with a mandatory header row.

    Attributes:
        text: Full decoded text of the source.
        name: Display name (file path or '<stream>').
        content_hash: SHA-256 of the source content.
    """

    text: str
    name: str
    content_hash: str

    @classmethod
    def open(cls, source: Source, encoding: str = "utf-8") -> "DelimitedSource":
        """
        Read a source into memory.

        Args:
            source: File path or open text stream.
            encoding: Text encoding for file paths.

        Returns:
            DelimitedSource with decoded text.

        Raises:
            FileNotFoundError: If a path does not exist.
        """
        if isinstance(source, (str, Path)):
            path = Path(source)
            if not path.exists():
                msg = f"Source file not found: {path}"
                raise FileNotFoundError(msg)
            # Undecodable bytes survive as lone surrogates and reject only their row
            text = path.read_text(encoding=encoding, errors="surrogateescape")
            return cls(text=text, name=str(path), content_hash=hash_file(path))

        text = source.read()
        return cls(text=text, name="<stream>", content_hash=hash_text(text))

    def iter_rows(
        self,
        delimiter: str = ",",
        quotechar: str = '"',
    ) -> tuple[list[str], Iterator[RawRow]]:
        """
        Split the source into a header and a stream of data rows.

        Blank lines are not rows and are not yielded. Leading blank lines
        before the header are skipped as well.

        Args:
            delimiter: Field delimiter.
            quotechar: Quote character for fields containing the delimiter.

        Returns:
            Tuple of (header fields, iterator over data rows). The header
            is empty when the source is empty.
        """
        reader = csv.reader(
            io.StringIO(self.text, newline=""),
            delimiter=delimiter,
            quotechar=quotechar,
        )
        header: list[str] = next((fields for fields in reader if not _is_blank(fields)), [])

        def rows() -> Iterator[RawRow]:
            row_number = 0
            for fields in reader:
                if _is_blank(fields):
                    continue
                row_number += 1
                yield RawRow(
                    row_number=row_number,
                    line_number=reader.line_num,
                    fields=fields,
                )

        return header, rows()
