"""
Product catalog ingestion.

Parses a delimited source against the product column contract, skips
malformed rows up to a configured limit, and commits the accepted rows
to the product store as a single batch.
"""

from collections import Counter
from dataclasses import dataclass, field

from catalogstats.config.settings import IngestionConfig, PipelineConfig, WriteMode
from catalogstats.exceptions import (
    EncodingError,
    FieldCountError,
    LoadAborted,
    SchemaError,
    SchemaErrorKind,
)
from catalogstats.ingestion.reader import DelimitedSource, Source
from catalogstats.schemas.columns import ProductRecord, normalize_header
from catalogstats.schemas.registry import SchemaRegistry
from catalogstats.store.product_store import ProductStore, records_to_frame
from catalogstats.utils.logging import get_logger, log_context

log = get_logger(__name__)


@dataclass(frozen=True)
class RowRejection:
    """A skipped row and the reason it was skipped."""

    row_number: int
    line_number: int
    kind: SchemaErrorKind
    column: str | None
    message: str


@dataclass
class ParseOutcome:
    """
    Result of parsing a source without touching the store.

    Attributes:
        source_name: Display name of the source.
        source_hash: SHA-256 of the source content.
        header: Canonical header fields.
        records: Accepted records in source order.
        rejections: Skipped rows in source order.
    """

    source_name: str
    source_hash: str
    header: list[str]
    records: list[ProductRecord] = field(default_factory=list)
    rejections: list[RowRejection] = field(default_factory=list)

    @property
    def total_rows(self) -> int:
        """Data rows read (header and blank lines excluded)."""
        return len(self.records) + len(self.rejections)


@dataclass
class LoadResult:
    """
    Audit record of a completed load.

    Attributes:
        source_name: Display name of the source.
        source_hash: SHA-256 of the source content.
        mode: How the batch was applied to the store.
        total_rows: Data rows read (header excluded).
        records_loaded: Rows accepted from the source.
        records_skipped: Rows rejected and skipped.
        duplicates_replaced: Accepted rows superseded by a later row with
            the same id.
        store_rows: Rows in the store after the commit.
        rejections: Details of every skipped row.
    """

    source_name: str
    source_hash: str
    mode: WriteMode
    total_rows: int
    records_loaded: int
    records_skipped: int
    duplicates_replaced: int
    store_rows: int
    rejections: list[RowRejection] = field(default_factory=list)

    @property
    def counts(self) -> tuple[int, int]:
        """(records_loaded, records_skipped)."""
        return self.records_loaded, self.records_skipped

    @property
    def rejections_by_kind(self) -> dict[SchemaErrorKind, int]:
        """Number of skipped rows per error kind."""
        return dict(Counter(r.kind for r in self.rejections))


def parse_source(
    source: Source,
    config: IngestionConfig,
    *,
    max_bad_records: int | None = None,
) -> ParseOutcome:
    """
    Parse and validate every row of a delimited source.

    Args:
        source: File path or open text stream.
        config: Delimiter, quoting and encoding settings.
        max_bad_records: Abort once more rows than this are skipped.
            None disables the limit (dry-run validation).

    Returns:
        ParseOutcome with accepted records and rejections.

    Raises:
        FileNotFoundError: If a source path does not exist.
        LoadAborted: If the skip limit is exceeded.
    """
    delimited = DelimitedSource.open(source, encoding=config.encoding)
    raw_header, rows = delimited.iter_rows(
        delimiter=config.delimiter,
        quotechar=config.quotechar,
    )
    header = normalize_header(raw_header)
    outcome = ParseOutcome(
        source_name=delimited.name,
        source_hash=delimited.content_hash,
        header=header,
    )

    if not header:
        log.warning("Source is empty", source=delimited.name)
        return outcome

    for raw in rows:
        try:
            if raw.has_undecodable_bytes:
                msg = f"Row is not valid {config.encoding} text"
                raise EncodingError(None, msg)
            if len(raw.fields) != len(header):
                msg = f"Expected {len(header)} fields, got {len(raw.fields)}"
                raise FieldCountError(None, msg)
            record = SchemaRegistry.validate_row(dict(zip(header, raw.fields)))
        except SchemaError as e:
            outcome.rejections.append(
                RowRejection(
                    row_number=raw.row_number,
                    line_number=raw.line_number,
                    kind=e.kind,
                    column=e.column,
                    message=str(e),
                )
            )
            log.debug(
                "Skipped row",
                row=raw.row_number,
                line=raw.line_number,
                kind=e.kind.value,
                reason=str(e),
            )
            if max_bad_records is not None and len(outcome.rejections) > max_bad_records:
                raise LoadAborted(
                    records_loaded=len(outcome.records),
                    records_skipped=len(outcome.rejections),
                    max_bad_records=max_bad_records,
                ) from e
            continue

        outcome.records.append(record)

    return outcome


class ProductLoader:
    """
    Loads delimited product catalogs into a ProductStore.

    Loads are all-or-nothing: the store is only touched after the whole
    source has been parsed within the skip limit.
    """

    def __init__(self, config: IngestionConfig, store: ProductStore) -> None:
        """
        Initialize product loader.

        Args:
            config: Ingestion configuration.
            store: Store that receives committed batches.
        """
        self.config = config
        self.store = store

    def load(self, source: Source) -> LoadResult:
        """
        Load a delimited source into the store.

        Args:
            source: File path or open text stream with a header row.

        Returns:
            LoadResult with exact loaded/skipped counts.

        Raises:
            FileNotFoundError: If a source path does not exist.
            LoadAborted: If more than max_bad_records rows are skipped.
        """
        source_label = str(source) if not hasattr(source, "read") else "<stream>"
        with log_context(source=source_label):
            log.info(
                "Loading product catalog",
                mode=self.config.write_mode.value,
                max_bad_records=self.config.max_bad_records,
            )

            try:
                outcome = parse_source(
                    source,
                    self.config,
                    max_bad_records=self.config.max_bad_records,
                )
            except LoadAborted as e:
                log.error(
                    "Load aborted, store unchanged",
                    loaded=e.records_loaded,
                    skipped=e.records_skipped,
                    limit=e.max_bad_records,
                )
                raise

            batch = records_to_frame(outcome.records)
            n_replaced = self.store.commit(batch, mode=self.config.write_mode)

            result = LoadResult(
                source_name=outcome.source_name,
                source_hash=outcome.source_hash,
                mode=self.config.write_mode,
                total_rows=outcome.total_rows,
                records_loaded=len(outcome.records),
                records_skipped=len(outcome.rejections),
                duplicates_replaced=n_replaced,
                store_rows=len(self.store),
                rejections=outcome.rejections,
            )

            log.info(
                "Load complete",
                total=result.total_rows,
                loaded=result.records_loaded,
                skipped=result.records_skipped,
                duplicates_replaced=result.duplicates_replaced,
                store_rows=result.store_rows,
            )
            return result


def load_products(
    config: PipelineConfig,
    store: ProductStore | None = None,
    source: Source | None = None,
) -> LoadResult:
    """
    Convenience function to load the configured catalog source.

    Args:
        config: Pipeline configuration.
        store: Target store. Opens the configured store path if not given.
        source: Override for the configured source path.

    Returns:
        LoadResult of the load.
    """
    if store is None:
        store = ProductStore.open(config.store_path)
    loader = ProductLoader(config.ingestion, store)
    return loader.load(source if source is not None else config.source_path)
