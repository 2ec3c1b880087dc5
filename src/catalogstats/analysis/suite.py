"""
Catalog analysis suite.

The fixed sequence of analysis queries run after every load. Queries
are read-only, so the suite runs them on a thread pool and returns the
results in declaration order.
"""

import time
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass

from catalogstats.aggregation.classification import NumericTokenClassifier
from catalogstats.aggregation.engine import AggregationEngine
from catalogstats.aggregation.results import AggregationResult
from catalogstats.config.settings import PipelineConfig
from catalogstats.reporting.emitter import ReportKind
from catalogstats.utils.logging import get_logger

log = get_logger(__name__)

QueryFn = Callable[[AggregationEngine], list[AggregationResult]]


@dataclass(frozen=True)
class Query:
    """A named analysis query and how its results are presented."""

    name: str
    title: str
    kind: ReportKind
    run: QueryFn


@dataclass
class QueryResult:
    """Results of one query with its wall-clock duration."""

    query: Query
    results: list[AggregationResult]
    elapsed_s: float


def catalog_queries(config: PipelineConfig) -> list[Query]:
    """
    Build the standard catalog analysis queries.

    Args:
        config: Pipeline configuration (classification bands, top_n).

    Returns:
        Queries in presentation order.
    """
    top_n = config.report.top_n
    classification = config.classification
    classifier = NumericTokenClassifier.from_config(classification)

    def price_buckets(engine: AggregationEngine) -> list[AggregationResult]:
        classified = engine.with_classification(
            classifier,
            column=classification.source_column,
            output_column=classification.output_column,
        )
        return classified.group_by([classification.output_column])

    return [
        Query(
            name="total_products",
            title="Total Products",
            kind=ReportKind.SCORECARD,
            run=lambda e: e.group_by([]),
        ),
        Query(
            name="gender_split",
            title="Products by Gender",
            kind=ReportKind.DISTRIBUTION,
            run=lambda e: e.group_by(["gender"]),
        ),
        Query(
            name="master_category",
            title="Products by Master Category",
            kind=ReportKind.DISTRIBUTION,
            run=lambda e: e.group_by(["master_category"]),
        ),
        Query(
            name="sub_category",
            title="Products by Sub Category",
            kind=ReportKind.DISTRIBUTION,
            run=lambda e: e.group_by(["master_category", "sub_category"]),
        ),
        Query(
            name="season",
            title="Products by Season (known seasons)",
            kind=ReportKind.DISTRIBUTION,
            run=lambda e: e.group_by(["season"], exclude_nulls=True),
        ),
        Query(
            name="usage",
            title="Products by Usage (known usage)",
            kind=ReportKind.DISTRIBUTION,
            run=lambda e: e.group_by(["usage"], exclude_nulls=True),
        ),
        Query(
            name="top_colours",
            title=f"Top {top_n} Base Colours",
            kind=ReportKind.RANKING,
            run=lambda e: e.rank(["base_colour"], exclude_nulls=True, top_n=top_n),
        ),
        Query(
            name="top_article_types_by_gender",
            title=f"Top {top_n} Article Types per Gender",
            kind=ReportKind.RANKING,
            run=lambda e: e.rank(["article_type"], partition_by=["gender"], top_n=top_n),
        ),
        Query(
            name="products_per_year",
            title="Products per Year",
            kind=ReportKind.TIMESERIES,
            run=lambda e: e.group_by(["year"], exclude_nulls=True, order="key"),
        ),
        Query(
            name="price_buckets",
            title="Products by Price Bucket",
            kind=ReportKind.DISTRIBUTION,
            run=price_buckets,
        ),
    ]


def run_suite(
    engine: AggregationEngine,
    queries: list[Query],
    max_workers: int = 4,
) -> list[QueryResult]:
    """
    Run queries concurrently against one engine.

    Args:
        engine: Engine over an immutable frame.
        queries: Queries to run.
        max_workers: Thread pool size.

    Returns:
        One QueryResult per query, in the order of `queries`.
    """
    log.info("Running analysis suite", queries=len(queries), workers=max_workers)

    def timed(query: Query) -> QueryResult:
        start = time.perf_counter()
        results = query.run(engine)
        return QueryResult(query, results, time.perf_counter() - start)

    outcomes: dict[int, QueryResult] = {}
    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        futures = {executor.submit(timed, query): i for i, query in enumerate(queries)}
        for future in as_completed(futures):
            outcome = future.result()
            outcomes[futures[future]] = outcome
            query = outcome.query
            log.debug(
                "Query finished",
                query=query.name,
                groups=len(outcome.results),
                elapsed_s=round(outcome.elapsed_s, 4),
            )

    return [outcomes[i] for i in range(len(queries))]
