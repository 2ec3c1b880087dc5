"""Command-line interface for the catalogstats pipeline."""

from pathlib import Path
from typing import TYPE_CHECKING, Annotated

import typer
from rich.console import Console
from rich.table import Table

if TYPE_CHECKING:
    import pandas as pd

    from catalogstats.config.settings import PipelineConfig

app = typer.Typer(
    name="catalogstats",
    help="Product catalog ingestion and categorical reporting.",
    no_args_is_help=True,
)

console = Console()
err_console = Console(stderr=True)

ConfigOption = Annotated[
    Path,
    typer.Option(
        "--config",
        "-c",
        help="Path to configuration YAML file.",
        exists=True,
        dir_okay=False,
    ),
]


def _load_pipeline_config(config: Path) -> "PipelineConfig":
    """Load config and configure logging from it."""
    from catalogstats.config.loader import load_config
    from catalogstats.utils.logging import configure_logging

    try:
        pipeline_config = load_config(config)
    except ValueError as e:
        err_console.print(f"[red]Error: Invalid configuration: {e}[/red]")
        raise typer.Exit(code=1) from e

    configure_logging(
        level=pipeline_config.logging.level,
        json_output=pipeline_config.logging.json_output,
    )
    return pipeline_config


def _scoped_frame(
    pipeline_config: "PipelineConfig",
    frame: "pd.DataFrame",
    from_year: int | None,
    to_year: int | None,
) -> "pd.DataFrame":
    """
    Restrict a store frame to [from_year, to_year).

    Reads through the configured buckets when they span the whole window,
    otherwise filters the store directly so no in-window year is lost.
    """
    from catalogstats.partitioning import build_partitioned_view

    if from_year is None and to_year is None:
        return frame

    partitioning = pipeline_config.partitioning
    if partitioning.ranges:
        view = build_partitioned_view(frame, partitioning.field, partitioning.ranges)
        if view.covers(from_year, to_year):
            return view.scan(from_year, to_year)
        err_console.print(
            "[dim]Partition ranges do not span the year window; "
            "filtering the full store.[/dim]"
        )

    values = frame["year"]
    mask = values.notna()
    if from_year is not None:
        mask &= (values >= from_year).fillna(False)
    if to_year is not None:
        mask &= (values < to_year).fillna(False)
    return frame[mask.astype(bool)]


@app.command()
def load(
    config: ConfigOption,
    source: Annotated[
        Path | None,
        typer.Option(
            "--source",
            "-s",
            help="Delimited catalog file. Defaults to data.source from the config.",
            dir_okay=False,
        ),
    ] = None,
    append: Annotated[
        bool,
        typer.Option(
            "--append",
            help="Append to the existing store instead of replacing it.",
        ),
    ] = False,
    audit: Annotated[
        bool,
        typer.Option("--audit", help="Audit the store after loading."),
    ] = False,
) -> None:
    """Load a product catalog into the store."""
    from catalogstats.config.settings import WriteMode
    from catalogstats.exceptions import LoadAborted
    from catalogstats.ingestion import ProductLoader
    from catalogstats.store import ProductStore

    pipeline_config = _load_pipeline_config(config)
    ingestion = pipeline_config.ingestion
    if append:
        ingestion = ingestion.model_copy(update={"write_mode": WriteMode.APPEND})
    source_path = source or pipeline_config.source_path

    console.print(f"[blue]Loading {source_path}[/blue]")
    console.print(f"[dim]Store: {pipeline_config.store_path}[/dim]")

    try:
        store = ProductStore.open(pipeline_config.store_path)
        result = ProductLoader(ingestion, store).load(source_path)
    except LoadAborted as e:
        console.print(f"[red]Error: {e}[/red]")
        console.print("[yellow]Store unchanged.[/yellow]")
        raise typer.Exit(code=1) from e
    except FileNotFoundError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(code=1) from e
    except Exception as e:
        console.print(f"[red]Error during load: {e}[/red]")
        raise typer.Exit(code=1) from e

    console.print()
    table = Table(title=f"Load Results ({result.mode.value})")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="green")
    table.add_row("Rows read", str(result.total_rows))
    table.add_row("Records loaded", str(result.records_loaded))
    table.add_row("Records skipped", str(result.records_skipped))
    table.add_row("Duplicates replaced", str(result.duplicates_replaced))
    table.add_row("Store rows", str(result.store_rows))
    console.print(table)

    if result.rejections:
        console.print("\n[yellow]Skipped rows:[/yellow]")
        for rejection in result.rejections[:10]:
            console.print(
                f"  line {rejection.line_number}: "
                f"[dim]{rejection.kind.value}[/dim] {rejection.message}"
            )
        if len(result.rejections) > 10:
            console.print(f"  [dim]... {len(result.rejections) - 10} more[/dim]")

    if audit:
        from catalogstats.assessment import AuditReporter, CheckStatus, StoreAuditor

        audit_result = StoreAuditor().run(store, load_result=result)
        AuditReporter(console).print_results(audit_result)
        if audit_result.overall_status == CheckStatus.FAIL:
            raise typer.Exit(code=1)


@app.command()
def validate(
    config: ConfigOption,
    source: Annotated[
        Path | None,
        typer.Option(
            "--source",
            "-s",
            help="Delimited catalog file. Defaults to data.source from the config.",
            dir_okay=False,
        ),
    ] = None,
) -> None:
    """Dry-run a catalog source against the column contract."""
    from catalogstats.validation import ConsoleReporter, SourceValidator

    pipeline_config = _load_pipeline_config(config)
    source_path = source or pipeline_config.source_path

    console.print("[blue]Running source validation...[/blue]")

    result = SourceValidator(pipeline_config.ingestion).validate(source_path)
    ConsoleReporter(console).print_result(result)

    if not result.exists or result.missing_columns or result.would_abort:
        raise typer.Exit(code=1)


@app.command()
def report(
    config: ConfigOption,
    output_format: Annotated[
        str | None,
        typer.Option(
            "--format",
            "-f",
            help="Output format: 'table', 'json' or 'csv'. Defaults to report.output_format.",
        ),
    ] = None,
    output: Annotated[
        Path | None,
        typer.Option(
            "--output",
            "-o",
            help="Directory to write one file per query. Defaults to stdout only.",
            file_okay=False,
        ),
    ] = None,
    save: Annotated[
        bool,
        typer.Option("--save", help="Write reports to the configured reports directory."),
    ] = False,
    from_year: Annotated[
        int | None,
        typer.Option("--from-year", help="Only records with year >= this."),
    ] = None,
    to_year: Annotated[
        int | None,
        typer.Option("--to-year", help="Only records with year < this."),
    ] = None,
) -> None:
    """Run the catalog analysis suite and render the reports."""
    from catalogstats.aggregation import AggregationEngine
    from catalogstats.analysis import catalog_queries, run_suite
    from catalogstats.config.settings import OutputFormat
    from catalogstats.reporting import ReportEmitter
    from catalogstats.store import ProductStore

    pipeline_config = _load_pipeline_config(config)

    try:
        fmt = (
            OutputFormat(output_format)
            if output_format
            else pipeline_config.report.output_format
        )
    except ValueError as e:
        console.print(
            f"[red]Error: Invalid format '{output_format}'. "
            "Use 'table', 'json' or 'csv'.[/red]"
        )
        raise typer.Exit(code=1) from e

    try:
        store = ProductStore.open(pipeline_config.store_path)
    except Exception as e:
        console.print(f"[red]Error opening store: {e}[/red]")
        raise typer.Exit(code=1) from e

    if store.is_empty:
        console.print(f"[red]Error: Store is empty: {pipeline_config.store_path}[/red]")
        console.print(f"[yellow]Run load first: catalogstats load --config {config}[/yellow]")
        raise typer.Exit(code=1)

    try:
        frame = _scoped_frame(pipeline_config, store.frame, from_year, to_year)
        engine = AggregationEngine(frame)
        outcomes = run_suite(
            engine,
            catalog_queries(pipeline_config),
            max_workers=pipeline_config.report.max_workers,
        )
    except Exception as e:
        console.print(f"[red]Error during analysis: {e}[/red]")
        raise typer.Exit(code=1) from e

    emitter = ReportEmitter()
    if output is None and save:
        output = pipeline_config.reports_dir
    if output is not None:
        output.mkdir(parents=True, exist_ok=True)

    for outcome in outcomes:
        query = outcome.query
        if fmt is OutputFormat.TABLE:
            console.print(emitter.renderable(outcome.results, query.kind, title=query.title))
        else:
            typer.echo(emitter.render(outcome.results, query.kind, fmt, title=query.title))

        if output is not None:
            path = output / f"{query.name}.{'txt' if fmt is OutputFormat.TABLE else fmt.value}"
            path.write_text(
                emitter.render(outcome.results, query.kind, fmt, title=query.title),
                encoding="utf-8",
            )

    if output is not None:
        console.print(f"\n[green]Saved {len(outcomes)} reports to: {output}[/green]")


@app.command()
def partition(
    config: ConfigOption,
    write: Annotated[
        bool,
        typer.Option("--write", "-w", help="Write one CSV per bucket to the output directory."),
    ] = False,
) -> None:
    """Bucket the store by the configured ranges."""
    from catalogstats.partitioning import build_partitioned_view
    from catalogstats.store import ProductStore

    pipeline_config = _load_pipeline_config(config)
    partitioning = pipeline_config.partitioning

    if not partitioning.ranges:
        console.print("[red]Error: No partitioning.ranges configured.[/red]")
        raise typer.Exit(code=1)

    try:
        store = ProductStore.open(pipeline_config.store_path)
        view = build_partitioned_view(store.frame, partitioning.field, partitioning.ranges)
    except (KeyError, ValueError) as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(code=1) from e

    table = Table(title=f"Partitioned View ({view.bucket_field})")
    table.add_column("Bucket", style="cyan")
    table.add_column("Range", style="dim")
    table.add_column("Records", justify="right", style="green")
    for bucket, df in view.buckets.items():
        table.add_row(bucket.label, f"[{bucket.lo}, {bucket.hi})", str(len(df)))
    console.print(table)

    console.print(f"[dim]Dropped (null {view.bucket_field}): {view.n_null}[/dim]")
    console.print(f"[dim]Dropped (outside every range): {view.n_out_of_range}[/dim]")

    if write:
        paths = view.write(pipeline_config.partitions_dir)
        console.print(
            f"\n[green]Wrote {len(paths)} buckets to: {pipeline_config.partitions_dir}[/green]"
        )


@app.command()
def audit(config: ConfigOption) -> None:
    """Audit the persisted store snapshot."""
    from catalogstats.assessment import AuditReporter, CheckStatus, StoreAuditor
    from catalogstats.store import ProductStore

    pipeline_config = _load_pipeline_config(config)

    console.print("[blue]Running store audit...[/blue]")

    if not pipeline_config.store_path.exists():
        console.print(f"[red]Error: Store not found: {pipeline_config.store_path}[/red]")
        console.print(f"[yellow]Run load first: catalogstats load --config {config}[/yellow]")
        raise typer.Exit(code=1)

    try:
        store = ProductStore.open(pipeline_config.store_path)
    except Exception as e:
        console.print(f"[red]Error opening store: {e}[/red]")
        raise typer.Exit(code=1) from e

    result = StoreAuditor().run(store)
    AuditReporter(console).print_results(result)

    if result.overall_status == CheckStatus.FAIL:
        raise typer.Exit(code=1)


@app.command()
def version() -> None:
    """Show version information."""
    from catalogstats import __version__

    console.print(f"catalogstats version {__version__}")


if __name__ == "__main__":
    app()
