"""
Report emitter for aggregation results.

Pure formatting: results are rendered in the order the aggregation
engine produced them and no figure is recomputed.
"""

import io
import json
from enum import Enum
from typing import ClassVar

import pandas as pd
from rich.console import Console, RenderableType
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from catalogstats.aggregation.results import NULL_LABEL, AggregationResult
from catalogstats.config.settings import OutputFormat


class ReportKind(str, Enum):
    """Presentation shape of a result set."""

    SCORECARD = "scorecard"
    DISTRIBUTION = "distribution"
    RANKING = "ranking"
    TIMESERIES = "timeseries"


def _display(value: object) -> str:
    return NULL_LABEL if value is None else str(value)


class ReportEmitter:
    """
    Formats aggregation results as tables, JSON or CSV.

    Uses Rich for table output.
    """

    BAR_WIDTH: ClassVar[int] = 30
    BAR_CHAR: ClassVar[str] = "█"

    def __init__(self, width: int = 100) -> None:
        """
        Initialize emitter.

        Args:
            width: Console width used when rendering tables to text.
        """
        self.width = width

    def to_records(
        self,
        results: list[AggregationResult],
        kind: ReportKind,
    ) -> list[dict[str, object]]:
        """
        Structured rows for a result set, one per result, in input order.

        Args:
            results: Aggregation results.
            kind: Presentation shape.

        Returns:
            List of flat dictionaries.
        """
        records: list[dict[str, object]] = []
        for result in results:
            if kind is ReportKind.SCORECARD:
                record: dict[str, object] = {"metric": result.label or "total"}
            elif kind is ReportKind.RANKING:
                record = dict(zip(result.partition_fields, result.partition))
                record["rank"] = result.rank
                record.update(zip(result.fields, result.key))
            else:
                record = dict(zip(result.fields, result.key))
            record["count"] = result.count
            record["percentage"] = result.percentage
            records.append(record)
        return records

    def render(
        self,
        results: list[AggregationResult],
        kind: ReportKind,
        output_format: OutputFormat = OutputFormat.TABLE,
        title: str | None = None,
    ) -> str:
        """
        Render a result set to text.

        Args:
            results: Aggregation results.
            kind: Presentation shape.
            output_format: table, json or csv.
            title: Optional title (tables only).

        Returns:
            Formatted output.
        """
        if output_format is OutputFormat.JSON:
            return json.dumps(self.to_records(results, kind), indent=2, default=str)

        if output_format is OutputFormat.CSV:
            records = self.to_records(results, kind)
            if not records:
                return ""
            return pd.DataFrame(records).to_csv(index=False)

        buffer = io.StringIO()
        console = Console(
            file=buffer,
            width=self.width,
            color_system=None,
            force_terminal=False,
        )
        console.print(self.renderable(results, kind, title=title))
        return buffer.getvalue()

    def renderable(
        self,
        results: list[AggregationResult],
        kind: ReportKind,
        title: str | None = None,
    ) -> RenderableType:
        """
        Build a Rich renderable for a result set.

        Args:
            results: Aggregation results.
            kind: Presentation shape.
            title: Optional title.

        Returns:
            Rich Panel (scorecard) or Table.
        """
        if kind is ReportKind.SCORECARD:
            return self._scorecard(results, title)

        table = Table(title=title, show_header=True, header_style="bold")
        if not results:
            table.add_column("Result", style="dim")
            table.add_row("No matching records")
            return table

        first = results[0]
        if kind is ReportKind.RANKING:
            for name in first.partition_fields:
                table.add_column(name, style="blue")
            table.add_column("Rank", justify="right")
        for name in first.fields:
            table.add_column(name, style="cyan")
        table.add_column("Count", justify="right", style="green")
        table.add_column("Share", justify="right")
        if kind is ReportKind.TIMESERIES:
            table.add_column("", no_wrap=True)

        max_count = max(r.count for r in results)
        for result in results:
            cells: list[str] = []
            if kind is ReportKind.RANKING:
                cells.extend(_display(v) for v in result.partition)
                cells.append(str(result.rank))
            cells.extend(_display(v) for v in result.key)
            cells.append(str(result.count))
            cells.append(f"{result.percentage:.2f}%")
            if kind is ReportKind.TIMESERIES:
                cells.append(self._bar(result.count, max_count))
            table.add_row(*(Text(cell) for cell in cells))

        return table

    def _scorecard(
        self,
        results: list[AggregationResult],
        title: str | None,
    ) -> RenderableType:
        """Headline figures, one line per result."""
        if not results:
            body = Text("0", style="bold")
        else:
            body = Text()
            for i, result in enumerate(results):
                if i:
                    body.append("\n")
                if result.label:
                    body.append(f"{result.label}: ", style="cyan")
                body.append(f"{result.count:,}", style="bold green")
                if result.label:
                    body.append(f" ({result.percentage:.2f}%)", style="dim")
        return Panel.fit(body, title=title)

    def _bar(self, count: int, max_count: int) -> str:
        if max_count == 0:
            return ""
        return self.BAR_CHAR * max(1, round(self.BAR_WIDTH * count / max_count))
