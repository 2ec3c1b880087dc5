"""
Console reporter for source validation results.

Formats validation results using Rich for clear, colored output.
"""

from rich.console import Console
from rich.table import Table
from rich.text import Text

from catalogstats.validation.core import ValidationResult


class ConsoleReporter:
    """Formats and displays validation results to the console."""

    def __init__(self, console: Console) -> None:
        """
        Initialize console reporter.

        Args:
            console: Rich Console instance for output.
        """
        self.console = console

    def print_result(self, result: ValidationResult) -> None:
        """
        Print a validation result: summary, error kinds, sample rows.

        Args:
            result: Validation result to display.
        """
        if not result.exists:
            self.console.print(f"[yellow]Missing:[/yellow] {result.source}")
            return

        self._print_summary(result)

        if result.missing_columns:
            self.console.print()
            self.console.print(
                "[bold red]Header is missing columns:[/bold red] "
                + ", ".join(result.missing_columns)
            )

        if result.rejections_by_kind:
            self.console.print()
            self._print_kinds(result)
            self.console.print()
            self._print_samples(result)

    def _print_summary(self, result: ValidationResult) -> None:
        """Print row counts and the load verdict."""
        table = Table(title="Source Validation Results", show_header=True)
        table.add_column("Source", style="cyan", no_wrap=True)
        table.add_column("Rows", justify="right")
        table.add_column("Valid", justify="right", style="green")
        table.add_column("Skipped", justify="right", style="red")
        table.add_column("Limit", justify="right", style="dim")
        table.add_column("Status", justify="center")

        table.add_row(
            str(result.source),
            str(result.total_rows),
            str(result.valid_rows),
            str(result.skipped_rows),
            str(result.max_bad_records),
            self._format_status(result),
        )
        self.console.print(table)

    def _format_status(self, result: ValidationResult) -> str:
        """
        Format the load verdict with color.

        Args:
            result: Validation result.

        Returns:
            Formatted status string with color markup.
        """
        if result.would_abort:
            return "[red]Would abort[/red]"
        if result.skipped_rows:
            return "[yellow]Loadable (with skips)[/yellow]"
        return "[green]Pass[/green]"

    def _print_kinds(self, result: ValidationResult) -> None:
        """Print skipped-row counts per error kind."""
        table = Table(title="Rejections by Kind", show_header=True)
        table.add_column("Kind", style="cyan")
        table.add_column("Rows", justify="right")
        for kind, n in sorted(result.rejections_by_kind.items(), key=lambda kv: -kv[1]):
            table.add_row(kind.value, str(n))
        self.console.print(table)

    def _print_samples(self, result: ValidationResult) -> None:
        """Print the first rejected rows."""
        table = Table(
            title=f"Sample Rejections (first {len(result.sample_rejections)})",
            show_header=True,
            header_style="bold dim",
        )
        table.add_column("Row", justify="right")
        table.add_column("Line", justify="right")
        table.add_column("Kind", style="cyan")
        table.add_column("Details", overflow="fold")
        for rejection in result.sample_rejections:
            table.add_row(
                str(rejection.row_number),
                str(rejection.line_number),
                rejection.kind.value,
                Text(rejection.message),
            )
        self.console.print(table)
