"""
Reporter for store audit results.

Formats audit results for console output using Rich.
"""

from typing import ClassVar

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from catalogstats.assessment.core import AuditResult, CheckResult, CheckStatus


class AuditReporter:
    """Formats and displays store audit results."""

    STATUS_STYLES: ClassVar[dict[CheckStatus, tuple[str, str]]] = {
        CheckStatus.PASS: ("PASS", "green"),
        CheckStatus.WARN: ("WARN", "yellow"),
        CheckStatus.FAIL: ("FAIL", "red"),
        CheckStatus.SKIP: ("SKIP", "dim"),
    }

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console()

    def print_results(self, result: AuditResult) -> None:
        """
        Print full audit results.

        Args:
            result: AuditResult to display.
        """
        self.console.print()
        self._print_header(result)

        self.console.print()
        self._print_checks_table(result)

        self.console.print()
        self._print_summary(result)

        failures = [c for c in result.checks if c.status == CheckStatus.FAIL]
        if failures:
            self.console.print()
            self._print_failure_details(failures)

    def _print_header(self, result: AuditResult) -> None:
        _, status_style = self.STATUS_STYLES[result.overall_status]

        title = Text("Store Audit Results", style="bold")
        subtitle = Text(
            f"{result.store_rows} records, fingerprint {result.fingerprint[:12]}",
            style="dim",
        )
        self.console.print(
            Panel.fit(Text.assemble(title, "\n", subtitle), border_style=status_style)
        )

    def _print_checks_table(self, result: AuditResult) -> None:
        table = Table(title="Audit Checks", show_header=True, header_style="bold")
        table.add_column("Check", style="cyan", min_width=18)
        table.add_column("Status", justify="center", min_width=8)
        table.add_column("Result", min_width=40)
        table.add_column("Checked", justify="right")
        table.add_column("Failed", justify="right")

        for check in result.checks:
            status_text, status_style = self.STATUS_STYLES[check.status]
            table.add_row(
                check.name,
                Text(status_text, style=status_style),
                check.message,
                str(check.n_checked) if check.n_checked > 0 else "-",
                str(check.n_failed) if check.n_failed > 0 else "-",
            )

        self.console.print(table)

    def _print_summary(self, result: AuditResult) -> None:
        status_text, status_style = self.STATUS_STYLES[result.overall_status]

        summary = Table(show_header=False, box=None)
        summary.add_column("Label", style="bold")
        summary.add_column("Value")

        summary.add_row("Overall Status:", Text(status_text, style=status_style))
        summary.add_row("Checks Passed:", Text(str(result.n_passed), style="green"))
        summary.add_row(
            "Checks Failed:",
            Text(str(result.n_failed), style="red" if result.n_failed > 0 else "dim"),
        )
        summary.add_row(
            "Checks Warned:",
            Text(str(result.n_warned), style="yellow" if result.n_warned > 0 else "dim"),
        )

        self.console.print(Panel(summary, title="Summary", border_style=status_style))

    def _print_failure_details(self, failures: list[CheckResult]) -> None:
        self.console.print(Text("Failure Details", style="bold red"))

        for check in failures:
            self.console.print(f"\n[red]{check.name}[/red]: {check.message}")
            if check.details:
                self.console.print(f"  [dim]{check.details}[/dim]")

            if check.sample_failures is not None and not check.sample_failures.empty:
                self.console.print("  [dim]Sample failures (showing up to 10):[/dim]")
                sample_table = Table(
                    show_header=True,
                    header_style="bold dim",
                    box=None,
                    padding=(0, 1),
                )
                for col in check.sample_failures.columns:
                    sample_table.add_column(str(col), overflow="fold")
                for _, row in check.sample_failures.head(10).iterrows():
                    sample_table.add_row(*[str(v) for v in row])
                self.console.print(sample_table)
