"""
Console reporter for transform and validation results.

Formats row rejections and validation findings using Rich for clear,
colored output.
"""

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from allocprep.models import FIELD_LABELS, TransformResult, ValidationFinding

# Longest value rendering before it is shortened in the findings table
MAX_VALUE_WIDTH = 40


class ConsoleReporter:
    """Formats and displays pipeline results to the console."""

    def __init__(self, console: Console) -> None:
        """
        Initialize console reporter.

        Args:
            console: Rich Console instance for output.
        """
        self.console = console

    def print_transform_results(self, results: list[TransformResult]) -> None:
        """
        Print per-table transform counts and any rejected rows.

        Args:
            results: One transform result per entity table.
        """
        table = Table(title="Row Transformation", show_header=True)
        table.add_column("Table", style="cyan", no_wrap=True)
        table.add_column("Rows", justify="right")
        table.add_column("Accepted", justify="right")
        table.add_column("Rejected", justify="right")

        for result in results:
            rejected = len(result.rejected)
            table.add_row(
                result.entity.table_name,
                str(result.n_rows),
                f"[green]{len(result.accepted)}[/green]",
                f"[red]{rejected}[/red]" if rejected else "0",
            )

        self.console.print(table)
        self._print_rejections(results)

    def _print_rejections(self, results: list[TransformResult]) -> None:
        failed = [r for r in results if r.rejected]
        if not failed:
            return

        self.console.print()
        self.console.print("[bold red]Rejected Rows:[/bold red]")
        for result in failed:
            self.console.print()
            self.console.print(f"[bold]{result.entity.table_name}[/bold]:")
            for rejection in result.rejected:
                # Row numbers are shown 1-based, like a spreadsheet
                self.console.print(f"  row {rejection.index + 1}: {escape(rejection.error)}")

    def print_findings(self, findings: list[ValidationFinding]) -> None:
        """
        Print validation findings as a formatted table.

        Args:
            findings: Merged findings from ``validate_all``.
        """
        if not findings:
            self.console.print("[green]No validation findings.[/green]")
            return

        table = Table(title="Validation Findings", show_header=True)
        table.add_column("Entity", style="cyan", no_wrap=True)
        table.add_column("Row", justify="right")
        table.add_column("Field", style="blue")
        table.add_column("Message")
        table.add_column("Value", style="dim")

        for finding in findings:
            table.add_row(
                finding.entity,
                str(finding.row_index + 1),
                FIELD_LABELS.get(finding.field, finding.field),
                escape(finding.message),
                escape(self._format_value(finding.value)),
            )

        self.console.print(table)
        self._print_summary(findings)

    def _format_value(self, value: object) -> str:
        text = "-" if value is None else str(value)
        if len(text) > MAX_VALUE_WIDTH:
            return text[: MAX_VALUE_WIDTH - 3] + "..."
        return text

    def _print_summary(self, findings: list[ValidationFinding]) -> None:
        counts: dict[str, int] = {}
        for finding in findings:
            counts[finding.entity] = counts.get(finding.entity, 0) + 1

        self.console.print()
        self.console.print("[bold]Summary:[/bold]")
        self.console.print(f"  Total findings: {len(findings)}")
        for entity, count in counts.items():
            self.console.print(f"  [yellow]{entity}: {count}[/yellow]")
