"""Table output formatter for lss.

This module provides a table output formatter that renders scan results
as a console-friendly table using Rich.
"""

from io import StringIO

from rich.console import Console
from rich.table import Table
from rich.text import Text

from lss.core.models import ScanResult
from lss.outputs import BaseOutput


def _confidence_style(confidence: float) -> str:
    if confidence >= 0.9:
        return "bold red"
    if confidence >= 0.7:
        return "red"
    if confidence >= 0.5:
        return "yellow"
    return "blue"


class TableOutput(BaseOutput):
    """Output formatter that renders a ScanResult as a Rich table.

    Shows path, line, snippet, matching rules, tags and confidence for each
    finding, with the confidence color coded.

    Example:
        formatter = TableOutput()
        print(formatter.format(scan_result))
    """

    @property
    def name(self) -> str:
        """Return the formatter name."""
        return "table"

    def format(self, result: ScanResult) -> str:
        """Format a scan result as a Rich table.

        Args:
            result: The ScanResult to format.

        Returns:
            The rendered table followed by a short summary.
        """
        table = Table(
            title=f"Scan Results: {result.target_path}",
            show_header=True,
            header_style="bold cyan",
        )

        table.add_column("Path", style="white", no_wrap=False)
        table.add_column("Line", justify="right", style="magenta")
        table.add_column("Snippet", no_wrap=False)
        table.add_column("Rules", style="cyan")
        table.add_column("Tags", style="green")
        table.add_column("Confidence", justify="right")

        # Text() keeps snippets out of Rich's markup parser
        for finding in result.findings:
            table.add_row(
                Text(finding.path),
                str(finding.line),
                Text(finding.snippet),
                Text(", ".join(finding.matched_rules)),
                Text(", ".join(finding.tags)),
                Text(f"{finding.confidence:.2f}", style=_confidence_style(finding.confidence)),
            )

        string_io = StringIO()
        console = Console(file=string_io, force_terminal=True, width=160)
        console.print(table)

        stats = result.stats
        summary_lines = [
            "",
            "[bold]Scan Summary[/bold]",
            f"  Duration: {result.scan_duration:.2f}s",
            f"  Total findings: {len(result.findings)}",
        ]
        for key, label in (
            ("files_scanned", "Files scanned"),
            ("files_ignored", "Files ignored"),
            ("repositories_scanned", "Repositories scanned"),
            ("git_findings", "History findings"),
        ):
            if key in stats:
                summary_lines.append(f"  {label}: {stats[key]}")

        for line in summary_lines:
            console.print(line)

        return string_io.getvalue()
