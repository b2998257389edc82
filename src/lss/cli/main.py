"""Command-line interface for lss.

This module provides the Typer-based CLI for running scans and listing the
active rule set.

Usage::

    lss scan --path . --format json
    lss --scan --path . --min-confidence 0.8
    lss rules list aws --page 1 --per-page 10
"""

import logging
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.text import Text

from lss import __version__
from lss.config import load_config
from lss.core.exceptions import ConfigError, LssError, OutputError, RuleError, ScanError
from lss.core.filters import parse_tag_list
from lss.core.ignore import read_ignore_file
from lss.core.logging import setup_logging
from lss.core.models import OutputFormat, Rule, ScanConfig
from lss.core.scanner import Scanner
from lss.outputs import get_formatter
from lss.outputs.rules_output import format_rule_page, format_rule_page_json
from lss.rules import filter_rules, load_rules, paginate_rules

# Exit codes
EXIT_SUCCESS = 0
EXIT_ERROR = 1
EXIT_NO_FINDINGS = 2

app = typer.Typer(
    name="lss",
    help="lss - find leaked secrets in a directory tree and its git history.",
    add_completion=False,
)
rules_app = typer.Typer(help="Inspect the active rule set.", no_args_is_help=True)
app.add_typer(rules_app, name="rules")

console = Console()
error_console = Console(stderr=True)


def _display_error(error: Exception, title: str = "Error") -> None:
    """Display an error with rich formatting.

    Args:
        error: The exception to display.
        title: The title for the error panel.
    """
    if isinstance(error, ScanError):
        heading, detail = "Scan Error", f"Path: {error.path}" if error.path else ""
    elif isinstance(error, ConfigError):
        heading, detail = "Configuration Error", f"Config key: {error.config_key}" if error.config_key else ""
    elif isinstance(error, RuleError):
        heading, detail = "Rule Error", f"Rule file: {error.rule_file}" if error.rule_file else ""
    elif isinstance(error, OutputError):
        heading, detail = "Output Error", f"Output path: {error.output_path}" if error.output_path else ""
    else:
        heading, detail = title, ""

    message = error.message if isinstance(error, LssError) else str(error)
    body = Text()
    body.append(heading, style="bold red")
    body.append(f"\n\n{message}")
    if detail:
        body.append(f"\n\n{detail}", style="dim")
    error_console.print(Panel(body, title=f"[red]{heading}[/red]", border_style="red"))


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"[bold cyan]lss[/bold cyan] version [green]{__version__}[/green]")
        raise typer.Exit()


def _parse_format(value: str) -> OutputFormat:
    try:
        return OutputFormat(value.lower())
    except ValueError:
        choices = ", ".join(f"'{f.value}'" for f in OutputFormat)
        raise ConfigError(f"Invalid format '{value}'. Choose one of {choices}.", config_key="format")


def _load_rules(rules_file: Optional[Path]) -> tuple[Rule, ...]:
    """Load the rule set, rejecting a --rules-file that does not exist."""
    if rules_file is not None and not rules_file.is_file():
        raise RuleError(f"Rules file not found: {rules_file}", rule_file=str(rules_file))
    return load_rules(rules_file)


def run_scan(
    path: Path,
    output_format: str = "human",
    entropy_threshold: Optional[float] = None,
    ignore_file: Optional[Path] = None,
    rules_file: Optional[Path] = None,
    include_tags: Optional[str] = None,
    exclude_tags: Optional[str] = None,
    min_confidence: Optional[float] = None,
    workers: Optional[int] = None,
    verbose: bool = False,
    quiet: bool = False,
) -> None:
    """Run a scan and print the results, then exit with the scan's status.

    Shared by the ``scan`` command and the ``--scan`` shorthand.

    Exit codes:
        0: Findings were reported
        1: Error (invalid options, missing path)
        2: No findings
    """
    setup_logging(verbose=verbose, level=logging.ERROR if quiet else None)

    try:
        fmt = _parse_format(output_format)
        config = load_config(cli_args={"entropy_threshold": entropy_threshold, "workers": workers})
        rules = _load_rules(rules_file)
    except LssError as e:
        _display_error(e)
        raise typer.Exit(code=EXIT_ERROR) from None

    if not verbose and not quiet:
        setup_logging(level=config.log_level.to_logging_level())

    ignores = set(config.ignore)
    if ignore_file is not None:
        ignores |= read_ignore_file(ignore_file)

    scan_config = ScanConfig(
        target_path=path,
        entropy_threshold=config.entropy_threshold,
        ignores=ignores,
        include_tags=parse_tag_list(include_tags),
        exclude_tags=parse_tag_list(exclude_tags),
        min_confidence=min_confidence if min_confidence is not None else 0.0,
        workers=config.scan.workers,
    )

    if verbose and not quiet:
        error_console.print(f"[dim]Scanning:[/dim] {path}")
        error_console.print(f"[dim]Rules:[/dim] {len(rules)}")
        error_console.print(f"[dim]Entropy threshold:[/dim] {scan_config.entropy_threshold}")

    try:
        result = Scanner(scan_config, rules).scan()
    except LssError as e:
        _display_error(e)
        raise typer.Exit(code=EXIT_ERROR) from None
    except KeyboardInterrupt:
        if not quiet:
            error_console.print("\n[yellow]Scan interrupted by user[/yellow]")
        raise typer.Exit(code=EXIT_ERROR) from None

    try:
        formatted_output = get_formatter(fmt).format(result)
    except Exception as e:
        _display_error(OutputError(f"Failed to format output: {e}"))
        raise typer.Exit(code=EXIT_ERROR) from None

    if not quiet:
        # Plain print: findings contain brackets that Rich would treat as markup,
        # and JSON must not be wrapped
        print(formatted_output)

    if not result.findings:
        raise typer.Exit(code=EXIT_NO_FINDINGS)
    raise typer.Exit(code=EXIT_SUCCESS)


PathOption = Annotated[
    Path,
    typer.Option("--path", "-p", help="Path to scan"),
]
FormatOption = Annotated[
    str,
    typer.Option("--format", "-f", help="Output format: human, json or table", case_sensitive=False),
]
EntropyOption = Annotated[
    Optional[float],
    typer.Option("--entropy-threshold", min=0.0, help="Override the entropy threshold"),
]
IgnoreFileOption = Annotated[
    Optional[Path],
    typer.Option("--ignore-file", help="Additional ignore file (one substring per line)"),
]
RulesFileOption = Annotated[
    Optional[Path],
    typer.Option("--rules-file", help="Load extra rules from a file (Name::Regex[::tags[::confidence]])"),
]
IncludeTagsOption = Annotated[
    Optional[str],
    typer.Option("--include-tags", help="Only report findings with any of these comma-separated tags"),
]
ExcludeTagsOption = Annotated[
    Optional[str],
    typer.Option("--exclude-tags", help="Drop findings with any of these comma-separated tags"),
]
MinConfidenceOption = Annotated[
    Optional[float],
    typer.Option("--min-confidence", min=0.0, max=1.0, help="Minimum combined confidence (0.0-1.0)"),
]
WorkersOption = Annotated[
    Optional[int],
    typer.Option("--workers", "-w", min=1, help="Parallel file-scan workers"),
]
VerboseOption = Annotated[bool, typer.Option("--verbose", "-v", help="Enable verbose output")]
QuietOption = Annotated[bool, typer.Option("--quiet", "-q", help="Suppress output (only show errors)")]


@app.command()
def scan(
    path: PathOption = Path("."),
    format: FormatOption = "human",
    entropy_threshold: EntropyOption = None,
    ignore_file: IgnoreFileOption = None,
    rules_file: RulesFileOption = None,
    include_tags: IncludeTagsOption = None,
    exclude_tags: ExcludeTagsOption = None,
    min_confidence: MinConfidenceOption = None,
    workers: WorkersOption = None,
    verbose: VerboseOption = False,
    quiet: QuietOption = False,
) -> None:
    """Scan a path, and the git history of repositories under it, for secrets."""
    run_scan(
        path,
        format,
        entropy_threshold=entropy_threshold,
        ignore_file=ignore_file,
        rules_file=rules_file,
        include_tags=include_tags,
        exclude_tags=exclude_tags,
        min_confidence=min_confidence,
        workers=workers,
        verbose=verbose,
        quiet=quiet,
    )


@rules_app.command("list")
def list_rules(
    query: Annotated[Optional[str], typer.Argument(help="Only show rules whose name contains this")] = None,
    json_output: Annotated[bool, typer.Option("--json", help="Output JSON")] = False,
    page: Annotated[int, typer.Option("--page", min=1, help="Page number (1-based)")] = 1,
    per_page: Annotated[int, typer.Option("--per-page", min=1, help="Items per page")] = 20,
    rules_file: RulesFileOption = None,
) -> None:
    """List the active rules with their pattern, tags and confidence."""
    try:
        rules = filter_rules(_load_rules(rules_file), query)
    except RuleError as e:
        _display_error(e)
        raise typer.Exit(code=EXIT_ERROR) from None
    rule_page = paginate_rules(rules, page=page, per_page=per_page)
    if json_output:
        print(format_rule_page_json(rule_page))
    else:
        print(format_rule_page(rule_page))


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    version: Annotated[
        Optional[bool],
        typer.Option("--version", callback=version_callback, is_eager=True, help="Show version and exit"),
    ] = None,
    scan_flag: Annotated[
        bool,
        typer.Option("--scan", help="Run a scan (shorthand for the scan command)"),
    ] = False,
    path: PathOption = Path("."),
    format: FormatOption = "human",
    entropy_threshold: EntropyOption = None,
    ignore_file: IgnoreFileOption = None,
    rules_file: RulesFileOption = None,
    include_tags: IncludeTagsOption = None,
    exclude_tags: ExcludeTagsOption = None,
    min_confidence: MinConfidenceOption = None,
    workers: WorkersOption = None,
    verbose: VerboseOption = False,
    quiet: QuietOption = False,
) -> None:
    """lss - find leaked secrets in a directory tree and its git history.

    Without a command (or with --scan) the current directory is scanned.
    """
    if ctx.invoked_subcommand is not None:
        return
    # --scan is accepted for compatibility; scanning is the default anyway
    run_scan(
        path,
        format,
        entropy_threshold=entropy_threshold,
        ignore_file=ignore_file,
        rules_file=rules_file,
        include_tags=include_tags,
        exclude_tags=exclude_tags,
        min_confidence=min_confidence,
        workers=workers,
        verbose=verbose,
        quiet=quiet,
    )


if __name__ == "__main__":
    app()
