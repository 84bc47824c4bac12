"""QueryTorque Plan CLI.

Command-line interface for execution plan diagnostics.

Commands:
    qt-plan analyze <plan.json>                  Diagnose an EXPLAIN (ANALYZE, FORMAT JSON) capture
    qt-plan analyze <plan.json> --text plan.txt  Attach the text EXPLAIN for display
    qt-plan analyze <plan.json> --json           Emit the AnalysisResult as JSON
    qt-plan fingerprint "<sql>"                  Print the grouping fingerprint of a query
    qt-plan rules                                List the diagnostic rules in execution order
"""

import logging
import sys
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.panel import Panel
from rich.syntax import Syntax
from rich.table import Table

from qt_plan import __version__
from qt_plan.analyzer import PlanAnalyzer
from qt_plan.config import get_settings
from qt_plan.fingerprint import fingerprint_query
from qt_plan.ingest import empty_plan
from qt_plan.models import AnalysisResult
from qt_plan.rules.registry import get_all_rules

console = Console()
logger = logging.getLogger(__name__)

SEVERITY_COLORS = {
    "critical": "red",
    "high": "orange3",
    "medium": "yellow",
    "low": "blue",
}


def read_text_file(file_path: str, suffixes: tuple[str, ...]) -> str:
    """Read a UTF-8 input file, checking its extension."""
    path = Path(file_path)
    if not path.exists():
        raise click.ClickException(f"File not found: {file_path}")
    if path.suffix.lower() not in suffixes:
        raise click.ClickException(f"Expected {' or '.join(suffixes)} file, got: {path.suffix}")
    try:
        return path.read_text(encoding="utf-8")
    except UnicodeDecodeError:
        raise click.ClickException(f"File is not valid UTF-8: {file_path}")


def is_degraded(result: AnalysisResult) -> bool:
    """True when the plan could not be interpreted at all."""
    return result.plan == empty_plan()


def display_analysis_result(result: AnalysisResult, verbose: bool = False) -> None:
    """Display analysis result with rich formatting."""
    score = result.health_score
    score_color = "green" if score >= 80 else "yellow" if score >= 60 else "red"
    score_text = f"[bold {score_color}]{score}/100[/bold {score_color}]"

    counts = result.severity_counts
    severity_summary = (
        f"Critical: {counts['critical']} | "
        f"High: {counts['high']} | "
        f"Medium: {counts['medium']} | "
        f"Low: {counts['low']}"
    )
    timing = (
        f"Execution: {result.plan.execution_time:.1f}ms | "
        f"Planning: {result.plan.planning_time:.1f}ms"
    )

    console.print(Panel(
        f"Health: {score_text}\n{severity_summary}\n{timing}",
        title="Plan Analysis Result",
        border_style=score_color,
    ))

    if is_degraded(result):
        console.print("[yellow]Warning: plan could not be interpreted; result is empty.[/yellow]")

    if verbose and result.plan_text:
        console.print(Syntax(result.plan_text, "text", theme="ansi_dark", word_wrap=True))

    if not result.issues:
        console.print("[green]No issues detected.[/green]")
        return

    table = Table(title="Detected Issues", show_header=True, header_style="bold")
    table.add_column("Severity", style="bold", width=10)
    table.add_column("Type", width=20)
    table.add_column("Operator", width=24)
    table.add_column("Description", width=60)

    for issue in result.issues:
        color = SEVERITY_COLORS.get(issue.severity.value, "white")
        table.add_row(
            f"[{color}]{issue.severity.value.upper()}[/{color}]",
            issue.type.value,
            issue.related_node or "-",
            issue.description,
        )

    console.print(table)

    if verbose:
        console.print("\n[bold]Suggested Fixes:[/bold]\n")
        for i, issue in enumerate(result.issues, 1):
            if issue.suggested_fix:
                console.print(f"{i}. [dim]{issue.type.value}:[/dim] {issue.suggested_fix}")

    if result.recommendations:
        console.print("\n[bold]Recommendations:[/bold]")
        for rec in result.recommendations:
            console.print(f"  • {rec}")


@click.group()
@click.version_option(version=__version__, prog_name="qt-plan")
def cli():
    """QueryTorque Plan - Execution Plan Diagnostics CLI."""
    pass


@cli.command()
@click.argument("file", type=click.Path())
@click.option("--text", "text_file", type=click.Path(), help="Text EXPLAIN output to attach for display")
@click.option("--verbose", "-v", is_flag=True, help="Show plan text and suggested fixes")
@click.option("--json", "output_json", is_flag=True, help="Output as JSON")
def analyze(file: str, text_file: Optional[str], verbose: bool, output_json: bool):
    """Diagnose an EXPLAIN (ANALYZE, FORMAT JSON) capture.

    Detects sequential scans, expensive joins, row estimation errors,
    temporary file usage, inefficient indexes, missing parallelism and
    high planning time, then prints recommendations and a 0-100 health
    score. Thresholds come from QT_PLAN_* environment variables.

    Examples:
        qt-plan analyze plan.json
        qt-plan analyze plan.json --text plan.txt -v
        qt-plan analyze plan.json --json > result.json
    """
    settings = get_settings()

    # Setup logging
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format='%(message)s')
    else:
        level = logging.getLevelName(settings.log_level.upper())
        if not isinstance(level, int):
            raise click.ClickException(f"Unknown log level: {settings.log_level}")
        logging.basicConfig(level=level)

    if not settings.uses_default_thresholds:
        logger.debug("Using thresholds overridden by QT_PLAN_* settings")

    try:
        raw_plan = read_text_file(file, (".json",))
        plan_text = read_text_file(text_file, (".txt", ".log")) if text_file else None
    except click.ClickException as e:
        console.print(f"[red]Error: {e.message}[/red]")
        sys.exit(1)

    analyzer = PlanAnalyzer(thresholds=settings.thresholds())
    result = analyzer.analyze(raw_plan, plan_text=plan_text)
    logger.debug(f"Analyzed {file}: score {result.health_score}")

    if output_json:
        click.echo(result.to_json())
        return

    display_analysis_result(result, verbose=verbose)


@cli.command()
@click.argument("sql", required=False)
@click.option("--file", "-f", "sql_file", type=click.Path(), help="Read the query from a .sql file")
def fingerprint(sql: Optional[str], sql_file: Optional[str]):
    """Print the normalized fingerprint of a query.

    Literals are replaced: numbers -> N, strings -> S, arrays -> A,
    JSON objects -> J.

    Examples:
        qt-plan fingerprint "SELECT * FROM users WHERE id = 42"
        qt-plan fingerprint -f query.sql
    """
    if sql_file:
        sql = read_text_file(sql_file, (".sql", ".txt"))
    if sql is None:
        raise click.UsageError("Provide a SQL string or --file")
    click.echo(fingerprint_query(sql))


@cli.command()
def rules():
    """List diagnostic rules in execution order."""
    table = Table(title="Diagnostic Rules", show_header=True, header_style="bold")
    table.add_column("#", justify="right", width=3)
    table.add_column("Rule", width=14)
    table.add_column("Type", width=20)
    table.add_column("Description")

    for i, rule in enumerate(get_all_rules(), 1):
        table.add_row(str(i), rule.rule_id, rule.issue_type.value, rule.description)

    console.print(table)


def main():
    """Entry point for the CLI."""
    cli()


if __name__ == "__main__":
    main()
