"""Rich rendering utilities for CLI commands."""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.markup import escape
from rich.table import Table

if TYPE_CHECKING:
    from collections.abc import Iterable

    from rich.console import Console

    from nflow._eval_engine import EvaluationFailure, SequenceIssue
    from nflow._flows import AggregatedEdge, FlowEdge, FlowStatistics
    from nflow._models import Variable


def _format_value(value: float | None) -> str:
    return "[dim]null[/dim]" if value is None else f"{value:.6g}"


def render_failures(failures: list[EvaluationFailure], console: Console) -> None:
    """Render evaluation failures as a Rich table.

    Args:
        failures: Failures of one evaluation pass.
        console: Rich Console to output to.

    """
    if not failures:
        return

    table = Table(show_header=True, header_style="bold cyan")
    table.add_column("Variable", style="bold")
    table.add_column("Kind")
    table.add_column("Message", style="dim")

    for failure in failures:
        table.add_row(escape(failure.variable_id), f"[red]{failure.kind.upper()}[/red]", escape(failure.message))

    console.print(table)


def render_issues(issues: list[SequenceIssue], console: Console) -> None:
    """Render sequence check issues as a Rich table."""
    if not issues:
        console.print("[dim]No sequence issues found[/dim]")
        return

    table = Table(show_header=True, header_style="bold cyan")
    table.add_column("Variable", style="bold")
    table.add_column("Issue")
    table.add_column("Detail", style="dim")

    for issue in issues:
        table.add_row(escape(issue.variable_id), f"[yellow]{issue.kind.upper()}[/yellow]", escape(issue.message))

    console.print(table)
    console.print(f"\n[dim]Total: {len(issues)} issues[/dim]")


def render_aggregated_flows(edges: Iterable[AggregatedEdge], console: Console) -> None:
    """Render aggregated flow edges as a Rich table."""
    edges = list(edges)
    if not edges:
        console.print("[dim]No flows with a value[/dim]")
        return

    table = Table(show_header=True, header_style="bold cyan")
    table.add_column("From", style="bold")
    table.add_column("To", style="bold")
    table.add_column("Total", justify="right", style="green")
    table.add_column("Count", justify="right")
    table.add_column("Variables", style="dim")

    for edge in edges:
        table.add_row(
            edge.source.label,
            edge.target.label,
            _format_value(edge.total_value),
            str(edge.variable_count),
            escape(", ".join(v.id for v in edge.variables)),
        )

    console.print(table)
    console.print(f"\n[dim]Total: {len(edges)} edges[/dim]")


def render_parallel_flows(edges: Iterable[FlowEdge], console: Console) -> None:
    """Render un-aggregated flow edges as a Rich table."""
    edges = list(edges)
    if not edges:
        console.print("[dim]No flows with a value[/dim]")
        return

    table = Table(show_header=True, header_style="bold cyan")
    table.add_column("From", style="bold")
    table.add_column("To", style="bold")
    table.add_column("#", justify="right")
    table.add_column("Value", justify="right", style="green")
    table.add_column("Variable", style="dim")
    table.add_column("Caption")

    for edge in edges:
        table.add_row(
            edge.source.label,
            edge.target.label,
            str(edge.parallel_index),
            _format_value(edge.value),
            escape(edge.variable.id),
            escape(edge.variable.caption or ""),
        )

    console.print(table)
    console.print(f"\n[dim]Total: {len(edges)} edges[/dim]")


def render_statistics(stats: FlowStatistics, console: Console) -> None:
    """Render flow statistics as a two-column table."""
    table = Table(show_header=False, box=None)
    table.add_column("Metric", style="cyan")
    table.add_column("Count", justify="right")
    table.add_row("Variables", str(stats.total_variables))
    table.add_row("Display variables", str(stats.display_variables))
    table.add_row("Flow variables", str(stats.flow_variables))
    table.add_row("Usable for graph", str(stats.graph_variables))
    table.add_row("Pairs with several flows", str(stats.multi_flow_pairs))
    console.print(table)


def render_variable(variable: Variable, console: Console) -> None:
    """Render every field of a variable."""
    console.print(f"[bold]Variable:[/bold] {escape(variable.id)} [dim](n_id {variable.n_id})[/dim]")
    console.print()
    console.print(f"[cyan]Type:[/cyan]        {variable.type}")
    console.print(f"[cyan]Role:[/cyan]        {variable.role}")
    console.print(f"[cyan]Department:[/cyan]  {variable.dept.label} [dim]({variable.dept})[/dim]")
    console.print(f"[cyan]Value:[/cyan]       {_format_value(variable.value)} {escape(variable.unit)}")
    console.print(f"[cyan]Sequence:[/cyan]    {variable.sequence}")
    console.print(f"[cyan]Expression:[/cyan]  {escape(variable.expr or '-')}")
    if variable.depends:
        console.print(f"[cyan]Depends:[/cyan]     {escape(', '.join(variable.depends))}")
    if variable.from_dept is not None and variable.to_dept is not None:
        console.print(f"[cyan]Flow:[/cyan]        {variable.from_dept.label} → {variable.to_dept.label}")
    if variable.caption:
        console.print(f"[cyan]Caption:[/cyan]     {escape(variable.caption)}")
