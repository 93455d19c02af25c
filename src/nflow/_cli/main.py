import logging
from pathlib import Path
from typing import Annotated

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from nflow._edits import EditValidationError
from nflow._flows import flow_statistics
from nflow._io import InputFileError, export_graph_json, export_to_toml, load_edits
from nflow._projection import build_flow_graph
from nflow._store import DuplicateVariableError, VariableStore

from .config import ConfigError, NflowConfig, get_config
from .render import (
    render_aggregated_flows,
    render_failures,
    render_issues,
    render_parallel_flows,
    render_statistics,
    render_variable,
)

app = typer.Typer()

logger = logging.getLogger(__name__)
# Console for stderr (info/errors)
err_console = Console(stderr=True)
# Console for stdout (results)
out_console = Console()

VariablesOption = Annotated[
    Path | None,
    typer.Option("-v", "--variables", help="Path to the variables JSON file"),
]
DisplayOption = Annotated[
    Path | None,
    typer.Option("-d", "--display", help="Path to the JSON list of n_id values to display"),
]
EditsOption = Annotated[
    Path | None,
    typer.Option("-e", "--edits", help="Path to a TOML file with an [inputs] table of new input values"),
]


@app.callback()
def callback(
    *,
    verbose: bool = typer.Option(default=False, help="Enable verbose output"),
) -> None:
    """Nitrogen flow network evaluation CLI."""
    log_level = logging.DEBUG if verbose else logging.INFO

    # Configure rich logging handler to output to stderr
    logging.basicConfig(
        level=log_level,
        format="%(message)s",
        handlers=[
            RichHandler(
                console=err_console,
                show_time=False,
                show_path=verbose,
                rich_tracebacks=True,
            ),
        ],
    )


def _config() -> NflowConfig:
    try:
        return get_config()
    except ConfigError as e:
        err_console.print(f"[red]Configuration error: {escape(str(e))}[/red]")
        raise typer.Exit(code=1) from e


def _load_store(
    variables: Path | None,
    display: Path | None,
    edits: Path | None,
    config: NflowConfig,
) -> VariableStore:
    """Load the store, falling back to configured paths, and apply edits."""
    variables = variables or config.variables
    display = display or config.display
    edits = edits or config.edits

    if variables is None:
        err_console.print("[red]No variables file given. Use --variables or set [tool.nflow].variables[/red]")
        raise typer.Exit(code=1)

    err_console.print(f"[cyan]Loading variables from:[/cyan] {variables}")
    try:
        store = VariableStore.from_files(variables, display)
    except (OSError, ValidationError, DuplicateVariableError) as e:
        err_console.print(f"[red]✗ Could not load variables: {escape(str(e))}[/red]")
        raise typer.Exit(code=1) from e

    if display is not None:
        err_console.print(f"[cyan]Display subset from:[/cyan] {display}")

    if edits is not None:
        err_console.print(f"[cyan]Applying edits from:[/cyan] {edits}")
        try:
            applied = store.apply_edits(load_edits(edits))
        except EditValidationError as e:
            err_console.print("[red]✗ Invalid edits, nothing was applied:[/red]")
            for issue in e.issues:
                err_console.print(f"  [red]•[/red] {escape(issue.variable_id)}: {escape(issue.message)}")
            raise typer.Exit(code=1) from e
        except (OSError, InputFileError) as e:
            err_console.print(f"[red]✗ Could not load edits: {escape(str(e))}[/red]")
            raise typer.Exit(code=1) from e
        err_console.print(f"[green]✓ {len(applied)} input value(s) updated[/green]")

    return store


def _evaluate(store: VariableStore) -> None:
    err_console.print("[cyan]Evaluating variables...[/cyan]")
    result = store.evaluate_all()
    computed = len(result.values) - len(result.failures)
    err_console.print(f"[green]✓ {computed} computed[/green], [red]{len(result.failures)} failed[/red]")


@app.command()
def calc(
    *,
    variables: VariablesOption = None,
    display: DisplayOption = None,
    edits: EditsOption = None,
    output: Annotated[
        Path | None,
        typer.Option("-o", "--output", help="Path to output TOML file"),
    ] = None,
    strict: Annotated[
        bool,
        typer.Option("--strict", help="Exit non-zero if any variable failed to evaluate"),
    ] = False,
) -> None:
    """Evaluate all derived variables and export the results."""
    config = _config()
    err_console.print()
    store = _load_store(variables, display, edits, config)
    err_console.print()

    err_console.print("[cyan]Evaluating variables...[/cyan]")
    result = store.evaluate_all()
    err_console.print()

    if result.failures:
        err_console.print(f"[yellow]⚠ {len(result.failures)} variable(s) could not be evaluated:[/yellow]")
        render_failures(result.failures, err_console)
        err_console.print()

    output = output or config.output
    if output is not None:
        err_console.print(f"[cyan]Exporting results to:[/cyan] {output}")
        export_to_toml(store, result, output)
        err_console.print()

    computed = len(result.values) - len(result.failures)
    err_console.print(f"[green]✓ Calculation complete:[/green] {computed} computed, {len(result.failures)} failed")
    err_console.print()

    if strict and result.failures:
        raise typer.Exit(code=1)


@app.command()
def check(
    *,
    variables: VariablesOption = None,
    display: DisplayOption = None,
    stats: Annotated[
        bool,
        typer.Option("--stats", help="Also evaluate and print flow graph statistics"),
    ] = False,
) -> None:
    """Check that sequence numbers agree with variable references."""
    config = _config()
    err_console.print()
    store = _load_store(variables, display, None, config)
    err_console.print()

    err_console.print("[cyan]Checking evaluation order...[/cyan]")
    issues = store.check_sequence()
    render_issues(issues, out_console)
    err_console.print()

    if stats:
        _evaluate(store)
        display_ids = store.display_ids
        if display_ids is None:
            display_ids = frozenset(v.n_id for v in store.get_display_variables())
        render_statistics(flow_statistics(store.variables, display_ids), out_console)
        err_console.print()

    if issues:
        err_console.print(f"[red]✗ {len(issues)} sequence issue(s) found[/red]")
        raise typer.Exit(code=1)

    err_console.print("[green]✓ Evaluation order is consistent[/green]")
    err_console.print()


@app.command()
def flows(
    *,
    variables: VariablesOption = None,
    display: DisplayOption = None,
    edits: EditsOption = None,
    parallel: Annotated[
        bool,
        typer.Option("--parallel", help="List every flow variable instead of aggregating by department pair"),
    ] = False,
    all_variables: Annotated[
        bool,
        typer.Option("--all", help="Include variables outside the display subset"),
    ] = False,
) -> None:
    """Evaluate and print the flows between departments."""
    config = _config()
    err_console.print()
    store = _load_store(variables, display, edits, config)
    _evaluate(store)
    err_console.print()

    display_only = not all_variables
    if parallel:
        render_parallel_flows(store.flow_edges(display_only=display_only), out_console)
    else:
        render_aggregated_flows(store.aggregate_flows(display_only=display_only).values(), out_console)


@app.command()
def graph(
    *,
    variables: VariablesOption = None,
    display: DisplayOption = None,
    edits: EditsOption = None,
    output: Annotated[
        Path | None,
        typer.Option("-o", "--output", help="Path to output JSON file"),
    ] = None,
    parallel: Annotated[
        bool,
        typer.Option("--parallel", help="Emit one edge per flow variable instead of aggregated edges"),
    ] = False,
) -> None:
    """Evaluate and write the department flow graph as JSON elements."""
    config = _config()
    err_console.print()
    store = _load_store(variables, display, edits, config)
    _evaluate(store)

    output = output or config.graph
    if output is None:
        err_console.print("[red]No output file given. Use --output or set [tool.nflow].graph[/red]")
        raise typer.Exit(code=1)

    flow_graph = build_flow_graph(store.get_display_variables(), aggregate=not parallel)
    err_console.print(f"[cyan]Writing graph to:[/cyan] {output}")
    export_graph_json(flow_graph, output)

    err_console.print()
    err_console.print(
        f"[green]✓ Graph written:[/green] {len(flow_graph.nodes)} nodes, {len(flow_graph.edges)} edges",
    )
    err_console.print()


@app.command()
def show(
    variable_id: Annotated[str, typer.Argument(help="Id of the variable to show")],
    *,
    variables: VariablesOption = None,
    edits: EditsOption = None,
) -> None:
    """Evaluate and print one variable."""
    config = _config()
    err_console.print()
    store = _load_store(variables, None, edits, config)
    _evaluate(store)
    err_console.print()

    if variable_id not in store:
        err_console.print(f"[red]Error: Variable not found: {escape(variable_id)}[/red]")
        raise typer.Exit(code=1)

    render_variable(store.get(variable_id), out_console)
    if store.last_result is not None:
        for failure in store.last_result.failures:
            if failure.variable_id == variable_id:
                out_console.print(f"[red]Evaluation failed:[/red] {escape(failure.message)}")


def main() -> None:
    app()
