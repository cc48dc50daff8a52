"""CLI ``validate`` command for checking task graphs without running them."""

from __future__ import annotations

import click

from cellgraph.cli._shared import load_graph_source
from cellgraph.cli._shared import materialize_graph
from cellgraph.graph.validation import find_cycle
from cellgraph.graph.validation import find_dangling_inputs


@click.command()
@click.argument("graph")
@click.option(
    "--param",
    "-p",
    multiple=True,
    help="Graph builder parameter in format 'name=value'. Can be specified multiple times.",
)
def validate(graph: str, param: tuple[str, ...]) -> None:
    """
    Check a task graph for unknown inputs and dependency cycles.

    Exits with status 1 if any problem is found.
    """
    try:
        source = load_graph_source(graph)
    except (ValueError, ModuleNotFoundError, AttributeError) as e:
        raise click.ClickException(str(e)) from e

    store = materialize_graph(source, param)
    dangling = find_dangling_inputs(store)
    cycle = find_cycle(store)

    for task_id, missing in dangling.items():
        click.echo(f"Task '{task_id}' depends on unknown task(s): {', '.join(missing)}")
    if cycle:
        click.echo(f"Circular dependency: {' -> '.join(cycle)}")

    if dangling or cycle:
        raise click.exceptions.Exit(1)

    click.echo(f"Graph OK: {len(store)} task(s)")
