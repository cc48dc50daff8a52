"""CLI ``run`` command for executing task graphs."""

from __future__ import annotations

import logging

import click

from cellgraph.cli._shared import load_graph_source
from cellgraph.cli._shared import materialize_graph
from cellgraph.cli._shared import parse_settings
from cellgraph.plugins.builtin.logging import LifecycleLoggingPlugin
from cellgraph.scheduler import Scheduler


@click.command()
@click.argument("graph")
@click.option(
    "--param",
    "-p",
    multiple=True,
    help="Graph builder parameter in format 'name=value'. Can be specified multiple times.",
)
@click.option(
    "--settings",
    "-s",
    multiple=True,
    help="Setting override in format 'name=value'. Can be specified multiple times.",
)
@click.option(
    "--timeout",
    "-t",
    type=float,
    default=None,
    help="Abort the run if it has not finished after this many seconds.",
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default=None,
    help="Log run and task lifecycle events at this level.",
)
def run(
    graph: str,
    param: tuple[str, ...],
    settings: tuple[str, ...],
    timeout: float | None,
    log_level: str | None,
) -> None:
    r"""
    Run a cellgraph task graph.

    GRAPH should be a dotted path to a TaskStore, a list of tasks, or a function returning
    either, e.g., 'notebooks.penguins.build_graph'.

    Examples:
    \b
    # Run a graph
    cellgraph run notebooks.penguins.build_graph

    \b
    # Run with builder parameters and settings
    cellgraph run notebooks.penguins.build_graph --param year=2008
    --settings max_concurrency=4
    """
    try:
        source = load_graph_source(graph)
    except (ValueError, ModuleNotFoundError, AttributeError) as e:
        raise click.ClickException(str(e)) from e

    store = materialize_graph(source, param)
    run_settings = parse_settings(settings)

    hooks = []
    if log_level:
        hooks.append(LifecycleLoggingPlugin(level=getattr(logging, log_level.upper())))

    click.echo(f"Running graph: {graph} ({len(store)} tasks)")

    try:
        result = Scheduler(settings=run_settings, hooks=hooks).run(store, timeout=timeout)
    except Exception as e:
        raise click.ClickException(f"Graph execution failed: {type(e).__name__}: {e}") from e

    click.echo(f"\nCompleted {len(result.completed)} task(s) in {result.duration:.3f}s")
    click.echo("Results:")
    for task in store:
        if task.has_value:
            click.echo(f"  {task.id}: {task.value!r}")

    if result.stalled:
        click.echo("Stalled:")
        for task_id, blocking in result.stalled.items():
            suffix = f" (waiting on {', '.join(blocking)})" if blocking else ""
            click.echo(f"  {task_id}{suffix}")
