from __future__ import annotations

import click

import cellgraph
from cellgraph.cli.cmd_run import run
from cellgraph.cli.cmd_validate import validate


@click.group(context_settings={"help_option_names": ["-h", "--help"], "max_content_width": 120})
@click.version_option(version=cellgraph.__version__)
@click.pass_context
def cli(ctx: click.Context) -> None:
    """Cellgraph - task graph scheduler for reactive notebooks."""


cli.add_command(run)
cli.add_command(validate)
