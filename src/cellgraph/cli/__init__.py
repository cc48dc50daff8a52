"""Cellgraph CLI - Command-line interface for cellgraph."""

from __future__ import annotations

from cellgraph.cli.base import cli

__all__ = ["cli"]


if __name__ == "__main__":
    cli()
