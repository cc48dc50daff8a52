"""Plugins shipped with cellgraph."""

from cellgraph.plugins.builtin.logging import LifecycleLoggingPlugin
from cellgraph.plugins.builtin.logging import get_logger

__all__ = [
    "LifecycleLoggingPlugin",
    "get_logger",
]
