"""Task execution: per-type behaviors, host facilities and cancellation."""

from cellgraph.execution.cancellation import CancellationToken
from cellgraph.execution.context import get_current_task
from cellgraph.execution.executor import SCRIPTS_LOADED
from cellgraph.execution.executor import Executor
from cellgraph.execution.hosts import HttpScriptHost
from cellgraph.execution.hosts import ScriptHost

__all__ = [
    "SCRIPTS_LOADED",
    "CancellationToken",
    "Executor",
    "HttpScriptHost",
    "ScriptHost",
    "get_current_task",
]
