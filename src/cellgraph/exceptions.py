"""
Centralized exception classes for the cellgraph library.

All cellgraph-specific exceptions inherit from CellgraphError for easy catching. Exceptions raised
by a task's own behavior (a failing HTTP request, an error inside a compute cell) are not wrapped
and propagate to the caller of the run unchanged.
"""


class CellgraphError(Exception):
    """Base exception for all cellgraph errors."""


class TaskError(CellgraphError):
    """Raised when a task is defined incorrectly (e.g. a payload of the wrong shape)."""


class GraphError(CellgraphError):
    """Raised when a task graph is malformed (duplicate ids, dangling inputs, cycles)."""


class ExecutionError(CellgraphError):
    """Raised when a host facility fails while executing a task."""


class RunCancelledError(CellgraphError):
    """Raised when a run is aborted through its cancellation token."""


class RunTimeoutError(RunCancelledError):
    """Raised when a run does not quiesce within its timeout."""
