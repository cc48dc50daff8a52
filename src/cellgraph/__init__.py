"""Cellgraph: task graph scheduler for reactive notebooks."""

__version__ = "0.3.0"

from . import settings
from .exceptions import CellgraphError
from .exceptions import ExecutionError
from .exceptions import GraphError
from .exceptions import RunCancelledError
from .exceptions import RunTimeoutError
from .exceptions import TaskError
from .execution import CancellationToken
from .execution import Executor
from .graph import CodeCell
from .graph import TaskStore
from .graph import build_tasks
from .invalidation import Invalidator
from .invalidation import update
from .plugins.manager import _initialize_plugin_system
from .scheduler import RunResult
from .scheduler import Scheduler
from .scheduler import run
from .scheduler import run_async
from .tasks import MISSING
from .tasks import Task
from .tasks import TaskState
from .tasks import TaskType

# Initialize hooks system on module import
_initialize_plugin_system()

__all__ = [
    "MISSING",
    "CancellationToken",
    "CellgraphError",
    "CodeCell",
    "ExecutionError",
    "Executor",
    "GraphError",
    "Invalidator",
    "RunCancelledError",
    "RunResult",
    "RunTimeoutError",
    "Scheduler",
    "Task",
    "TaskError",
    "TaskState",
    "TaskStore",
    "TaskType",
    "build_tasks",
    "run",
    "run_async",
    "settings",
    "update",
]
