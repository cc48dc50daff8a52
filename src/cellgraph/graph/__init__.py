"""In-memory task graph: storage, readiness, validation and document builders."""

from cellgraph.graph.builder import CodeCell
from cellgraph.graph.builder import build_tasks
from cellgraph.graph.readiness import blocked_by
from cellgraph.graph.readiness import get_ready
from cellgraph.graph.readiness import is_ready
from cellgraph.graph.store import TaskStore
from cellgraph.graph.validation import find_cycle
from cellgraph.graph.validation import find_dangling_inputs
from cellgraph.graph.validation import validate_graph

__all__ = [
    "CodeCell",
    "TaskStore",
    "blocked_by",
    "build_tasks",
    "find_cycle",
    "find_dangling_inputs",
    "get_ready",
    "is_ready",
    "validate_graph",
]
