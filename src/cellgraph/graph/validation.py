"""Structural checks for task graphs: dangling inputs and dependency cycles."""

from __future__ import annotations

import logging

from cellgraph.exceptions import GraphError
from cellgraph.graph.store import TaskStore

logger = logging.getLogger(__name__)


def find_dangling_inputs(store: TaskStore) -> dict[str, list[str]]:
    """
    Find input ids that do not resolve to any task in the store.

    Returns:
        Mapping from task id to its unresolved input ids, for tasks that have any.
    """
    dangling: dict[str, list[str]] = {}
    for task in store:
        if missing := [input_id for input_id in task.inputs if input_id not in store]:
            dangling[task.id] = missing
    return dangling


def find_cycle(store: TaskStore) -> list[str] | None:
    """
    Find a dependency cycle, if any.

    Uses an iterative depth-first traversal over input edges to avoid recursion limits on long
    chains.

    Returns:
        The ids along the cycle with the first id repeated at the end (e.g. `["a", "b", "a"]`),
        or None if the graph is acyclic.
    """
    done: set[str] = set()

    for root in store.ids:
        if root in done:
            continue

        path: list[str] = []
        on_path: set[str] = set()
        stack: list[tuple[str, bool]] = [(root, False)]

        while stack:
            task_id, leaving = stack.pop()

            if leaving:
                path.pop()
                on_path.discard(task_id)
                done.add(task_id)
                continue

            if task_id in done:
                continue

            path.append(task_id)
            on_path.add(task_id)
            stack.append((task_id, True))

            for input_id in reversed(store[task_id].inputs):
                if input_id in on_path:
                    start = path.index(input_id)
                    return path[start:] + [input_id]
                if input_id in store and input_id not in done:
                    stack.append((input_id, False))

    return None


def validate_graph(store: TaskStore, *, strict: bool = False) -> None:
    """
    Check a graph for dangling inputs and cycles before running it.

    Args:
        store: Graph to check.
        strict: If True, raise on any problem. If False, log a warning for each problem and let
            execution proceed: missing inputs are treated as satisfied and cycles stall.

    Raises:
        GraphError: In strict mode, if an input id is unresolved or a cycle exists.
    """
    for task_id, missing in find_dangling_inputs(store).items():
        message = f"Task '{task_id}' depends on unknown task(s): {missing}"
        if strict:
            raise GraphError(message)
        logger.warning(f"{message}; treating them as satisfied")

    if cycle := find_cycle(store):
        message = f"Circular dependency detected: {' -> '.join(cycle)}"
        if strict:
            raise GraphError(message)
        logger.warning(f"{message}; these tasks will never run")
