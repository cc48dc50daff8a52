"""Readiness evaluation over a task store."""

from __future__ import annotations

from cellgraph.graph.store import TaskStore
from cellgraph.tasks import Task
from cellgraph.tasks import TaskState


def is_ready(task: Task, store: TaskStore) -> bool:
    """
    Check whether a task may start executing.

    A task is ready when it is pending and every input that exists in the store is complete.
    Input ids that do not resolve to a task count as satisfied.
    """
    if task.state is not TaskState.PENDING:
        return False
    return not blocked_by(task, store)


def blocked_by(task: Task, store: TaskStore) -> list[str]:
    """Return the ids of `task`'s existing inputs that are not yet complete."""
    blocking = []
    for input_id in task.inputs:
        source = store.get(input_id)
        if source is not None and source.state is not TaskState.COMPLETE:
            blocking.append(input_id)
    return blocking


def get_ready(store: TaskStore) -> list[Task]:
    """
    Get all tasks that are ready to execute, in store order.

    Evaluated from scratch on every call; no dependency counters are cached between calls, so
    the result always reflects invalidations made since the last scan.
    """
    return store.filter(lambda task: is_ready(task, store))
