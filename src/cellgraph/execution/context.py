"""Execution context for the task currently running in this asyncio task or thread."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar

from cellgraph.tasks import Task

_current_task: ContextVar[Task | None] = ContextVar("cellgraph_current_task", default=None)


@contextmanager
def task_context(task: Task) -> Iterator[None]:
    """Publish `task` as the current task for the duration of the block."""
    token = _current_task.set(task)
    try:
        yield
    finally:
        _current_task.reset(token)


def get_current_task() -> Task | None:
    """
    Get the task being executed in the current context.

    Returns:
        The task, or None outside of task execution. Context variables are copied into threads
        started with `asyncio.to_thread`, so offloaded compute cells see their task too.
    """
    return _current_task.get()
