"""Invalidation of tasks and cascading resets through their dependents."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any

from cellgraph.graph.store import TaskStore
from cellgraph.plugins.manager import resolve_hook_manager
from cellgraph.tasks import MISSING
from cellgraph.tasks import Task

logger = logging.getLogger(__name__)


def update(
    tasks: TaskStore | Iterable[Task],
    task_id: str,
    payload: Any = MISSING,
    *,
    hooks: list[Any] | None = None,
) -> list[str]:
    """
    Invalidate a task and everything downstream of it.

    Convenience wrapper around `Invalidator.update`. Nothing is re-run; call `run` again to
    recompute the invalidated part of the graph.

    Examples:
        >>> from cellgraph import Task, TaskType, run
        >>> tasks = [
        ...     Task("a", TaskType.VARIABLE, payload=1),
        ...     Task("b", TaskType.COMPUTE, payload=lambda a: a * 10, inputs=["a"]),
        ... ]
        >>> _ = run(tasks)
        >>> update(tasks, "a", 5)
        ['a', 'b']
        >>> tasks[1].state.value
        'pending'
        >>> _ = run(tasks)
        >>> tasks[1].value
        50
    """
    return Invalidator(TaskStore.coerce(tasks), hooks=hooks).update(task_id, payload)


class Invalidator:
    """
    Resets tasks in response to edits.

    Invalidation is the only operation allowed to move a task backwards: the task and every task
    that transitively depends on it go straight back to pending with their values cleared,
    whatever state they were in. Tasks that do not depend on the updated task are untouched.

    An invalidation is expected to happen between runs. If it does overlap a run, executions
    already in flight for the reset tasks are discarded when they finish (each reset bumps the
    task's generation), so a stale result can never be published.

    Args:
        store: Graph holding the tasks.
        hooks: Optional list of hook implementations for this invalidator only.
    """

    def __init__(self, store: TaskStore, *, hooks: list[Any] | None = None) -> None:
        self.store = store
        self.hooks = hooks

    def update(self, task_id: str, payload: Any = MISSING) -> list[str]:
        """
        Reset `task_id` and cascade the reset to all of its transitive dependents.

        Args:
            task_id: Task to invalidate. Unknown ids are ignored.
            payload: Replacement payload. Any value, including None, replaces the current one;
                leave it out to keep the existing payload.

        Returns:
            The ids that were reset, starting with `task_id`, in cascade order.

        Raises:
            TaskError: If `payload` does not fit the task's type. Nothing is reset in that case.
        """
        task = self.store.get(task_id)
        if task is None:
            logger.debug(f"Ignoring update of unknown task '{task_id}'")
            return []

        hooks = resolve_hook_manager(self.hooks).hook
        logger.debug(f"Updating {task_id}")
        task.reset(payload)
        hooks.on_task_invalidated(task=task, source_id=task_id)

        reset = [task_id]
        seen = {task_id}
        stack = [dependent.id for dependent in reversed(self.store.dependents(task_id))]

        # Each task is reset once per call, even when reachable through several paths or a cycle
        while stack:
            current_id = stack.pop()
            if current_id in seen:
                continue
            seen.add(current_id)

            dependent = self.store[current_id]
            dependent.reset()
            hooks.on_task_invalidated(task=dependent, source_id=task_id)
            reset.append(current_id)

            stack.extend(d.id for d in reversed(self.store.dependents(current_id)))

        return reset
