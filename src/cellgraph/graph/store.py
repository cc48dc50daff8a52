"""Passive storage for the tasks of one document."""

from __future__ import annotations

from collections.abc import Callable
from collections.abc import Iterable
from collections.abc import Iterator
from typing import Any

from cellgraph.exceptions import GraphError
from cellgraph.tasks import Task


class TaskStore:
    """
    Mapping from task id to `Task` for a single document.

    The store has no behavior of its own and no concurrency control: the scheduler and the
    invalidator read and mutate the task records it holds. A document rebuild replaces the whole
    store rather than adding or removing tasks one by one.

    Args:
        tasks: Tasks to store. Ids must be unique.

    Raises:
        GraphError: If two tasks share an id.
    """

    def __init__(self, tasks: Iterable[Task] = ()) -> None:
        self._tasks: dict[str, Task] = {}
        for task in tasks:
            if not isinstance(task, Task):
                raise GraphError(f"TaskStore expects Task instances, got {type(task).__name__}")
            if task.id in self._tasks:
                raise GraphError(f"Duplicate task id '{task.id}' in graph")
            self._tasks[task.id] = task

    @classmethod
    def coerce(cls, tasks: TaskStore | Iterable[Task]) -> TaskStore:
        """Return `tasks` unchanged if it is already a store, otherwise build one from it."""
        if isinstance(tasks, TaskStore):
            return tasks
        return cls(tasks)

    def __getitem__(self, task_id: str) -> Task:
        return self._tasks[task_id]

    def __contains__(self, task_id: object) -> bool:
        return task_id in self._tasks

    def __iter__(self) -> Iterator[Task]:
        return iter(list(self._tasks.values()))

    def __len__(self) -> int:
        return len(self._tasks)

    def __repr__(self) -> str:
        return f"TaskStore({list(self._tasks)})"

    @property
    def ids(self) -> list[str]:
        return list(self._tasks)

    def get(self, task_id: str) -> Task | None:
        """Look up a task by id, returning None if absent."""
        return self._tasks.get(task_id)

    def filter(self, predicate: Callable[[Task], bool]) -> list[Task]:
        """Return the tasks matching `predicate`, in store order."""
        return [task for task in self._tasks.values() if predicate(task)]

    def dependents(self, task_id: str) -> list[Task]:
        """Return the tasks that list `task_id` among their inputs."""
        return self.filter(lambda task: task_id in task.inputs)

    def input_values(self, task: Task) -> list[Any]:
        """
        Values of `task`'s inputs, in input order.

        Ids that do not resolve to a task, or resolve to a task without a value, yield None.
        """
        values = []
        for input_id in task.inputs:
            source = self._tasks.get(input_id)
            values.append(source.value if source is not None else None)
        return values

    def values(self) -> dict[str, Any]:
        """Values of all complete tasks keyed by id, for substitution into a rendered document."""
        return {task_id: task.value for task_id, task in self._tasks.items() if task.has_value}
