"""Hook specifications for cellgraph execution lifecycle events."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from cellgraph.plugins.markers import hook_spec

if TYPE_CHECKING:
    from cellgraph.scheduler import RunResult
    from cellgraph.tasks import Task


class TaskSpec:
    """Hook specifications for task-level events."""

    @hook_spec
    def before_task_execute(self, task: Task) -> None:
        """
        Called after a task has been claimed and before its behavior runs.

        Args:
            task: The task about to execute (already in the executing state).
        """

    @hook_spec
    def after_task_execute(self, task: Task, value: Any, duration: float) -> None:
        """
        Called after a task completes successfully.

        Args:
            task: The completed task.
            value: The value the task produced.
            duration: Time taken to execute in seconds.
        """

    @hook_spec
    def on_task_error(self, task: Task, error: BaseException, duration: float) -> None:
        """
        Called when a task's behavior raises.

        Args:
            task: The failed task (left in the executing state).
            error: The exception that was raised.
            duration: Time taken before failure in seconds.
        """

    @hook_spec
    def on_task_invalidated(self, task: Task, source_id: str) -> None:
        """
        Called for each task reset by an invalidation.

        Args:
            task: The task that was reset to pending.
            source_id: Id of the task whose update started the cascade.
        """


class RunSpec:
    """Hook specifications for run-level events."""

    @hook_spec
    def before_run(self, task_count: int, ready_count: int) -> None:
        """
        Called before the scheduler starts executing a graph.

        Args:
            task_count: Total number of tasks in the store.
            ready_count: Number of tasks ready at the start of the run.
        """

    @hook_spec
    def after_run(self, result: RunResult) -> None:
        """
        Called when a run quiesces.

        Args:
            result: Summary of the run, including any stalled tasks.
        """

    @hook_spec
    def on_run_error(self, error: BaseException, duration: float) -> None:
        """
        Called when a run is aborted by a task failure, a cancellation or a timeout.

        Args:
            error: The exception that ends the run.
            duration: Time elapsed before the run was aborted, in seconds.
        """
