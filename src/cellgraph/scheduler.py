"""Scheduler driving a task graph to quiescence."""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Iterable
from dataclasses import dataclass
from dataclasses import field
from typing import Any

from pluggy import HookRelay

from cellgraph.exceptions import RunCancelledError
from cellgraph.exceptions import RunTimeoutError
from cellgraph.execution.cancellation import CancellationToken
from cellgraph.execution.executor import Executor
from cellgraph.graph.readiness import blocked_by
from cellgraph.graph.readiness import get_ready
from cellgraph.graph.store import TaskStore
from cellgraph.graph.validation import validate_graph
from cellgraph.plugins.manager import resolve_hook_manager
from cellgraph.settings import CellgraphSettings
from cellgraph.settings import get_global_settings
from cellgraph.tasks import Task
from cellgraph.tasks import TaskState

logger = logging.getLogger(__name__)


# region API


def run(
    tasks: TaskStore | Iterable[Task],
    *,
    executor: Executor | None = None,
    settings: CellgraphSettings | None = None,
    hooks: list[Any] | None = None,
    token: CancellationToken | None = None,
    timeout: float | None = None,
) -> RunResult:
    """
    Run every reachable task in a graph, blocking until the graph quiesces.

    Args:
        tasks: The graph to run, as a store or an iterable of tasks.
        executor: Executor to use. Defaults to an `Executor` built from `settings`.
        settings: Settings for this run. If None, the global settings are used.
        hooks: Optional list of hook implementations for this run only. These are combined with
            any globally registered hooks.
        token: Optional token used to cancel the run from elsewhere.
        timeout: Time limit in seconds. Defaults to `settings.run_timeout`.

    Returns:
        Summary of the run.

    Examples:
        >>> from cellgraph import Task, TaskType
        >>> tasks = [
        ...     Task("a", TaskType.VARIABLE, payload=1),
        ...     Task("b", TaskType.VARIABLE, payload=2),
        ...     Task("c", TaskType.COMPUTE, payload=lambda a, b: a + b, inputs=["a", "b"]),
        ... ]
        >>> run(tasks).completed[-1]
        'c'
        >>> tasks[2].value
        3
    """
    scheduler = Scheduler(executor, settings=settings, hooks=hooks)
    return scheduler.run(tasks, token=token, timeout=timeout)


async def run_async(
    tasks: TaskStore | Iterable[Task],
    *,
    executor: Executor | None = None,
    settings: CellgraphSettings | None = None,
    hooks: list[Any] | None = None,
    token: CancellationToken | None = None,
    timeout: float | None = None,
) -> RunResult:
    """
    Run every reachable task in a graph from within an async context.

    Accepts the same arguments as `run`.
    """
    scheduler = Scheduler(executor, settings=settings, hooks=hooks)
    return await scheduler.run_async(tasks, token=token, timeout=timeout)


@dataclass
class RunResult:
    """Summary of a scheduler run."""

    completed: list[str] = field(default_factory=list)
    """Ids of the tasks completed by this run, in completion order."""

    stalled: dict[str, list[str]] = field(default_factory=dict)
    """Tasks still pending after the run, mapped to the inputs they are waiting on."""

    duration: float = 0.0
    """Wall-clock duration of the run in seconds."""

    @property
    def quiesced(self) -> bool:
        """Return True if no task was left pending."""
        return not self.stalled


# region Internal


class Scheduler:
    """
    Fan-out/fan-in scheduler for a task graph.

    A run seeds a queue with every ready task and starts a pool of workers on it. Each worker
    claims a task, executes it, and on completion re-scans the whole store for tasks that became
    ready, pushing any that are not already queued. The run ends once the queue is drained and
    no worker is busy.

    Several completions may discover the same task at once. The claim made by the executor is an
    atomic compare-and-set on the task, so whichever worker loses the race simply skips it and
    each task executes at most once per readiness.

    A run ends early in three ways:
        - A task fails: the other in-flight tasks are cancelled and left executing (they must be
          invalidated before they can run again) and the task's exception is re-raised.
        - The token is cancelled: in-flight tasks are interrupted and returned to pending, and
          `RunCancelledError` is raised.
        - The timeout elapses: as for cancellation, but `RunTimeoutError` is raised.

    Args:
        executor: Executor to use. Defaults to an `Executor` built from `settings`.
        settings: Settings to use. If None, the global settings are read at the start of each
            run.
        hooks: Optional list of hook implementations for this scheduler's runs only.
    """

    def __init__(
        self,
        executor: Executor | None = None,
        *,
        settings: CellgraphSettings | None = None,
        hooks: list[Any] | None = None,
    ) -> None:
        self._settings = settings
        self.executor = executor or Executor(settings=settings)
        self.hooks = hooks

    @property
    def settings(self) -> CellgraphSettings:
        return self._settings or get_global_settings()

    def run(
        self,
        tasks: TaskStore | Iterable[Task],
        *,
        token: CancellationToken | None = None,
        timeout: float | None = None,
    ) -> RunResult:
        """Run the graph on a new event loop, blocking until it quiesces."""
        return asyncio.run(self.run_async(tasks, token=token, timeout=timeout))

    async def run_async(
        self,
        tasks: TaskStore | Iterable[Task],
        *,
        token: CancellationToken | None = None,
        timeout: float | None = None,
    ) -> RunResult:
        """
        Run the graph until every reachable task is complete.

        Tasks that cannot become ready (missing upstream work, cycles, failed inputs) are left
        pending and reported in `RunResult.stalled`; stalls never raise.

        Raises:
            GraphError: If strict validation is enabled and the graph is malformed.
            RunCancelledError: If `token` is cancelled before the run quiesces.
            RunTimeoutError: If the run does not quiesce within the timeout.
            Exception: Any exception raised by a task's behavior, unchanged.
        """
        store = TaskStore.coerce(tasks)
        settings = self.settings
        hooks = resolve_hook_manager(self.hooks).hook

        validate_graph(store, strict=settings.strict_validation)
        if timeout is None:
            timeout = settings.run_timeout

        ready = get_ready(store)
        hooks.before_run(task_count=len(store), ready_count=len(ready))

        start_time = time.perf_counter()
        state = _RunState(store)
        try:
            async with self.executor.session():
                await self._drive(state, ready, hooks, token, timeout)
        except BaseException as e:
            hooks.on_run_error(error=e, duration=time.perf_counter() - start_time)
            raise

        result = RunResult(
            completed=state.completed,
            stalled={
                task.id: blocked_by(task, store)
                for task in store
                if task.state is TaskState.PENDING
            },
            duration=time.perf_counter() - start_time,
        )
        hooks.after_run(result=result)
        return result

    async def _drive(
        self,
        state: _RunState,
        ready: list[Task],
        hooks: HookRelay,
        token: CancellationToken | None,
        timeout: float | None,
    ) -> None:
        """Run the worker pool until the queue drains or the run is aborted."""
        if token is not None and token.cancelled:
            raise RunCancelledError(token.reason or "Run cancelled before it started")

        for task in ready:
            state.enqueue(task)
        if not state.queued:
            return

        worker_count = self.settings.max_concurrency or len(state.store)
        workers = [
            asyncio.create_task(self._worker(state, hooks))
            for _ in range(max(1, min(worker_count, len(state.store))))
        ]

        drained = asyncio.create_task(state.queue.join())
        failed = asyncio.create_task(state.failed.wait())
        waiters = {drained, failed}
        cancelled = None
        if token is not None:
            cancelled = asyncio.create_task(token.wait())
            waiters.add(cancelled)

        try:
            done, _ = await asyncio.wait(
                waiters, timeout=timeout, return_when=asyncio.FIRST_COMPLETED
            )
        finally:
            state.aborting = True
            for pending in [*workers, *waiters]:
                pending.cancel()
            await asyncio.gather(*workers, *waiters, return_exceptions=True)
            if state.error is None:
                state.release_in_flight()

        if state.error is not None:
            raise state.error
        if drained in done:
            return
        if token is not None and cancelled in done:
            raise RunCancelledError(token.reason or "Run cancelled")
        raise RunTimeoutError(f"Run did not finish within {timeout} seconds")

    async def _worker(self, state: _RunState, hooks: HookRelay) -> None:
        while True:
            task = await state.queue.get()
            try:
                state.queued.discard(task.id)
                generation = task.try_begin()
                if generation is None:
                    continue

                state.in_flight[task.id] = (task, generation)
                try:
                    completed = await self.executor.execute(task, generation, state.store, hooks)
                except BaseException as e:
                    # Cancellation of the pool itself, not a failure of the task
                    if state.aborting:
                        raise
                    state.fail(e)
                    return

                del state.in_flight[task.id]
                if completed:
                    state.completed.append(task.id)
                    for newly_ready in get_ready(state.store):
                        state.enqueue(newly_ready)
            finally:
                state.queue.task_done()


class _RunState:
    """Mutable bookkeeping for a single run."""

    def __init__(self, store: TaskStore) -> None:
        self.store = store
        self.queue: asyncio.Queue[Task] = asyncio.Queue()
        self.queued: set[str] = set()
        self.in_flight: dict[str, tuple[Task, int]] = {}
        self.completed: list[str] = []
        self.failed = asyncio.Event()
        self.error: BaseException | None = None
        self.aborting = False

    def enqueue(self, task: Task) -> None:
        if task.id in self.queued:
            return
        self.queued.add(task.id)
        self.queue.put_nowait(task)

    def fail(self, error: BaseException) -> None:
        if self.error is None:
            self.error = error
        self.failed.set()

    def release_in_flight(self) -> None:
        """Return interrupted tasks to pending so that a later run picks them up again."""
        for task, generation in self.in_flight.values():
            if task.release(generation):
                logger.debug(f"Interrupted: {task.id}")
        self.in_flight.clear()
