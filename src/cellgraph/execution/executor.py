"""Per-type task behaviors and the execution envelope shared by all task types."""

from __future__ import annotations

import asyncio
import inspect
import logging
import time
from collections.abc import AsyncIterator
from collections.abc import Awaitable
from collections.abc import Callable
from contextlib import asynccontextmanager
from typing import Any

import httpx
from pluggy import HookRelay

from cellgraph.execution.context import task_context
from cellgraph.execution.hosts import HttpScriptHost
from cellgraph.execution.hosts import ScriptHost
from cellgraph.graph.store import TaskStore
from cellgraph.settings import CellgraphSettings
from cellgraph.settings import get_global_settings
from cellgraph.tasks import Task
from cellgraph.tasks import TaskType

logger = logging.getLogger(__name__)

SCRIPTS_LOADED = "scripts loaded"
"""Value of a completed script-load task."""

_Handler = Callable[[Task, TaskStore], Awaitable[Any]]


class Executor:
    """
    Runs a single task's type-specific behavior and records its result.

    Every task type shares the same envelope: the task is claimed (pending -> executing), its
    behavior runs, and the produced value is stored as the task completes. There is no
    error-capture wrapper; if the behavior raises, the task stays in the executing state and the
    exception propagates to the caller.

    Args:
        client: HTTP client for download tasks. If None, a client is opened for the duration of
            each `session()`.
        script_host: Environment used by script-load tasks. Defaults to an `HttpScriptHost`
            that fetches through the same client as download tasks.
        settings: Settings to use. If None, the global settings are read when needed.
    """

    def __init__(
        self,
        *,
        client: httpx.AsyncClient | None = None,
        script_host: ScriptHost | None = None,
        settings: CellgraphSettings | None = None,
    ) -> None:
        self._settings = settings
        self._client = client
        self._session_client: httpx.AsyncClient | None = None
        self.script_host = script_host or HttpScriptHost(get_client=self._current_client)
        self._handlers: dict[TaskType, _Handler] = {
            TaskType.SCRIPT_LOAD: self._load_scripts,
            TaskType.DOWNLOAD: self._download,
            TaskType.COMPUTE: self._compute,
            TaskType.VARIABLE: self._variable,
        }

    @property
    def settings(self) -> CellgraphSettings:
        return self._settings or get_global_settings()

    def _current_client(self) -> httpx.AsyncClient | None:
        return self._client or self._session_client

    @asynccontextmanager
    async def session(self) -> AsyncIterator[None]:
        """Provide an HTTP client for the tasks executed inside the block."""
        if self._client is not None or self._session_client is not None:
            yield
            return

        async with httpx.AsyncClient(timeout=self.settings.download_timeout) as client:
            self._session_client = client
            try:
                yield
            finally:
                self._session_client = None

    # region Envelope

    async def run_task(self, task: Task, store: TaskStore, hooks: HookRelay) -> bool:
        """
        Claim and execute `task`.

        Returns:
            True if this call completed the task; False if the task could not be claimed (it is
            not pending) or was invalidated while executing.
        """
        generation = task.try_begin()
        if generation is None:
            return False
        return await self.execute(task, generation, store, hooks)

    async def execute(
        self, task: Task, generation: int, store: TaskStore, hooks: HookRelay
    ) -> bool:
        """
        Execute a task that has already been claimed under `generation`.

        Args:
            task: Task in the executing state.
            generation: Generation returned by `task.try_begin()`.
            store: Store holding the task's inputs.
            hooks: Pluggy relay for lifecycle hooks.

        Returns:
            True if the task completed, False if its result was discarded because the task was
            invalidated while executing.

        Raises:
            BaseException: Whatever the behavior raised, unchanged. This includes
                `asyncio.CancelledError` raised by the behavior itself, which is reported through
                `on_task_error` like any other failure; cancelling the executing asyncio task from
                outside is not.
        """
        logger.debug(f"Running: {task.id}")
        hooks.before_task_execute(task=task)

        start_time = time.perf_counter()
        try:
            with task_context(task):
                value = await self._handlers[task.type](task, store)
        except BaseException as e:
            if not _interrupted(e):
                hooks.on_task_error(task=task, error=e, duration=time.perf_counter() - start_time)
            raise

        if not task.complete(value, generation):
            logger.info(f"Discarding result of '{task.id}': invalidated while executing")
            return False

        logger.debug(f"Done: {task.id}")
        hooks.after_task_execute(
            task=task, value=value, duration=time.perf_counter() - start_time
        )
        return True

    # region Behaviors

    async def _load_scripts(self, task: Task, store: TaskStore) -> str:
        if self._current_client() is None:
            async with self.session():
                return await self._load_scripts(task, store)

        # Scripts may depend on each other, so each load finishes before the next starts
        for url in task.payload:
            logger.debug(f"Loading {url}")
            await self.script_host.load_script(url)
        return SCRIPTS_LOADED

    async def _download(self, task: Task, store: TaskStore) -> Any:
        client = self._current_client()
        if client is None:
            async with self.session():
                return await self._download(task, store)

        response = await client.get(task.payload, follow_redirects=True)
        response.raise_for_status()

        if is_json_content_type(response.headers.get("content-type")):
            return response.json()
        return response.content

    async def _compute(self, task: Task, store: TaskStore) -> Any:
        func = task.payload
        args = store.input_values(task)

        if self.settings.offload_sync_compute and not inspect.iscoroutinefunction(func):
            result = await asyncio.to_thread(func, *args)
        else:
            result = func(*args)

        if inspect.isawaitable(result):
            result = await result
        return result

    async def _variable(self, task: Task, store: TaskStore) -> Any:
        return task.payload


def is_json_content_type(content_type: str | None) -> bool:
    """
    Check whether a Content-Type header denotes JSON.

    Examples:
        >>> is_json_content_type("application/json; charset=utf-8")
        True
        >>> is_json_content_type("application/geo+json")
        True
        >>> is_json_content_type("text/csv")
        False
        >>> is_json_content_type(None)
        False
    """
    if not content_type:
        return False
    mime_type = content_type.split(";", 1)[0].strip().lower()
    return mime_type == "application/json" or mime_type.endswith("+json")


def _interrupted(error: BaseException) -> bool:
    """Check whether `error` is the current asyncio task being cancelled from outside."""
    if not isinstance(error, asyncio.CancelledError):
        return False
    current = asyncio.current_task()
    return current is not None and current.cancelling() > 0
