"""
Lifecycle logging for cellgraph runs, and task-aware loggers for notebook cells.

Example:
    >>> from cellgraph import run
    >>> from cellgraph.plugins import LifecycleLoggingPlugin
    >>> from cellgraph.plugins.builtin import get_logger
    >>>
    >>> def summarize(rows):
    ...     get_logger(__name__).info(f"Summarizing {len(rows)} rows")
    ...     return len(rows)
    >>>
    >>> run(tasks, hooks=[LifecycleLoggingPlugin()])  # doctest: +SKIP
"""

from __future__ import annotations

import json
import logging
import logging.config
from pathlib import Path
from typing import TYPE_CHECKING, Any, MutableMapping

from cellgraph.execution.context import get_current_task
from cellgraph.plugins.markers import hook_impl

if TYPE_CHECKING:
    from cellgraph.scheduler import RunResult
    from cellgraph.tasks import Task

DEFAULT_LOGGER_NAME = "cellgraph.lifecycle"
DEFAULT_TASK_LOGGER_NAME = "cellgraph.tasks"


class LifecycleLoggingPlugin:
    """
    Plugin that logs run and task lifecycle events.

    On construction the plugin applies a `logging.config.dictConfig` configuration, by default
    the `logging.json` file shipped next to this module, which routes all `cellgraph` loggers to
    stderr.

    Args:
        name: Optional logger name to use (default: "cellgraph.lifecycle").
        level: Minimum level for the lifecycle logger (default: INFO).
        config: Optional logging config dict. If not provided, loads the bundled config.
    """

    def __init__(
        self,
        name: str | None = None,
        level: int = logging.INFO,
        config: dict[str, Any] | None = None,
    ):
        if config is None:
            config = json.loads(self._config_path.read_text(encoding="utf-8"))
        logging.config.dictConfig(config)

        self._logger = logging.getLogger(name or DEFAULT_LOGGER_NAME)
        self._logger.setLevel(level)

    @property
    def _config_path(self) -> Path:
        """Path to the default logging configuration file."""
        return Path(__file__).parent / "logging.json"

    @hook_impl
    def before_run(self, task_count: int, ready_count: int) -> None:
        self._logger.info(f"Starting run: {task_count} task(s), {ready_count} ready")

    @hook_impl
    def after_run(self, result: RunResult) -> None:
        self._logger.info(
            f"Run finished in {result.duration:.3f}s: {len(result.completed)} task(s) completed"
        )
        for task_id, blocking in result.stalled.items():
            if blocking:
                self._logger.warning(f"Task '{task_id}' stalled waiting on {blocking}")
            else:
                self._logger.warning(f"Task '{task_id}' did not run")

    @hook_impl
    def on_run_error(self, error: BaseException, duration: float) -> None:
        self._logger.error(f"Run aborted after {duration:.3f}s: {type(error).__name__}: {error}")

    @hook_impl
    def before_task_execute(self, task: Task) -> None:
        self._logger.debug(f"Running: {task.id} ({task.type.value})")

    @hook_impl
    def after_task_execute(self, task: Task, value: Any, duration: float) -> None:
        self._logger.info(f"Done: {task.id} in {duration:.3f}s")

    @hook_impl
    def on_task_error(self, task: Task, error: BaseException, duration: float) -> None:
        self._logger.error(
            f"Task '{task.id}' failed after {duration:.3f}s: {type(error).__name__}: {error}"
        )

    @hook_impl
    def on_task_invalidated(self, task: Task, source_id: str) -> None:
        if task.id == source_id:
            self._logger.info(f"Updating {task.id}")
        else:
            self._logger.debug(f"Invalidated {task.id} (downstream of {source_id})")


class _TaskLoggerAdapter(logging.LoggerAdapter):
    """
    Logger adapter that injects the current task's context into log records.

    Adds `cellgraph_task_id` and `cellgraph_task_type` to the record's extras so formatters can
    use e.g. `%(cellgraph_task_id)s`.
    """

    def process(self, msg: Any, kwargs: MutableMapping[str, Any]) -> tuple[Any, dict[str, Any]]:
        extra = dict(kwargs.get("extra") or {})
        task = get_current_task()
        if task is not None:
            extra.update(
                {
                    "cellgraph_task_id": task.id,
                    "cellgraph_task_type": task.type.value,
                }
            )
        kwargs["extra"] = extra
        return msg, dict(kwargs)


def get_logger(name: str | None = None) -> logging.LoggerAdapter:
    """
    Get a logger for use inside notebook cells.

    Args:
        name: Logger name. If None, uses "cellgraph.tasks". The current task's id and type are
            attached to every record regardless of the logger name.

    Returns:
        LoggerAdapter that injects task context into each record.
    """
    return _TaskLoggerAdapter(logging.getLogger(name or DEFAULT_TASK_LOGGER_NAME), {})
