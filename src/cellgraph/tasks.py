"""Task records: the nodes of a reactive notebook's dependency graph."""

from __future__ import annotations

import threading
from collections.abc import Iterable
from dataclasses import dataclass
from dataclasses import field
from enum import Enum
from typing import Any, Final

from cellgraph.exceptions import TaskError


class _Missing:
    """Sentinel type for "no value supplied", distinct from `None`."""

    _instance: _Missing | None = None

    def __new__(cls) -> _Missing:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "MISSING"


MISSING: Final = _Missing()


class TaskType(str, Enum):
    """Kind of work a task performs; selects the executor behavior."""

    SCRIPT_LOAD = "script_load"
    DOWNLOAD = "download"
    COMPUTE = "compute"
    VARIABLE = "variable"


class TaskState(str, Enum):
    """Lifecycle state of a task."""

    PENDING = "pending"
    EXECUTING = "executing"
    COMPLETE = "complete"


@dataclass(eq=False)
class Task:
    """
    A single unit of computation or data acquisition in the graph.

    Tasks are mutable records shared by every concurrently executing branch of a run. Each task
    may only be advanced by whoever claimed it (see `try_begin`), and only the invalidator moves
    a task backwards. All transitions happen under a per-task lock, which makes the claim an
    atomic compare-and-set even when work is offloaded to other threads.

    Examples:
        >>> a = Task("a", TaskType.VARIABLE, payload=1)
        >>> b = Task("b", TaskType.COMPUTE, payload=lambda a: a + 1, inputs=["a"])
        >>> b.inputs
        ('a',)
        >>> a.state.value
        'pending'
    """

    id: str
    """Unique identifier within a store; stable across invalidation."""

    type: TaskType
    """Determines how the executor runs this task."""

    payload: Any = None
    """Type-specific definition (script URLs, a URL, a callable, or a literal value)."""

    inputs: tuple[str, ...] = ()
    """Ids of the tasks this task depends on, in argument order."""

    state: TaskState = TaskState.PENDING
    """Current lifecycle state."""

    generation: int = field(default=0, init=False)
    """Incremented on every invalidation; stale executions cannot complete the task."""

    _value: Any = field(default=MISSING, init=False, repr=False)
    _lock: threading.Lock = field(default_factory=threading.Lock, init=False, repr=False)

    def __post_init__(self) -> None:
        if not isinstance(self.id, str) or not self.id:
            raise TaskError(f"Task id must be a non-empty string, got {self.id!r}")
        try:
            self.type = TaskType(self.type)
        except ValueError as e:
            raise TaskError(f"Unknown task type {self.type!r} for task '{self.id}'") from e
        self.state = TaskState(self.state)
        self.inputs = _normalize_inputs(self.id, self.inputs)
        self.payload = check_payload(self.id, self.type, self.payload)

    # region Value

    @property
    def value(self) -> Any:
        """The task's result once complete, `None` otherwise (see `has_value`)."""
        return None if self._value is MISSING else self._value

    @property
    def has_value(self) -> bool:
        """Whether a value is present (only true once the task is complete)."""
        return self._value is not MISSING

    @property
    def is_complete(self) -> bool:
        return self.state is TaskState.COMPLETE

    # region Transitions

    def try_begin(self) -> int | None:
        """
        Atomically claim the task for execution.

        Returns:
            The generation the claim was made under, or None if the task is not pending (it was
            already claimed by another worker, is complete, or is stuck after a failure).
        """
        with self._lock:
            if self.state is not TaskState.PENDING:
                return None
            self.state = TaskState.EXECUTING
            return self.generation

    def complete(self, value: Any, generation: int) -> bool:
        """
        Store the result of an execution started under `generation` and mark the task complete.

        Returns:
            False if the task was invalidated while executing; the value is discarded and the
            task keeps the state the invalidator gave it.
        """
        with self._lock:
            if generation != self.generation or self.state is not TaskState.EXECUTING:
                return False
            self._value = value
            self.state = TaskState.COMPLETE
            return True

    def release(self, generation: int) -> bool:
        """Return an interrupted execution to pending (used when a run is cancelled)."""
        with self._lock:
            if generation != self.generation or self.state is not TaskState.EXECUTING:
                return False
            self.state = TaskState.PENDING
            return True

    def reset(self, payload: Any = MISSING) -> None:
        """Invalidate the task: optionally replace its payload, clear its value, make it pending."""
        with self._lock:
            if payload is not MISSING:
                self.payload = check_payload(self.id, self.type, payload)
            self._value = MISSING
            self.state = TaskState.PENDING
            self.generation += 1


def _normalize_inputs(task_id: str, inputs: Iterable[str] | None) -> tuple[str, ...]:
    if inputs is None:
        return ()
    if isinstance(inputs, str):
        raise TaskError(
            f"Inputs for task '{task_id}' must be a sequence of task ids, not a string. "
            f"Did you mean [{inputs!r}]?"
        )
    normalized = tuple(inputs)
    if bad := [i for i in normalized if not isinstance(i, str)]:
        raise TaskError(f"Inputs for task '{task_id}' must be strings, got {bad!r}")
    return normalized


def check_payload(task_id: str, task_type: TaskType, payload: Any) -> Any:
    """
    Validate (and lightly normalize) a payload for the given task type.

    Script lists are converted to tuples so later mutation by the caller cannot change them
    mid-run.

    Raises:
        TaskError: If the payload does not have the shape required by the task type.
    """
    if task_type is TaskType.SCRIPT_LOAD:
        if isinstance(payload, str) or not isinstance(payload, Iterable):
            raise TaskError(f"Script-load task '{task_id}' expects a list of URLs")
        urls = tuple(payload)
        if not all(isinstance(url, str) for url in urls):
            raise TaskError(f"Script-load task '{task_id}' expects a list of URL strings")
        return urls

    if task_type is TaskType.DOWNLOAD:
        if not isinstance(payload, str) or not payload:
            raise TaskError(f"Download task '{task_id}' expects a URL string, got {payload!r}")
        return payload

    if task_type is TaskType.COMPUTE:
        if not callable(payload):
            raise TaskError(f"Compute task '{task_id}' expects a callable, got {payload!r}")
        return payload

    return payload

