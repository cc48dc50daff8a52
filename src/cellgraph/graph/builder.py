"""Builds the task graph for a compiled notebook document."""

from __future__ import annotations

from collections.abc import Callable
from collections.abc import Iterable
from collections.abc import Mapping
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from cellgraph.graph.store import TaskStore
from cellgraph.tasks import Task
from cellgraph.tasks import TaskType

SCRIPTS_TASK_ID = "scripts"


@dataclass(frozen=True)
class CodeCell:
    """A compiled code cell: a function of the values named by `inputs`, producing `output`."""

    output: str
    """Name under which the cell's result is published (becomes the task id)."""

    func: Callable[..., Any]
    """Compiled cell body; receives one positional argument per input."""

    inputs: tuple[str, ...] = ()
    """Names of the values the cell reads, in parameter order."""


def build_tasks(
    data: Mapping[str, str] | None = None,
    cells: Iterable[CodeCell] = (),
    *,
    scripts: Sequence[str] = (),
    variables: Mapping[str, Any] | None = None,
) -> TaskStore:
    """
    Materialize a document's declarations into a task store.

    The document header's download declarations come first so that data tasks are in place
    before any compute task that reads them.

    Args:
        data: Download declarations from the document header, mapping a name to a URL.
        cells: Compiled code cells, in document order.
        scripts: External script URLs to load, in order, before the document runs.
        variables: Named literal values that cells may depend on and that can later be changed
            through invalidation.

    Returns:
        A new store holding one task per declaration.

    Raises:
        GraphError: If two declarations share a name.

    Examples:
        >>> store = build_tasks(
        ...     data={"penguins": "https://example.com/penguins.json"},
        ...     cells=[CodeCell("count", len, inputs=("penguins",))],
        ... )
        >>> [(task.id, task.type.value) for task in store]
        [('penguins', 'download'), ('count', 'compute')]
    """
    tasks: list[Task] = []

    for name, url in (data or {}).items():
        tasks.append(Task(name, TaskType.DOWNLOAD, payload=url))

    if scripts:
        tasks.append(Task(SCRIPTS_TASK_ID, TaskType.SCRIPT_LOAD, payload=list(scripts)))

    for name, value in (variables or {}).items():
        tasks.append(Task(name, TaskType.VARIABLE, payload=value))

    for cell in cells:
        tasks.append(Task(cell.output, TaskType.COMPUTE, payload=cell.func, inputs=cell.inputs))

    return TaskStore(tasks)
