"""Example graphs used by the CLI tests."""

from __future__ import annotations

from cellgraph import CodeCell
from cellgraph import Task
from cellgraph import TaskType
from cellgraph import build_tasks


def math_graph(x: int, y: int = 10) -> list[Task]:
    """Sum two variables and scale the result."""
    return [
        Task("x", TaskType.VARIABLE, payload=x),
        Task("y", TaskType.VARIABLE, payload=y),
        Task("total", TaskType.COMPUTE, payload=lambda x, y: x + y, inputs=["x", "y"]),
        Task("scaled", TaskType.COMPUTE, payload=lambda total: total * 2, inputs=["total"]),
    ]


def empty_graph() -> list[Task]:
    return []


def failing_graph() -> list[Task]:
    def explode(value: int) -> int:
        raise ZeroDivisionError("division by zero")

    return [
        Task("value", TaskType.VARIABLE, payload=1),
        Task("ratio", TaskType.COMPUTE, payload=explode, inputs=["value"]),
    ]


def dangling_graph() -> list[Task]:
    return [Task("orphan", TaskType.COMPUTE, payload=lambda missing: missing, inputs=["missing"])]


def cyclic_graph() -> list[Task]:
    return [
        Task("seed", TaskType.VARIABLE, payload=0),
        Task("a", TaskType.COMPUTE, payload=lambda b: b, inputs=["b"]),
        Task("b", TaskType.COMPUTE, payload=lambda a: a, inputs=["a"]),
    ]


def greeting(name: str = "world", shout: bool = False) -> str:
    text = f"hello {name}"
    return text.upper() if shout else text


notebook = build_tasks(
    variables={"name": "penguins"},
    cells=[CodeCell("greeting", greeting, inputs=("name",))],
)
"""A prebuilt store, loaded as-is by the CLI."""

not_a_graph = 42
