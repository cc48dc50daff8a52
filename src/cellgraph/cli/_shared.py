"""Helpers shared by the CLI commands: loading graphs and parsing `name=value` options."""

from __future__ import annotations

import importlib
import inspect
import sys
import types
import typing
from collections.abc import Iterable
from pathlib import Path
from typing import Any, Union, get_args, get_origin

import click

from cellgraph.graph.store import TaskStore
from cellgraph.settings import CellgraphSettings
from cellgraph.tasks import Task


def parse_param_value(value: str, param_type: type | None) -> Any:
    """
    Parse a parameter value string into the appropriate type.

    Args:
        value: String value to parse.
        param_type: Target type to convert to, or None for string.

    Returns:
        Parsed value in the appropriate type.

    Raises:
        ValueError: If the value cannot be converted to the target type.
    """
    if param_type is None:
        return value

    if param_type is int:
        try:
            return int(value)
        except ValueError as e:
            raise ValueError(f"Cannot convert '{value}' to int") from e
    elif param_type is float:
        try:
            return float(value)
        except ValueError as e:
            raise ValueError(f"Cannot convert '{value}' to float") from e
    elif param_type is bool:
        return value.lower() in ("true", "1", "yes", "y")
    elif param_type is str:
        return value
    else:
        try:
            return param_type(value)
        except Exception:
            return value


def load_graph_source(graph_path: str) -> Any:
    """
    Load the object named by a dotted path.

    Args:
        graph_path: Dotted path to the graph (e.g., 'notebooks.penguins.build').

    Raises:
        ValueError: If the path is invalid.
        ModuleNotFoundError: If the module cannot be found.
        AttributeError: If the attribute does not exist in the module.
    """
    if "." not in graph_path:
        raise ValueError(
            f"Invalid graph path: '{graph_path}'. Expected format: 'module.graph_name'"
        )

    module_path, attr_name = graph_path.rsplit(".", 1)

    # Add current directory to Python path if not already there
    cwd = str(Path.cwd())
    if cwd not in sys.path:  # pragma: no cover
        sys.path.insert(0, cwd)

    module = importlib.import_module(module_path)

    if not hasattr(module, attr_name):
        raise AttributeError(f"Graph '{attr_name}' not found in module '{module_path}'")

    return getattr(module, attr_name)


def materialize_graph(source: Any, raw_params: tuple[str, ...]) -> TaskStore:
    """
    Turn a loaded graph source into a task store.

    `source` may be a `TaskStore`, an iterable of tasks, or a callable returning either. Only
    callables accept `--param` values, which are converted using the callable's annotations.

    Raises:
        click.BadParameter: For malformed, unknown or missing parameters.
        click.ClickException: If the source does not produce tasks.
    """
    if callable(source) and not isinstance(source, TaskStore):
        params = parse_call_params(source, raw_params)
        try:
            source = source(**params)
        except Exception as e:  # pragma: no cover
            raise click.ClickException(f"Error building graph: {e}") from e
    elif raw_params:
        raise click.BadParameter("--param is only supported when the graph is built by a function")

    if isinstance(source, TaskStore):
        return source
    if isinstance(source, Iterable) and not isinstance(source, (str, bytes)):
        items = list(source)
        if all(isinstance(item, Task) for item in items):
            return TaskStore(items)

    raise click.ClickException(
        f"Expected a TaskStore or an iterable of Task objects, got {type(source).__name__}"
    )


def parse_call_params(func: Any, raw_params: tuple[str, ...]) -> dict[str, Any]:
    """Parse and validate `name=value` strings against a callable's signature."""
    signature = inspect.signature(func)
    try:
        hints = typing.get_type_hints(func)
    except Exception:  # pragma: no cover
        hints = {}

    params: dict[str, Any] = {}
    for p in raw_params:
        if "=" not in p:
            raise click.BadParameter(f"Invalid parameter format: '{p}'. Expected 'name=value'")

        param_name, param_value = p.split("=", 1)

        if param_name not in signature.parameters:
            raise click.BadParameter(
                f"Unknown parameter: '{param_name}'. "
                f"Available parameters: {list(signature.parameters)}"
            )

        try:
            params[param_name] = parse_param_value(param_value, hints.get(param_name))
        except ValueError as e:
            raise click.BadParameter(
                f"Invalid value for parameter '{param_name}': '{param_value}'. {e}"
            ) from e

    missing_params = [
        name
        for name, info in signature.parameters.items()
        if info.default is inspect.Parameter.empty
        and info.kind not in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD)
        and name not in params
    ]
    if missing_params:
        raise click.BadParameter(
            f"Missing required parameters: {missing_params}. "
            f"Use --param name=value to provide them."
        )

    return params


def parse_settings(raw_settings: tuple[str, ...], **overrides: Any) -> CellgraphSettings:
    """
    Build settings from `name=value` strings, converting values by field type.

    Keyword `overrides` with a value of None are ignored.

    Raises:
        click.BadParameter: For malformed entries, unknown names or invalid values.
    """
    settings_dict: dict[str, Any] = {k: v for k, v in overrides.items() if v is not None}
    fields = CellgraphSettings.__dataclass_fields__
    type_hints = typing.get_type_hints(CellgraphSettings)

    for s in raw_settings:
        if "=" not in s:
            raise click.BadParameter(f"Invalid setting format: '{s}'. Expected 'name=value'")

        setting_name, setting_value = s.split("=", 1)

        if setting_name not in fields:
            raise click.BadParameter(
                f"Unknown setting: '{setting_name}'. Available settings: {', '.join(fields)}"
            )

        field_type = type_hints[setting_name]
        # For optional types (e.g. int | None), use the first concrete type
        if get_origin(field_type) is Union or isinstance(field_type, types.UnionType):
            field_type = get_args(field_type)[0]
        try:
            settings_dict[setting_name] = parse_param_value(setting_value, field_type)
        except ValueError as e:
            raise click.BadParameter(
                f"Invalid value for setting '{setting_name}': '{setting_value}'. {e}"
            ) from e

    try:
        return CellgraphSettings(**settings_dict)
    except ValueError as e:
        raise click.BadParameter(str(e)) from e
