"""Conftest for all pytest configuration - fixtures, hooks, and doctest setup."""

import doctest
import logging

import pytest

from cellgraph.plugins.manager import reset_global_plugin_manager
from cellgraph.settings import CellgraphSettings
from cellgraph.settings import get_global_settings
from cellgraph.settings import set_global_settings

# Doctest Configuration


def pytest_configure(config):
    """Configure pytest with custom doctest options."""
    doctest.ELLIPSIS_MARKER = "..."


def pytest_collection_modifyitems(items):
    """Automatically mark doctest items with the 'doctest' marker."""
    for item in items:
        if isinstance(item, pytest.DoctestItem):
            item.add_marker(pytest.mark.doctest)


# Isolation fixtures


@pytest.fixture(autouse=True)
def isolate_global_state():
    """
    Reset global plugins, global settings and cellgraph logger state around each test.

    `LifecycleLoggingPlugin` applies a dictConfig that turns off propagation for the `cellgraph`
    logger, which would hide records from pytest's `caplog` in later tests.
    """
    _watched = ["cellgraph", "cellgraph.lifecycle", "cellgraph.tasks"]
    _saved: dict[str, tuple[bool, int, list[logging.Handler]]] = {}
    for name in _watched:
        lg = logging.getLogger(name)
        _saved[name] = (lg.propagate, lg.level, lg.handlers[:])
    saved_settings = get_global_settings()

    reset_global_plugin_manager()
    set_global_settings(CellgraphSettings())

    yield

    reset_global_plugin_manager()
    set_global_settings(saved_settings)

    for name, (propagate, level, handlers) in _saved.items():
        lg = logging.getLogger(name)
        lg.propagate = propagate
        lg.setLevel(level)
        lg.handlers = handlers
