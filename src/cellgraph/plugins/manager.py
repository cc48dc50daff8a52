"""Utility functions to manage the project-wide hook configuration."""

from __future__ import annotations

import logging
from inspect import isclass
from typing import Any

from pluggy import PluginManager

from .markers import HOOK_NAMESPACE
from .specs import RunSpec
from .specs import TaskSpec

logger = logging.getLogger(__name__)

_PLUGIN_ENTRY_POINT = "cellgraph.hooks"  # entry-point to load hooks from for installed plugins
_PLUGIN_MANAGER: PluginManager | None = None


# region API


def register_hooks(*hooks: Any) -> None:
    """Register specified cellgraph pluggy hooks."""
    hook_manager = get_hook_manager()
    for hooks_collection in hooks:
        if not hook_manager.is_registered(hooks_collection):
            _check_instance(hooks_collection)
            hook_manager.register(hooks_collection)


def register_plugins_entry_points(_plugin_manager: PluginManager | None = None) -> None:
    """Register cellgraph plugins from Python package entrypoints."""
    _plugin_manager = _plugin_manager if _plugin_manager else get_hook_manager()
    _plugin_manager.load_setuptools_entrypoints(_PLUGIN_ENTRY_POINT)  # Doesn't use setuptools


def get_hook_manager() -> PluginManager:
    """Returns the global plugin manager, creating it on first use."""
    plugin_manager = _PLUGIN_MANAGER
    if plugin_manager is None:
        plugin_manager = _initialize_plugin_system()
    return plugin_manager


def create_hook_manager_with_plugins(plugins: list[Any]) -> PluginManager:
    """
    Create a new hook manager with both global and execution-specific plugins.

    This combines globally registered hooks with additional hooks for a specific run. Used
    internally by the scheduler and the invalidator to support per-call hooks.

    Args:
        plugins: Additional hook implementations to register.

    Returns:
        A new PluginManager with global + execution-specific hooks.
    """
    manager = _create_plugin_manager()

    for plugin in get_hook_manager().get_plugins():
        if not manager.is_registered(plugin):  # pragma: no branch
            manager.register(plugin)

    for plugin in plugins:
        if not manager.is_registered(plugin):  # pragma: no branch
            _check_instance(plugin)
            manager.register(plugin)

    return manager


def resolve_hook_manager(hooks: list[Any] | None) -> PluginManager:
    """Return a per-call manager when `hooks` are given, else the global manager."""
    if hooks:
        return create_hook_manager_with_plugins(hooks)
    return get_hook_manager()


def reset_global_plugin_manager() -> None:
    """Discard every globally registered plugin (mainly useful for tests)."""
    _initialize_plugin_system()


# region Helpers


def _initialize_plugin_system() -> PluginManager:
    """Initializes hooks for the cellgraph library."""
    manager = _create_plugin_manager()
    global _PLUGIN_MANAGER
    _PLUGIN_MANAGER = manager
    return manager


def _create_plugin_manager() -> PluginManager:
    """Create a new PluginManager instance and register cellgraph's hook specs."""
    manager = PluginManager(HOOK_NAMESPACE)
    manager.trace.root.setwriter(
        logger.debug if logger.getEffectiveLevel() == logging.DEBUG else None
    )
    manager.enable_tracing()
    manager.add_hookspecs(TaskSpec)
    manager.add_hookspecs(RunSpec)
    return manager


def _check_instance(plugin: Any) -> None:
    if isclass(plugin):
        raise TypeError(
            "cellgraph expects hooks to be registered as instances. "
            "Have you forgotten the `()` when registering a hook class?"
        )
