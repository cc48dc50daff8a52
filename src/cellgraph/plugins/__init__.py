from cellgraph.plugins.builtin import LifecycleLoggingPlugin

from .manager import register_hooks
from .manager import register_plugins_entry_points
from .manager import reset_global_plugin_manager
from .markers import hook_impl

__all__ = [
    "hook_impl",
    "LifecycleLoggingPlugin",
    "register_hooks",
    "register_plugins_entry_points",
    "reset_global_plugin_manager",
]
