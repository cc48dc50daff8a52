"""Pluggy markers for cellgraph hook specifications and implementations."""

import pluggy

HOOK_NAMESPACE = "cellgraph"

hook_spec = pluggy.HookspecMarker(HOOK_NAMESPACE)
hook_impl = pluggy.HookimplMarker(HOOK_NAMESPACE)
