from __future__ import annotations

import threading
from dataclasses import dataclass

_GLOBAL_CELLGRAPH_SETTINGS: CellgraphSettings | None = None
_SETTINGS_LOCK = threading.RLock()


@dataclass(frozen=True)
class CellgraphSettings:
    """Configuration settings for cellgraph."""

    max_concurrency: int | None = None
    """
    Maximum number of tasks executing at the same time within a single run.

    If None, every ready task is started immediately (one worker per task in the graph).
    """

    strict_validation: bool = False
    """
    If True, dangling input ids and dependency cycles raise a GraphError before a run starts.

    If False, they are logged as warnings; missing inputs count as satisfied and cycles stall.
    """

    download_timeout: float | None = 30.0
    """Timeout in seconds for each HTTP request made by download and script-load tasks."""

    run_timeout: float | None = None
    """Default time limit in seconds for a whole run. If None, runs are unbounded."""

    offload_sync_compute: bool = False
    """
    If True, synchronous compute callables run in a worker thread via `asyncio.to_thread`.

    This keeps long-running cells from blocking downloads and other cells in the same run.
    """

    def __post_init__(self) -> None:
        if self.max_concurrency is not None and self.max_concurrency < 1:
            raise ValueError("max_concurrency must be a positive integer")
        for name in ("download_timeout", "run_timeout"):
            value = getattr(self, name)
            if value is not None and value <= 0:
                raise ValueError(f"{name} must be positive")


def get_global_settings() -> CellgraphSettings:
    """
    Get the global cellgraph settings instance (thread-safe).

    If no global settings have been set, returns a default instance.
    """
    with _SETTINGS_LOCK:
        global _GLOBAL_CELLGRAPH_SETTINGS
        if _GLOBAL_CELLGRAPH_SETTINGS is None:
            _GLOBAL_CELLGRAPH_SETTINGS = CellgraphSettings()
        return _GLOBAL_CELLGRAPH_SETTINGS


def set_global_settings(settings: CellgraphSettings) -> None:
    """
    Set the global cellgraph settings instance (thread-safe).

    Schedulers created without explicit settings read the global instance when a run starts, so
    changes take effect on the next run.

    Args:
        settings (CellgraphSettings): Settings to set as global.
    """
    with _SETTINGS_LOCK:
        global _GLOBAL_CELLGRAPH_SETTINGS
        _GLOBAL_CELLGRAPH_SETTINGS = settings
