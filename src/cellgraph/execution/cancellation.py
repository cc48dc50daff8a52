"""Cooperative cancellation for scheduler runs."""

from __future__ import annotations

import asyncio
import threading


class CancellationToken:
    """
    Signal used to abort a run from outside.

    `cancel()` may be called from any thread (for example a UI thread reacting to an edit); the
    scheduler observes it on its own event loop.

    Examples:
        >>> token = CancellationToken()
        >>> token.cancelled
        False
        >>> token.cancel("document closed")
        >>> token.cancelled, token.reason
        (True, 'document closed')
    """

    def __init__(self) -> None:
        self._cancelled = threading.Event()
        self._reason: str | None = None
        self._waiters: list[tuple[asyncio.AbstractEventLoop, asyncio.Event]] = []
        self._lock = threading.Lock()

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    @property
    def reason(self) -> str | None:
        return self._reason

    def cancel(self, reason: str | None = None) -> None:
        """Request cancellation. Subsequent calls are no-ops."""
        with self._lock:
            if self._cancelled.is_set():
                return
            self._reason = reason
            self._cancelled.set()
            waiters = list(self._waiters)

        for loop, event in waiters:
            try:
                loop.call_soon_threadsafe(event.set)
            except RuntimeError:  # pragma: no cover - loop already closed
                pass

    async def wait(self) -> None:
        """Wait until cancellation is requested."""
        event = asyncio.Event()
        entry = (asyncio.get_running_loop(), event)
        with self._lock:
            if self._cancelled.is_set():
                return
            self._waiters.append(entry)
        try:
            await event.wait()
        finally:
            with self._lock:
                self._waiters.remove(entry)
