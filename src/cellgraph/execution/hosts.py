"""
Host facilities used by task behaviors.

Script loading is a side effect owned by the environment the notebook runs in, so the executor
only talks to a `ScriptHost`. The default host fetches each script's source over HTTP and keeps
it in load order, which is what a page does when it appends script elements to its head.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Protocol, runtime_checkable

import httpx

from cellgraph.exceptions import ExecutionError

logger = logging.getLogger(__name__)


@runtime_checkable
class ScriptHost(Protocol):
    """Environment capable of loading external scripts."""

    async def load_script(self, url: str) -> None:
        """Load and evaluate the script at `url`, returning once it is available."""
        ...


class HttpScriptHost:
    """
    Script host that downloads script sources with httpx.

    Loaded sources are kept in `scripts`, keyed by URL in the order they finished loading.

    Args:
        client: Client to use for requests.
        timeout: Request timeout in seconds when no client is available.
        get_client: Called on every load to look up a client owned by someone else (such as the
            executor's session client) when `client` is not given. If neither yields a client, a
            new one is created for the load.
    """

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        timeout: float | None = 30.0,
        *,
        get_client: Callable[[], httpx.AsyncClient | None] | None = None,
    ):
        self._client = client
        self._get_client = get_client
        self._timeout = timeout
        self.scripts: dict[str, str] = {}

    async def load_script(self, url: str) -> None:
        try:
            client = self._client or (self._get_client() if self._get_client else None)
            if client is not None:
                response = await client.get(url, follow_redirects=True)
            else:
                async with httpx.AsyncClient(timeout=self._timeout) as client:
                    response = await client.get(url, follow_redirects=True)
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise ExecutionError(f"Failed to load script {url}: {e}") from e

        self.scripts[url] = response.text
        logger.info(f"Loaded {url}")
