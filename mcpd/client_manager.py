"""Registry of active MCP client connections and the tools allowed on each."""

from __future__ import annotations

import threading
from collections.abc import Iterable
from typing import Any


class ClientManager:
    """Holds clients and their tool lists by server name; safe for use from several threads."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._clients: dict[str, Any] = {}
        self._tools: dict[str, list[str]] = {}

    def add(self, name: str, client: Any, tools: Iterable[str]) -> None:
        """Register a client and its tools under a server name."""
        with self._lock:
            self._clients[name] = client
            self._tools[name] = list(tools)

    def client(self, name: str) -> Any | None:
        """Return the client for a server, or None if it is not registered."""
        with self._lock:
            return self._clients.get(name)

    def tools(self, name: str) -> list[str] | None:
        """Return the tools for a server, or None if it is not registered."""
        with self._lock:
            tools = self._tools.get(name)
            return list(tools) if tools is not None else None

    def list(self) -> list[str]:
        """Return the names of all registered servers."""
        with self._lock:
            return list(self._clients)

    def remove(self, name: str) -> None:
        """Forget a server's client and tools."""
        with self._lock:
            self._clients.pop(name, None)
            self._tools.pop(name, None)