"""Tracking of the health of registered MCP servers."""

from __future__ import annotations

import threading
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import StrEnum

from mcpd.errors import HealthNotTrackedError


class HealthStatus(StrEnum):
    """The availability state of an MCP server."""

    OK = "ok"
    TIMEOUT = "timeout"
    UNREACHABLE = "unreachable"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class ServerHealth:
    """The last known health state of an MCP server."""

    name: str
    status: HealthStatus
    latency: timedelta | None = None
    last_checked: datetime | None = None
    last_successful: datetime | None = None


class HealthTracker:
    """Records health checks for a fixed set of servers; safe for use from several threads."""

    def __init__(self, server_names: Iterable[str] | None = None) -> None:
        self._lock = threading.Lock()
        self._statuses: dict[str, ServerHealth] = {
            name: ServerHealth(name=name, status=HealthStatus.UNKNOWN)
            for name in server_names or ()
        }

    def status(self, name: str) -> ServerHealth:
        """Return the health of a tracked server."""
        with self._lock:
            try:
                return self._statuses[name]
            except KeyError:
                raise HealthNotTrackedError(name) from None

    def list(self) -> list[ServerHealth]:
        """Return the health of every tracked server."""
        with self._lock:
            return list(self._statuses.values())

    def update(
        self, name: str, status: HealthStatus, latency: timedelta | None = None
    ) -> None:
        """Record a health check, stamping the current time.

        The last successful time moves only when the status is OK.
        """
        with self._lock:
            previous = self._statuses.get(name)
            if previous is None:
                raise HealthNotTrackedError(name)
            now = datetime.now(timezone.utc)
            status = HealthStatus(status)
            last_successful = now if status is HealthStatus.OK else previous.last_successful
            self._statuses[name] = ServerHealth(
                name=name,
                status=status,
                latency=latency,
                last_checked=now,
                last_successful=last_successful,
            )