"""Per-application memo of instances resolved from the registry.

Entries never expire on their own. ``invalidate``/``clear`` are the only way
to drop them; otherwise a process restart is.

Concurrent first fetches of one application are single-flight across threads
and event loops: the first caller claims a ``concurrent.futures.Future`` and
every other caller waits on it until the leader releases it.
"""
from __future__ import annotations

import threading
from concurrent.futures import Future

from eureka_client.discover.entities import ServiceInstance


class InstanceCache:
    """Mapping of application name to its instance list, shared across threads."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._entries: dict[str, list[ServiceInstance]] = {}
        self._in_flight: dict[str, Future] = {}

    def get(self, app_name: str) -> list[ServiceInstance] | None:
        """Returns the non-empty entry for ``app_name`` or None."""
        with self._lock:
            entry = self._entries.get(app_name)
        return entry if entry else None

    def put(self, app_name: str, instances: list[ServiceInstance]) -> list[ServiceInstance]:
        stored = list(instances)
        with self._lock:
            self._entries[app_name] = stored
        return stored

    def invalidate(self, app_name: str) -> bool:
        with self._lock:
            return self._entries.pop(app_name, None) is not None

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def claim_fetch(self, app_name: str) -> tuple[Future, bool]:
        """Joins the in-flight fetch of ``app_name`` or starts a new one.

        Returns:
            The shared future and whether the caller is its leader. The
            leader must settle the future and call ``release_fetch``.
        """
        with self._lock:
            flight = self._in_flight.get(app_name)
            if flight is not None:
                return flight, False
            flight = self._in_flight[app_name] = Future()
            return flight, True

    def release_fetch(self, app_name: str, flight: Future) -> None:
        with self._lock:
            if self._in_flight.get(app_name) is flight:
                del self._in_flight[app_name]

    def pending_fetches(self) -> list[str]:
        with self._lock:
            return list(self._in_flight)

    def app_names(self) -> list[str]:
        with self._lock:
            return list(self._entries)

    def __contains__(self, app_name: object) -> bool:
        with self._lock:
            return bool(self._entries.get(app_name))  # type: ignore[arg-type]

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


__all__ = ["InstanceCache"]
