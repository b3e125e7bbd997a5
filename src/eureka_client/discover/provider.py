from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Awaitable, Mapping, Sequence

from eureka_client.discover.entities import ServiceInstance


class InstanceProvider(ABC):
    """Fallback source of instances, consulted when the registry has none.

    Implementations may be synchronous or return an awaitable.
    """

    @abstractmethod
    def get_instances(
        self, app_name: str
    ) -> list[ServiceInstance] | Awaitable[list[ServiceInstance]]:
        """Returns the instances known for ``app_name``."""


class StaticInstanceProvider(InstanceProvider):
    """Serves a fixed instance list per application name."""

    def __init__(self, instances: Mapping[str, Sequence[ServiceInstance]] | None = None) -> None:
        self._instances: dict[str, list[ServiceInstance]] = {
            name: list(items) for name, items in (instances or {}).items()
        }

    def add(self, app_name: str, instance: ServiceInstance) -> None:
        self._instances.setdefault(app_name, []).append(instance)

    def get_instances(self, app_name: str) -> list[ServiceInstance]:
        return list(self._instances.get(app_name, []))

    def __repr__(self) -> str:
        return f"StaticInstanceProvider(apps={sorted(self._instances)})"


__all__ = ["InstanceProvider", "StaticInstanceProvider"]
