"""Strategies that pick one instance out of a resolved instance list.

Every strategy raises ``SelectionError`` when handed an empty sequence.
"""
from __future__ import annotations

import itertools
import logging
import random
import threading
from abc import ABC, abstractmethod
from collections.abc import Sequence
from typing import Any

from eureka_client.discover.entities import ServiceInstance
from eureka_client.exceptions import SelectionError
from eureka_client.utils.constant import DiscoveryPolicy

logger = logging.getLogger(__name__)


class DiscoveryStrategy(ABC):
    """Abstract base class for instance selection."""

    @abstractmethod
    def get_instance(self, instances: Sequence[ServiceInstance]) -> ServiceInstance:
        """Selects one instance.

        Args:
            instances: Non-empty ordered sequence of registry instances.

        Returns:
            One element of ``instances``.
        """


def _ensure_not_empty(instances: Sequence[Any]) -> None:
    if not instances:
        raise SelectionError()


class RandomStrategy(DiscoveryStrategy):
    """Uniform random selection; each index is equally likely."""

    def __init__(self, rng: random.Random | None = None) -> None:
        self._rng = rng or random.Random()

    def get_instance(self, instances: Sequence[ServiceInstance]) -> ServiceInstance:
        _ensure_not_empty(instances)
        return instances[self._rng.randrange(len(instances))]


class RoundRobinStrategy(DiscoveryStrategy):
    """Cycles through the list positions, one call at a time."""

    def __init__(self) -> None:
        self._counter = itertools.count()
        self._lock = threading.Lock()

    def get_instance(self, instances: Sequence[ServiceInstance]) -> ServiceInstance:
        _ensure_not_empty(instances)
        with self._lock:
            index = next(self._counter)
        return instances[index % len(instances)]


class DiscoveryStrategyFactory:
    """Factory class for creating DiscoveryStrategy instances."""

    strategy_classes: dict[DiscoveryPolicy, type[DiscoveryStrategy]] = {
        DiscoveryPolicy.Random: RandomStrategy,
        DiscoveryPolicy.RoundRobin: RoundRobinStrategy,
    }

    @classmethod
    def get_strategy(cls, policy: DiscoveryPolicy | str) -> DiscoveryStrategy:
        """Returns a fresh strategy for the given policy or policy name."""
        if not isinstance(policy, DiscoveryPolicy):
            policy = DiscoveryPolicy.to_original(str(policy))
        strategy_class = cls.strategy_classes.get(policy)
        if strategy_class is None:
            raise ValueError(f"Discovery strategy '{policy}' not found.")
        logger.debug("creating discovery strategy: %s", policy.value)
        return strategy_class()

    @classmethod
    def register_strategy(cls, policy: DiscoveryPolicy, strategy_class: type[DiscoveryStrategy]) -> None:
        """Registers a DiscoveryStrategy class with the factory."""
        cls.strategy_classes[policy] = strategy_class


__all__ = [
    "DiscoveryStrategy",
    "DiscoveryStrategyFactory",
    "RandomStrategy",
    "RoundRobinStrategy",
]
