"""Instance discovery: selection strategies, fallback providers and the cache.

Example:
    from eureka_client.discover import RoundRobinStrategy, StaticInstanceProvider

    config.discovery_strategy = RoundRobinStrategy()
    config.instance_provider = StaticInstanceProvider(
        {"billing": [{"ipAddr": "10.0.0.7", "port": {"$": 8080, "@enabled": "true"}}]}
    )
"""

from __future__ import annotations

from eureka_client.discover.cache import InstanceCache
from eureka_client.discover.entities import InstanceSummary, ServiceInstance
from eureka_client.discover.provider import InstanceProvider, StaticInstanceProvider
from eureka_client.discover.strategy import (
    DiscoveryStrategy,
    DiscoveryStrategyFactory,
    RandomStrategy,
    RoundRobinStrategy,
)

__all__ = [
    "DiscoveryStrategy",
    "DiscoveryStrategyFactory",
    "InstanceCache",
    "InstanceProvider",
    "InstanceSummary",
    "RandomStrategy",
    "RoundRobinStrategy",
    "ServiceInstance",
    "StaticInstanceProvider",
]
