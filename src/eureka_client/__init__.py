"""Public API for eureka_client.

Re-exports the stable, supported surface area of the library. Import from
here when possible.
"""

from eureka_client.client import (
    EurekaClient,
    EurekaTransport,
    HeartbeatLoop,
    HttpxTransport,
    TransportResponse,
)
from eureka_client.config import (
    ConfigError,
    DataCenterInfo,
    InstanceConfig,
    PortConfig,
    load_config,
)
from eureka_client.discover import (
    DiscoveryStrategy,
    InstanceCache,
    InstanceProvider,
    RandomStrategy,
    RoundRobinStrategy,
    ServiceInstance,
    StaticInstanceProvider,
)
from eureka_client.exceptions import (
    DeRegisterFailure,
    EurekaClientError,
    InstanceFailure,
    RegisterFailure,
    SelectionError,
    TransportError,
    TransportTimeoutError,
)

__all__ = [
    # client
    "EurekaClient",
    "EurekaTransport",
    "HeartbeatLoop",
    "HttpxTransport",
    "TransportResponse",
    # config
    "ConfigError",
    "DataCenterInfo",
    "InstanceConfig",
    "PortConfig",
    "load_config",
    # discovery
    "DiscoveryStrategy",
    "InstanceCache",
    "InstanceProvider",
    "RandomStrategy",
    "RoundRobinStrategy",
    "ServiceInstance",
    "StaticInstanceProvider",
    # errors
    "EurekaClientError",
    "RegisterFailure",
    "DeRegisterFailure",
    "InstanceFailure",
    "SelectionError",
    "TransportError",
    "TransportTimeoutError",
]
