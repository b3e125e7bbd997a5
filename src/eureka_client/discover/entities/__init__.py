from .registration import (
    DataCenterInfoWire,
    InstanceInfo,
    PortInfo,
    RegistrationRequest,
)
from .service_instance import InstanceSummary, ServiceInstance

__all__ = [
    "DataCenterInfoWire",
    "InstanceInfo",
    "InstanceSummary",
    "PortInfo",
    "RegistrationRequest",
    "ServiceInstance",
]
