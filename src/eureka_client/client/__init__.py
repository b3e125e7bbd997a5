from eureka_client.client.eureka_client import EurekaClient
from eureka_client.client.heartbeat import HeartbeatLoop
from eureka_client.client.transport import EurekaTransport, HttpxTransport, TransportResponse

__all__ = [
    "EurekaClient",
    "EurekaTransport",
    "HeartbeatLoop",
    "HttpxTransport",
    "TransportResponse",
]
