from enum import StrEnum

DEFAULT_EUREKA_URL = "http://localhost:8761"
DEFAULT_HEARTBEAT_INTERVAL = 30
DEFAULT_HTTP_TIMEOUT = 30.0
APPS_PATH = "/eureka/apps"

DEFAULT_DATA_CENTER_CLASS = "com.netflix.appinfo.InstanceInfo$DefaultDataCenterInfo"
DEFAULT_DATA_CENTER_NAME = "MyOwn"
DEFAULT_SECURE_PORT = 443
DEFAULT_COUNTRY_ID = "1"

JSON_HEADERS: dict[str, str] = {
    "Content-Type": "application/json",
    "Accept": "application/json",
}


class InstanceStatus(StrEnum):
    """Instance statuses understood by the registry."""
    UP = "UP"
    DOWN = "DOWN"
    STARTING = "STARTING"
    OUT_OF_SERVICE = "OUT_OF_SERVICE"
    UNKNOWN = "UNKNOWN"


class DiscoveryPolicy(StrEnum):
    """Selection policies for picking one instance out of many
    Random
    RoundRobin
    """
    Random = "random"
    RoundRobin = "round_robin"

    @classmethod
    def to_original(cls, value: str) -> "DiscoveryPolicy":
        normalized = value.strip().lower().replace("-", "_")
        for policy in cls:
            if policy.value == normalized or policy.name.lower() == normalized.replace("_", ""):
                return policy
        raise ValueError(f"Unknown discovery policy: {value!r}")


def app_path(app_name: str) -> str:
    return f"{APPS_PATH}/{app_name}"


def instance_path(app_name: str, instance_id: str) -> str:
    return f"{APPS_PATH}/{app_name}/{instance_id}"
