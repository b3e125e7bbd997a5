from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from eureka_client.discover.entities import (
    DataCenterInfoWire,
    InstanceInfo,
    PortInfo,
    RegistrationRequest,
)
from eureka_client.discover.provider import InstanceProvider
from eureka_client.discover.strategy import (
    DiscoveryStrategy,
    DiscoveryStrategyFactory,
    RandomStrategy,
)
from eureka_client.utils.constant import (
    DEFAULT_COUNTRY_ID,
    DEFAULT_DATA_CENTER_CLASS,
    DEFAULT_DATA_CENTER_NAME,
    DEFAULT_EUREKA_URL,
    DEFAULT_HEARTBEAT_INTERVAL,
    DEFAULT_SECURE_PORT,
    InstanceStatus,
)


def _pair_to_mapping(data: Any, first: str, second: str) -> Any:
    if isinstance(data, (tuple, list)):
        if not 1 <= len(data) <= 2:
            raise ValueError(f"expected ({first}, {second}), got {len(data)} items")
        payload = {first: data[0]}
        if len(data) == 2:
            payload[second] = data[1]
        return payload
    return data


class PortConfig(BaseModel):
    """A port value together with its enabled flag."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    value: int | str
    enabled: bool = True

    @model_validator(mode="before")
    @classmethod
    def _from_shorthand(cls, data: Any) -> Any:
        if isinstance(data, (int, str)) and not isinstance(data, bool):
            return {"value": data}
        return _pair_to_mapping(data, "value", "enabled")

    def to_wire(self) -> PortInfo:
        return PortInfo(value=self.value, enabled=self.enabled)


class DataCenterInfo(BaseModel):
    """Data center descriptor advertised with the instance."""

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        alias_generator=to_camel,
        populate_by_name=True,
    )

    class_name: str = DEFAULT_DATA_CENTER_CLASS
    name: str = DEFAULT_DATA_CENTER_NAME

    @model_validator(mode="before")
    @classmethod
    def _from_pair(cls, data: Any) -> Any:
        return _pair_to_mapping(data, "class_name", "name")

    def to_wire(self) -> DataCenterInfoWire:
        return DataCenterInfoWire(class_name=self.class_name, name=self.name)


class InstanceConfig(BaseModel):
    """Description of the advertised instance and of the registry endpoint.

    Keys may be given in snake_case or in the registry's camelCase
    (``appName``, ``eurekaDefaultUrl``). Unknown keys are rejected.

    ``host_name`` falls back to ``ip`` and both VIP addresses fall back to
    ``app_name``. These fallbacks are applied once, when the config is
    built; assigning ``ip`` or ``app_name`` later leaves them alone.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
        validate_assignment=True,
        arbitrary_types_allowed=True,
    )

    app_name: str
    ip: str
    port: PortConfig
    host_name: str = ""
    secure_port: PortConfig = Field(
        default_factory=lambda: PortConfig(value=DEFAULT_SECURE_PORT, enabled=False)
    )
    status: str = InstanceStatus.UP.value
    overridden_status: str = InstanceStatus.UNKNOWN.value
    country_id: str = DEFAULT_COUNTRY_ID
    data_center_info: DataCenterInfo = Field(default_factory=DataCenterInfo)
    home_page_url: str = ""
    status_page_url: str = ""
    health_check_url: str = ""
    vip_address: str = ""
    secure_vip_address: str = ""

    eureka_default_url: str = DEFAULT_EUREKA_URL
    heartbeat_interval: float = Field(default=DEFAULT_HEARTBEAT_INTERVAL, ge=0)

    discovery_strategy: DiscoveryStrategy = Field(default_factory=RandomStrategy, exclude=True)
    instance_provider: InstanceProvider | None = Field(default=None, exclude=True)

    @field_validator("discovery_strategy", mode="before")
    @classmethod
    def _strategy_from_name(cls, value: Any) -> Any:
        if isinstance(value, str):
            return DiscoveryStrategyFactory.get_strategy(value)
        return value

    @field_validator("country_id", mode="before")
    @classmethod
    def _country_id_as_str(cls, value: Any) -> Any:
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value

    def model_post_init(self, __context: Any) -> None:
        if not self.host_name:
            self.host_name = self.ip
        if not self.vip_address:
            self.vip_address = self.app_name
        if not self.secure_vip_address:
            self.secure_vip_address = self.app_name

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | "InstanceConfig") -> "InstanceConfig":
        if isinstance(data, cls):
            return data
        if not isinstance(data, Mapping):
            raise TypeError("instance config must be a mapping")
        return cls.model_validate(dict(data))

    @property
    def instance_id(self) -> str:
        """Returns the registry instance ID, ``host:app:port``."""
        return f"{self.host_name}:{self.app_name}:{self.port.value}"

    def registration_payload(self) -> dict[str, Any]:
        """Builds the body expected by the registry's registration endpoint."""
        request = RegistrationRequest(
            instance=InstanceInfo(
                instance_id=self.instance_id,
                host_name=self.host_name,
                app=self.app_name,
                ip_addr=self.ip,
                status=self.status,
                overridden_status=self.overridden_status,
                port=self.port.to_wire(),
                secure_port=self.secure_port.to_wire(),
                country_id=self.country_id,
                data_center_info=self.data_center_info.to_wire(),
                home_page_url=self.home_page_url,
                status_page_url=self.status_page_url,
                health_check_url=self.health_check_url,
                vip_address=self.vip_address,
                secure_vip_address=self.secure_vip_address,
            )
        )
        return request.to_payload()


__all__ = ["DataCenterInfo", "InstanceConfig", "PortConfig"]
