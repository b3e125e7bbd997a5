"""Wire models for the registry's registration endpoint.

Field order and aliases are load-bearing: registry servers expect the
``{"instance": {...}}`` document exactly as dumped by
``RegistrationRequest.to_payload()``.
"""
from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class _WireModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)


class PortInfo(_WireModel):
    value: int | str = Field(alias="$")
    enabled: bool = Field(alias="@enabled")


class DataCenterInfoWire(_WireModel):
    class_name: str = Field(alias="@class")
    name: str


class InstanceInfo(_WireModel):
    instance_id: str = Field(alias="instanceId")
    host_name: str = Field(alias="hostName")
    app: str
    ip_addr: str = Field(alias="ipAddr")
    status: str
    overridden_status: str = Field(alias="overriddenstatus")
    port: PortInfo
    secure_port: PortInfo = Field(alias="securePort")
    country_id: str = Field(alias="countryId")
    data_center_info: DataCenterInfoWire = Field(alias="dataCenterInfo")
    home_page_url: str = Field(alias="homePageUrl")
    status_page_url: str = Field(alias="statusPageUrl")
    health_check_url: str = Field(alias="healthCheckUrl")
    vip_address: str = Field(alias="vipAddress")
    secure_vip_address: str = Field(alias="secureVipAddress")


class RegistrationRequest(_WireModel):
    instance: InstanceInfo

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)
