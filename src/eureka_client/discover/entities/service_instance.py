from typing import Any, TypeAlias

from pydantic import BaseModel, ConfigDict, Field, field_validator

ServiceInstance: TypeAlias = dict[str, Any]
"""A registry instance record, passed around untouched."""


class InstanceSummary(BaseModel):
    """Read-only view over the fields of a registry instance record."""

    model_config = ConfigDict(extra="allow", populate_by_name=True, frozen=True)

    instance_id: str | None = Field(default=None, alias="instanceId")
    app: str | None = None
    host_name: str | None = Field(default=None, alias="hostName")
    ip_addr: str | None = Field(default=None, alias="ipAddr")
    status: str | None = None
    port: int | None = None
    secure_port: int | None = Field(default=None, alias="securePort")

    @field_validator("port", "secure_port", mode="before")
    @classmethod
    def _unwrap_port(cls, value: Any) -> Any:
        # registry ports arrive as {"$": 8080, "@enabled": "true"}
        if isinstance(value, dict):
            return value.get("$")
        return value

    @classmethod
    def from_instance(cls, instance: ServiceInstance) -> "InstanceSummary":
        return cls.model_validate(instance)

    @property
    def address(self) -> str:
        """Constructs the host:port address of the instance."""
        host = self.ip_addr or self.host_name or ""
        if self.port is None:
            return host
        return f"{host}:{self.port}"
