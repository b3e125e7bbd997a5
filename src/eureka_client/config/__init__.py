"""Configuration helpers."""

from .loader import ConfigError, build_config, load_config, load_config_with_overloads
from .models import DataCenterInfo, InstanceConfig, PortConfig

__all__ = [
    "ConfigError",
    "DataCenterInfo",
    "InstanceConfig",
    "PortConfig",
    "build_config",
    "load_config",
    "load_config_with_overloads",
]
