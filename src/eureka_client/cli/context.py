"""Shared helpers turning parsed CLI arguments into a configured client."""
from __future__ import annotations

import argparse
from typing import Final

from eureka_client.client import EurekaClient
from eureka_client.config import ConfigError, InstanceConfig, load_config
from eureka_client.config.loader import get_default_config_path
from eureka_client.utils.constant import DEFAULT_HTTP_TIMEOUT

EXIT_SUCCESS: Final = 0
EXIT_ERROR: Final = 1
EXIT_VALIDATION_FAILED: Final = 2

# Identity used when the CLI only reads from the registry.
_ANONYMOUS_INSTANCE = {"app_name": "eureka-cli", "ip": "127.0.0.1", "port": 0}


def resolve_config(args: argparse.Namespace, *, require_file: bool = True) -> InstanceConfig:
    """Load the instance config named by ``--config`` or the default path.

    Raises:
        ConfigError: When no file is found and ``require_file`` is set.
    """
    path = getattr(args, "config", None) or get_default_config_path()
    if path:
        config = load_config(path)
    elif require_file:
        raise ConfigError("No configuration file given (use --config) and no default found")
    else:
        config = InstanceConfig.from_dict(_ANONYMOUS_INSTANCE)
    eureka_url = getattr(args, "eureka_url", None)
    if eureka_url:
        config.eureka_default_url = eureka_url
    return config


def build_client(args: argparse.Namespace, *, require_file: bool = True) -> EurekaClient:
    config = resolve_config(args, require_file=require_file)
    timeout = getattr(args, "timeout", None)
    return EurekaClient(
        config,
        interactive=True,
        timeout=DEFAULT_HTTP_TIMEOUT if timeout is None else timeout,
    )
