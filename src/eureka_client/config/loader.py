from __future__ import annotations

import os
import re
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from eureka_client.discover.provider import StaticInstanceProvider

from .models import InstanceConfig


class ConfigError(RuntimeError):
    """Raised when configuration loading fails."""


_ENV_PATTERN = re.compile(r"\$\{([A-Za-z_][A-Za-z0-9_]*)(?::-(.*?))?\}")
_ROOT_KEY = "eureka"
_INSTANCES_KEY = "instances"


def get_default_config_path() -> Path | None:
    """Return the first default config path that exists."""
    candidates = [
        Path.cwd() / "eureka.yaml",
        Path.cwd() / "eureka.yml",
        Path.home() / ".eureka.yaml",
        Path.home() / ".eureka.yml",
        Path("/etc/eureka/config.yaml"),
        Path("/etc/eureka/config.yml"),
    ]
    for candidate in candidates:
        if candidate.is_file():
            return candidate
    return None


def load_default_config() -> InstanceConfig:
    """Load the default config file into an InstanceConfig."""
    path = get_default_config_path()
    if path is None:
        raise ConfigError("No default config file found")
    return load_config(path)


def load_config(path: str | Path | None) -> InstanceConfig:
    """Load a YAML config file into an InstanceConfig."""
    if not path:
        return load_default_config()
    data = _load_config_mapping(path)
    return build_config(data, source=str(path))


def load_config_with_overloads(
    base_path: str | Path, *overload_paths: str | Path
) -> InstanceConfig:
    """Load a base config file and apply one or more override files."""
    merged = _load_config_mapping(base_path)
    for overload in overload_paths:
        overlay = _load_config_mapping(overload)
        merged = _merge_mapping(merged, overlay)
    return build_config(merged, source=str(base_path))


def build_config(data: Mapping[str, Any], *, source: str = "<mapping>") -> InstanceConfig:
    """Build an InstanceConfig from an already-parsed mapping.

    An ``instances`` mapping (application name to instance list) becomes a
    StaticInstanceProvider unless an ``instance_provider`` is given.
    """
    payload = dict(data)
    static_instances = payload.pop(_INSTANCES_KEY, None)
    if static_instances is not None:
        if not isinstance(static_instances, Mapping):
            raise ConfigError(f"{_INSTANCES_KEY} section must be a mapping")
        payload.setdefault("instance_provider", StaticInstanceProvider(static_instances))
    try:
        return InstanceConfig.from_dict(payload)
    except ValidationError as exc:
        raise ConfigError(f"Invalid eureka configuration in {source}: {exc}") from exc


def _load_config_mapping(path: str | Path) -> dict[str, Any]:
    config_path = _to_path(path)
    _ensure_yaml_path(config_path)
    if not config_path.is_file():
        raise ConfigError(f"Config file not found: {config_path}")
    try:
        content = config_path.read_text(encoding="utf-8")
        data = _parse_yaml_with_env(content)
    except ConfigError:
        raise
    except Exception as exc:
        raise ConfigError(f"Failed to load config file: {config_path}") from exc
    return _normalize_config_root(dict(data))


def _parse_yaml_with_env(content: str) -> Mapping[str, Any]:
    parsed = yaml.safe_load(content) or {}
    if not isinstance(parsed, Mapping):
        raise ConfigError("Config file must parse to a mapping")
    return _expand_env_in_data(parsed)


def _expand_env_in_data(value: Any) -> Any:
    if isinstance(value, str):
        return _expand_env_value(value)
    if isinstance(value, Mapping):
        return {key: _expand_env_in_data(val) for key, val in value.items()}
    if isinstance(value, list):
        return [_expand_env_in_data(item) for item in value]
    return value


def _expand_env_value(value: str) -> str:
    def replace(match: re.Match[str]) -> str:
        name = match.group(1)
        default = match.group(2)
        env_value = os.getenv(name)
        if env_value is None or env_value == "":
            if default is None:
                raise ConfigError(
                    f"Environment variable '{name}' is not set and no default provided"
                )
            return default
        return env_value

    return _ENV_PATTERN.sub(replace, value)


def _merge_mapping(base: Mapping[str, Any], override: Mapping[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in override.items():
        if (
            key in merged
            and isinstance(merged[key], Mapping)
            and isinstance(value, Mapping)
        ):
            merged[key] = _merge_mapping(merged[key], value)
        else:
            merged[key] = value
    return merged


def _normalize_config_root(data: Mapping[str, Any]) -> dict[str, Any]:
    if _ROOT_KEY not in data:
        return dict(data)
    nested = data[_ROOT_KEY]
    if not isinstance(nested, Mapping):
        raise ConfigError(f"{_ROOT_KEY} section must be a mapping")
    merged = dict(nested)
    for key, value in data.items():
        if key == _ROOT_KEY:
            continue
        merged[key] = value
    return merged


def _ensure_yaml_path(path: Path) -> None:
    if path.suffix.lower() not in {".yaml", ".yml"}:
        raise ConfigError(f"Unsupported config file type: {path.suffix}")


def _to_path(path: str | Path) -> Path:
    return Path(path).expanduser()
