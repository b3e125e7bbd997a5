from __future__ import annotations

from pathlib import Path

import pytest

from eureka_client.config import ConfigError, build_config, load_config, load_config_with_overloads
from eureka_client.config import loader as config_loader
from eureka_client.discover import RoundRobinStrategy, StaticInstanceProvider


def _write(path: Path, content: str) -> Path:
    path.write_text(content, encoding="utf-8")
    return path


def test_load_config_reads_yaml(tmp_path):
    path = _write(
        tmp_path / "eureka.yaml",
        """
app_name: orders
ip: 10.0.0.5
port: 8080
eureka_default_url: http://eureka:8761
heartbeat_interval: 5
discovery_strategy: round_robin
""",
    )
    config = load_config(path)
    assert config.instance_id == "10.0.0.5:orders:8080"
    assert config.eureka_default_url == "http://eureka:8761"
    assert config.heartbeat_interval == 5
    assert isinstance(config.discovery_strategy, RoundRobinStrategy)


def test_load_config_accepts_eureka_root_key_and_camel_case(tmp_path):
    path = _write(
        tmp_path / "eureka.yml",
        """
eureka:
  appName: orders
  ip: 10.0.0.5
  port: [8080, true]
  securePort: [8443, true]
""",
    )
    config = load_config(path)
    assert config.app_name == "orders"
    assert config.secure_port.value == 8443
    assert config.secure_port.enabled is True


def test_env_expansion_with_default(tmp_path, monkeypatch):
    monkeypatch.setenv("ORDERS_IP", "10.1.1.1")
    monkeypatch.delenv("ORDERS_PORT", raising=False)
    path = _write(
        tmp_path / "eureka.yaml",
        """
app_name: orders
ip: ${ORDERS_IP}
port: ${ORDERS_PORT:-9090}
""",
    )
    config = load_config(path)
    assert config.ip == "10.1.1.1"
    assert config.instance_id == "10.1.1.1:orders:9090"


def test_env_expansion_without_default_fails(tmp_path, monkeypatch):
    monkeypatch.delenv("ORDERS_IP", raising=False)
    path = _write(tmp_path / "eureka.yaml", "app_name: orders\nip: ${ORDERS_IP}\nport: 8080\n")
    with pytest.raises(ConfigError, match="ORDERS_IP"):
        load_config(path)


def test_instances_section_builds_static_provider(tmp_path):
    path = _write(
        tmp_path / "eureka.yaml",
        """
app_name: orders
ip: 10.0.0.5
port: 8080
instances:
  billing:
    - instanceId: billing-1
      ipAddr: 10.0.0.7
      port: {"$": 8080, "@enabled": "true"}
""",
    )
    config = load_config(path)
    provider = config.instance_provider
    assert isinstance(provider, StaticInstanceProvider)
    assert provider.get_instances("billing")[0]["instanceId"] == "billing-1"
    assert provider.get_instances("unknown") == []


def test_instances_section_must_be_mapping():
    with pytest.raises(ConfigError, match="instances"):
        build_config({"app_name": "orders", "ip": "10.0.0.5", "port": 8080, "instances": ["x"]})


def test_invalid_config_is_wrapped(tmp_path):
    path = _write(tmp_path / "eureka.yaml", "app_name: orders\nport: 8080\nbogus: 1\n")
    with pytest.raises(ConfigError, match="Invalid eureka configuration"):
        load_config(path)


def test_missing_file(tmp_path):
    with pytest.raises(ConfigError, match="not found"):
        load_config(tmp_path / "absent.yaml")


def test_unsupported_suffix(tmp_path):
    path = _write(tmp_path / "eureka.json", "{}")
    with pytest.raises(ConfigError, match="Unsupported"):
        load_config(path)


def test_non_mapping_document(tmp_path):
    path = _write(tmp_path / "eureka.yaml", "- just\n- a list\n")
    with pytest.raises(ConfigError, match="mapping"):
        load_config(path)


def test_overloads_are_merged(tmp_path):
    base = _write(
        tmp_path / "base.yaml",
        "app_name: orders\nip: 10.0.0.5\nport: 8080\ndata_center_info:\n  name: MyOwn\n",
    )
    override = _write(
        tmp_path / "prod.yaml",
        "eureka_default_url: http://eureka.prod:8761\ndata_center_info:\n  name: Amazon\n",
    )
    config = load_config_with_overloads(base, override)
    assert config.eureka_default_url == "http://eureka.prod:8761"
    assert config.data_center_info.name == "Amazon"
    assert config.app_name == "orders"


def test_default_path_lookup(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(Path, "home", classmethod(lambda cls: tmp_path / "home"))
    _write(tmp_path / "eureka.yaml", "app_name: orders\nip: 10.0.0.5\nport: 8080\n")
    assert config_loader.get_default_config_path() == tmp_path / "eureka.yaml"
    assert load_config(None).app_name == "orders"
