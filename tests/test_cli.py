from __future__ import annotations

import json

import pytest

from conftest import FakeTransport, application_payload, json_response
from eureka_client.cli import build_parser, main
from eureka_client.cli import context as cli_context
from eureka_client.client import EurekaClient, TransportResponse

CONFIG_YAML = """
app_name: orders
ip: 10.0.0.5
port: 8080
eureka_default_url: http://eureka:8761
instances:
  billing:
    - instanceId: billing-static
      ipAddr: 10.9.9.9
      port: {"$": 8080, "@enabled": "true"}
"""


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "eureka.yaml"
    path.write_text(CONFIG_YAML, encoding="utf-8")
    return path


@pytest.fixture
def transport(monkeypatch):
    fake = FakeTransport()
    created: list[EurekaClient] = []

    def factory(config, *, interactive, timeout):
        client = EurekaClient(config, fake, interactive=False)
        created.append(client)
        return client

    monkeypatch.setattr(cli_context, "EurekaClient", factory)
    fake.created = created
    return fake


@pytest.fixture(autouse=True)
def _isolated_cwd(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(cli_context, "get_default_config_path", lambda: None)


def test_parser_requires_a_command():
    with pytest.raises(SystemExit):
        build_parser().parse_args([])


def test_verbose_and_quiet_are_exclusive():
    with pytest.raises(SystemExit):
        build_parser().parse_args(["-v", "-q", "version"])


def test_version(capsys):
    assert main(["version"]) == 0
    assert capsys.readouterr().out.strip()


def test_config_validate(config_file, capsys):
    assert main(["config", "validate", str(config_file)]) == 0
    out = capsys.readouterr().out
    assert f"Configuration file is valid: {config_file}" in out
    assert "instance: 10.0.0.5:orders:8080" in out


def test_config_validate_reports_errors(tmp_path, capsys):
    path = tmp_path / "broken.yaml"
    path.write_text("app_name: orders\n", encoding="utf-8")
    assert main(["config", "validate", str(path)]) == 2
    assert "Validation failed" in capsys.readouterr().err


def test_config_validate_missing_file(tmp_path, capsys):
    assert main(["config", "validate", str(tmp_path / "nope.yaml")]) == 1
    assert "not found" in capsys.readouterr().err


def test_config_show_prints_registration_payload(config_file, capsys):
    assert main(["config", "show", str(config_file)]) == 0
    payload = json.loads(capsys.readouterr().out)
    assert payload["instance"]["instanceId"] == "10.0.0.5:orders:8080"
    assert payload["instance"]["port"] == {"$": 8080, "@enabled": True}


def test_register(config_file, transport, capsys):
    transport.queue(TransportResponse(204))
    assert main(["--config", str(config_file), "register"]) == 0
    assert "Registered 10.0.0.5:orders:8080" in capsys.readouterr().out
    assert transport.calls[0][:2] == ("POST", "/eureka/apps/orders")


def test_register_failure(config_file, transport, capsys):
    transport.queue(TransportResponse(500))
    assert main(["--config", str(config_file), "register"]) == 1
    assert "Could not register with Eureka." in capsys.readouterr().err


def test_register_without_config(transport, capsys):
    assert main(["register"]) == 1
    assert "No configuration file" in capsys.readouterr().err
    assert transport.calls == []


def test_eureka_url_override(config_file, transport):
    transport.queue(TransportResponse(200))
    assert main(["--config", str(config_file), "--eureka-url", "http://other:8761", "deregister"]) == 0
    assert transport.created[0].config.eureka_default_url == "http://other:8761"
    assert transport.calls[0][0] == "DELETE"


@pytest.mark.parametrize("status_code, expected_exit, word", [(200, 0, "registered"), (404, 1, "not registered")])
def test_status(config_file, transport, capsys, status_code, expected_exit, word):
    transport.queue(TransportResponse(status_code))
    assert main(["--config", str(config_file), "status"]) == expected_exit
    assert capsys.readouterr().out.strip().endswith(f": {word}")


def test_heartbeat(config_file, transport):
    transport.queue(TransportResponse(200), TransportResponse(500))
    assert main(["--config", str(config_file), "heartbeat"]) == 0
    assert main(["--config", str(config_file), "heartbeat"]) == 1


def test_discover_list_json(config_file, transport, capsys):
    instance = {"instanceId": "billing-1", "ipAddr": "10.0.0.7", "status": "UP"}
    transport.queue(json_response(200, application_payload(instance)))
    assert main(["--config", str(config_file), "discover", "list", "billing", "--format", "json"]) == 0
    assert json.loads(capsys.readouterr().out) == [instance]


def test_discover_list_text_uses_provider_fallback(config_file, transport, capsys):
    transport.queue(TransportResponse(404))
    assert main(["--config", str(config_file), "discover", "list", "billing"]) == 0
    out = capsys.readouterr().out
    assert "[1] 10.9.9.9:8080" in out
    assert "instance: billing-static" in out


def test_discover_pick_without_config_file(transport, capsys):
    instance = {"instanceId": "billing-1", "ipAddr": "10.0.0.7"}
    transport.queue(json_response(200, application_payload(instance)))
    assert main(["discover", "pick", "billing", "--format", "json"]) == 0
    assert json.loads(capsys.readouterr().out) == instance


def test_discover_failure(transport, capsys):
    transport.queue(TransportResponse(503))
    assert main(["discover", "list", "billing"]) == 1
    assert "Could not get instances from Eureka." in capsys.readouterr().err
