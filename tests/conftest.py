from __future__ import annotations

import json
import logging
from collections.abc import Callable
from typing import Any

import pytest

from eureka_client.client.transport import EurekaTransport, TransportResponse
from eureka_client.observability.logging import PACKAGE_LOGGER, LogContext


class FakeTransport(EurekaTransport):
    """Records requests and answers them from a queue or a responder."""

    def __init__(self, responder: Callable[[str, str, Any], Any] | None = None):
        self.calls: list[tuple[str, str, Any]] = []
        self.headers: list[dict[str, str] | None] = []
        self.responses: list[Any] = []
        self.responder = responder
        self.closed = False

    def queue(self, *responses: Any) -> "FakeTransport":
        self.responses.extend(responses)
        return self

    async def request(self, method, path, *, headers=None, body=None):
        self.calls.append((method, path, body))
        self.headers.append(headers)
        if self.responder is not None:
            outcome = self.responder(method, path, body)
        else:
            outcome = self.responses.pop(0)
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome

    async def aclose(self) -> None:
        self.closed = True


def json_response(status_code: int, payload: Any) -> TransportResponse:
    return TransportResponse(status_code=status_code, body=json.dumps(payload).encode("utf-8"))


def application_payload(*instances: dict[str, Any]) -> dict[str, Any]:
    return {"application": {"name": "BILLING", "instance": list(instances)}}


@pytest.fixture
def fake_transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def instance_config() -> dict[str, Any]:
    return {"app_name": "orders", "ip": "10.0.0.5", "port": 8080, "heartbeat_interval": 0.01}


@pytest.fixture(autouse=True)
def _reset_log_context():
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture(autouse=True)
def _restore_package_logger():
    logger = logging.getLogger(PACKAGE_LOGGER)
    handlers = list(logger.handlers)
    level, propagate = logger.level, logger.propagate
    yield
    logger.handlers[:] = handlers
    logger.setLevel(level)
    logger.propagate = propagate
