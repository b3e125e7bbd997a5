from __future__ import annotations

import asyncio
import io
import json
import logging

import pytest

from eureka_client.observability.logging import (
    LOG_FORMAT_ENV,
    PACKAGE_LOGGER,
    ContextFilter,
    LogContext,
    configure_logging,
    get_logger,
)


def _detach(logger: logging.Logger) -> None:
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)
    logger.propagate = True


def test_json_output_carries_context():
    stream = io.StringIO()
    logger = get_logger("eureka_client.tests.json", log_format="json", stream=stream)
    try:
        with LogContext(app_name="orders", instance_id="10.0.0.5:orders:8080"):
            logger.info("registered %s", "orders", extra={"status_code": 204})
    finally:
        _detach(logger)

    payload = json.loads(stream.getvalue().strip())
    assert payload["message"] == "registered orders"
    assert payload["level"] == "INFO"
    assert payload["logger"] == "eureka_client.tests.json"
    assert payload["app_name"] == "orders"
    assert payload["instance_id"] == "10.0.0.5:orders:8080"
    assert payload["status_code"] == 204
    assert payload["timestamp"].endswith("Z")


def test_console_output_fills_missing_context():
    stream = io.StringIO()
    logger = get_logger("eureka_client.tests.console", log_format="console", stream=stream)
    try:
        logger.warning("heartbeat failed")
    finally:
        _detach(logger)

    line = stream.getvalue().strip()
    assert "WARNING eureka_client.tests.console heartbeat failed" in line
    assert line.endswith("app_name=- instance_id=-")


def test_log_format_from_environment(monkeypatch):
    monkeypatch.setenv(LOG_FORMAT_ENV, "console")
    stream = io.StringIO()
    logger = get_logger("eureka_client.tests.env", stream=stream)
    try:
        logger.info("hello")
    finally:
        _detach(logger)

    with pytest.raises(json.JSONDecodeError):
        json.loads(stream.getvalue())


def test_handler_is_added_once():
    stream = io.StringIO()
    logger = get_logger("eureka_client.tests.once", log_format="json", stream=stream)
    get_logger("eureka_client.tests.once", log_format="json", stream=stream)
    try:
        assert len(logger.handlers) == 1
        assert logger.propagate is False
    finally:
        _detach(logger)


@pytest.mark.parametrize(
    "verbose, quiet, expected",
    [(False, False, logging.INFO), (True, False, logging.DEBUG), (False, True, logging.WARNING)],
)
def test_configure_logging_levels(verbose, quiet, expected):
    logger = configure_logging(verbose=verbose, quiet=quiet, stream=io.StringIO())
    assert logger.name == PACKAGE_LOGGER
    assert logger.level == expected


def test_log_context_nesting_and_reset():
    with LogContext(app_name="orders"):
        with LogContext(instance_id="orders-1", region="eu"):
            assert LogContext.snapshot() == {
                "app_name": "orders",
                "instance_id": "orders-1",
                "region": "eu",
            }
        assert LogContext.snapshot() == {"app_name": "orders", "instance_id": None}
    assert LogContext.snapshot() == {"app_name": None, "instance_id": None}


@pytest.mark.asyncio
async def test_log_context_is_task_local():
    seen: dict[str, dict] = {}

    async def worker(name: str) -> None:
        with LogContext(app_name=name):
            await asyncio.sleep(0)
            seen[name] = LogContext.snapshot()

    await asyncio.gather(worker("orders"), worker("billing"))
    assert seen["orders"]["app_name"] == "orders"
    assert seen["billing"]["app_name"] == "billing"


def test_context_filter_keeps_explicit_values():
    record = logging.LogRecord("x", logging.INFO, __file__, 1, "msg", None, None)
    record.app_name = "explicit"
    with LogContext(app_name="orders", instance_id="orders-1"):
        ContextFilter().filter(record)
    assert record.app_name == "explicit"
    assert record.instance_id == "orders-1"
