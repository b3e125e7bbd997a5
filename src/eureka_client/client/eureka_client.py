"""Registration lifecycle and instance resolution against a Eureka registry.

Error policy:
    - ``register`` / ``deregister`` raise on anything but their success status.
    - ``heartbeat`` / ``is_registered`` are best-effort and never raise.
    - ``fetch_instances`` raises ``InstanceFailure`` only once the instance
      provider fallback is exhausted.
"""
from __future__ import annotations

import asyncio
import inspect
import logging
import sys
from collections.abc import Mapping
from concurrent.futures import Future
from datetime import datetime
from http import HTTPStatus
from typing import Any

from eureka_client.client.heartbeat import HeartbeatLoop
from eureka_client.client.transport import EurekaTransport, HttpxTransport, TransportResponse
from eureka_client.config.models import InstanceConfig
from eureka_client.discover.cache import InstanceCache
from eureka_client.discover.entities import ServiceInstance
from eureka_client.exceptions import (
    DeRegisterFailure,
    InstanceFailure,
    RegisterFailure,
    TransportError,
)
from eureka_client.observability.logging import LogContext
from eureka_client.utils.constant import (
    DEFAULT_HTTP_TIMEOUT,
    JSON_HEADERS,
    app_path,
    instance_path,
)

logger = logging.getLogger(__name__)


def _stdout_is_tty() -> bool:
    stream = sys.stdout
    return stream is not None and hasattr(stream, "isatty") and stream.isatty()


def _is_cancelling() -> bool:
    task = asyncio.current_task()
    return task is not None and task.cancelling() > 0


def _error_code(exc: BaseException) -> Any:
    """Returns the errno found along the cause chain, else the client error code."""
    seen: set[int] = set()
    current: BaseException | None = exc
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        errno = getattr(current, "errno", None)
        if errno is not None:
            return errno
        current = current.__cause__ or current.__context__
    return getattr(exc, "code", None)


def _extract_instances(response: TransportResponse) -> list[ServiceInstance] | None:
    try:
        body = response.json()
    except ValueError:
        logger.warning("Registry returned a body that is not JSON")
        return None
    if not isinstance(body, Mapping):
        return None
    application = body.get("application")
    if not isinstance(application, Mapping):
        return None
    instances = application.get("instance")
    # a lone instance may come back unwrapped
    if isinstance(instances, Mapping):
        return [dict(instances)]
    if isinstance(instances, list):
        return instances
    return None


class EurekaClient:
    """Client for one registered instance.

    Args:
        config: The instance description. A mapping is converted with
            ``InstanceConfig.from_dict``; an InstanceConfig is referenced,
            not copied.
        transport: Transport to the registry. Defaults to an HttpxTransport
            on ``config.eureka_default_url``, owned and closed by the client.
        interactive: Whether to echo progress lines to stdout. Defaults to
            whether stdout is a terminal.
        cache: Instance cache to use. Defaults to a fresh InstanceCache.
        timeout: Request timeout of the default transport, in seconds.
    """

    def __init__(
        self,
        config: InstanceConfig | Mapping[str, Any],
        transport: EurekaTransport | None = None,
        *,
        interactive: bool | None = None,
        cache: InstanceCache | None = None,
        timeout: float | None = DEFAULT_HTTP_TIMEOUT,
    ):
        self._config = InstanceConfig.from_dict(config)
        self._owns_transport = transport is None
        self._transport = transport or HttpxTransport(self._config.eureka_default_url, timeout=timeout)
        self._interactive = _stdout_is_tty() if interactive is None else interactive
        self._cache = cache if cache is not None else InstanceCache()
        self._stop_event: asyncio.Event | None = None
        self._task: asyncio.Task | None = None

    @property
    def config(self) -> InstanceConfig:
        return self._config

    @property
    def cache(self) -> InstanceCache:
        return self._cache

    @property
    def interactive(self) -> bool:
        return self._interactive

    async def __aenter__(self) -> "EurekaClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Stops a background loop and closes an owned transport."""
        if self._task is not None:
            await self.stop()
        if self._owns_transport:
            await self._transport.aclose()

    async def _request(self, method: str, path: str, body: Any | None = None) -> TransportResponse:
        return await self._transport.request(method, path, headers=dict(JSON_HEADERS), body=body)

    def _output(self, message: str) -> None:
        if not self._interactive:
            return
        print(f"[{datetime.now():%Y-%m-%d %H:%M:%S}] {message}", flush=True)

    def _instance_path(self) -> str:
        return instance_path(self._config.app_name, self._config.instance_id)

    # ------------------------------------------------------------------
    # Registration lifecycle
    # ------------------------------------------------------------------

    async def register(self) -> None:
        """Registers this instance. Succeeds only on 204 No Content.

        Raises:
            RegisterFailure: On any other status or a transport error.
        """
        payload = self._config.registration_payload()
        self._output("Registering...")
        try:
            response = await self._request("POST", app_path(self._config.app_name), body=payload)
        except TransportError as exc:
            logger.error("Registration of %s failed: %s", self._config.instance_id, exc.message)
            raise RegisterFailure(data={"instance_id": self._config.instance_id}, cause=exc) from exc
        if response.status_code != HTTPStatus.NO_CONTENT:
            logger.error(
                "Registration of %s rejected with status %s",
                self._config.instance_id,
                response.status_code,
            )
            raise RegisterFailure(
                data={"instance_id": self._config.instance_id, "status_code": response.status_code}
            )
        logger.info("Registered %s", self._config.instance_id)

    async def is_registered(self) -> bool:
        """Best-effort check of this instance's registry record.

        Any failure, including a transport error, reads as "not registered".
        """
        try:
            response = await self._request("GET", self._instance_path())
        except Exception:
            logger.debug("Registration check for %s failed", self._config.instance_id, exc_info=True)
            return False
        return response.status_code == HTTPStatus.OK

    async def deregister(self) -> None:
        """Removes this instance from the registry. Succeeds only on 200.

        Raises:
            DeRegisterFailure: On any other status or a transport error.
        """
        self._output("De-registering...")
        try:
            response = await self._request("DELETE", self._instance_path())
        except TransportError as exc:
            logger.error("De-registration of %s failed: %s", self._config.instance_id, exc.message)
            raise DeRegisterFailure(data={"instance_id": self._config.instance_id}, cause=exc) from exc
        if response.status_code != HTTPStatus.OK:
            raise DeRegisterFailure(
                data={"instance_id": self._config.instance_id, "status_code": response.status_code}
            )
        logger.info("De-registered %s", self._config.instance_id)

    async def heartbeat(self) -> bool:
        """Renews the registration lease. Never raises.

        Returns:
            True if the registry acknowledged the renewal with 200.
        """
        self._output("Sending heartbeat...")
        try:
            response = await self._request("PUT", self._instance_path())
        except Exception as exc:
            code = _error_code(exc)
            self._output(f"Heartbeat failed because of connection error... (code: {code})")
            logger.warning(
                "Heartbeat for %s failed because of connection error (code: %s): %s",
                self._config.instance_id,
                code,
                exc,
            )
            return False
        if response.status_code != HTTPStatus.OK:
            self._output(f"Heartbeat failed... (code: {response.status_code})")
            logger.warning(
                "Heartbeat for %s failed (code: %s)",
                self._config.instance_id,
                response.status_code,
            )
            return False
        return True

    async def start(self, stop_event: asyncio.Event | None = None) -> None:
        """Registers once, then heartbeats every ``heartbeat_interval`` seconds.

        Runs until ``stop_event`` is set or the task is cancelled. A failed
        initial registration propagates and no heartbeat is sent.
        """
        with LogContext(app_name=self._config.app_name, instance_id=self._config.instance_id):
            await self.register()
            loop = HeartbeatLoop(self.heartbeat, self._config.heartbeat_interval)
            await loop.run(stop_event)

    def run_in_background(self) -> asyncio.Task:
        """Runs ``start()`` as a task that ``stop()`` can end."""
        if self._task is not None and not self._task.done():
            raise RuntimeError("client is already running")
        self._stop_event = asyncio.Event()
        self._task = asyncio.create_task(self.start(self._stop_event))
        return self._task

    async def stop(self, *, deregister: bool = False) -> None:
        """Ends a background loop started with ``run_in_background()``.

        De-registration stays the caller's choice; pass ``deregister=True``
        to remove the instance once the loop has exited.
        """
        if self._stop_event is not None:
            self._stop_event.set()
        if self._task is not None:
            results = await asyncio.gather(self._task, return_exceptions=True)
            self._task = None
            for result in results:
                if isinstance(result, Exception):
                    logger.warning("Heartbeat task ended with an error: %s", result)
        if deregister:
            await self.deregister()

    # ------------------------------------------------------------------
    # Instance resolution
    # ------------------------------------------------------------------

    async def fetch_instance(self, app_name: str) -> ServiceInstance:
        """Resolves ``app_name`` and lets the discovery strategy pick one."""
        instances = await self.fetch_instances(app_name)
        return self._config.discovery_strategy.get_instance(instances)

    async def fetch_instances(self, app_name: str) -> list[ServiceInstance]:
        """Returns the instances of ``app_name`` in registry order.

        A cached entry is returned without a network call and is never
        re-checked for staleness. Only registry results are cached; results
        of the instance provider are returned as-is on every fallback.
        Concurrent callers, from any thread or event loop, share one
        resolution of an uncached name.

        Raises:
            InstanceFailure: When the registry yields nothing and there is no
                provider, or the provider itself fails.
        """
        while True:
            cached = self._cache.get(app_name)
            if cached is not None:
                return cached
            flight, leader = self._cache.claim_fetch(app_name)
            if leader:
                return await self._lead_fetch(app_name, flight)
            try:
                # shielded so a cancelled waiter cannot cancel the leader's flight
                return await asyncio.shield(asyncio.wrap_future(flight))
            except asyncio.CancelledError:
                if flight.cancelled() and not _is_cancelling():
                    # the leader was interrupted; retry as a new leader
                    continue
                raise

    async def refresh_instances(self, app_name: str) -> list[ServiceInstance]:
        """Drops the cached entry for ``app_name`` and resolves it again."""
        self._cache.invalidate(app_name)
        return await self.fetch_instances(app_name)

    def invalidate(self, app_name: str | None = None) -> None:
        """Drops one cached application, or all of them."""
        if app_name is None:
            self._cache.clear()
        else:
            self._cache.invalidate(app_name)

    async def _lead_fetch(self, app_name: str, flight: Future) -> list[ServiceInstance]:
        try:
            cached = self._cache.get(app_name)
            result = cached if cached is not None else await self._fetch_from_registry(app_name)
        except Exception as exc:
            flight.set_exception(exc)
            raise
        except BaseException:
            flight.cancel()
            raise
        else:
            flight.set_result(result)
            return result
        finally:
            self._cache.release_fetch(app_name, flight)

    async def _fetch_from_registry(self, app_name: str) -> list[ServiceInstance]:
        not_found = f"No instance found for '{app_name}'."
        try:
            response = await self._request("GET", app_path(app_name))
        except TransportError as exc:
            logger.warning("Could not reach registry for %s: %s", app_name, exc.message)
            return await self._fallback(app_name, not_found, cause=exc)
        if response.status_code != HTTPStatus.OK:
            return await self._fallback(
                app_name,
                "Could not get instances from Eureka.",
                data={"app_name": app_name, "status_code": response.status_code},
            )
        instances = _extract_instances(response)
        if not instances:
            return await self._fallback(app_name, not_found)
        logger.debug("Resolved %d instance(s) for %s", len(instances), app_name)
        return self._cache.put(app_name, instances)

    async def _fallback(
        self,
        app_name: str,
        message: str,
        *,
        data: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> list[ServiceInstance]:
        provider = self._config.instance_provider
        if provider is None:
            raise InstanceFailure(message=message, data=data or {"app_name": app_name}, cause=cause)
        logger.info("Using %s for %s", type(provider).__name__, app_name)
        try:
            result = provider.get_instances(app_name)
            if inspect.isawaitable(result):
                result = await result
        except Exception as exc:
            raise InstanceFailure(
                message=f"Instance provider failed for '{app_name}'.",
                data={"app_name": app_name},
                cause=exc,
            ) from exc
        return result


__all__ = ["EurekaClient"]
