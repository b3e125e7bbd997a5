"""Transports carrying registry requests.

A transport turns ``(method, path, headers, body)`` into a
``TransportResponse`` or raises ``TransportError``. It never interprets
status codes; that is the client's job.
"""
from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

import httpx

from eureka_client.exceptions import TransportError, TransportTimeoutError
from eureka_client.utils.constant import DEFAULT_HTTP_TIMEOUT

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TransportResponse:
    """Status code and raw body of a registry response."""

    status_code: int
    body: bytes = b""
    headers: dict[str, str] = field(default_factory=dict)

    def json(self) -> Any:
        """Decodes the body as JSON; an empty body decodes to None."""
        if not self.body or not self.body.strip():
            return None
        return json.loads(self.body)


class EurekaTransport(ABC):
    """Abstract transport used by EurekaClient."""

    @abstractmethod
    async def request(
        self,
        method: str,
        path: str,
        *,
        headers: dict[str, str] | None = None,
        body: Any | None = None,
    ) -> TransportResponse:
        """Sends one request.

        Args:
            method: HTTP method name.
            path: Path below the registry base URL, e.g. ``/eureka/apps/X``.
            headers: Request headers.
            body: JSON-serialisable body, or None for no body.

        Raises:
            TransportError: If no response could be obtained.
        """

    async def aclose(self) -> None:
        """Releases transport resources."""


class HttpxTransport(EurekaTransport):
    """Transport over an ``httpx.AsyncClient``.

    If ``httpx_client`` is given the caller owns its lifecycle; otherwise the
    transport creates one and closes it in ``aclose()``.
    """

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float | None = DEFAULT_HTTP_TIMEOUT,
        httpx_client: httpx.AsyncClient | None = None,
    ):
        if not base_url:
            raise ValueError("Must provide base_url")
        self.base_url = base_url.rstrip("/")
        self._owns_client = httpx_client is None
        self._client = httpx_client or httpx.AsyncClient(timeout=timeout)

    def url_for(self, path: str) -> str:
        if not path.startswith("/"):
            path = f"/{path}"
        return f"{self.base_url}{path}"

    async def request(
        self,
        method: str,
        path: str,
        *,
        headers: dict[str, str] | None = None,
        body: Any | None = None,
    ) -> TransportResponse:
        url = self.url_for(path)
        try:
            response = await self._client.request(method, url, headers=headers, json=body)
        except httpx.TimeoutException as exc:
            raise TransportTimeoutError(
                message=f"{method} {url} timed out",
                data={"method": method, "url": url},
                cause=exc,
            ) from exc
        except httpx.HTTPError as exc:
            raise TransportError(
                message=f"{method} {url} failed: {exc}",
                data={"method": method, "url": url, "error_type": type(exc).__name__},
                cause=exc,
            ) from exc
        logger.debug("%s %s -> %s", method, url, response.status_code)
        return TransportResponse(
            status_code=response.status_code,
            body=response.content,
            headers=dict(response.headers),
        )

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()


__all__ = ["EurekaTransport", "HttpxTransport", "TransportResponse"]
