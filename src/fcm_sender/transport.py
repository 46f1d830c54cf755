"""HTTP exchange used by the dispatchers, one POST per attempt."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional, Protocol

import httpx

from .errors import TransportError

LOGGER = logging.getLogger(__name__)


@dataclass
class TransportResponse:
    """Status, headers and raw body of one exchange."""

    status_code: int
    content: bytes = b""
    headers: Mapping[str, str] = field(default_factory=dict)

    def header(self, name: str) -> Optional[str]:
        value = self.headers.get(name)
        if value is None and not isinstance(self.headers, httpx.Headers):
            lowered = name.lower()
            for key, candidate in self.headers.items():
                if key.lower() == lowered:
                    return candidate
        return value


class Transport(Protocol):
    def post(
        self,
        url: str,
        content: bytes,
        headers: Mapping[str, str],
        timeout: Optional[float] = None,
    ) -> TransportResponse:
        ...

    def close(self) -> None:
        ...


class AsyncTransport(Protocol):
    async def post(
        self,
        url: str,
        content: bytes,
        headers: Mapping[str, str],
        timeout: Optional[float] = None,
    ) -> TransportResponse:
        ...

    async def aclose(self) -> None:
        ...


class HttpxTransport:
    """Synchronous transport backed by :class:`httpx.Client`."""

    def __init__(
        self,
        client: Optional[httpx.Client] = None,
        *,
        client_options: Optional[dict[str, Any]] = None,
    ) -> None:
        self._owns_client = client is None
        self._client = client or httpx.Client(**dict(client_options or {}))

    def post(
        self,
        url: str,
        content: bytes,
        headers: Mapping[str, str],
        timeout: Optional[float] = None,
    ) -> TransportResponse:
        try:
            response = self._client.post(url, content=content, headers=dict(headers), timeout=timeout)
        except httpx.HTTPError as exc:
            raise TransportError(f"error sending request to {url}: {exc}") from exc
        LOGGER.debug("response %s: %s", response.status_code, response.text)
        return TransportResponse(
            status_code=response.status_code,
            content=response.content,
            headers=response.headers,
        )

    def close(self) -> None:
        if self._owns_client:
            self._client.close()


class AsyncHttpxTransport:
    """Asynchronous transport backed by :class:`httpx.AsyncClient`."""

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        *,
        client_options: Optional[dict[str, Any]] = None,
    ) -> None:
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(**dict(client_options or {}))

    async def post(
        self,
        url: str,
        content: bytes,
        headers: Mapping[str, str],
        timeout: Optional[float] = None,
    ) -> TransportResponse:
        try:
            response = await self._client.post(
                url,
                content=content,
                headers=dict(headers),
                timeout=timeout,
            )
        except httpx.HTTPError as exc:
            raise TransportError(f"error sending request to {url}: {exc}") from exc
        LOGGER.debug("response %s: %s", response.status_code, response.text)
        return TransportResponse(
            status_code=response.status_code,
            content=response.content,
            headers=response.headers,
        )

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()


__all__ = [
    "AsyncHttpxTransport",
    "AsyncTransport",
    "HttpxTransport",
    "Transport",
    "TransportResponse",
]
