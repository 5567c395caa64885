"""HTTP transport implementations for sync and async clients."""

from __future__ import annotations

import abc
from collections.abc import AsyncIterable, AsyncIterator, Iterable
from dataclasses import dataclass
from typing import Any

import httpx

RawContent = bytes | str | Iterable[bytes] | AsyncIterable[bytes]


@dataclass(frozen=True, slots=True)
class JSONBody:
    """JSON request body - automatically sets Content-Type to application/json."""

    data: Any


@dataclass(frozen=True, slots=True)
class BytesBody:
    """Raw bytes request body with explicit content type."""

    data: bytes
    content_type: str = "application/octet-stream"


@dataclass(frozen=True, slots=True)
class RawBody:
    """Pre-encoded content (bytes, text or a chunk iterator) passed through to httpx."""

    data: RawContent


RequestBody = JSONBody | BytesBody | RawBody | None


def _unpack_body(
    body: RequestBody, headers: dict[str, str]
) -> tuple[Any | None, RawContent | None]:
    json_data: Any | None = None
    raw_content: RawContent | None = None
    if isinstance(body, JSONBody):
        json_data = body.data
    elif isinstance(body, BytesBody):
        raw_content = body.data
        headers["content-type"] = body.content_type
    elif isinstance(body, RawBody):
        raw_content = body.data
    return json_data, raw_content


async def _aiter_sync(chunks: Iterable[bytes]) -> AsyncIterator[bytes]:
    for chunk in chunks:
        yield chunk


class BaseTransport(abc.ABC):
    """Abstract base class for HTTP transports."""

    @abc.abstractmethod
    async def send(
        self,
        method: str,
        url: str,
        *,
        params: dict[str, Any] | None = None,
        body: RequestBody = None,
        headers: dict[str, str] | None = None,
        timeout: float | None = None,
        follow_redirects: bool = False,
        stream: bool = False,
    ) -> httpx.Response:
        """Send an HTTP request and return the response."""
        ...


class SyncTransport(BaseTransport):
    """
    Synchronous HTTP transport using httpx.Client.

    ``send`` is declared async but never awaits anything, so it can be
    driven by iter_coroutine().
    """

    def __init__(self, client: httpx.Client) -> None:
        self._client = client

    @property
    def client(self) -> httpx.Client:
        return self._client

    async def send(
        self,
        method: str,
        url: str,
        *,
        params: dict[str, Any] | None = None,
        body: RequestBody = None,
        headers: dict[str, str] | None = None,
        timeout: float | None = None,
        follow_redirects: bool = False,
        stream: bool = False,
    ) -> httpx.Response:
        request_headers = dict(headers or {})
        json_data, raw_content = _unpack_body(body, request_headers)
        kwargs: dict[str, Any] = {}
        if timeout is not None:
            kwargs["timeout"] = httpx.Timeout(timeout)
        request = self._client.build_request(
            method,
            url,
            params=params or None,
            json=json_data,
            content=raw_content,
            headers=request_headers,
            **kwargs,
        )
        return self._client.send(request, stream=stream, follow_redirects=follow_redirects)

    def close(self) -> None:
        self._client.close()


class AsyncTransport(BaseTransport):
    """Asynchronous HTTP transport using httpx.AsyncClient."""

    def __init__(self, client: httpx.AsyncClient) -> None:
        self._client = client

    @property
    def client(self) -> httpx.AsyncClient:
        return self._client

    async def send(
        self,
        method: str,
        url: str,
        *,
        params: dict[str, Any] | None = None,
        body: RequestBody = None,
        headers: dict[str, str] | None = None,
        timeout: float | None = None,
        follow_redirects: bool = False,
        stream: bool = False,
    ) -> httpx.Response:
        request_headers = dict(headers or {})
        json_data, raw_content = _unpack_body(body, request_headers)
        # AsyncClient refuses sync iterators
        if raw_content is not None and not isinstance(
            raw_content, (bytes, str, AsyncIterable)
        ):
            raw_content = _aiter_sync(raw_content)
        kwargs: dict[str, Any] = {}
        if timeout is not None:
            kwargs["timeout"] = httpx.Timeout(timeout)
        request = self._client.build_request(
            method,
            url,
            params=params or None,
            json=json_data,
            content=raw_content,
            headers=request_headers,
            **kwargs,
        )
        return await self._client.send(
            request, stream=stream, follow_redirects=follow_redirects
        )

    async def aclose(self) -> None:
        await self._client.aclose()


__all__ = [
    "BaseTransport",
    "SyncTransport",
    "AsyncTransport",
    "JSONBody",
    "BytesBody",
    "RawBody",
    "RequestBody",
]
