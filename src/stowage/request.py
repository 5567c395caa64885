"""Immutable description of an outbound storage API call."""

from __future__ import annotations

import json
from collections.abc import AsyncIterable, Callable, Iterable, Mapping
from dataclasses import dataclass, field, replace
from typing import Any

import httpx
from pydantic import BaseModel

from ._http import JSONBody, RawBody, RequestBody, StorageConfig
from .decoders import BodyDecoder, JSONDecoder, RawDecoder
from .errors import StorageError, parse_http_error, parse_storage_error
from .paths import flatten_query, join_url
from .utils import is_file_like, iter_file_chunks

ErrorParser = Callable[[httpx.Response, "RequestDescriptor"], StorageError]

JSON_CONTENT_TYPE = "application/json"


def _is_json_content_type(content_type: str | None) -> bool:
    if not content_type:
        return True
    media_type = content_type.split(";", 1)[0].strip().lower()
    return media_type == JSON_CONTENT_TYPE or media_type.endswith("+json")


def _is_chunk_stream(body: Any) -> bool:
    if isinstance(body, (Mapping, list, tuple)):
        return False
    return isinstance(body, (Iterable, AsyncIterable))


def _to_json_data(body: Any) -> Any:
    if hasattr(body, "to_payload"):
        return body.to_payload()
    if isinstance(body, BaseModel):
        return body.model_dump(mode="json", exclude_none=True)
    return body


@dataclass(frozen=True)
class RequestDescriptor:
    """Method, target, headers, query, body and the decode/error strategies.

    Every ``with_*`` call returns a new descriptor; dispatching never mutates it.
    """

    url: str
    method: str = "GET"
    headers: Mapping[str, str] = field(default_factory=dict)
    query: Mapping[str, str] = field(default_factory=dict)
    body: Any = None
    decoder: BodyDecoder = field(default_factory=JSONDecoder)
    schema: type[BaseModel] | None = None
    error_parser: ErrorParser = parse_http_error

    def with_method(self, method: str) -> RequestDescriptor:
        return replace(self, method=method.upper())

    def with_headers(self, headers: Mapping[str, Any]) -> RequestDescriptor:
        merged = dict(self.headers)
        merged.update({key.lower(): str(value) for key, value in headers.items()})
        return replace(self, headers=merged)

    def with_query(self, query: Mapping[str, Any] | BaseModel | None) -> RequestDescriptor:
        merged = dict(self.query)
        merged.update(flatten_query(query))
        return replace(self, query=merged)

    def with_body(self, body: Any) -> RequestDescriptor:
        return replace(self, body=body)

    def with_body_decoder(
        self, decoder: BodyDecoder | None, *, schema: type[BaseModel] | None = None
    ) -> RequestDescriptor:
        """Select the decoder; ``None`` disables decoding (raw bytes are returned)."""
        return replace(self, decoder=decoder or RawDecoder(), schema=schema)

    def with_error_parser(self, parser: ErrorParser) -> RequestDescriptor:
        return replace(self, error_parser=parser)

    @property
    def content_type(self) -> str | None:
        return self.headers.get("content-type")

    def encode_body(self) -> RequestBody:
        """Pick an encoder for the body from its type and the content-type.

        Chunk iterators are always streamed as-is; other structured values are
        JSON-encoded unless a non-JSON content-type was set.
        """
        body = self.body
        if body is None:
            return None
        if isinstance(body, (bytes, bytearray, memoryview)):
            return RawBody(bytes(body))
        if isinstance(body, str):
            return RawBody(body.encode("utf-8"))
        if is_file_like(body):
            return RawBody(iter_file_chunks(body))
        if isinstance(body, BaseModel) or hasattr(body, "to_payload"):
            return JSONBody(_to_json_data(body))
        if _is_chunk_stream(body):
            return RawBody(body)
        if _is_json_content_type(self.content_type):
            try:
                json.dumps(body)
            except (TypeError, ValueError) as exc:
                raise TypeError(f"Cannot encode a {type(body).__name__} body as JSON: {exc}") from exc
            return JSONBody(body)
        if isinstance(body, (list, tuple)):
            return RawBody(body)
        raise TypeError(
            f"Cannot encode a {type(body).__name__} body as {self.content_type!r}"
        )

    def decode(self, response: httpx.Response) -> Any:
        return self.decoder.decode(response, schema=self.schema)

    def parse_error(self, response: httpx.Response) -> StorageError:
        return self.error_parser(response, self)


def base_request(config: StorageConfig, path: str) -> RequestDescriptor:
    """A JSON request against the storage endpoint with the service error parser."""
    return (
        RequestDescriptor(url=join_url(config.storage_url, path))
        .with_error_parser(parse_storage_error)
        .with_headers({"content-type": JSON_CONTENT_TYPE})
    )


__all__ = [
    "ErrorParser",
    "RequestDescriptor",
    "base_request",
    "JSON_CONTENT_TYPE",
]
