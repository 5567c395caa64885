"""Body decoders: strategies that turn a successful response into a value."""

from __future__ import annotations

import json
from typing import Any, Protocol

import httpx
from pydantic import BaseModel

from .errors import StorageDecodeError, StorageValidationError
from .models import parse_resource
from .utils import debug


class BodyDecoder(Protocol):
    def decode(self, response: httpx.Response, *, schema: type[BaseModel] | None = None) -> Any:
        ...


def _response_context(response: httpx.Response) -> dict[str, Any]:
    context: dict[str, Any] = {"status": response.status_code}
    try:
        request = response.request
    except RuntimeError:
        return context
    context["method"] = request.method
    context["url"] = str(request.url)
    return context


class JSONDecoder:
    """Generic JSON decoding. An empty body decodes to ``None``."""

    def decode(self, response: httpx.Response, *, schema: type[BaseModel] | None = None) -> Any:
        content = response.content
        if not content.strip():
            return None
        try:
            return json.loads(content)
        except ValueError as exc:
            raise StorageDecodeError(
                "Response body is not valid JSON", **_response_context(response)
            ) from exc


class StorageBodyDecoder:
    """JSON decoding checked against the expected resource schema.

    A body that matches the schema is still returned as plain JSON data; a body
    that does not match fails the whole decode.
    """

    def __init__(self) -> None:
        self._json = JSONDecoder()

    def decode(self, response: httpx.Response, *, schema: type[BaseModel] | None = None) -> Any:
        body = self._json.decode(response)
        if schema is None:
            return body
        try:
            parse_resource(schema, body)
        except StorageValidationError as exc:
            debug(f"response body rejected by {schema.__name__}", exc.fields)
            raise StorageDecodeError(
                f"Response body does not match {schema.__name__}: {exc.message}",
                fields=exc.fields,
                data=body,
                **_response_context(response),
            ) from exc
        return body


class RawDecoder:
    """Decoding disabled: the body bytes are returned unmodified."""

    def decode(self, response: httpx.Response, *, schema: type[BaseModel] | None = None) -> bytes:
        return response.content


__all__ = [
    "BodyDecoder",
    "JSONDecoder",
    "StorageBodyDecoder",
    "RawDecoder",
]
