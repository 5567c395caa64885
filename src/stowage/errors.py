from __future__ import annotations

from typing import TYPE_CHECKING, Any, Literal

import httpx

if TYPE_CHECKING:
    from .request import RequestDescriptor

ErrorKind = Literal[
    "validation",
    "not_found",
    "conflict",
    "unauthorized",
    "generic_http",
    "decode_error",
    "transport_error",
]


class StorageError(Exception):
    """Base error for every failure surfaced by the storage pipeline.

    Attributes are read-only once the error is created.
    """

    kind: ErrorKind = "generic_http"

    def __init__(
        self,
        message: str,
        *,
        status: int | None = None,
        method: str | None = None,
        url: str | None = None,
        code: str | None = None,
        data: Any | None = None,
    ) -> None:
        super().__init__(message)
        self._message = message
        self._status = status
        self._method = method
        self._url = url
        self._code = code
        self._data = data

    @property
    def message(self) -> str:
        return self._message

    @property
    def status(self) -> int | None:
        return self._status

    @property
    def method(self) -> str | None:
        return self._method

    @property
    def url(self) -> str | None:
        return self._url

    @property
    def code(self) -> str | None:
        """Service-provided error code, when the body carried one."""
        return self._code

    @property
    def data(self) -> Any | None:
        return self._data

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(kind={self.kind!r}, status={self._status!r}, "
            f"message={self._message!r})"
        )


class StorageValidationError(StorageError):
    kind: ErrorKind = "validation"

    def __init__(self, message: str, *, fields: list[str] | None = None, **kwargs: Any) -> None:
        super().__init__(message, **kwargs)
        self._fields = list(fields or [])

    @property
    def fields(self) -> list[str]:
        """Names of the fields that were missing or invalid."""
        return list(self._fields)


class StorageNotFoundError(StorageError):
    kind: ErrorKind = "not_found"


class StorageConflictError(StorageError):
    kind: ErrorKind = "conflict"


class StorageUnauthorizedError(StorageError):
    kind: ErrorKind = "unauthorized"


class StorageHTTPError(StorageError):
    kind: ErrorKind = "generic_http"


class StorageDecodeError(StorageError):
    kind: ErrorKind = "decode_error"

    def __init__(self, message: str, *, fields: list[str] | None = None, **kwargs: Any) -> None:
        super().__init__(message, **kwargs)
        self._fields = list(fields or [])

    @property
    def fields(self) -> list[str]:
        return list(self._fields)


class StorageTransportError(StorageError):
    kind: ErrorKind = "transport_error"


class StreamConsumedError(RuntimeError):
    """Raised when a single-pass transfer is iterated a second time."""

    def __init__(self) -> None:
        super().__init__(
            "Transfer has already been consumed; issue the request again to re-read it"
        )


_STATUS_ERRORS: dict[int, type[StorageError]] = {
    401: StorageUnauthorizedError,
    403: StorageUnauthorizedError,
    404: StorageNotFoundError,
    409: StorageConflictError,
}

_MAX_BODY_SNIPPET = 500


def error_class_for_status(status: int) -> type[StorageError]:
    return _STATUS_ERRORS.get(status, StorageHTTPError)


def _context(request: RequestDescriptor | None) -> dict[str, Any]:
    if request is None:
        return {}
    return {"method": request.method, "url": request.url}


def _read_text(response: httpx.Response) -> str:
    try:
        return response.text
    except (httpx.ResponseNotRead, httpx.StreamError, UnicodeDecodeError):
        return ""


def parse_http_error(
    response: httpx.Response, request: RequestDescriptor | None = None
) -> StorageError:
    """Generic parser: kind and message derived from the status code and raw body."""
    status = response.status_code
    message = f"HTTP {status}"
    if response.reason_phrase:
        message = f"{message} {response.reason_phrase}"
    text = _read_text(response)
    if text:
        snippet = text if len(text) <= _MAX_BODY_SNIPPET else text[:_MAX_BODY_SNIPPET] + "..."
        message = f"{message}: {snippet}"
    cls = error_class_for_status(status)
    return cls(message, status=status, **_context(request))


def parse_storage_error(
    response: httpx.Response, request: RequestDescriptor | None = None
) -> StorageError:
    """Service parser: use the body's ``message`` verbatim, else fall back to
    :func:`parse_http_error`.

    The kind always comes from the HTTP status code.
    """
    try:
        data = response.json()
    except (ValueError, httpx.ResponseNotRead):
        data = None

    if not isinstance(data, dict) or not isinstance(data.get("message"), str):
        return parse_http_error(response, request)

    code = data.get("code") if isinstance(data.get("code"), str) else data.get("error")
    cls = error_class_for_status(response.status_code)
    return cls(
        data["message"],
        status=response.status_code,
        code=code if isinstance(code, str) else None,
        data=data,
        **_context(request),
    )


__all__ = [
    "ErrorKind",
    "StorageError",
    "StorageValidationError",
    "StorageNotFoundError",
    "StorageConflictError",
    "StorageUnauthorizedError",
    "StorageHTTPError",
    "StorageDecodeError",
    "StorageTransportError",
    "StreamConsumedError",
    "error_class_for_status",
    "parse_http_error",
    "parse_storage_error",
]
