"""Single-pass streamed downloads with an optional per-chunk hook.

A transfer wraps a response whose headers have arrived but whose body has not
been read, so it starts out ``streaming``; the pending phase ends before one
exists. It can be consumed exactly once: either iterated chunk by chunk, or
driven by :meth:`consume`, which buffers the body or hands every chunk to a
hook. The hook may end consumption early by returning :class:`Stop`.
"""

from __future__ import annotations

import inspect
from collections.abc import AsyncIterator, Awaitable, Callable, Iterator
from dataclasses import dataclass
from typing import Any, Literal, cast

import httpx

from ._http import iter_coroutine
from .errors import StorageTransportError, StreamConsumedError
from .utils import debug

TransferState = Literal["streaming", "completed", "failed"]


@dataclass(frozen=True, slots=True)
class StreamEvent:
    status: int
    headers: httpx.Headers
    chunk: bytes
    received: int
    done: bool = False


@dataclass(frozen=True, slots=True)
class Stop:
    """Returned by a hook to end consumption; ``value`` becomes the outcome."""

    value: Any = None


HookOutcome = Stop | None
StreamHook = Callable[[StreamEvent], HookOutcome | Awaitable[HookOutcome]]


async def _await_if_necessary(value: Any) -> Any:
    if inspect.isawaitable(value):
        return await cast(Awaitable[Any], value)
    return value


def _transport_error(exc: httpx.TransportError, response: httpx.Response) -> StorageTransportError:
    context: dict[str, Any] = {"status": response.status_code}
    try:
        context["method"] = response.request.method
        context["url"] = str(response.request.url)
    except RuntimeError:
        pass
    return StorageTransportError(str(exc) or type(exc).__name__, **context)


class BaseTransfer:
    def __init__(self, response: httpx.Response) -> None:
        self._response = response
        self._state: TransferState = "streaming"
        self._consumed = False

    @property
    def status(self) -> int:
        return self._response.status_code

    @property
    def headers(self) -> httpx.Headers:
        return self._response.headers

    @property
    def state(self) -> TransferState:
        return self._state

    def _claim(self) -> None:
        if self._consumed:
            raise StreamConsumedError()
        self._consumed = True

    def _chunks(self) -> AsyncIterator[bytes]:
        raise NotImplementedError

    async def _close(self) -> None:
        raise NotImplementedError

    def _event(self, chunk: bytes, received: int, *, done: bool = False) -> StreamEvent:
        return StreamEvent(
            status=self.status,
            headers=self.headers,
            chunk=chunk,
            received=received,
            done=done,
        )

    async def _consume(self, hook: StreamHook | None = None) -> Any:
        self._claim()
        received = 0
        buffer = bytearray()
        chunks = self._chunks()
        try:
            async for chunk in chunks:
                if not chunk:
                    continue
                received += len(chunk)
                if hook is None:
                    buffer.extend(chunk)
                    continue
                outcome = await _await_if_necessary(hook(self._event(chunk, received)))
                if isinstance(outcome, Stop):
                    debug("transfer stopped early by hook", received)
                    self._state = "completed"
                    return outcome.value

            if hook is None:
                self._state = "completed"
                return bytes(buffer)

            outcome = await _await_if_necessary(hook(self._event(b"", received, done=True)))
            self._state = "completed"
            return outcome.value if isinstance(outcome, Stop) else None
        except httpx.TransportError as exc:
            self._state = "failed"
            raise _transport_error(exc, self._response) from exc
        except BaseException:
            self._state = "failed"
            raise
        finally:
            await chunks.aclose()
            await self._close()


class Transfer(BaseTransfer):
    """Synchronous transfer over an ``httpx.Response`` opened with ``stream=True``."""

    def __iter__(self) -> Iterator[bytes]:
        self._claim()
        try:
            for chunk in self._response.iter_bytes():
                yield chunk
            self._state = "completed"
        except httpx.TransportError as exc:
            self._state = "failed"
            raise _transport_error(exc, self._response) from exc
        finally:
            self._response.close()

    def consume(self, hook: Callable[[StreamEvent], HookOutcome] | None = None) -> Any:
        """Read the body: buffered when ``hook`` is None, else chunk by chunk.

        The hook must be a plain function; use :class:`AsyncTransfer` for
        coroutine hooks.
        """
        return iter_coroutine(self._consume(hook))

    def close(self) -> None:
        self._response.close()

    def __enter__(self) -> Transfer:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    def _chunks(self) -> AsyncIterator[bytes]:
        async def _iterate() -> AsyncIterator[bytes]:
            for chunk in self._response.iter_bytes():
                yield chunk

        return _iterate()

    async def _close(self) -> None:
        self._response.close()


class AsyncTransfer(BaseTransfer):
    """Asynchronous transfer; hooks may be plain functions or coroutines."""

    async def __aiter__(self) -> AsyncIterator[bytes]:
        self._claim()
        try:
            async for chunk in self._response.aiter_bytes():
                yield chunk
            self._state = "completed"
        except httpx.TransportError as exc:
            self._state = "failed"
            raise _transport_error(exc, self._response) from exc
        finally:
            await self._response.aclose()

    async def consume(self, hook: StreamHook | None = None) -> Any:
        return await self._consume(hook)

    async def aclose(self) -> None:
        await self._response.aclose()

    async def __aenter__(self) -> AsyncTransfer:
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.aclose()

    def _chunks(self) -> AsyncIterator[bytes]:
        async def _iterate() -> AsyncIterator[bytes]:
            async for chunk in self._response.aiter_bytes():
                yield chunk

        return _iterate()

    async def _close(self) -> None:
        await self._response.aclose()


__all__ = [
    "TransferState",
    "StreamEvent",
    "Stop",
    "HookOutcome",
    "StreamHook",
    "BaseTransfer",
    "Transfer",
    "AsyncTransfer",
]
