"""iter_coroutine - drive the shared async core from synchronous clients."""

from __future__ import annotations

import typing

_T = typing.TypeVar("_T")


def iter_coroutine(coro: typing.Coroutine[None, None, _T]) -> _T:
    """
    Run a coroutine that never suspends and return its result.

    The sync storage client shares its request pipeline with the async one.
    Over a ``SyncTransport`` every ``await`` in that pipeline resolves
    immediately, so a single ``send(None)`` runs the whole coroutine.

    Raises:
        RuntimeError: If the coroutine suspends (i.e. awaited real async I/O).
    """
    try:
        coro.send(None)
    except StopIteration as ex:
        return ex.value  # type: ignore [no-any-return]
    else:
        raise RuntimeError(f"coroutine {coro!r} did not stop after one iteration!")
    finally:
        coro.close()


__all__ = ["iter_coroutine"]
