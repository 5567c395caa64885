from __future__ import annotations

import logging
import mimetypes
import os
import sys
from collections.abc import Iterator
from typing import Any, Protocol

logger = logging.getLogger("stowage")

DEFAULT_CHUNK_SIZE = 64 * 1024
DEFAULT_MIME_TYPE = "application/octet-stream"


def _configure_debug_from_env() -> None:
    debug_env = os.getenv("DEBUG", "")
    if "stowage" in debug_env and not logger.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter("stowage: %(message)s"))
        logger.addHandler(handler)
        logger.setLevel(logging.DEBUG)


_configure_debug_from_env()


def debug(message: str, *args: Any) -> None:
    if not logger.isEnabledFor(logging.DEBUG):
        return
    if args:
        message = " ".join([message, *(str(arg) for arg in args)])
    logger.debug(message)


def guess_mime_type(path: str) -> str:
    mime_type, _ = mimetypes.guess_type(path)
    return mime_type or DEFAULT_MIME_TYPE


class SupportsRead(Protocol):
    def read(self, size: int = -1) -> bytes:  # pragma: no cover - Protocol
        ...


def is_file_like(value: Any) -> bool:
    return hasattr(value, "read")


def iter_file_chunks(source: SupportsRead, chunk_size: int = DEFAULT_CHUNK_SIZE) -> Iterator[bytes]:
    while True:
        chunk = source.read(chunk_size)
        if not chunk:
            break
        if isinstance(chunk, str):
            chunk = chunk.encode("utf-8")
        yield bytes(chunk)


__all__ = [
    "logger",
    "debug",
    "guess_mime_type",
    "is_file_like",
    "iter_file_chunks",
    "DEFAULT_CHUNK_SIZE",
    "DEFAULT_MIME_TYPE",
]
