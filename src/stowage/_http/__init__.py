"""Shared HTTP infrastructure for storage API clients."""

from .clients import create_storage_async_client, create_storage_client
from .config import (
    DEFAULT_TIMEOUT,
    USER_AGENT,
    StorageConfig,
    require_api_key,
    require_storage_url,
    resolve_config,
)
from .iter_coroutine import iter_coroutine
from .transport import (
    AsyncTransport,
    BaseTransport,
    BytesBody,
    JSONBody,
    RawBody,
    RequestBody,
    SyncTransport,
)

__all__ = [
    "DEFAULT_TIMEOUT",
    "USER_AGENT",
    "StorageConfig",
    "require_api_key",
    "require_storage_url",
    "resolve_config",
    "iter_coroutine",
    "BaseTransport",
    "SyncTransport",
    "AsyncTransport",
    "JSONBody",
    "BytesBody",
    "RawBody",
    "RequestBody",
    "create_storage_client",
    "create_storage_async_client",
]
