"""HTTP configuration for storage API clients."""

from __future__ import annotations

import os
from dataclasses import dataclass, field

DEFAULT_TIMEOUT = 60.0
USER_AGENT = "stowage-py"


@dataclass
class StorageConfig:
    """Connection settings for a storage endpoint."""

    url: str
    api_key: str
    timeout: float = DEFAULT_TIMEOUT
    default_headers: dict[str, str] = field(default_factory=dict)

    @property
    def storage_url(self) -> str:
        return self.url.rstrip("/")

    def get_headers(self) -> dict[str, str]:
        """Build request headers with authorization."""
        headers = {
            "apikey": self.api_key,
            "authorization": f"Bearer {self.api_key}",
            **self.default_headers,
        }
        return headers


def require_api_key(api_key: str | None) -> str:
    """Resolve the API key from argument or environment, raising if not found."""
    resolved = api_key or os.getenv("STOWAGE_API_KEY")
    if not resolved:
        raise RuntimeError("Missing storage API key. Pass api_key=... or set STOWAGE_API_KEY.")
    return resolved


def require_storage_url(url: str | None) -> str:
    """Resolve the storage base URL from argument or environment, raising if not found."""
    resolved = url or os.getenv("STOWAGE_URL")
    if not resolved:
        raise RuntimeError("Missing storage URL. Pass url=... or set STOWAGE_URL.")
    return resolved.rstrip("/")


def resolve_config(
    url: str | None = None,
    api_key: str | None = None,
    *,
    timeout: float | None = None,
    headers: dict[str, str] | None = None,
) -> StorageConfig:
    return StorageConfig(
        url=require_storage_url(url),
        api_key=require_api_key(api_key),
        timeout=timeout if timeout is not None else DEFAULT_TIMEOUT,
        default_headers=dict(headers or {}),
    )


__all__ = [
    "StorageConfig",
    "DEFAULT_TIMEOUT",
    "USER_AGENT",
    "require_api_key",
    "require_storage_url",
    "resolve_config",
]
