"""Client factory functions for creating pre-configured httpx clients."""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence

import httpx

from .config import DEFAULT_TIMEOUT


def _create_auth_hook(
    headers: Mapping[str, str],
) -> Callable[[httpx.Request], httpx.Request]:
    """Create a request hook that adds storage auth headers to every request.

    Uses setdefault so per-request headers take precedence.
    """

    def hook(request: httpx.Request) -> httpx.Request:
        for key, value in headers.items():
            request.headers.setdefault(key, value)
        return request

    return hook


def _prepend_request_hooks(
    client: httpx.Client | httpx.AsyncClient,
    hooks: Sequence[Callable[[httpx.Request], httpx.Request]],
) -> None:
    """Prepend request hooks to an existing client's event hooks.

    Prepending ensures our default hooks run first, allowing user-configured
    hooks to override or intercept the defaults.
    """
    existing_hooks = list(client.event_hooks.get("request", []))
    client.event_hooks["request"] = list(hooks) + existing_hooks


def _create_async_auth_hook(headers: Mapping[str, str]):
    sync_hook = _create_auth_hook(headers)

    async def hook(request: httpx.Request) -> None:
        sync_hook(request)

    return hook


def create_storage_client(
    headers: Mapping[str, str],
    timeout: float | None = None,
    *,
    client: httpx.Client | None = None,
) -> httpx.Client:
    """Create or configure a sync httpx client for the storage API.

    Args:
        headers: Auth and default headers added to every request.
        timeout: Request timeout in seconds. Defaults to DEFAULT_TIMEOUT.
            Ignored if client is provided.
        client: Optional existing client to configure. If provided, the auth
            hook is prepended to existing hooks, allowing user hooks to override.

    Returns:
        An httpx.Client with the auth event hook configured.
    """
    auth_hook = _create_auth_hook(headers)

    if client is not None:
        _prepend_request_hooks(client, [auth_hook])
        return client

    effective_timeout = timeout if timeout is not None else DEFAULT_TIMEOUT
    return httpx.Client(
        timeout=httpx.Timeout(effective_timeout),
        event_hooks={"request": [auth_hook]},
    )


def create_storage_async_client(
    headers: Mapping[str, str],
    timeout: float | None = None,
    *,
    client: httpx.AsyncClient | None = None,
) -> httpx.AsyncClient:
    """Create or configure an async httpx client for the storage API.

    Args:
        headers: Auth and default headers added to every request.
        timeout: Request timeout in seconds. Defaults to DEFAULT_TIMEOUT.
            Ignored if client is provided.
        client: Optional existing client to configure. If provided, the auth
            hook is prepended to existing hooks, allowing user hooks to override.

    Returns:
        An httpx.AsyncClient with the auth event hook configured.
    """
    auth_hook = _create_async_auth_hook(headers)

    if client is not None:
        _prepend_request_hooks(client, [auth_hook])
        return client

    effective_timeout = timeout if timeout is not None else DEFAULT_TIMEOUT
    return httpx.AsyncClient(
        timeout=httpx.Timeout(effective_timeout),
        event_hooks={"request": [auth_hook]},
    )


__all__ = [
    "create_storage_client",
    "create_storage_async_client",
]
