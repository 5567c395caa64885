"""Synchronous storage client."""

from __future__ import annotations

import os
from collections.abc import Callable, Iterable, Mapping
from typing import Any

import httpx

from ._core import SyncStorageOps, TransformInput
from ._http import SyncTransport, iter_coroutine, resolve_config
from .models import Bucket, FileOptions, ListV2Options, SearchOptions
from .streaming import HookOutcome, StreamEvent, Transfer
from .types import ListV2Result, Result, SignedUploadUrl, SignedUrl, UploadResult


class StorageClient:
    """Synchronous client for a storage service.

    Every operation returns :class:`~stowage.Ok` or :class:`~stowage.Err`.
    ``url`` and ``api_key`` fall back to ``STOWAGE_URL`` and ``STOWAGE_API_KEY``.
    An ``httpx.Client`` (or a ready-made :class:`SyncTransport`) may be passed
    in; a supplied client gets the auth headers through a request hook.
    """

    def __init__(
        self,
        url: str | None = None,
        api_key: str | None = None,
        *,
        timeout: float | None = None,
        headers: dict[str, str] | None = None,
        client: httpx.Client | None = None,
        transport: SyncTransport | None = None,
    ) -> None:
        self._config = resolve_config(url, api_key, timeout=timeout, headers=headers)
        self._ops = SyncStorageOps(self._config, client=client, transport=transport)
        self._closed = False

    @property
    def url(self) -> str:
        return self._config.storage_url

    def _check(self) -> SyncStorageOps:
        if self._closed:
            raise RuntimeError("Client is closed")
        return self._ops

    def list_buckets(self) -> Result[Any]:
        """List every bucket visible to the API key."""
        return iter_coroutine(self._check().list_buckets())

    def get_bucket(self, bucket_id: str) -> Result[Any]:
        """Fetch one bucket by id."""
        return iter_coroutine(self._check().get_bucket(bucket_id))

    def create_bucket(
        self, bucket_id: str, attrs: Bucket | Mapping[str, Any] | None = None
    ) -> Result[Any]:
        """Create a bucket; ``name`` defaults to ``bucket_id``."""
        return iter_coroutine(self._check().create_bucket(bucket_id, attrs))

    def update_bucket(
        self, bucket_id: str, attrs: Bucket | Mapping[str, Any] | None = None
    ) -> Result[Any]:
        """Update a bucket's visibility and upload restrictions."""
        return iter_coroutine(self._check().update_bucket(bucket_id, attrs))

    def empty_bucket(self, bucket_id: str) -> Result[Any]:
        """Delete every object in a bucket."""
        return iter_coroutine(self._check().empty_bucket(bucket_id))

    def delete_bucket(self, bucket_id: str) -> Result[Any]:
        """Delete an empty bucket."""
        return iter_coroutine(self._check().delete_bucket(bucket_id))

    def from_(self, bucket_id: str) -> StorageFileApi:
        """Object operations scoped to ``bucket_id``."""
        return StorageFileApi(self, bucket_id)

    def close(self) -> None:
        if not self._closed:
            self._ops.close()
            self._closed = True

    def __enter__(self) -> StorageClient:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()


class StorageFileApi:
    """Object operations bound to one bucket of a :class:`StorageClient`."""

    def __init__(self, client: StorageClient, bucket_id: str) -> None:
        self._client = client
        self.bucket_id = bucket_id

    @property
    def _ops(self) -> SyncStorageOps:
        return self._client._check()

    def upload(
        self, path: str, body: Any, options: FileOptions | Mapping[str, Any] | None = None
    ) -> Result[UploadResult]:
        return iter_coroutine(self._ops.upload(self.bucket_id, path, body, options))

    def update(
        self, path: str, body: Any, options: FileOptions | Mapping[str, Any] | None = None
    ) -> Result[UploadResult]:
        """Replace the content of an existing object."""
        return iter_coroutine(self._ops.update(self.bucket_id, path, body, options))

    def upload_file(
        self,
        local_path: str | os.PathLike,
        path: str | None = None,
        options: FileOptions | Mapping[str, Any] | None = None,
    ) -> Result[UploadResult]:
        """Upload a local file; the content type is guessed from its name unless given."""
        return iter_coroutine(self._ops.upload_file(self.bucket_id, local_path, path, options))

    def upload_to_signed_url(
        self,
        path: str,
        token: str,
        body: Any,
        options: FileOptions | Mapping[str, Any] | None = None,
    ) -> Result[UploadResult]:
        return iter_coroutine(
            self._ops.upload_to_signed_url(self.bucket_id, path, token, body, options)
        )

    def create_signed_upload_url(self, path: str, *, upsert: bool = False) -> Result[SignedUploadUrl]:
        return iter_coroutine(
            self._ops.create_signed_upload_url(self.bucket_id, path, upsert=upsert)
        )

    def move(
        self, from_path: str, to_path: str, *, destination_bucket: str | None = None
    ) -> Result[Any]:
        return iter_coroutine(
            self._ops.move(
                self.bucket_id, from_path, to_path, destination_bucket=destination_bucket
            )
        )

    def copy(
        self, from_path: str, to_path: str, *, destination_bucket: str | None = None
    ) -> Result[Any]:
        return iter_coroutine(
            self._ops.copy(
                self.bucket_id, from_path, to_path, destination_bucket=destination_bucket
            )
        )

    def info(self, path: str) -> Result[Any]:
        return iter_coroutine(self._ops.info(self.bucket_id, path))

    def exists(self, path: str) -> Result[bool]:
        return iter_coroutine(self._ops.exists(self.bucket_id, path))

    def list(
        self, prefix: str | None = None, options: SearchOptions | Mapping[str, Any] | None = None
    ) -> Result[Any]:
        """List objects and folders under ``prefix``."""
        return iter_coroutine(self._ops.list(self.bucket_id, prefix, options))

    def list_v2(
        self, prefix: str | None = None, options: ListV2Options | Mapping[str, Any] | None = None
    ) -> Result[ListV2Result]:
        """Cursor-paginated listing."""
        return iter_coroutine(self._ops.list_v2(self.bucket_id, prefix, options))

    def remove(self, paths: str | Iterable[str]) -> Result[Any]:
        return iter_coroutine(self._ops.remove(self.bucket_id, paths))

    def create_signed_url(
        self,
        path: str,
        expires_in: int,
        *,
        download: bool | str | None = None,
        transform: TransformInput = None,
    ) -> Result[str]:
        """A time-limited URL for ``path``; ``download`` adds a content-disposition hint."""
        return iter_coroutine(
            self._ops.create_signed_url(
                self.bucket_id, path, expires_in, download=download, transform=transform
            )
        )

    def create_signed_urls(
        self, paths: Iterable[str], expires_in: int, *, download: bool | str | None = None
    ) -> Result[list[SignedUrl]]:
        return iter_coroutine(
            self._ops.create_signed_urls(self.bucket_id, paths, expires_in, download=download)
        )

    def download(self, path: str, *, transform: TransformInput = None) -> Result[bytes]:
        """Download the whole object into memory."""
        return iter_coroutine(self._ops.download(self.bucket_id, path, transform=transform))

    def download_stream(self, path: str, *, transform: TransformInput = None) -> Result[Transfer]:
        """Open the object for single-pass chunked reading.

        The caller owns the returned :class:`Transfer` and must iterate or
        close it.
        """
        return iter_coroutine(
            self._ops.download_stream(self.bucket_id, path, transform=transform)
        )

    def download_lazy(
        self,
        path: str,
        on_response: Callable[[StreamEvent], HookOutcome] | None = None,
        *,
        transform: TransformInput = None,
    ) -> Result[Any]:
        """Stream the object through ``on_response``, or buffer it when no hook is given."""
        return iter_coroutine(
            self._ops.download_lazy(self.bucket_id, path, on_response, transform=transform)
        )

    def download_to(
        self,
        path: str,
        local_path: str | os.PathLike,
        *,
        transform: TransformInput = None,
        overwrite: bool = True,
        create_parents: bool = True,
    ) -> Result[str]:
        """Stream the object into a local file and return its path."""
        return iter_coroutine(
            self._ops.download_to(
                self.bucket_id,
                path,
                local_path,
                transform=transform,
                overwrite=overwrite,
                create_parents=create_parents,
            )
        )

    def get_public_url(
        self,
        path: str,
        *,
        download: bool | str | None = None,
        transform: TransformInput = None,
    ) -> Result[str]:
        """The public URL of ``path``. No request is made."""
        return self._ops.get_public_url(
            self.bucket_id, path, download=download, transform=transform
        )


__all__ = ["StorageClient", "StorageFileApi"]
