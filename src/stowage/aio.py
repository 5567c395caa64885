"""Asynchronous storage client."""

from __future__ import annotations

import os
from collections.abc import Iterable, Mapping
from typing import Any

import httpx

from ._core import AsyncStorageOps, TransformInput
from ._http import AsyncTransport, resolve_config
from .models import Bucket, FileOptions, ListV2Options, SearchOptions
from .streaming import AsyncTransfer, StreamHook
from .types import ListV2Result, Result, SignedUploadUrl, SignedUrl, UploadResult


class AsyncStorageClient:
    """Asynchronous counterpart of :class:`~stowage.StorageClient`."""

    def __init__(
        self,
        url: str | None = None,
        api_key: str | None = None,
        *,
        timeout: float | None = None,
        headers: dict[str, str] | None = None,
        client: httpx.AsyncClient | None = None,
        transport: AsyncTransport | None = None,
    ) -> None:
        self._config = resolve_config(url, api_key, timeout=timeout, headers=headers)
        self._ops = AsyncStorageOps(self._config, client=client, transport=transport)
        self._closed = False

    @property
    def url(self) -> str:
        return self._config.storage_url

    def _check(self) -> AsyncStorageOps:
        if self._closed:
            raise RuntimeError("Client is closed")
        return self._ops

    async def list_buckets(self) -> Result[Any]:
        return await self._check().list_buckets()

    async def get_bucket(self, bucket_id: str) -> Result[Any]:
        return await self._check().get_bucket(bucket_id)

    async def create_bucket(
        self, bucket_id: str, attrs: Bucket | Mapping[str, Any] | None = None
    ) -> Result[Any]:
        return await self._check().create_bucket(bucket_id, attrs)

    async def update_bucket(
        self, bucket_id: str, attrs: Bucket | Mapping[str, Any] | None = None
    ) -> Result[Any]:
        return await self._check().update_bucket(bucket_id, attrs)

    async def empty_bucket(self, bucket_id: str) -> Result[Any]:
        return await self._check().empty_bucket(bucket_id)

    async def delete_bucket(self, bucket_id: str) -> Result[Any]:
        return await self._check().delete_bucket(bucket_id)

    def from_(self, bucket_id: str) -> AsyncStorageFileApi:
        return AsyncStorageFileApi(self, bucket_id)

    async def aclose(self) -> None:
        if not self._closed:
            await self._ops.aclose()
            self._closed = True

    async def __aenter__(self) -> AsyncStorageClient:
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.aclose()


class AsyncStorageFileApi:
    """Object operations bound to one bucket of an :class:`AsyncStorageClient`.

    Hooks passed to :meth:`download_lazy` may be plain functions or coroutines.
    """

    def __init__(self, client: AsyncStorageClient, bucket_id: str) -> None:
        self._client = client
        self.bucket_id = bucket_id

    @property
    def _ops(self) -> AsyncStorageOps:
        return self._client._check()

    async def upload(
        self, path: str, body: Any, options: FileOptions | Mapping[str, Any] | None = None
    ) -> Result[UploadResult]:
        return await self._ops.upload(self.bucket_id, path, body, options)

    async def update(
        self, path: str, body: Any, options: FileOptions | Mapping[str, Any] | None = None
    ) -> Result[UploadResult]:
        return await self._ops.update(self.bucket_id, path, body, options)

    async def upload_file(
        self,
        local_path: str | os.PathLike,
        path: str | None = None,
        options: FileOptions | Mapping[str, Any] | None = None,
    ) -> Result[UploadResult]:
        return await self._ops.upload_file(self.bucket_id, local_path, path, options)

    async def upload_to_signed_url(
        self,
        path: str,
        token: str,
        body: Any,
        options: FileOptions | Mapping[str, Any] | None = None,
    ) -> Result[UploadResult]:
        return await self._ops.upload_to_signed_url(self.bucket_id, path, token, body, options)

    async def create_signed_upload_url(
        self, path: str, *, upsert: bool = False
    ) -> Result[SignedUploadUrl]:
        return await self._ops.create_signed_upload_url(self.bucket_id, path, upsert=upsert)

    async def move(
        self, from_path: str, to_path: str, *, destination_bucket: str | None = None
    ) -> Result[Any]:
        return await self._ops.move(
            self.bucket_id, from_path, to_path, destination_bucket=destination_bucket
        )

    async def copy(
        self, from_path: str, to_path: str, *, destination_bucket: str | None = None
    ) -> Result[Any]:
        return await self._ops.copy(
            self.bucket_id, from_path, to_path, destination_bucket=destination_bucket
        )

    async def info(self, path: str) -> Result[Any]:
        return await self._ops.info(self.bucket_id, path)

    async def exists(self, path: str) -> Result[bool]:
        return await self._ops.exists(self.bucket_id, path)

    async def list(
        self, prefix: str | None = None, options: SearchOptions | Mapping[str, Any] | None = None
    ) -> Result[Any]:
        return await self._ops.list(self.bucket_id, prefix, options)

    async def list_v2(
        self, prefix: str | None = None, options: ListV2Options | Mapping[str, Any] | None = None
    ) -> Result[ListV2Result]:
        return await self._ops.list_v2(self.bucket_id, prefix, options)

    async def remove(self, paths: str | Iterable[str]) -> Result[Any]:
        return await self._ops.remove(self.bucket_id, paths)

    async def create_signed_url(
        self,
        path: str,
        expires_in: int,
        *,
        download: bool | str | None = None,
        transform: TransformInput = None,
    ) -> Result[str]:
        return await self._ops.create_signed_url(
            self.bucket_id, path, expires_in, download=download, transform=transform
        )

    async def create_signed_urls(
        self, paths: Iterable[str], expires_in: int, *, download: bool | str | None = None
    ) -> Result[list[SignedUrl]]:
        return await self._ops.create_signed_urls(
            self.bucket_id, paths, expires_in, download=download
        )

    async def download(self, path: str, *, transform: TransformInput = None) -> Result[bytes]:
        return await self._ops.download(self.bucket_id, path, transform=transform)

    async def download_stream(
        self, path: str, *, transform: TransformInput = None
    ) -> Result[AsyncTransfer]:
        return await self._ops.download_stream(self.bucket_id, path, transform=transform)

    async def download_lazy(
        self,
        path: str,
        on_response: StreamHook | None = None,
        *,
        transform: TransformInput = None,
    ) -> Result[Any]:
        return await self._ops.download_lazy(
            self.bucket_id, path, on_response, transform=transform
        )

    async def download_to(
        self,
        path: str,
        local_path: str | os.PathLike,
        *,
        transform: TransformInput = None,
        overwrite: bool = True,
        create_parents: bool = True,
    ) -> Result[str]:
        return await self._ops.download_to(
            self.bucket_id,
            path,
            local_path,
            transform=transform,
            overwrite=overwrite,
            create_parents=create_parents,
        )

    def get_public_url(
        self,
        path: str,
        *,
        download: bool | str | None = None,
        transform: TransformInput = None,
    ) -> Result[str]:
        return self._ops.get_public_url(
            self.bucket_id, path, download=download, transform=transform
        )


__all__ = ["AsyncStorageClient", "AsyncStorageFileApi"]
