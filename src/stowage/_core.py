from __future__ import annotations

import os
from collections.abc import Callable, Iterable, Mapping
from typing import Any

import httpx

from . import paths
from ._http import (
    USER_AGENT,
    AsyncTransport,
    BaseTransport,
    StorageConfig,
    SyncTransport,
    create_storage_async_client,
    create_storage_client,
)
from .decoders import StorageBodyDecoder
from .errors import (
    StorageDecodeError,
    StorageError,
    StorageTransportError,
    StorageValidationError,
)
from .models import (
    Bucket,
    FileObject,
    FileOptions,
    ListV2Options,
    SearchOptions,
    TransformOptions,
    parse_one,
    parse_options,
)
from .request import RequestDescriptor, base_request
from .streaming import AsyncTransfer, BaseTransfer, Stop, StreamEvent, StreamHook, Transfer
from .types import Err, ListV2Result, Ok, Result, SignedUploadUrl, SignedUrl, UploadResult
from .utils import debug, guess_mime_type

TransformInput = TransformOptions | Mapping[str, Any] | None


def _transport_error(exc: httpx.TransportError, descriptor: RequestDescriptor) -> StorageTransportError:
    return StorageTransportError(
        str(exc) or type(exc).__name__, method=descriptor.method, url=descriptor.url
    )


def _validate_upload_body(body: Any) -> None:
    if body is None or isinstance(body, Mapping):
        raise StorageValidationError(
            "upload body must be bytes, text, a file object or an iterable of bytes",
            fields=["body"],
        )


def _as_dict(body: Any, what: str) -> dict[str, Any]:
    if not isinstance(body, dict):
        raise StorageDecodeError(f"Expected a JSON object in the {what} response", data=body)
    return body


def _as_list(body: Any, what: str) -> list[Any]:
    if not isinstance(body, list):
        raise StorageDecodeError(f"Expected a JSON array in the {what} response", data=body)
    return body


def _transform_or_none(transform: TransformInput) -> TransformOptions | None:
    if transform is None:
        return None
    return parse_options(TransformOptions, transform)


class StorageRequestClient:
    """Dispatches request descriptors over a transport.

    Every outcome comes back as :class:`Ok` or :class:`Err`; nothing raised by
    the transport, the decoder or the error parser escapes :meth:`request`.
    """

    _transport: BaseTransport

    def __init__(self, *, config: StorageConfig, transport: BaseTransport) -> None:
        self._config = config
        self._transport = transport

    @property
    def config(self) -> StorageConfig:
        return self._config

    @property
    def transport(self) -> BaseTransport:
        return self._transport

    def close(self) -> None:
        if isinstance(self._transport, SyncTransport):
            self._transport.close()

    async def aclose(self) -> None:
        if isinstance(self._transport, AsyncTransport):
            await self._transport.aclose()

    async def send(self, descriptor: RequestDescriptor, *, stream: bool = False) -> httpx.Response:
        debug(f"{descriptor.method} {descriptor.url}")
        try:
            body = descriptor.encode_body()
        except TypeError as exc:
            raise StorageValidationError(str(exc), fields=["body"]) from exc
        try:
            return await self._transport.send(
                descriptor.method,
                descriptor.url,
                params=dict(descriptor.query),
                body=body,
                headers={"user-agent": USER_AGENT, **descriptor.headers},
                stream=stream,
            )
        except httpx.TransportError as exc:
            debug(f"transport failure for {descriptor.method} {descriptor.url}", str(exc))
            raise _transport_error(exc, descriptor) from exc

    async def request(self, descriptor: RequestDescriptor) -> Result[Any]:
        try:
            response = await self.send(descriptor)
            if 200 <= response.status_code < 300:
                return Ok(descriptor.decode(response))
            error = descriptor.parse_error(response)
        except StorageError as exc:
            return Err(exc)
        debug(f"{descriptor.method} {descriptor.url} failed", error.kind, error.status)
        return Err(error)


def create_sync_request_client(
    config: StorageConfig,
    *,
    client: httpx.Client | None = None,
    transport: SyncTransport | None = None,
) -> StorageRequestClient:
    if transport is None:
        transport = SyncTransport(
            create_storage_client(config.get_headers(), config.timeout, client=client)
        )
    return StorageRequestClient(config=config, transport=transport)


def create_async_request_client(
    config: StorageConfig,
    *,
    client: httpx.AsyncClient | None = None,
    transport: AsyncTransport | None = None,
) -> StorageRequestClient:
    if transport is None:
        transport = AsyncTransport(
            create_storage_async_client(config.get_headers(), config.timeout, client=client)
        )
    return StorageRequestClient(config=config, transport=transport)


class BaseStorageOps:
    """Bucket and object operations shared by the sync and async clients."""

    def __init__(self, *, request_client: StorageRequestClient) -> None:
        self._request_client = request_client

    @property
    def config(self) -> StorageConfig:
        return self._request_client.config

    def _make_transfer(self, response: httpx.Response) -> BaseTransfer:
        raise NotImplementedError

    async def _read_response(self, response: httpx.Response) -> None:
        raise NotImplementedError

    async def _close_response(self, response: httpx.Response) -> None:
        raise NotImplementedError

    def _request(self, path: str) -> RequestDescriptor:
        return base_request(self.config, path)

    def _full_url(self, relative: str, download: bool | str | None = None) -> str:
        url = paths.join_url(self.config.storage_url, relative)
        return paths.append_query(url, paths.download_query(download))

    async def _dispatch(
        self, descriptor: RequestDescriptor, build: Callable[[Any], Any] | None = None
    ) -> Result[Any]:
        result = await self._request_client.request(descriptor)
        if build is None or isinstance(result, Err):
            return result
        try:
            return Ok(build(result.value))
        except StorageError as exc:
            return Err(exc)

    async def _open_stream(self, descriptor: RequestDescriptor) -> Result[BaseTransfer]:
        try:
            response = await self._request_client.send(descriptor, stream=True)
        except StorageError as exc:
            return Err(exc)
        if 200 <= response.status_code < 300:
            return Ok(self._make_transfer(response))
        try:
            await self._read_response(response)
            return Err(descriptor.parse_error(response))
        except httpx.TransportError as exc:
            return Err(_transport_error(exc, descriptor))
        finally:
            await self._close_response(response)

    # Buckets

    async def list_buckets(self) -> Result[Any]:
        descriptor = self._request(paths.bucket_path()).with_body_decoder(
            StorageBodyDecoder(), schema=Bucket
        )
        return await self._dispatch(descriptor)

    async def get_bucket(self, bucket_id: str) -> Result[Any]:
        descriptor = self._request(paths.bucket_path_with_id(bucket_id)).with_body_decoder(
            StorageBodyDecoder(), schema=Bucket
        )
        return await self._dispatch(descriptor)

    async def create_bucket(
        self, bucket_id: str, attrs: Bucket | Mapping[str, Any] | None = None
    ) -> Result[Any]:
        try:
            data = attrs.model_dump() if isinstance(attrs, Bucket) else dict(attrs or {})
            bucket = parse_one(Bucket, {**data, "id": bucket_id})
        except StorageValidationError as exc:
            return Err(exc)
        descriptor = (
            self._request(paths.bucket_path())
            .with_method("POST")
            .with_body(bucket.to_payload())
        )
        return await self._dispatch(descriptor)

    async def update_bucket(
        self, bucket_id: str, attrs: Bucket | Mapping[str, Any] | None = None
    ) -> Result[Any]:
        try:
            data = attrs.model_dump() if isinstance(attrs, Bucket) else dict(attrs or {})
            bucket = parse_one(Bucket, {**data, "id": bucket_id})
        except StorageValidationError as exc:
            return Err(exc)
        descriptor = (
            self._request(paths.bucket_path_with_id(bucket_id))
            .with_method("PUT")
            .with_body(bucket.to_update_payload())
        )
        return await self._dispatch(descriptor)

    async def empty_bucket(self, bucket_id: str) -> Result[Any]:
        descriptor = self._request(paths.bucket_path_to_empty(bucket_id)).with_method("POST")
        return await self._dispatch(descriptor)

    async def delete_bucket(self, bucket_id: str) -> Result[Any]:
        descriptor = self._request(paths.bucket_path_with_id(bucket_id)).with_method("DELETE")
        return await self._dispatch(descriptor)

    # Objects

    async def _put_object(
        self,
        method: str,
        bucket_id: str,
        path: str,
        body: Any,
        options: FileOptions | Mapping[str, Any] | None,
    ) -> Result[UploadResult]:
        clean = paths.normalize_path(path)
        try:
            _validate_upload_body(body)
            file_options = parse_options(FileOptions, options)
        except StorageValidationError as exc:
            return Err(exc)
        descriptor = (
            self._request(paths.file_upload(bucket_id, clean))
            .with_method(method)
            .with_headers(file_options.to_headers())
            .with_body(body)
        )

        def build(raw: Any) -> UploadResult:
            data = raw if isinstance(raw, dict) else {}
            return UploadResult(
                path=clean, id=data.get("Id", data.get("id")), full_path=data.get("Key")
            )

        return await self._dispatch(descriptor, build)

    async def upload(
        self,
        bucket_id: str,
        path: str,
        body: Any,
        options: FileOptions | Mapping[str, Any] | None = None,
    ) -> Result[UploadResult]:
        return await self._put_object("POST", bucket_id, path, body, options)

    async def update(
        self,
        bucket_id: str,
        path: str,
        body: Any,
        options: FileOptions | Mapping[str, Any] | None = None,
    ) -> Result[UploadResult]:
        return await self._put_object("PUT", bucket_id, path, body, options)

    async def upload_file(
        self,
        bucket_id: str,
        local_path: str | os.PathLike,
        path: str | None = None,
        options: FileOptions | Mapping[str, Any] | None = None,
    ) -> Result[UploadResult]:
        src = os.fspath(local_path)
        if not os.path.isfile(src):
            return Err(StorageValidationError(f"local file not found: {src}", fields=["local_path"]))
        if options is None or (isinstance(options, Mapping) and "content_type" not in options):
            options = {**(options or {}), "content_type": guess_mime_type(src)}
        target = path if path is not None else os.path.basename(src)
        with open(src, "rb") as f:
            return await self.upload(bucket_id, target, f, options)

    async def upload_to_signed_url(
        self,
        bucket_id: str,
        path: str,
        token: str,
        body: Any,
        options: FileOptions | Mapping[str, Any] | None = None,
    ) -> Result[UploadResult]:
        clean = paths.normalize_path(path)
        try:
            _validate_upload_body(body)
            file_options = parse_options(FileOptions, options)
        except StorageValidationError as exc:
            return Err(exc)
        descriptor = (
            self._request(paths.file_upload_to_url(bucket_id, clean))
            .with_method("PUT")
            .with_query({"token": token})
            .with_headers(file_options.to_headers())
            .with_body(body)
        )

        def build(raw: Any) -> UploadResult:
            data = raw if isinstance(raw, dict) else {}
            return UploadResult(path=clean, id=data.get("Id"), full_path=data.get("Key"))

        return await self._dispatch(descriptor, build)

    async def create_signed_upload_url(
        self, bucket_id: str, path: str, *, upsert: bool = False
    ) -> Result[SignedUploadUrl]:
        clean = paths.normalize_path(path)
        descriptor = (
            self._request(paths.file_upload_signed_url(bucket_id, clean))
            .with_method("POST")
            .with_headers({"x-upsert": "true" if upsert else "false"})
        )

        def build(raw: Any) -> SignedUploadUrl:
            relative = _as_dict(raw, "signed upload URL").get("url")
            if not isinstance(relative, str):
                raise StorageDecodeError("Signed upload URL response has no url", data=raw)
            token = paths.query_param(relative, "token")
            if token is None:
                raise StorageDecodeError("Signed upload URL carries no token", data=raw)
            return SignedUploadUrl(signed_url=self._full_url(relative), token=token, path=clean)

        return await self._dispatch(descriptor, build)

    async def _relocate(
        self,
        endpoint: str,
        bucket_id: str,
        from_path: str,
        to_path: str,
        destination_bucket: str | None,
    ) -> Result[Any]:
        body: dict[str, Any] = {
            "bucket_id": bucket_id,
            "source_key": paths.normalize_path(from_path),
            "destination_key": paths.normalize_path(to_path),
        }
        if destination_bucket is not None:
            body["destination_bucket"] = destination_bucket
        descriptor = self._request(endpoint).with_method("POST").with_body(body)
        return await self._dispatch(descriptor)

    async def move(
        self,
        bucket_id: str,
        from_path: str,
        to_path: str,
        *,
        destination_bucket: str | None = None,
    ) -> Result[Any]:
        return await self._relocate(
            paths.file_move(), bucket_id, from_path, to_path, destination_bucket
        )

    async def copy(
        self,
        bucket_id: str,
        from_path: str,
        to_path: str,
        *,
        destination_bucket: str | None = None,
    ) -> Result[Any]:
        return await self._relocate(
            paths.file_copy(), bucket_id, from_path, to_path, destination_bucket
        )

    async def info(self, bucket_id: str, path: str) -> Result[Any]:
        descriptor = self._request(
            paths.file_info(bucket_id, paths.normalize_path(path))
        ).with_body_decoder(StorageBodyDecoder(), schema=FileObject)
        return await self._dispatch(descriptor)

    async def exists(self, bucket_id: str, path: str) -> Result[bool]:
        descriptor = (
            self._request(paths.file_upload(bucket_id, paths.normalize_path(path)))
            .with_method("HEAD")
            .with_body_decoder(None)
        )
        result = await self._request_client.request(descriptor)
        if isinstance(result, Ok):
            return Ok(True)
        if result.error.status in (400, 404):
            return Ok(False)
        return result

    async def list(
        self,
        bucket_id: str,
        prefix: str | None = None,
        options: SearchOptions | Mapping[str, Any] | None = None,
    ) -> Result[Any]:
        try:
            search = parse_options(SearchOptions, options)
        except StorageValidationError as exc:
            return Err(exc)
        descriptor = (
            self._request(paths.file_list(bucket_id))
            .with_method("POST")
            .with_body({"prefix": prefix or "", **search.to_payload()})
            .with_body_decoder(StorageBodyDecoder(), schema=FileObject)
        )
        return await self._dispatch(descriptor)

    async def list_v2(
        self,
        bucket_id: str,
        prefix: str | None = None,
        options: ListV2Options | Mapping[str, Any] | None = None,
    ) -> Result[ListV2Result]:
        try:
            page = parse_options(ListV2Options, options)
        except StorageValidationError as exc:
            return Err(exc)
        descriptor = (
            self._request(paths.file_list_v2(bucket_id))
            .with_method("POST")
            .with_body({"prefix": prefix or "", **page.to_payload()})
        )

        def build(raw: Any) -> ListV2Result:
            data = _as_dict(raw, "list")
            return ListV2Result(
                objects=list(data.get("objects") or []),
                folders=list(data.get("folders") or []),
                has_next=bool(data.get("hasNext", False)),
                next_cursor=data.get("nextCursor"),
            )

        return await self._dispatch(descriptor, build)

    async def remove(self, bucket_id: str, file_paths: str | Iterable[str]) -> Result[Any]:
        prefixes = [file_paths] if isinstance(file_paths, str) else list(file_paths)
        descriptor = (
            self._request(paths.file_remove(bucket_id))
            .with_method("DELETE")
            .with_body({"prefixes": [paths.normalize_path(p) for p in prefixes]})
        )
        return await self._dispatch(descriptor)

    async def create_signed_url(
        self,
        bucket_id: str,
        path: str,
        expires_in: int,
        *,
        download: bool | str | None = None,
        transform: TransformInput = None,
    ) -> Result[str]:
        try:
            transform_options = _transform_or_none(transform)
        except StorageValidationError as exc:
            return Err(exc)
        body: dict[str, Any] = {"expiresIn": expires_in}
        if transform_options is not None:
            body["transform"] = transform_options.to_payload()
        descriptor = (
            self._request(paths.file_signed_url(bucket_id, paths.normalize_path(path)))
            .with_method("POST")
            .with_body(body)
        )

        def build(raw: Any) -> str:
            relative = _as_dict(raw, "signed URL").get("signedURL")
            if not isinstance(relative, str):
                raise StorageDecodeError("Signed URL response has no signedURL", data=raw)
            return self._full_url(relative, download)

        return await self._dispatch(descriptor, build)

    async def create_signed_urls(
        self,
        bucket_id: str,
        file_paths: Iterable[str],
        expires_in: int,
        *,
        download: bool | str | None = None,
    ) -> Result[list[SignedUrl]]:
        descriptor = (
            self._request(paths.file_signed_urls(bucket_id))
            .with_method("POST")
            .with_body(
                {"expiresIn": expires_in, "paths": [paths.normalize_path(p) for p in file_paths]}
            )
        )

        def build(raw: Any) -> list[SignedUrl]:
            urls: list[SignedUrl] = []
            for item in _as_list(raw, "signed URLs"):
                entry = item if isinstance(item, dict) else {}
                relative = entry.get("signedURL")
                urls.append(
                    SignedUrl(
                        path=entry.get("path"),
                        signed_url=self._full_url(relative, download) if relative else None,
                        error=entry.get("error"),
                    )
                )
            return urls

        return await self._dispatch(descriptor, build)

    def _download_request(self, bucket_id: str, path: str, transform: TransformOptions | None) -> RequestDescriptor:
        clean = paths.normalize_path(path)
        descriptor = (
            self._request(paths.file_download(bucket_id, clean, transform=transform is not None))
            .with_headers({"accept": guess_mime_type(clean)})
            .with_body_decoder(None)
        )
        if transform is not None:
            descriptor = descriptor.with_query(transform)
        return descriptor

    async def download(
        self, bucket_id: str, path: str, *, transform: TransformInput = None
    ) -> Result[bytes]:
        try:
            transform_options = _transform_or_none(transform)
        except StorageValidationError as exc:
            return Err(exc)
        return await self._dispatch(self._download_request(bucket_id, path, transform_options))

    async def download_stream(
        self, bucket_id: str, path: str, *, transform: TransformInput = None
    ) -> Result[BaseTransfer]:
        try:
            transform_options = _transform_or_none(transform)
        except StorageValidationError as exc:
            return Err(exc)
        return await self._open_stream(self._download_request(bucket_id, path, transform_options))

    async def download_lazy(
        self,
        bucket_id: str,
        path: str,
        on_response: StreamHook | None = None,
        *,
        transform: TransformInput = None,
    ) -> Result[Any]:
        opened = await self.download_stream(bucket_id, path, transform=transform)
        if isinstance(opened, Err):
            return opened
        try:
            return Ok(await opened.value._consume(on_response))
        except StorageError as exc:
            return Err(exc)

    async def download_to(
        self,
        bucket_id: str,
        path: str,
        local_path: str | os.PathLike,
        *,
        transform: TransformInput = None,
        overwrite: bool = True,
        create_parents: bool = True,
    ) -> Result[str]:
        dst = os.fspath(local_path)
        if not overwrite and os.path.exists(dst):
            return Err(
                StorageValidationError(
                    "destination exists; pass overwrite=True to replace it", fields=["local_path"]
                )
            )
        opened = await self.download_stream(bucket_id, path, transform=transform)
        if isinstance(opened, Err):
            return opened
        transfer = opened.value
        tmp = dst + ".part"
        try:
            if create_parents:
                os.makedirs(os.path.dirname(dst) or ".", exist_ok=True)
            with open(tmp, "wb") as f:

                def sink(event: StreamEvent) -> Stop | None:
                    if event.done:
                        return Stop(dst)
                    f.write(event.chunk)
                    return None

                await transfer._consume(sink)
            os.replace(tmp, dst)
        except StorageError as exc:
            _remove_quietly(tmp)
            return Err(exc)
        except BaseException:
            _remove_quietly(tmp)
            raise
        finally:
            await transfer._close()
        return Ok(dst)

    def get_public_url(
        self,
        bucket_id: str,
        path: str,
        *,
        download: bool | str | None = None,
        transform: TransformInput = None,
    ) -> Result[str]:
        try:
            transform_options = _transform_or_none(transform)
        except StorageValidationError as exc:
            return Err(exc)
        relative = paths.file_public(
            bucket_id, paths.normalize_path(path), transform=transform_options is not None
        )
        url = self._full_url(relative)
        if transform_options is not None:
            url = paths.append_query(url, transform_options.to_query())
        return Ok(paths.append_query(url, paths.download_query(download)))


def _remove_quietly(path: str) -> None:
    if os.path.exists(path):
        os.remove(path)


class SyncStorageOps(BaseStorageOps):
    def __init__(
        self,
        config: StorageConfig,
        *,
        client: httpx.Client | None = None,
        transport: SyncTransport | None = None,
    ) -> None:
        super().__init__(
            request_client=create_sync_request_client(config, client=client, transport=transport)
        )

    def close(self) -> None:
        self._request_client.close()

    def _make_transfer(self, response: httpx.Response) -> Transfer:
        return Transfer(response)

    async def _read_response(self, response: httpx.Response) -> None:
        response.read()

    async def _close_response(self, response: httpx.Response) -> None:
        response.close()


class AsyncStorageOps(BaseStorageOps):
    def __init__(
        self,
        config: StorageConfig,
        *,
        client: httpx.AsyncClient | None = None,
        transport: AsyncTransport | None = None,
    ) -> None:
        super().__init__(
            request_client=create_async_request_client(config, client=client, transport=transport)
        )

    async def aclose(self) -> None:
        await self._request_client.aclose()

    def _make_transfer(self, response: httpx.Response) -> AsyncTransfer:
        return AsyncTransfer(response)

    async def _read_response(self, response: httpx.Response) -> None:
        await response.aread()

    async def _close_response(self, response: httpx.Response) -> None:
        await response.aclose()


__all__ = [
    "StorageRequestClient",
    "BaseStorageOps",
    "SyncStorageOps",
    "AsyncStorageOps",
    "create_sync_request_client",
    "create_async_request_client",
]
