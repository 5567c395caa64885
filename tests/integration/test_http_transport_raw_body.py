"""Tests for RawBody support in HTTP transports."""

import io

import pytest
import respx
from httpx import Response

from stowage._http import (
    AsyncTransport,
    BytesBody,
    RawBody,
    SyncTransport,
    create_storage_async_client,
    create_storage_client,
    iter_coroutine,
)
from stowage.utils import iter_file_chunks

UPLOAD_URL = "https://upload.example.com/storage/v1/object/avatars/a.bin"
HEADERS = {"apikey": "key", "authorization": "Bearer key"}


class TestRawBodySupport:
    """Test that RawBody content is passed through transport unchanged."""

    @respx.mock
    def test_sync_raw_body_iterable(self):
        """SyncTransport should forward iterable bodies without JSON encoding."""
        expected = b"chunk-1chunk-2"

        def handler(request):
            payload = b"".join(request.stream)
            assert payload == expected
            return Response(200, json={"ok": True})

        route = respx.post(UPLOAD_URL).mock(side_effect=handler)

        transport = SyncTransport(create_storage_client(HEADERS, timeout=30.0))
        try:
            body = RawBody(iter([b"chunk-1", b"chunk-2"]))
            response = iter_coroutine(transport.send("POST", UPLOAD_URL, body=body))
            assert response.status_code == 200
            assert route.called
            assert route.calls.last.request.headers["apikey"] == "key"
        finally:
            transport.close()

    @respx.mock
    @pytest.mark.asyncio
    async def test_async_raw_body_async_iterable(self):
        """AsyncTransport should forward async iterable bodies without JSON encoding."""
        expected = b"part-apart-b"

        async def chunks():
            yield b"part-a"
            yield b"part-b"

        async def handler(request):
            body = b""
            async for chunk in request.stream:
                body += chunk
            assert body == expected
            return Response(200, json={"ok": True})

        route = respx.post(UPLOAD_URL).mock(side_effect=handler)

        transport = AsyncTransport(create_storage_async_client(HEADERS, timeout=30.0))
        try:
            response = await transport.send("POST", UPLOAD_URL, body=RawBody(chunks()))
            assert response.status_code == 200
            assert route.called
        finally:
            await transport.aclose()

    @respx.mock
    @pytest.mark.asyncio
    async def test_async_raw_body_sync_file_chunks(self):
        """AsyncTransport should adapt sync chunk iterators from file objects."""
        payload = b"a" * (64 * 1024) + b"b" * 32

        async def handler(request):
            body = b""
            async for chunk in request.stream:
                body += chunk
            assert body == payload
            return Response(200, json={"ok": True})

        route = respx.post(UPLOAD_URL).mock(side_effect=handler)

        transport = AsyncTransport(create_storage_async_client(HEADERS, timeout=30.0))
        try:
            body = RawBody(iter_file_chunks(io.BytesIO(payload)))
            response = await transport.send("POST", UPLOAD_URL, body=body)
            assert response.status_code == 200
            assert route.called
        finally:
            await transport.aclose()

    @respx.mock
    def test_bytes_body_sets_content_type(self):
        route = respx.post(UPLOAD_URL).mock(return_value=Response(200, json={}))

        transport = SyncTransport(create_storage_client(HEADERS, timeout=30.0))
        try:
            iter_coroutine(
                transport.send("POST", UPLOAD_URL, body=BytesBody(b"png", content_type="image/png"))
            )
            request = route.calls.last.request
            assert request.headers["content-type"] == "image/png"
            assert request.content == b"png"
        finally:
            transport.close()
