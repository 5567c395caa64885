"""Tests for storage URL construction.

These tests verify that endpoint URLs are built consistently:
- the storage URL may be given with or without a trailing slash
- object paths are normalized before they are placed in the URL
- query strings are attached once, whatever the operation
"""

import pytest
import respx
from httpx import Response

from stowage import AsyncStorageClient, StorageClient


class TestUrlNormalization:
    """Test that URL normalization produces consistent results regardless of input format."""

    @pytest.mark.parametrize(
        "storage_url,expected_url",
        [
            ("https://api.example.com/storage/v1", "https://api.example.com/storage/v1/bucket"),
            ("https://api.example.com/storage/v1/", "https://api.example.com/storage/v1/bucket"),
            ("https://api.example.com", "https://api.example.com/bucket"),
            ("https://api.example.com/", "https://api.example.com/bucket"),
        ],
        ids=[
            "path_no_trailing",
            "path_trailing",
            "root_no_trailing",
            "root_trailing",
        ],
    )
    @respx.mock
    def test_sync_normalization_consistency(
        self, mock_env_clear, storage_url: str, expected_url: str
    ):
        route = respx.get(expected_url).mock(return_value=Response(200, json=[]))

        with StorageClient(storage_url, "key") as client:
            result = client.list_buckets()

        assert result.ok
        assert route.called

    @pytest.mark.parametrize(
        "storage_url,expected_url",
        [
            ("https://api.example.com/storage/v1", "https://api.example.com/storage/v1/bucket"),
            ("https://api.example.com/storage/v1/", "https://api.example.com/storage/v1/bucket"),
        ],
        ids=["no_trailing", "trailing"],
    )
    @respx.mock
    @pytest.mark.asyncio
    async def test_async_normalization_consistency(
        self, mock_env_clear, storage_url: str, expected_url: str
    ):
        route = respx.get(expected_url).mock(return_value=Response(200, json=[]))

        async with AsyncStorageClient(storage_url, "key") as client:
            result = await client.list_buckets()

        assert result.ok
        assert route.called


class TestObjectPaths:
    """Test that object paths reach the wire in normalized form."""

    @pytest.mark.parametrize(
        "path",
        ["folder/cat.png", "/folder/cat.png", "folder/cat.png/", "//folder///cat.png//"],
        ids=["clean", "leading", "trailing", "repeated"],
    )
    @respx.mock
    def test_object_path_variants(self, mock_env_clear, path: str):
        route = respx.get("https://api.example.com/storage/v1/object/info/avatars/folder/cat.png").mock(
            return_value=Response(200, json={"id": "1", "name": "cat.png"})
        )

        with StorageClient("https://api.example.com/storage/v1", "key") as client:
            result = client.from_("avatars").info(path)

        assert result.ok
        assert route.called

    @respx.mock
    def test_query_is_not_duplicated(self, mock_env_clear):
        route = respx.get(
            "https://api.example.com/storage/v1/render/image/authenticated/avatars/cat.png"
        ).mock(return_value=Response(200, content=b"img"))

        with StorageClient("https://api.example.com/storage/v1", "key") as client:
            client.from_("avatars").download("cat.png", transform={"width": 10})

        url = route.calls.last.request.url
        assert url.query.count(b"width=") == 1
