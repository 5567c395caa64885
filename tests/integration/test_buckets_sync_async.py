"""Integration tests for bucket operations using respx mocking.

Tests both sync and async variants to ensure API parity.
"""

import json

import httpx
import pytest
import respx

from stowage import (
    AsyncStorageClient,
    StorageClient,
    StorageNotFoundError,
)

STORAGE_URL = "https://project.example.com/storage/v1"
API_KEY = "test_api_key"


class TestCreateBucket:
    """Test bucket creation."""

    @respx.mock
    def test_create_bucket_sync(self, mock_env_clear):
        """The request body carries defaults; the response body is passed through."""
        route = respx.post(f"{STORAGE_URL}/bucket").mock(
            return_value=httpx.Response(200, json={"name": "avatars"})
        )

        with StorageClient(STORAGE_URL, API_KEY) as client:
            result = client.create_bucket("avatars")

        assert result.ok
        assert result.value == {"name": "avatars"}
        request = route.calls.last.request
        assert json.loads(request.content) == {"id": "avatars", "name": "avatars", "public": False}
        assert request.headers["apikey"] == API_KEY
        assert request.headers["authorization"] == f"Bearer {API_KEY}"
        assert request.headers["content-type"] == "application/json"
        assert request.headers["user-agent"] == "stowage-py"

    @respx.mock
    @pytest.mark.asyncio
    async def test_create_bucket_async(self, mock_env_clear):
        route = respx.post(f"{STORAGE_URL}/bucket").mock(
            return_value=httpx.Response(200, json={"name": "docs"})
        )

        async with AsyncStorageClient(STORAGE_URL, API_KEY) as client:
            result = await client.create_bucket(
                "docs", {"public": True, "file_size_limit": "10MB"}
            )

        assert result.ok
        assert json.loads(route.calls.last.request.content) == {
            "id": "docs",
            "name": "docs",
            "public": True,
            "file_size_limit": "10MB",
        }

    @respx.mock(assert_all_called=False)
    def test_create_bucket_invalid_attrs_sends_nothing(self, mock_env_clear):
        route = respx.post(f"{STORAGE_URL}/bucket")

        with StorageClient(STORAGE_URL, API_KEY) as client:
            result = client.create_bucket("", {"public": True})

        assert not result.ok
        assert result.error.kind == "validation"
        assert "id" in result.error.fields
        assert not route.called

    @respx.mock
    def test_create_bucket_conflict(self, mock_env_clear):
        respx.post(f"{STORAGE_URL}/bucket").mock(
            return_value=httpx.Response(
                409, json={"statusCode": "409", "error": "Duplicate", "message": "already exists"}
            )
        )

        with StorageClient(STORAGE_URL, API_KEY) as client:
            result = client.create_bucket("avatars")

        assert result.error.kind == "conflict"
        assert result.error.message == "already exists"


class TestReadBuckets:
    """Test bucket listing and lookup."""

    @respx.mock
    def test_list_buckets_sync(self, mock_env_clear, mock_bucket_list_response):
        respx.get(f"{STORAGE_URL}/bucket").mock(
            return_value=httpx.Response(200, json=mock_bucket_list_response)
        )

        with StorageClient(STORAGE_URL, API_KEY) as client:
            result = client.list_buckets()

        assert result.ok
        assert result.value == mock_bucket_list_response

    @respx.mock
    @pytest.mark.asyncio
    async def test_list_buckets_async(self, mock_env_clear, mock_bucket_list_response):
        respx.get(f"{STORAGE_URL}/bucket").mock(
            return_value=httpx.Response(200, json=mock_bucket_list_response)
        )

        async with AsyncStorageClient(STORAGE_URL, API_KEY) as client:
            result = await client.list_buckets()

        assert result.value == mock_bucket_list_response

    @respx.mock
    def test_list_buckets_rejects_malformed_entries(self, mock_env_clear):
        body = [{"id": "ok"}, {"name": "no-id"}]
        respx.get(f"{STORAGE_URL}/bucket").mock(return_value=httpx.Response(200, json=body))

        with StorageClient(STORAGE_URL, API_KEY) as client:
            result = client.list_buckets()

        assert result.error.kind == "decode_error"
        assert result.error.fields == ["id"]

    @respx.mock
    def test_get_bucket_sync(self, mock_env_clear, mock_bucket_response):
        respx.get(f"{STORAGE_URL}/bucket/avatars").mock(
            return_value=httpx.Response(200, json=mock_bucket_response)
        )

        with StorageClient(STORAGE_URL, API_KEY) as client:
            result = client.get_bucket("avatars")

        assert result.unwrap() == mock_bucket_response

    @respx.mock
    def test_get_bucket_not_found_sync(self, mock_env_clear, mock_not_found_response):
        respx.get(f"{STORAGE_URL}/bucket/missing").mock(
            return_value=httpx.Response(404, json=mock_not_found_response)
        )

        with StorageClient(STORAGE_URL, API_KEY) as client:
            result = client.get_bucket("missing")

        assert not result.ok
        assert result.error.kind == "not_found"
        assert result.error.message == "Bucket not found"
        assert result.error.status == 404
        with pytest.raises(StorageNotFoundError):
            result.unwrap()

    @respx.mock
    @pytest.mark.asyncio
    async def test_get_bucket_not_found_async(self, mock_env_clear, mock_not_found_response):
        respx.get(f"{STORAGE_URL}/bucket/missing").mock(
            return_value=httpx.Response(404, json=mock_not_found_response)
        )

        async with AsyncStorageClient(STORAGE_URL, API_KEY) as client:
            result = await client.get_bucket("missing")

        assert result.error.kind == "not_found"


class TestModifyBuckets:
    """Test bucket update, empty and delete."""

    @respx.mock
    def test_update_bucket_sync(self, mock_env_clear):
        route = respx.put(f"{STORAGE_URL}/bucket/avatars").mock(
            return_value=httpx.Response(200, json={"message": "Successfully updated"})
        )

        with StorageClient(STORAGE_URL, API_KEY) as client:
            result = client.update_bucket(
                "avatars", {"public": True, "allowed_mime_types": ["image/png"]}
            )

        assert result.value == {"message": "Successfully updated"}
        assert json.loads(route.calls.last.request.content) == {
            "public": True,
            "allowed_mime_types": ["image/png"],
        }

    @respx.mock
    def test_empty_bucket_sync(self, mock_env_clear):
        route = respx.post(f"{STORAGE_URL}/bucket/avatars/empty").mock(
            return_value=httpx.Response(200, json={"message": "Successfully emptied"})
        )

        with StorageClient(STORAGE_URL, API_KEY) as client:
            result = client.empty_bucket("avatars")

        assert result.ok
        assert route.called

    @respx.mock
    @pytest.mark.asyncio
    async def test_delete_bucket_async(self, mock_env_clear):
        route = respx.delete(f"{STORAGE_URL}/bucket/avatars").mock(
            return_value=httpx.Response(200, json={"message": "Successfully deleted"})
        )

        async with AsyncStorageClient(STORAGE_URL, API_KEY) as client:
            result = await client.delete_bucket("avatars")

        assert result.value == {"message": "Successfully deleted"}
        assert route.called


class TestFailures:
    """Test transport and decode failures become error values."""

    @respx.mock
    def test_transport_error_sync(self, mock_env_clear):
        respx.get(f"{STORAGE_URL}/bucket").mock(side_effect=httpx.ConnectError("refused"))

        with StorageClient(STORAGE_URL, API_KEY) as client:
            result = client.list_buckets()

        assert not result.ok
        assert result.error.kind == "transport_error"
        assert result.error.method == "GET"
        assert result.error.url == f"{STORAGE_URL}/bucket"

    @respx.mock
    @pytest.mark.asyncio
    async def test_transport_error_async(self, mock_env_clear):
        respx.get(f"{STORAGE_URL}/bucket").mock(side_effect=httpx.ConnectTimeout("timed out"))

        async with AsyncStorageClient(STORAGE_URL, API_KEY) as client:
            result = await client.list_buckets()

        assert result.error.kind == "transport_error"

    @respx.mock
    def test_invalid_json_is_decode_error(self, mock_env_clear):
        respx.get(f"{STORAGE_URL}/bucket/avatars").mock(
            return_value=httpx.Response(200, content=b"<html>oops</html>")
        )

        with StorageClient(STORAGE_URL, API_KEY) as client:
            result = client.get_bucket("avatars")

        assert result.error.kind == "decode_error"
