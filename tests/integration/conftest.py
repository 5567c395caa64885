"""Fixtures for integration tests using respx mocking."""

import pytest

# Storage API base URL
STORAGE_URL = "https://project.example.com/storage/v1"
API_KEY = "test_api_key"


# =============================================================================
# Bucket Mock Responses
# =============================================================================


@pytest.fixture
def mock_bucket_response() -> dict:
    """Mock response for a single bucket."""
    return {
        "id": "avatars",
        "name": "avatars",
        "owner": "",
        "public": False,
        "file_size_limit": None,
        "allowed_mime_types": None,
        "created_at": "2024-01-15T10:30:00.000Z",
        "updated_at": "2024-01-15T10:30:00.000Z",
    }


@pytest.fixture
def mock_bucket_list_response(mock_bucket_response: dict) -> list:
    """Mock response for bucket listing."""
    return [
        mock_bucket_response,
        {
            "id": "documents",
            "name": "documents",
            "public": True,
            "file_size_limit": 10485760,
            "allowed_mime_types": ["application/pdf"],
            "created_at": "2024-01-16T09:00:00.000Z",
            "updated_at": "2024-01-16T09:00:00.000Z",
        },
    ]


@pytest.fixture
def mock_not_found_response() -> dict:
    """Mock error body returned by the service for unknown resources."""
    return {"statusCode": "404", "error": "not_found", "message": "Bucket not found"}


# =============================================================================
# Object Mock Responses
# =============================================================================


@pytest.fixture
def mock_upload_response() -> dict:
    """Mock response for an object upload."""
    return {"Id": "2d4bb5d2-7a0f-4c0f-9f5c-ec2d1c7b1d11", "Key": "avatars/folder/cat.png"}


@pytest.fixture
def mock_file_object() -> dict:
    """Mock object metadata."""
    return {
        "id": "2d4bb5d2-7a0f-4c0f-9f5c-ec2d1c7b1d11",
        "name": "cat.png",
        "bucket_id": "avatars",
        "owner": "",
        "metadata": {"size": 1024, "mimetype": "image/png"},
        "created_at": "2024-01-15T10:30:00.000Z",
        "updated_at": "2024-01-15T10:30:00.000Z",
        "last_accessed_at": "2024-01-15T10:30:00.000Z",
    }


@pytest.fixture
def mock_file_list_response(mock_file_object: dict) -> list:
    """Mock response for object listing."""
    return [
        mock_file_object,
        {**mock_file_object, "id": "9b1f0c1e-0000-4000-8000-000000000002", "name": "dog.png"},
    ]


@pytest.fixture
def mock_list_v2_response(mock_file_object: dict) -> dict:
    """Mock response for cursor-paginated listing."""
    return {
        "hasNext": True,
        "nextCursor": "cursor-2",
        "folders": [{"name": "folder", "key": "folder/"}],
        "objects": [mock_file_object],
    }
