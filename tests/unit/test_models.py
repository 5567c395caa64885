"""Unit tests for resource schemas and option records."""

import base64
import json

import pytest

from stowage.errors import StorageValidationError
from stowage.models import (
    Bucket,
    FileObject,
    FileOptions,
    FileSizeLimit,
    SearchOptions,
    TransformOptions,
    parse_one,
    parse_options,
    parse_resource,
    parse_size_limit,
)


class TestBucket:
    def test_name_defaults_to_id(self):
        bucket = parse_one(Bucket, {"id": "avatars"})
        assert bucket.name == "avatars"
        assert bucket.public is False

    def test_explicit_name_is_kept(self):
        bucket = parse_one(Bucket, {"id": "avatars", "name": "Avatars"})
        assert bucket.name == "Avatars"

    def test_missing_id_is_reported(self):
        with pytest.raises(StorageValidationError) as exc_info:
            parse_one(Bucket, {"name": "avatars"})
        assert exc_info.value.kind == "validation"
        assert "id" in exc_info.value.fields

    def test_unknown_fields_are_ignored(self):
        bucket = parse_one(Bucket, {"id": "avatars", "shard": 3})
        assert not hasattr(bucket, "shard")

    def test_payload_has_only_set_attributes(self):
        bucket = parse_one(Bucket, {"id": "avatars"})
        assert bucket.to_payload() == {"id": "avatars", "name": "avatars", "public": False}

    def test_payload_renders_size_limit(self):
        bucket = parse_one(
            Bucket,
            {"id": "docs", "file_size_limit": "10MB", "allowed_mime_types": ["image/png"]},
        )
        assert bucket.to_payload() == {
            "id": "docs",
            "name": "docs",
            "public": False,
            "allowed_mime_types": ["image/png"],
            "file_size_limit": "10MB",
        }

    def test_update_payload(self):
        bucket = parse_one(Bucket, {"id": "docs", "public": True, "file_size_limit": 2048})
        assert bucket.to_update_payload() == {"public": True, "file_size_limit": 2048}


class TestFileSizeLimit:
    def test_integer_means_bytes(self):
        limit = FileSizeLimit.model_validate(100)
        assert limit.size == 100
        assert limit.unit == "byte"
        assert limit.to_wire() == 100

    def test_megabytes(self):
        limit = FileSizeLimit.model_validate("10MB")
        assert limit.size == 10
        assert limit.unit == "megabyte"
        assert str(limit) == "10MB"
        assert limit.to_wire() == "10MB"

    def test_unknown_suffix_falls_back_to_bytes(self):
        limit = FileSizeLimit.model_validate("10XX")
        assert limit.size == 10
        assert limit.unit == "byte"

    def test_parse_size_limit_rejects_non_numeric(self):
        with pytest.raises(ValueError):
            parse_size_limit("huge")

    def test_zero_is_invalid(self):
        with pytest.raises(StorageValidationError) as exc_info:
            parse_one(Bucket, {"id": "docs", "file_size_limit": 0})
        assert exc_info.value.fields[0].startswith("file_size_limit")


class TestFileObject:
    def test_path_is_normalized(self):
        obj = parse_one(FileObject, {"id": "1", "path": "//a//b/"})
        assert obj.path == "a/b"

    def test_list_aborts_on_first_invalid_element(self):
        items = [{"id": "1", "name": "a.png"}, {"name": "b.png"}, {"id": "3"}]
        with pytest.raises(StorageValidationError) as exc_info:
            parse_resource(FileObject, items)
        assert exc_info.value.fields == ["id"]

    def test_empty_list_is_valid(self):
        assert parse_resource(FileObject, []) == []


class TestSearchOptions:
    def test_defaults(self):
        options = parse_options(SearchOptions, None)
        assert options.to_payload() == {
            "limit": 100,
            "offset": 0,
            "sort_by": {"column": "name", "order": "asc"},
        }

    def test_search_and_order(self):
        options = parse_options(
            SearchOptions, {"search": "cat", "sort_by": {"column": "created_at", "order": "DESC"}}
        )
        payload = options.to_payload()
        assert payload["search"] == "cat"
        assert payload["sort_by"] == {"column": "created_at", "order": "desc"}

    def test_negative_limit_is_rejected(self):
        with pytest.raises(StorageValidationError) as exc_info:
            parse_options(SearchOptions, {"limit": -1})
        assert exc_info.value.fields == ["limit"]


class TestTransformOptions:
    def test_query_omits_unset_dimensions(self):
        transform = parse_options(TransformOptions, {"width": 100})
        assert transform.to_query() == "width=100&resize=cover&quality=80&format=origin"

    def test_quality_bounds(self):
        with pytest.raises(StorageValidationError):
            parse_options(TransformOptions, {"quality": 5})


class TestFileOptions:
    def test_default_headers(self):
        headers = parse_options(FileOptions, None).to_headers()
        assert headers["cache-control"] == "max-age=3600"
        assert headers["content-type"] == "text/plain;charset=UTF-8"
        assert headers["x-upsert"] == "false"
        assert json.loads(base64.b64decode(headers["x-metadata"])) == {}

    def test_custom_values(self):
        options = parse_options(
            FileOptions,
            {
                "cache_control": 60,
                "content_type": "image/png",
                "upsert": True,
                "metadata": {"owner": "me"},
                "headers": {"x-trace": "abc"},
            },
        )
        headers = options.to_headers()
        assert headers["cache-control"] == "max-age=60"
        assert headers["content-type"] == "image/png"
        assert headers["x-upsert"] == "true"
        assert json.loads(base64.b64decode(headers["x-metadata"])) == {"owner": "me"}
        assert headers["x-trace"] == "abc"
