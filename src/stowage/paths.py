"""Endpoint paths and query strings for the storage REST API."""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any
from urllib.parse import parse_qs, urlencode, urlparse

from pydantic import BaseModel

_SLASH_RUNS = re.compile(r"/{2,}")


def normalize_path(path: str) -> str:
    """Collapse repeated slashes, then drop one leading and one trailing slash.

    ``normalize_path(normalize_path(p)) == normalize_path(p)`` for every ``p``.
    """
    cleaned = _SLASH_RUNS.sub("/", path)
    if cleaned.startswith("/"):
        cleaned = cleaned[1:]
    if cleaned.endswith("/"):
        cleaned = cleaned[:-1]
    return cleaned


def _query_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (BaseModel, Mapping)):
        return encode_query(value)
    return str(value)


def flatten_query(params: Mapping[str, Any] | BaseModel | None) -> dict[str, str]:
    """Flatten a record into string pairs, omitting ``None`` values.

    Nested records are encoded into their own query sub-string.
    """
    if params is None:
        return {}
    items = params.model_dump() if isinstance(params, BaseModel) else dict(params)
    return {str(key): _query_value(value) for key, value in items.items() if value is not None}


def encode_query(params: Mapping[str, Any] | BaseModel | None) -> str:
    return urlencode(flatten_query(params))


def append_query(url: str, query: str) -> str:
    if not query:
        return url
    sep = "&" if "?" in url else "?"
    return f"{url}{sep}{query}"


def query_param(url: str, name: str) -> str | None:
    values = parse_qs(urlparse(url).query).get(name)
    return values[0] if values else None


def join_url(base_url: str, path: str) -> str:
    return f"{base_url.rstrip('/')}/{path.lstrip('/')}"


# Buckets


def bucket_path() -> str:
    return "/bucket"


def bucket_path_with_id(bucket_id: str) -> str:
    return f"/bucket/{bucket_id}"


def bucket_path_to_empty(bucket_id: str) -> str:
    return f"/bucket/{bucket_id}/empty"


# Objects


def file_upload(bucket_id: str, path: str) -> str:
    return f"/object/{bucket_id}/{path}"


def file_upload_to_url(bucket_id: str, path: str) -> str:
    return f"/object/upload/sign/{bucket_id}/{path}"


def file_upload_signed_url(bucket_id: str, path: str) -> str:
    return f"/object/upload/sign/{bucket_id}/{path}"


def file_move() -> str:
    return "/object/move"


def file_copy() -> str:
    return "/object/copy"


def file_info(bucket_id: str, wildcard: str) -> str:
    return f"/object/info/{bucket_id}/{wildcard}"


def file_list(bucket_id: str) -> str:
    return f"/object/list/{bucket_id}"


def file_list_v2(bucket_id: str) -> str:
    return f"/object/list-v2/{bucket_id}"


def file_remove(bucket_id: str) -> str:
    return f"/object/{bucket_id}"


def file_signed_url(bucket_id: str, path: str) -> str:
    return f"/object/sign/{bucket_id}/{path}"


def file_signed_urls(bucket_id: str) -> str:
    return f"/object/sign/{bucket_id}"


def file_download(bucket_id: str, wildcard: str, *, transform: bool = False) -> str:
    if transform:
        return f"/render/image/authenticated/{bucket_id}/{wildcard}"
    return f"/object/{bucket_id}/{wildcard}"


def file_public(bucket_id: str, path: str, *, transform: bool = False) -> str:
    if transform:
        return f"/render/image/public/{bucket_id}/{path}"
    return f"/object/public/{bucket_id}/{path}"


def download_query(download: bool | str | None) -> str:
    """``download=`` for ``True``, ``download=<name>`` for a filename, nothing for ``None``."""
    if download is None or download is False:
        return ""
    return urlencode({"download": "" if download is True else download})


__all__ = [
    "normalize_path",
    "flatten_query",
    "encode_query",
    "append_query",
    "query_param",
    "join_url",
    "download_query",
    "bucket_path",
    "bucket_path_with_id",
    "bucket_path_to_empty",
    "file_upload",
    "file_upload_to_url",
    "file_upload_signed_url",
    "file_move",
    "file_copy",
    "file_info",
    "file_list",
    "file_list_v2",
    "file_remove",
    "file_signed_url",
    "file_signed_urls",
    "file_download",
    "file_public",
]
