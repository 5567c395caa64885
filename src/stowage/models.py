"""Resource schemas for buckets, files and request options.

Every record is validated from a loosely-typed mapping. Input is cast and
defaulted, then checked for required fields. Invalid input raises
:class:`~stowage.errors.StorageValidationError`, which names the offending
fields.
"""

from __future__ import annotations

import base64
import json
import re
from collections.abc import Mapping
from datetime import datetime
from typing import Any, Literal, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from .errors import StorageValidationError
from .paths import encode_query, normalize_path

ModelT = TypeVar("ModelT", bound=BaseModel)

SizeUnit = Literal["byte", "megabyte", "gigabyte", "terabyte"]
ResizeMode = Literal["cover", "contain", "fill"]
SortOrder = Literal["asc", "desc"]

_SUFFIX_UNITS: dict[str, SizeUnit] = {
    "B": "byte",
    "MB": "megabyte",
    "GB": "gigabyte",
    "TB": "terabyte",
}
_UNIT_SUFFIXES: dict[str, str] = {unit: suffix for suffix, unit in _SUFFIX_UNITS.items()}
_SIZE_LIMIT_RE = re.compile(r"^\s*(\d+)\s*(\S*)\s*$")


def parse_size_limit(value: str) -> dict[str, Any]:
    """Split ``"10MB"`` into ``{"size": 10, "unit": "megabyte"}``.

    Unknown suffixes fall back to bytes.
    """
    match = _SIZE_LIMIT_RE.match(value)
    if match is None:
        raise ValueError(f"size limit {value!r} must start with an integer")
    size, suffix = match.groups()
    return {"size": int(size), "unit": _SUFFIX_UNITS.get(suffix.upper(), "byte")}


class FileSizeLimit(BaseModel):
    """Maximum upload size of a bucket, as a value and unit pair."""

    model_config = ConfigDict(frozen=True)

    size: int = Field(gt=0)
    unit: SizeUnit = "byte"

    @model_validator(mode="before")
    @classmethod
    def _cast(cls, value: Any) -> Any:
        if isinstance(value, bool):
            return value
        if isinstance(value, int):
            return {"size": value, "unit": "byte"}
        if isinstance(value, str):
            return parse_size_limit(value)
        return value

    @field_validator("unit", mode="before")
    @classmethod
    def _cast_unit(cls, value: Any) -> Any:
        if isinstance(value, str) and value.upper() in _SUFFIX_UNITS:
            return _SUFFIX_UNITS[value.upper()]
        return value

    def __str__(self) -> str:
        return f"{self.size}{_UNIT_SUFFIXES[self.unit]}"

    def to_wire(self) -> int | str:
        """Bytes go over the wire as a plain integer, other units as ``"10MB"``."""
        if self.unit == "byte":
            return self.size
        return str(self)


class Bucket(BaseModel):
    """A named container of files.

    ``name`` defaults to ``id`` when absent. ``created_at`` and ``updated_at``
    are set by the service.
    """

    model_config = ConfigDict(extra="ignore")

    id: str = Field(min_length=1)
    name: str = Field(min_length=1)
    owner: str | None = None
    file_size_limit: FileSizeLimit | None = None
    allowed_mime_types: list[str] | None = None
    public: bool = False
    type: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @model_validator(mode="before")
    @classmethod
    def _default_name(cls, data: Any) -> Any:
        if not isinstance(data, Mapping):
            return data
        data = {str(key): value for key, value in data.items()}
        if not data.get("name") and data.get("id"):
            data["name"] = data["id"]
        return data

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"id": self.id, "name": self.name, "public": self.public}
        if self.allowed_mime_types is not None:
            payload["allowed_mime_types"] = list(self.allowed_mime_types)
        if self.file_size_limit is not None:
            payload["file_size_limit"] = self.file_size_limit.to_wire()
        return payload

    def to_update_payload(self) -> dict[str, Any]:
        """The subset of attributes the service accepts on update."""
        payload: dict[str, Any] = {"public": self.public}
        if self.file_size_limit is not None:
            payload["file_size_limit"] = self.file_size_limit.to_wire()
        if self.allowed_mime_types is not None:
            payload["allowed_mime_types"] = list(self.allowed_mime_types)
        if self.type is not None:
            payload["type"] = self.type
        return payload


class FileObject(BaseModel):
    """A stored object. ``bucket_id`` only names its bucket."""

    model_config = ConfigDict(extra="ignore")

    id: str = Field(min_length=1)
    path: str | None = None
    name: str | None = None
    bucket_id: str | None = None
    owner: str | None = None
    metadata: dict[str, Any] | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    last_accessed_at: datetime | None = None

    @field_validator("path")
    @classmethod
    def _normalize_path(cls, value: str | None) -> str | None:
        return normalize_path(value) if value is not None else None


class SortBy(BaseModel):
    column: str = "name"
    order: SortOrder = "asc"

    @field_validator("order", mode="before")
    @classmethod
    def _lower(cls, value: Any) -> Any:
        return value.lower() if isinstance(value, str) else value


class SearchOptions(BaseModel):
    """Offset pagination, search and sorting for object listings."""

    limit: int = Field(default=100, ge=0)
    offset: int = Field(default=0, ge=0)
    search: str | None = None
    sort_by: SortBy = Field(default_factory=SortBy)

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True)


class ListV2Options(BaseModel):
    """Cursor pagination for object listings."""

    limit: int = Field(default=100, ge=0)
    cursor: str | None = None
    with_delimiter: bool = False

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True)


class TransformOptions(BaseModel):
    """Image rendering parameters applied at download time."""

    width: int | None = Field(default=None, gt=0)
    height: int | None = Field(default=None, gt=0)
    resize: ResizeMode = "cover"
    quality: int = Field(default=80, ge=20, le=100)
    format: str = "origin"

    @field_validator("resize", mode="before")
    @classmethod
    def _lower(cls, value: Any) -> Any:
        return value.lower() if isinstance(value, str) else value

    def to_query(self) -> str:
        return encode_query(self)

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True)


class FileOptions(BaseModel):
    """Upload settings; rendered as request headers."""

    cache_control: str = "3600"
    content_type: str = "text/plain;charset=UTF-8"
    upsert: bool = False
    metadata: dict[str, Any] = Field(default_factory=dict)
    headers: dict[str, str] = Field(default_factory=dict)

    @field_validator("cache_control", mode="before")
    @classmethod
    def _stringify(cls, value: Any) -> Any:
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value

    def to_headers(self) -> dict[str, str]:
        encoded_metadata = base64.b64encode(json.dumps(self.metadata).encode()).decode()
        headers = {
            "cache-control": f"max-age={self.cache_control}",
            "content-type": self.content_type,
            "x-upsert": "true" if self.upsert else "false",
            "x-metadata": encoded_metadata,
        }
        headers.update(self.headers)
        return headers


def _error_fields(exc: ValidationError) -> list[str]:
    fields: list[str] = []
    for error in exc.errors():
        name = ".".join(str(part) for part in error["loc"] if not isinstance(part, int))
        if name and name not in fields:
            fields.append(name)
    return fields


def parse_resource(schema: type[ModelT], attrs: Any) -> ModelT | list[ModelT]:
    """Validate ``attrs`` (a mapping or a list of mappings) against ``schema``.

    Lists are validated element by element; the first invalid element aborts
    the batch and its error is raised.
    """
    if isinstance(attrs, list):
        return [parse_one(schema, item) for item in attrs]
    return parse_one(schema, attrs)


def parse_one(schema: type[ModelT], attrs: Any) -> ModelT:
    if isinstance(attrs, schema):
        return attrs
    try:
        return schema.model_validate(attrs)
    except ValidationError as exc:
        fields = _error_fields(exc)
        detail = ", ".join(fields) if fields else "input"
        raise StorageValidationError(
            f"invalid {schema.__name__}: {detail}", fields=fields
        ) from exc


def parse_options(schema: type[ModelT], attrs: ModelT | Mapping[str, Any] | None) -> ModelT:
    """Build an options record, defaulting every field when ``attrs`` is None."""
    return parse_one(schema, {} if attrs is None else attrs)


__all__ = [
    "SizeUnit",
    "ResizeMode",
    "SortOrder",
    "FileSizeLimit",
    "Bucket",
    "FileObject",
    "SortBy",
    "SearchOptions",
    "ListV2Options",
    "TransformOptions",
    "FileOptions",
    "parse_size_limit",
    "parse_resource",
    "parse_one",
    "parse_options",
]
