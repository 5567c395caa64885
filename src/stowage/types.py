from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Generic, NoReturn, TypeVar

from .errors import StorageError

T = TypeVar("T")
U = TypeVar("U")


@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    value: T

    @property
    def ok(self) -> bool:
        return True

    @property
    def error(self) -> None:
        return None

    def unwrap(self) -> T:
        return self.value

    def map(self, fn: Callable[[T], U]) -> Ok[U]:
        return Ok(fn(self.value))


@dataclass(frozen=True, slots=True)
class Err:
    error: StorageError

    @property
    def ok(self) -> bool:
        return False

    @property
    def value(self) -> None:
        return None

    def unwrap(self) -> NoReturn:
        raise self.error

    def map(self, fn: Callable[[Any], Any]) -> Err:
        return self


Result = Ok[T] | Err


@dataclass(slots=True)
class UploadResult:
    path: str
    id: str | None
    full_path: str | None


@dataclass(slots=True)
class SignedUploadUrl:
    signed_url: str
    token: str | None
    path: str


@dataclass(slots=True)
class SignedUrl:
    path: str | None
    signed_url: str | None
    error: str | None = None


@dataclass(slots=True)
class ListV2Result:
    objects: list[dict[str, Any]]
    folders: list[dict[str, Any]]
    has_next: bool
    next_cursor: str | None


__all__ = [
    "Ok",
    "Err",
    "Result",
    "UploadResult",
    "SignedUploadUrl",
    "SignedUrl",
    "ListV2Result",
]
