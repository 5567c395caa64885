from .aio import AsyncStorageClient, AsyncStorageFileApi
from .client import StorageClient, StorageFileApi
from .errors import (
    ErrorKind,
    StorageConflictError,
    StorageDecodeError,
    StorageError,
    StorageHTTPError,
    StorageNotFoundError,
    StorageTransportError,
    StorageUnauthorizedError,
    StorageValidationError,
    StreamConsumedError,
)
from .models import (
    Bucket,
    FileObject,
    FileOptions,
    FileSizeLimit,
    ListV2Options,
    SearchOptions,
    SortBy,
    TransformOptions,
)
from .paths import normalize_path
from .request import RequestDescriptor
from .streaming import AsyncTransfer, Stop, StreamEvent, Transfer
from .types import Err, ListV2Result, Ok, Result, SignedUploadUrl, SignedUrl, UploadResult

__all__ = [
    "StorageClient",
    "StorageFileApi",
    "AsyncStorageClient",
    "AsyncStorageFileApi",
    "ErrorKind",
    "StorageError",
    "StorageValidationError",
    "StorageNotFoundError",
    "StorageConflictError",
    "StorageUnauthorizedError",
    "StorageHTTPError",
    "StorageDecodeError",
    "StorageTransportError",
    "StreamConsumedError",
    "Bucket",
    "FileObject",
    "FileOptions",
    "FileSizeLimit",
    "ListV2Options",
    "SearchOptions",
    "SortBy",
    "TransformOptions",
    "normalize_path",
    "RequestDescriptor",
    "Transfer",
    "AsyncTransfer",
    "StreamEvent",
    "Stop",
    "Ok",
    "Err",
    "Result",
    "UploadResult",
    "SignedUploadUrl",
    "SignedUrl",
    "ListV2Result",
]
