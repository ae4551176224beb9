"""Filesystem layer — backends, mounts, path utilities, the router."""

from filemount.fs.database_fs import DatabaseBackend
from filemount.fs.dummy import DummyBackend, dummy_backend
from filemount.fs.exceptions import (
    DuplicateMountNameError,
    FileStorageError,
    InvalidMountNameError,
    InvalidPathError,
    OperationNotSupportedError,
    PathNotAllowedError,
    StorageError,
)
from filemount.fs.filters import PathFilters
from filemount.fs.guarded import GuardedBackend
from filemount.fs.local_disk import LocalDiskBackend
from filemount.fs.memory import MemoryBackend
from filemount.fs.mounts import MountRegistry, validate_mount_name
from filemount.fs.protocol import StorageBackend
from filemount.fs.types import (
    DIRECTORY_MIME_TYPE,
    File,
    FileMetadata,
    ListFilesResponse,
    ListOptions,
    Operation,
    Paging,
    UpsertFileCommand,
)
from filemount.fs.unified import UnifiedFileStorage
from filemount.fs.utils import (
    DELIMITER,
    join,
    normalize_delimiters,
    strip_mount_prefix,
    validate_path,
)

__all__ = [
    "DELIMITER",
    "DIRECTORY_MIME_TYPE",
    "DatabaseBackend",
    "DummyBackend",
    "DuplicateMountNameError",
    "File",
    "FileMetadata",
    "FileStorageError",
    "GuardedBackend",
    "InvalidMountNameError",
    "InvalidPathError",
    "ListFilesResponse",
    "ListOptions",
    "LocalDiskBackend",
    "MemoryBackend",
    "MountRegistry",
    "Operation",
    "OperationNotSupportedError",
    "Paging",
    "PathFilters",
    "PathNotAllowedError",
    "StorageBackend",
    "StorageError",
    "UnifiedFileStorage",
    "UpsertFileCommand",
    "dummy_backend",
    "join",
    "normalize_delimiters",
    "strip_mount_prefix",
    "validate_mount_name",
    "validate_path",
]
