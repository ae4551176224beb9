"""filemount: one path namespace over many storage backends.

Mount local directories, in-memory stores and databases under names, then
address every file as ``/<mount>/<path>``.
"""

__version__ = "0.1.0"

from filemount._filestorage import FileStorage
from filemount._service import provide_service
from filemount.config import (
    BackendConfig,
    BackendKind,
    FileStorageConfig,
    default_config,
)
from filemount.fs import (
    DatabaseBackend,
    DuplicateMountNameError,
    File,
    FileMetadata,
    FileStorageError,
    InvalidPathError,
    ListFilesResponse,
    ListOptions,
    LocalDiskBackend,
    MemoryBackend,
    Operation,
    OperationNotSupportedError,
    Paging,
    PathFilters,
    PathNotAllowedError,
    StorageBackend,
    StorageError,
    UnifiedFileStorage,
    UpsertFileCommand,
)

__all__ = [
    "BackendConfig",
    "BackendKind",
    "DatabaseBackend",
    "DuplicateMountNameError",
    "File",
    "FileMetadata",
    "FileStorage",
    "FileStorageConfig",
    "FileStorageError",
    "InvalidPathError",
    "ListFilesResponse",
    "ListOptions",
    "LocalDiskBackend",
    "MemoryBackend",
    "Operation",
    "OperationNotSupportedError",
    "Paging",
    "PathFilters",
    "PathNotAllowedError",
    "StorageBackend",
    "StorageError",
    "UnifiedFileStorage",
    "UpsertFileCommand",
    "__version__",
    "default_config",
    "provide_service",
]
