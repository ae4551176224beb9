"""Custom exception hierarchy for the filemount storage layer."""


class FileStorageError(Exception):
    """Base exception for all filemount storage errors."""


class InvalidPathError(FileStorageError):
    """Raised when a path is empty, relative, or contains unsafe segments."""


class InvalidMountNameError(FileStorageError):
    """Raised when a mount name cannot be used as a path segment."""


class DuplicateMountNameError(FileStorageError):
    """Raised at construction time when two backends share a mount name."""


class PathNotAllowedError(FileStorageError):
    """Raised when a backend's path filters reject a mutation."""


class OperationNotSupportedError(FileStorageError):
    """Raised when a backend does not support the requested operation."""


class StorageError(FileStorageError):
    """Raised on storage backend failures (DB connection, disk I/O, etc.)."""
