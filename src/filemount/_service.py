"""Service construction — build a router from configuration."""

from __future__ import annotations

import logging
import os
from typing import TYPE_CHECKING

from filemount.config import BackendKind
from filemount.fs.database_fs import DatabaseBackend
from filemount.fs.exceptions import DuplicateMountNameError, StorageError
from filemount.fs.guarded import GuardedBackend
from filemount.fs.local_disk import LocalDiskBackend
from filemount.fs.memory import MemoryBackend
from filemount.fs.unified import UnifiedFileStorage

if TYPE_CHECKING:
    from filemount.config import BackendConfig, FileStorageConfig
    from filemount.fs.protocol import StorageBackend

logger = logging.getLogger(__name__)


def _open_backend(config: BackendConfig) -> StorageBackend:
    if config.kind is BackendKind.MEMORY:
        return MemoryBackend()
    if config.kind is BackendKind.DB:
        return DatabaseBackend(config.path)
    try:
        return LocalDiskBackend(config.path)
    except OSError as e:
        logger.error(
            "Failed to initialize file storage backend %s at %s (cwd %s): %s",
            config.name,
            config.path,
            os.getcwd(),
            e,
        )
        raise StorageError(f"Cannot open backend {config.name!r}: {e}") from e


def provide_service(
    config: FileStorageConfig, *, enabled: bool = True
) -> UnifiedFileStorage:
    """Build a ``UnifiedFileStorage`` for *config*.

    With ``enabled=False`` the router has no mounts and every path resolves
    to the dummy backend. Any backend that fails to open, or a repeated
    mount name, aborts construction.
    """
    if not enabled:
        logger.info("File storage disabled")
        return UnifiedFileStorage()

    mounts: list[tuple[str, StorageBackend]] = []
    seen: set[str] = set()
    for backend_config in config.backends:
        if backend_config.name in seen:
            raise DuplicateMountNameError(f"Duplicate backend name {backend_config.name}")
        seen.add(backend_config.name)

        backend = GuardedBackend(
            _open_backend(backend_config),
            backend_config.path_filters,
            backend_config.supported_operations,
            name=backend_config.name,
        )
        mounts.append((backend_config.name, backend))
        logger.info(
            "Mounted %s backend %s", backend_config.kind.value, backend_config.name
        )

    return UnifiedFileStorage(mounts)
