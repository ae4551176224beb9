"""UnifiedFileStorage — routes one path namespace across mounted backends."""

from __future__ import annotations

import logging
from dataclasses import replace as dc_replace
from typing import TYPE_CHECKING, TypeVar

from .dummy import dummy_backend
from .mounts import MountRegistry
from .utils import join, strip_mount_prefix, validate_path

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from .protocol import StorageBackend
    from .types import (
        File,
        FileMetadata,
        ListFilesResponse,
        ListOptions,
        Paging,
        UpsertFileCommand,
    )

logger = logging.getLogger(__name__)

M = TypeVar("M", bound="FileMetadata")


class UnifiedFileStorage:
    """Routes operations to backends by mount name.

    Presents a single namespace to callers while delegating to the
    backend mounted under the first path segment. Every call is
    resolve -> delegate -> rewrite: the mount prefix is stripped before the
    backend sees a path and added back to every path it returns.

    Paths outside every mount go to a shared dummy backend: reads report
    not-found and mutations raise ``OperationNotSupportedError``.

    Implements the ``StorageBackend`` protocol, so routers can be mounted
    inside other routers.
    """

    def __init__(
        self,
        mounts: MountRegistry
        | Mapping[str, StorageBackend]
        | Iterable[tuple[str, StorageBackend]] = (),
    ) -> None:
        self._registry = mounts if isinstance(mounts, MountRegistry) else MountRegistry(mounts)
        self._dummy = dummy_backend()

    def __repr__(self) -> str:
        return f"UnifiedFileStorage({list(self._registry)!r})"

    @property
    def mounts(self) -> MountRegistry:
        """Read-only view of the mounted backends."""
        return self._registry

    @property
    def dummy(self) -> StorageBackend:
        """The fallback backend for unmounted paths."""
        return self._dummy

    def has_mount(self, name: str) -> bool:
        return self._registry.has_mount(name)

    # =========================================================================
    # Resolution
    # =========================================================================

    def resolve(self, path: str) -> tuple[StorageBackend, str, str]:
        """Resolve a unified path to ``(backend, local_path, mount_name)``.

        Raises ``InvalidPathError`` before any backend is touched. A path
        outside every mount resolves to the dummy backend with its path
        unchanged and an empty mount name.
        """
        matched = self._registry.match(path)
        if matched is not None:
            mount_name, backend = matched
            local_path = strip_mount_prefix(path, mount_name)
            validate_path(local_path)
            logger.debug("Resolved %s to %s on mount %s", path, local_path, mount_name)
            return backend, local_path, mount_name

        validate_path(path)
        logger.warning("Backend not found for path %s", path)
        return self._dummy, path, ""

    @staticmethod
    def _prefix(entry: M, mount_name: str) -> M:
        return dc_replace(entry, full_path=join(mount_name, entry.full_path))

    # =========================================================================
    # Read Operations
    # =========================================================================

    async def get(self, path: str) -> File | None:
        """Get a file, or ``None`` if it does not exist."""
        backend, local_path, mount_name = self.resolve(path)
        file = await backend.get(local_path)
        if file is None:
            return None
        return self._prefix(file, mount_name)

    async def list_files(
        self,
        path: str,
        paging: Paging | None = None,
        options: ListOptions | None = None,
    ) -> ListFilesResponse:
        """List files below *path*.

        ``paging`` is handed to the backend untouched and the returned
        ``last_path`` cursor comes back verbatim, so cursors are only valid
        for the mount that issued them.
        """
        backend, local_path, mount_name = self.resolve(path)
        response = await backend.list_files(local_path, paging, options)
        return dc_replace(
            response,
            files=[self._prefix(f, mount_name) for f in response.files],
        )

    async def list_folders(
        self, path: str, options: ListOptions | None = None
    ) -> list[FileMetadata]:
        """List folders below *path*."""
        backend, local_path, mount_name = self.resolve(path)
        folders = await backend.list_folders(local_path, options)
        return [self._prefix(folder, mount_name) for folder in folders]

    # =========================================================================
    # Write Operations
    # =========================================================================

    async def upsert(self, command: UpsertFileCommand) -> None:
        """Create or replace a file.

        The backend receives a copy of *command* carrying the local path;
        the caller's command is left as it was.
        """
        backend, local_path, _ = self.resolve(command.path)
        await backend.upsert(dc_replace(command, path=local_path))

    async def delete(self, path: str) -> None:
        """Delete a file."""
        backend, local_path, _ = self.resolve(path)
        await backend.delete(local_path)

    async def create_folder(self, path: str) -> None:
        backend, local_path, _ = self.resolve(path)
        await backend.create_folder(local_path)

    async def delete_folder(self, path: str) -> None:
        backend, local_path, _ = self.resolve(path)
        await backend.delete_folder(local_path)

    # =========================================================================
    # Lifecycle
    # =========================================================================

    async def close(self) -> None:
        """Close every mounted backend.

        All backends are closed even when some fail; the last failure is
        re-raised afterwards.
        """
        last_error: Exception | None = None
        for name, backend in self._registry.items():
            try:
                await backend.close()
            except Exception as e:
                logger.warning("Failed to close backend %s", name, exc_info=True)
                last_error = e
        if last_error is not None:
            raise last_error

    async def __aenter__(self) -> UnifiedFileStorage:
        return self

    async def __aexit__(
        self,
        exc_type: object,
        exc_val: object,
        exc_tb: object,
    ) -> None:
        await self.close()
