"""StorageBackend protocol — the capability set every backend implements.

Backends only ever see backend-local paths; the router strips and re-adds
mount prefixes around every call.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from .types import (
        File,
        FileMetadata,
        ListFilesResponse,
        ListOptions,
        Paging,
        UpsertFileCommand,
    )


@runtime_checkable
class StorageBackend(Protocol):
    """Core interface every backend must implement."""

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    async def get(self, path: str) -> File | None:
        """Return the file at *path*, or ``None`` if it does not exist."""
        ...

    async def list_files(
        self,
        path: str,
        paging: Paging | None = None,
        options: ListOptions | None = None,
    ) -> ListFilesResponse: ...

    async def list_folders(
        self,
        path: str,
        options: ListOptions | None = None,
    ) -> list[FileMetadata]: ...

    # ------------------------------------------------------------------
    # Write
    # ------------------------------------------------------------------

    async def upsert(self, command: UpsertFileCommand) -> None: ...

    async def delete(self, path: str) -> None: ...

    async def create_folder(self, path: str) -> None: ...

    async def delete_folder(self, path: str) -> None: ...

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def close(self) -> None:
        """Release resources. Called once on shutdown."""
        ...
