"""DummyBackend — stores nothing, finds nothing."""

from __future__ import annotations

from typing import TYPE_CHECKING

from .filters import PathFilters
from .guarded import GuardedBackend
from .types import ListFilesResponse

if TYPE_CHECKING:
    from .types import File, FileMetadata, ListOptions, Paging, UpsertFileCommand


class DummyBackend:
    """No-op backend. Reads find nothing; writes are discarded.

    Never mounted directly: the router wraps it with ``dummy_backend()`` so
    that mutations are rejected before they get here.
    """

    async def get(self, path: str) -> File | None:
        return None

    async def list_files(
        self,
        path: str,
        paging: Paging | None = None,
        options: ListOptions | None = None,
    ) -> ListFilesResponse:
        return ListFilesResponse()

    async def list_folders(
        self, path: str, options: ListOptions | None = None
    ) -> list[FileMetadata]:
        return []

    async def upsert(self, command: UpsertFileCommand) -> None:
        pass

    async def delete(self, path: str) -> None:
        pass

    async def create_folder(self, path: str) -> None:
        pass

    async def delete_folder(self, path: str) -> None:
        pass

    async def close(self) -> None:
        pass


def dummy_backend() -> GuardedBackend:
    """The fallback for paths outside every mount.

    Empty allow-list and no supported operations: reads report not-found,
    mutations raise ``OperationNotSupportedError``.
    """
    return GuardedBackend(
        DummyBackend(),
        PathFilters.deny_all(),
        supported_operations=(),
        name="dummy",
    )
