"""GuardedBackend — path filters and supported operations around a backend."""

from __future__ import annotations

import logging
from dataclasses import replace as dc_replace
from typing import TYPE_CHECKING

from .exceptions import OperationNotSupportedError, PathNotAllowedError
from .filters import PathFilters
from .types import ALL_OPERATIONS, ListFilesResponse, Operation
from .utils import validate_path

if TYPE_CHECKING:
    from collections.abc import Iterable

    from .protocol import StorageBackend
    from .types import File, FileMetadata, ListOptions, Paging, UpsertFileCommand

logger = logging.getLogger(__name__)


class GuardedBackend:
    """Enforces a backend's allow-list and declared operations.

    Reads of a path the filters reject behave as "not found": ``get``
    returns ``None`` and listings come back empty. Mutations are rejected
    with ``OperationNotSupportedError`` when the operation is not declared,
    and with ``PathNotAllowedError`` when the filters reject the path.

    Implements the ``StorageBackend`` protocol.
    """

    def __init__(
        self,
        wrapped: StorageBackend,
        path_filters: PathFilters | None = None,
        supported_operations: Iterable[Operation] | None = None,
        *,
        name: str = "",
    ) -> None:
        self.wrapped = wrapped
        self.path_filters = path_filters or PathFilters.allow_all()
        self.supported_operations = (
            ALL_OPERATIONS
            if supported_operations is None
            else frozenset(Operation(op) for op in supported_operations)
        )
        self.name = name

    def __repr__(self) -> str:
        return f"GuardedBackend({self.name or type(self.wrapped).__name__})"

    # ------------------------------------------------------------------
    # Checks
    # ------------------------------------------------------------------

    def supports(self, operation: Operation) -> bool:
        return operation in self.supported_operations

    def _require(self, operation: Operation) -> None:
        if not self.supports(operation):
            raise OperationNotSupportedError(
                f"Operation {operation.value!r} is not supported by {self!r}"
            )

    def _check_mutation(self, operation: Operation, path: str) -> None:
        validate_path(path)
        self._require(operation)
        if not self.path_filters.is_allowed(path):
            raise PathNotAllowedError(f"Path not allowed: {path}")

    def _visible(self, entry: FileMetadata, options: ListOptions | None) -> bool:
        if not self.path_filters.is_allowed(entry.full_path):
            return False
        extra = options.path_filters if options is not None else None
        return extra is None or extra.is_allowed(entry.full_path)

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    async def get(self, path: str) -> File | None:
        validate_path(path)
        if not self.path_filters.is_allowed(path):
            return None
        self._require(Operation.GET)
        return await self.wrapped.get(path)

    async def list_files(
        self,
        path: str,
        paging: Paging | None = None,
        options: ListOptions | None = None,
    ) -> ListFilesResponse:
        validate_path(path)
        if not self.path_filters.may_contain_allowed(path):
            return ListFilesResponse()
        self._require(Operation.LIST_FILES)

        response = await self.wrapped.list_files(path, paging, options)
        visible = [f for f in response.files if self._visible(f, options)]
        if len(visible) == len(response.files):
            return response
        return dc_replace(response, files=visible)

    async def list_folders(
        self,
        path: str,
        options: ListOptions | None = None,
    ) -> list[FileMetadata]:
        validate_path(path)
        if not self.path_filters.may_contain_allowed(path):
            return []
        self._require(Operation.LIST_FOLDERS)

        folders = await self.wrapped.list_folders(path, options)
        return [
            folder
            for folder in folders
            if self.path_filters.may_contain_allowed(folder.full_path)
        ]

    # ------------------------------------------------------------------
    # Write
    # ------------------------------------------------------------------

    async def upsert(self, command: UpsertFileCommand) -> None:
        self._check_mutation(Operation.UPSERT, command.path)
        await self.wrapped.upsert(command)

    async def delete(self, path: str) -> None:
        self._check_mutation(Operation.DELETE, path)
        await self.wrapped.delete(path)

    async def create_folder(self, path: str) -> None:
        self._check_mutation(Operation.CREATE_FOLDER, path)
        await self.wrapped.create_folder(path)

    async def delete_folder(self, path: str) -> None:
        self._check_mutation(Operation.DELETE_FOLDER, path)
        await self.wrapped.delete_folder(path)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def close(self) -> None:
        logger.debug("Closing %r", self)
        await self.wrapped.close()
