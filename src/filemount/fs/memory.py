"""MemoryBackend — process-local dict storage, mostly for tests and scratch mounts."""

from __future__ import annotations

import logging
from dataclasses import replace as dc_replace
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from .exceptions import InvalidPathError, StorageError
from .listing import ancestor_folders, is_within, paginate, select_children
from .types import DIRECTORY_MIME_TYPE, File, FileMetadata
from .utils import DELIMITER, folder_path, guess_mime_type, split_path

if TYPE_CHECKING:
    from .types import ListFilesResponse, ListOptions, Paging, UpsertFileCommand

logger = logging.getLogger(__name__)


def merge_upsert(existing: File | None, command: UpsertFileCommand, now: datetime) -> File:
    """Build the stored file for *command* on top of *existing*.

    Fields the command leaves as ``None`` keep their stored value, so an
    upsert without contents only updates metadata.
    """
    _, name = split_path(command.path)
    if existing is None:
        contents = command.contents if command.contents is not None else b""
        return File(
            full_path=command.path,
            name=name,
            mime_type=command.mime_type or guess_mime_type(name),
            size=len(contents),
            created=now,
            modified=now,
            properties=dict(command.properties or {}),
            contents=contents,
        )

    contents = command.contents if command.contents is not None else existing.contents or b""
    return dc_replace(
        existing,
        mime_type=command.mime_type or existing.mime_type,
        size=len(contents),
        modified=now,
        properties=(
            dict(command.properties)
            if command.properties is not None
            else dict(existing.properties)
        ),
        contents=contents,
    )


def check_file_path(path: str) -> None:
    """Files live below root and have no trailing delimiter."""
    if path == DELIMITER or path.endswith(DELIMITER):
        raise InvalidPathError(f"Not a file path: {path}")


class MemoryBackend:
    """In-memory storage backend.

    Folders are tracked explicitly; upserting a file creates its parent
    folders. Implements the ``StorageBackend`` protocol.
    """

    def __init__(self) -> None:
        self._files: dict[str, File] = {}
        self._folders: dict[str, FileMetadata] = {}

    def _add_folder(self, path: str, now: datetime) -> None:
        if path in self._folders:
            return
        _, name = split_path(path)
        self._folders[path] = FileMetadata(
            full_path=path,
            name=name,
            mime_type=DIRECTORY_MIME_TYPE,
            created=now,
            modified=now,
        )

    def _check_no_file_at(self, folders: list[str]) -> None:
        for folder in folders:
            if folder in self._files:
                raise StorageError(f"A file already exists at {folder}")

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    async def get(self, path: str) -> File | None:
        stored = self._files.get(path)
        if stored is None:
            return None
        return dc_replace(stored, properties=dict(stored.properties))

    async def list_files(
        self,
        path: str,
        paging: Paging | None = None,
        options: ListOptions | None = None,
    ) -> ListFilesResponse:
        with_contents = options.with_contents if options is not None else False
        files = [
            dc_replace(
                f,
                properties=dict(f.properties),
                contents=f.contents if with_contents else None,
            )
            for f in select_children(self._files.values(), path, options)
        ]
        return paginate(files, paging)

    async def list_folders(
        self, path: str, options: ListOptions | None = None
    ) -> list[FileMetadata]:
        return [
            dc_replace(folder)
            for folder in select_children(self._folders.values(), path, options)
        ]

    # ------------------------------------------------------------------
    # Write
    # ------------------------------------------------------------------

    async def upsert(self, command: UpsertFileCommand) -> None:
        check_file_path(command.path)
        if command.path in self._folders:
            raise StorageError(f"A folder already exists at {command.path}")
        folders = ancestor_folders(command.path)
        self._check_no_file_at(folders)

        now = datetime.now(UTC)
        self._files[command.path] = merge_upsert(self._files.get(command.path), command, now)
        for folder in folders:
            self._add_folder(folder, now)
        logger.debug("Upserted %s", command.path)

    async def delete(self, path: str) -> None:
        if self._files.pop(path, None) is not None:
            logger.debug("Deleted %s", path)

    async def create_folder(self, path: str) -> None:
        path = folder_path(path)
        if path == DELIMITER:
            return
        folders = [path, *ancestor_folders(path)]
        self._check_no_file_at(folders)

        now = datetime.now(UTC)
        for folder in folders:
            self._add_folder(folder, now)

    async def delete_folder(self, path: str) -> None:
        path = folder_path(path)
        if path == DELIMITER:
            raise StorageError("Cannot delete the root folder")
        if path not in self._folders:
            return

        if any(is_within(p, path, recursive=True) for p in (*self._files, *self._folders)):
            raise StorageError(f"Folder is not empty: {path}")
        del self._folders[path]

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def close(self) -> None:
        self._files.clear()
        self._folders.clear()
