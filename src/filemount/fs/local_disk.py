"""LocalDiskBackend — files on the host filesystem under one directory."""

from __future__ import annotations

import asyncio
import contextlib
import json
import logging
import os
import tempfile
from datetime import UTC, datetime
from pathlib import Path
from typing import TYPE_CHECKING, Any

from .exceptions import InvalidPathError, PathNotAllowedError, StorageError
from .listing import paginate, select_children
from .memory import check_file_path, merge_upsert
from .types import DIRECTORY_MIME_TYPE, File, FileMetadata
from .utils import DELIMITER, folder_path, guess_mime_type

if TYPE_CHECKING:
    from .types import ListFilesResponse, ListOptions, Paging, UpsertFileCommand

logger = logging.getLogger(__name__)

ATTRS_SUFFIX = ".attrs"
"""Sidecar holding mime type, properties and creation time of a file."""

_TMP_PREFIX = ".filemount-"


def _is_internal(name: str) -> bool:
    return name.endswith(ATTRS_SUFFIX) or name.startswith(_TMP_PREFIX)


def _atomic_write(target: Path, data: bytes) -> None:
    fd, tmp_path = tempfile.mkstemp(dir=str(target.parent), prefix=_TMP_PREFIX)
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
        Path(tmp_path).replace(target)
    except Exception:
        with contextlib.suppress(OSError):
            Path(tmp_path).unlink()
        raise


class LocalDiskBackend:
    """Direct disk storage rooted at ``host_dir``.

    File attributes that the filesystem cannot hold (mime type, properties)
    live in a JSON sidecar next to each file, ``<name>.attrs``. Sidecars are
    never listed and cannot be written through the backend.

    Security: ``_resolve_path()`` keeps every path inside ``host_dir`` and
    rejects symlinks.

    Implements the ``StorageBackend`` protocol.
    """

    def __init__(self, host_dir: Path | str) -> None:
        self.host_dir = Path(host_dir).resolve()

        if not self.host_dir.exists():
            raise FileNotFoundError(f"Host directory does not exist: {self.host_dir}")
        if not self.host_dir.is_dir():
            raise NotADirectoryError(f"Host path is not a directory: {self.host_dir}")

    def __repr__(self) -> str:
        return f"LocalDiskBackend({str(self.host_dir)!r})"

    # =========================================================================
    # Path Resolution & Security
    # =========================================================================

    def _resolve_path(self, local_path: str) -> Path:
        """Resolve a backend-local path to a physical path under host_dir."""
        rel = local_path.strip(DELIMITER)
        if not rel:
            return self.host_dir

        current = self.host_dir
        for part in Path(rel).parts:
            current = current / part
            if current.is_symlink():
                raise PathNotAllowedError(
                    f"Symlinks not allowed: {local_path} contains symlink at "
                    f"{current.relative_to(self.host_dir)}"
                )

        resolved = (self.host_dir / rel).resolve()
        try:
            resolved.relative_to(self.host_dir)
        except ValueError:
            raise PathNotAllowedError(
                f"Path traversal detected: {local_path} resolves outside mount directory"
            ) from None
        return resolved

    def _to_local_path(self, physical: Path) -> str:
        rel = physical.relative_to(self.host_dir).as_posix()
        return DELIMITER if rel == "." else DELIMITER + rel

    @staticmethod
    def _attrs_path(physical: Path) -> Path:
        return physical.with_name(physical.name + ATTRS_SUFFIX)

    # =========================================================================
    # Sync helpers (run in worker threads)
    # =========================================================================

    def _load_file(self, physical: Path, *, with_contents: bool) -> File:
        st = physical.stat()
        attrs: dict[str, Any] = {}
        attrs_path = self._attrs_path(physical)
        if attrs_path.is_file():
            attrs = json.loads(attrs_path.read_text("utf-8"))

        created = attrs.get("created")
        return File(
            full_path=self._to_local_path(physical),
            name=physical.name,
            mime_type=attrs.get("mime_type") or guess_mime_type(physical.name),
            size=st.st_size,
            created=(
                datetime.fromisoformat(created)
                if created
                else datetime.fromtimestamp(st.st_ctime, tz=UTC)
            ),
            modified=datetime.fromtimestamp(st.st_mtime, tz=UTC),
            properties=dict(attrs.get("properties") or {}),
            contents=physical.read_bytes() if with_contents else None,
        )

    def _load_folder(self, physical: Path) -> FileMetadata:
        st = physical.stat()
        return FileMetadata(
            full_path=self._to_local_path(physical),
            name=physical.name,
            mime_type=DIRECTORY_MIME_TYPE,
            created=datetime.fromtimestamp(st.st_ctime, tz=UTC),
            modified=datetime.fromtimestamp(st.st_mtime, tz=UTC),
        )

    def _scan(self, root: Path, *, recursive: bool) -> tuple[list[File], list[FileMetadata]]:
        files: list[File] = []
        folders: list[FileMetadata] = []
        if not root.is_dir():
            return files, folders

        pending = [root]
        while pending:
            current = pending.pop()
            for entry in os.scandir(current):
                if _is_internal(entry.name) or entry.is_symlink():
                    continue
                physical = Path(entry.path)
                if entry.is_dir():
                    folders.append(self._load_folder(physical))
                    if recursive:
                        pending.append(physical)
                elif entry.is_file():
                    files.append(self._load_file(physical, with_contents=False))
        return files, folders

    # =========================================================================
    # Read
    # =========================================================================

    async def get(self, path: str) -> File | None:
        if path == DELIMITER or path.endswith(DELIMITER):
            return None
        resolved = self._resolve_path(path)
        if _is_internal(resolved.name):
            return None

        def _get() -> File | None:
            if not resolved.is_file():
                return None
            return self._load_file(resolved, with_contents=True)

        try:
            return await asyncio.to_thread(_get)
        except (OSError, ValueError) as e:
            raise StorageError(f"Cannot read {path}: {e}") from e

    async def list_files(
        self,
        path: str,
        paging: Paging | None = None,
        options: ListOptions | None = None,
    ) -> ListFilesResponse:
        resolved = self._resolve_path(path)
        recursive = options.recursive if options is not None else False
        with_contents = options.with_contents if options is not None else False

        def _list() -> ListFilesResponse:
            files, _ = self._scan(resolved, recursive=recursive)
            response = paginate(select_children(files, path, options), paging)
            if with_contents:
                for f in response.files:
                    f.contents = self._resolve_path(f.full_path).read_bytes()
            return response

        try:
            return await asyncio.to_thread(_list)
        except (OSError, ValueError) as e:
            raise StorageError(f"Cannot list files in {path}: {e}") from e

    async def list_folders(
        self, path: str, options: ListOptions | None = None
    ) -> list[FileMetadata]:
        resolved = self._resolve_path(path)
        recursive = options.recursive if options is not None else False

        def _list() -> list[FileMetadata]:
            _, folders = self._scan(resolved, recursive=recursive)
            return select_children(folders, path, options)

        try:
            return await asyncio.to_thread(_list)
        except (OSError, ValueError) as e:
            raise StorageError(f"Cannot list folders in {path}: {e}") from e

    # =========================================================================
    # Write
    # =========================================================================

    async def upsert(self, command: UpsertFileCommand) -> None:
        check_file_path(command.path)
        resolved = self._resolve_path(command.path)
        if _is_internal(resolved.name):
            raise InvalidPathError(f"Reserved file name: {resolved.name}")

        def _upsert() -> None:
            if resolved.is_dir():
                raise StorageError(f"A folder already exists at {command.path}")
            existing = (
                self._load_file(resolved, with_contents=command.contents is None)
                if resolved.is_file()
                else None
            )
            merged = merge_upsert(existing, command, datetime.now(UTC))

            resolved.parent.mkdir(parents=True, exist_ok=True)
            _atomic_write(resolved, merged.contents or b"")
            attrs = {
                "mime_type": merged.mime_type,
                "properties": merged.properties,
                "created": merged.created.isoformat() if merged.created else None,
            }
            _atomic_write(self._attrs_path(resolved), json.dumps(attrs).encode("utf-8"))

        try:
            await asyncio.to_thread(_upsert)
        except (OSError, ValueError) as e:
            raise StorageError(f"Failed to write {command.path}: {e}") from e
        logger.debug("Upserted %s under %s", command.path, self.host_dir)

    async def delete(self, path: str) -> None:
        check_file_path(path)
        resolved = self._resolve_path(path)

        def _delete() -> None:
            if resolved.is_dir():
                raise StorageError(f"Not a file: {path}")
            resolved.unlink(missing_ok=True)
            self._attrs_path(resolved).unlink(missing_ok=True)

        try:
            await asyncio.to_thread(_delete)
        except OSError as e:
            raise StorageError(f"Failed to delete {path}: {e}") from e

    async def create_folder(self, path: str) -> None:
        resolved = self._resolve_path(folder_path(path))

        def _mkdir() -> None:
            if resolved.exists() and not resolved.is_dir():
                raise StorageError(f"A file already exists at {path}")
            resolved.mkdir(parents=True, exist_ok=True)

        try:
            await asyncio.to_thread(_mkdir)
        except OSError as e:
            raise StorageError(f"Failed to create folder {path}: {e}") from e

    async def delete_folder(self, path: str) -> None:
        path = folder_path(path)
        if path == DELIMITER:
            raise StorageError("Cannot delete the root folder")
        resolved = self._resolve_path(path)

        def _rmdir() -> None:
            if not resolved.exists():
                return
            if not resolved.is_dir():
                raise StorageError(f"Not a folder: {path}")
            if any(resolved.iterdir()):
                raise StorageError(f"Folder is not empty: {path}")
            resolved.rmdir()

        try:
            await asyncio.to_thread(_rmdir)
        except OSError as e:
            raise StorageError(f"Failed to delete folder {path}: {e}") from e

    # =========================================================================
    # Lifecycle
    # =========================================================================

    async def close(self) -> None:
        """No resources to release."""
