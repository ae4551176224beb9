"""FileStorage — synchronous facade over UnifiedFileStorage."""

from __future__ import annotations

import asyncio
import threading
from typing import TYPE_CHECKING, Any

from filemount._service import provide_service

if TYPE_CHECKING:
    from filemount.config import FileStorageConfig
    from filemount.fs.types import (
        File,
        FileMetadata,
        ListFilesResponse,
        ListOptions,
        Paging,
        UpsertFileCommand,
    )
    from filemount.fs.unified import UnifiedFileStorage


class FileStorage:
    """Blocking file storage API backed by a private event loop.

    The router and its backends are async; the loop runs in a daemon thread
    so plain sync code (and code already inside another event loop) can
    call in.

    Usage::

        with FileStorage(default_config("/srv/static")) as fs:
            icons = fs.list_files("/public/img/icons")
    """

    def __init__(self, config: FileStorageConfig, *, enabled: bool = True) -> None:
        self._closed = False

        self._loop = asyncio.new_event_loop()
        self._thread = threading.Thread(target=self._loop.run_forever, daemon=True)
        self._thread.start()

        try:
            self._storage: UnifiedFileStorage = provide_service(config, enabled=enabled)
        except Exception:
            self._stop_loop()
            raise

    def _run(self, coro: Any) -> Any:
        """Submit *coro* to the private loop and block for the result."""
        if self._closed:
            coro.close()
            msg = "FileStorage is closed"
            raise RuntimeError(msg)
        future = asyncio.run_coroutine_threadsafe(coro, self._loop)
        return future.result()

    def _stop_loop(self) -> None:
        self._loop.call_soon_threadsafe(self._loop.stop)
        self._thread.join(timeout=5)

    @property
    def storage(self) -> UnifiedFileStorage:
        """The underlying async router."""
        return self._storage

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def close(self) -> None:
        """Close all backends, stop the event loop and join the thread."""
        if self._closed:
            return

        try:
            self._run(self._storage.close())
        finally:
            self._closed = True
            self._stop_loop()

    def __enter__(self) -> FileStorage:
        return self

    def __exit__(self, exc_type: object, exc_val: object, exc_tb: object) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Storage wrappers (sync)
    # ------------------------------------------------------------------

    def get(self, path: str) -> File | None:
        return self._run(self._storage.get(path))

    def upsert(self, command: UpsertFileCommand) -> None:
        self._run(self._storage.upsert(command))

    def delete(self, path: str) -> None:
        self._run(self._storage.delete(path))

    def list_files(
        self,
        path: str,
        paging: Paging | None = None,
        options: ListOptions | None = None,
    ) -> ListFilesResponse:
        return self._run(self._storage.list_files(path, paging, options))

    def list_folders(
        self, path: str, options: ListOptions | None = None
    ) -> list[FileMetadata]:
        return self._run(self._storage.list_folders(path, options))

    def create_folder(self, path: str) -> None:
        self._run(self._storage.create_folder(path))

    def delete_folder(self, path: str) -> None:
        self._run(self._storage.delete_folder(path))
