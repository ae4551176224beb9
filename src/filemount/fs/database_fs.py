"""DatabaseBackend — files and folders as rows, via async SQLAlchemy."""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlmodel import select

from .exceptions import StorageError
from .listing import ancestor_folders, folder_prefix, paginate, select_children
from .memory import check_file_path, merge_upsert
from .types import DIRECTORY_MIME_TYPE, File, FileMetadata
from .utils import DELIMITER, folder_path, parent_path, split_path

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from filemount.models.files import StoredFileBase

    from .types import ListFilesResponse, ListOptions, Paging, UpsertFileCommand

logger = logging.getLogger(__name__)


class DatabaseBackend:
    """Database-backed storage. Works with any async SQLAlchemy dialect.

    The backend owns its engine unless one is passed in, creates its table
    on first use, and opens one session per operation.

    Implements the ``StorageBackend`` protocol.
    """

    def __init__(
        self,
        url: str = "sqlite+aiosqlite://",
        *,
        engine: AsyncEngine | None = None,
        file_model: type[StoredFileBase] | None = None,
    ) -> None:
        from filemount.models.files import StoredFile

        self.url = url
        self._file_model: type[StoredFileBase] = file_model or StoredFile
        self._owns_engine = engine is None
        self._engine: AsyncEngine | None = engine
        self._session_factory: async_sessionmaker[AsyncSession] | None = None
        self._init_lock = asyncio.Lock()

    def __repr__(self) -> str:
        return f"DatabaseBackend({self.url!r})"

    @property
    def file_model(self) -> type[StoredFileBase]:
        return self._file_model

    # ------------------------------------------------------------------
    # Database Management
    # ------------------------------------------------------------------

    async def _ensure_db(self) -> async_sessionmaker[AsyncSession]:
        """Create the engine and table if needed."""
        if self._session_factory is not None:
            return self._session_factory
        async with self._init_lock:
            if self._session_factory is not None:
                return self._session_factory

            if self._engine is None:
                self._engine = create_async_engine(self.url, echo=False)

            table = self._file_model.__table__  # type: ignore[attr-defined]
            async with self._engine.begin() as conn:
                await conn.run_sync(lambda c: table.create(c, checkfirst=True))
            logger.debug("Ensured table %s on %s", table.name, self.url)

            self._session_factory = async_sessionmaker(
                self._engine,
                class_=AsyncSession,
                expire_on_commit=False,
            )
            return self._session_factory

    @asynccontextmanager
    async def _session(self) -> AsyncIterator[AsyncSession]:
        factory = await self._ensure_db()
        async with factory() as session:
            try:
                yield session
                await session.commit()
            except SQLAlchemyError as e:
                await session.rollback()
                raise StorageError(f"Database operation failed: {e}") from e
            except Exception:
                await session.rollback()
                raise

    async def _row(
        self, session: AsyncSession, path: str
    ) -> StoredFileBase | None:
        model = self._file_model
        result = await session.execute(
            select(model).where(model.path == path)  # type: ignore[arg-type]
        )
        return result.scalar_one_or_none()

    # ------------------------------------------------------------------
    # Row conversion
    # ------------------------------------------------------------------

    @staticmethod
    def _to_file(row: StoredFileBase, *, with_contents: bool = True) -> File:
        return File(
            full_path=row.path,
            name=row.name,
            mime_type=row.mime_type,
            size=row.size,
            created=row.created_at,
            modified=row.updated_at,
            properties=dict(row.properties or {}),
            contents=row.contents if with_contents else None,
        )

    @staticmethod
    def _to_folder(row: StoredFileBase) -> FileMetadata:
        return FileMetadata(
            full_path=row.path,
            name=row.name,
            mime_type=DIRECTORY_MIME_TYPE,
            created=row.created_at,
            modified=row.updated_at,
        )

    async def _rows_below(
        self,
        session: AsyncSession,
        folder: str,
        *,
        is_folder: bool,
        recursive: bool,
    ) -> list[StoredFileBase]:
        model = self._file_model
        query = select(model).where(model.is_folder == is_folder)  # type: ignore[arg-type]
        if recursive:
            query = query.where(
                model.path.startswith(folder_prefix(folder), autoescape=True)  # type: ignore[union-attr]
            )
        else:
            query = query.where(model.parent_path == folder_path(folder))  # type: ignore[arg-type]
        result = await session.execute(query.order_by(model.path))  # type: ignore[arg-type]
        return list(result.scalars().all())

    async def _ensure_folders(
        self, session: AsyncSession, folders: list[str], now: datetime
    ) -> None:
        for folder in folders:
            row = await self._row(session, folder)
            if row is None:
                parent, name = split_path(folder)
                session.add(
                    self._file_model(
                        path=folder,
                        parent_path=parent,
                        name=name,
                        is_folder=True,
                        mime_type=DIRECTORY_MIME_TYPE,
                        created_at=now,
                        updated_at=now,
                    )
                )
            elif not row.is_folder:
                raise StorageError(f"A file already exists at {folder}")

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    async def get(self, path: str) -> File | None:
        if path == DELIMITER or path.endswith(DELIMITER):
            return None
        async with self._session() as session:
            row = await self._row(session, path)
            if row is None or row.is_folder:
                return None
            return self._to_file(row)

    async def list_files(
        self,
        path: str,
        paging: Paging | None = None,
        options: ListOptions | None = None,
    ) -> ListFilesResponse:
        recursive = options.recursive if options is not None else False
        with_contents = options.with_contents if options is not None else False
        async with self._session() as session:
            rows = await self._rows_below(
                session, path, is_folder=False, recursive=recursive
            )
            files = [self._to_file(row, with_contents=with_contents) for row in rows]
        return paginate(select_children(files, path, options), paging)

    async def list_folders(
        self, path: str, options: ListOptions | None = None
    ) -> list[FileMetadata]:
        recursive = options.recursive if options is not None else False
        async with self._session() as session:
            rows = await self._rows_below(
                session, path, is_folder=True, recursive=recursive
            )
            folders = [self._to_folder(row) for row in rows]
        return select_children(folders, path, options)

    # ------------------------------------------------------------------
    # Write
    # ------------------------------------------------------------------

    async def upsert(self, command: UpsertFileCommand) -> None:
        check_file_path(command.path)
        now = datetime.now(UTC)
        async with self._session() as session:
            row = await self._row(session, command.path)
            if row is not None and row.is_folder:
                raise StorageError(f"A folder already exists at {command.path}")

            merged = merge_upsert(
                self._to_file(row) if row is not None else None, command, now
            )
            if row is None:
                row = self._file_model(
                    path=command.path,
                    parent_path=parent_path(command.path),
                    name=merged.name,
                    created_at=now,
                )
            row.mime_type = merged.mime_type
            row.contents = merged.contents
            row.size = merged.size
            row.properties = merged.properties
            row.updated_at = now
            session.add(row)

            await self._ensure_folders(session, ancestor_folders(command.path), now)
        logger.debug("Upserted %s in %s", command.path, self.url)

    async def delete(self, path: str) -> None:
        check_file_path(path)
        async with self._session() as session:
            row = await self._row(session, path)
            if row is None:
                return
            if row.is_folder:
                raise StorageError(f"Not a file: {path}")
            await session.delete(row)

    async def create_folder(self, path: str) -> None:
        path = folder_path(path)
        if path == DELIMITER:
            return
        now = datetime.now(UTC)
        async with self._session() as session:
            await self._ensure_folders(session, [path, *ancestor_folders(path)], now)

    async def delete_folder(self, path: str) -> None:
        path = folder_path(path)
        if path == DELIMITER:
            raise StorageError("Cannot delete the root folder")
        model = self._file_model
        async with self._session() as session:
            row = await self._row(session, path)
            if row is None:
                return
            if not row.is_folder:
                raise StorageError(f"Not a folder: {path}")

            child = await session.execute(
                select(model.id)  # type: ignore[call-overload]
                .where(model.path.startswith(folder_prefix(path), autoescape=True))  # type: ignore[union-attr]
                .limit(1)
            )
            if child.first() is not None:
                raise StorageError(f"Folder is not empty: {path}")
            await session.delete(row)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def close(self) -> None:
        """Dispose the engine if this backend created it."""
        if self._engine is not None and self._owns_engine:
            await self._engine.dispose()
            self._engine = None
        self._session_factory = None
