"""Value types: File, FileMetadata, UpsertFileCommand, paging and listing."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from datetime import datetime

    from .filters import PathFilters

DIRECTORY_MIME_TYPE = "directory"


class Operation(str, Enum):
    """Operations a backend may declare as supported."""

    GET = "get"
    DELETE = "delete"
    UPSERT = "upsert"
    LIST_FILES = "list_files"
    LIST_FOLDERS = "list_folders"
    CREATE_FOLDER = "create_folder"
    DELETE_FOLDER = "delete_folder"


ALL_OPERATIONS: frozenset[Operation] = frozenset(Operation)
READ_OPERATIONS: frozenset[Operation] = frozenset(
    {Operation.GET, Operation.LIST_FILES, Operation.LIST_FOLDERS}
)


@dataclass
class FileMetadata:
    """File or folder metadata.

    ``full_path`` is backend-local inside a backend and unified once it has
    passed back through the router.
    """

    full_path: str
    name: str
    mime_type: str = "application/octet-stream"
    size: int = 0
    created: datetime | None = None
    modified: datetime | None = None
    description: str = ""
    properties: dict[str, str] = field(default_factory=dict)

    @property
    def is_folder(self) -> bool:
        return self.mime_type == DIRECTORY_MIME_TYPE


@dataclass
class File(FileMetadata):
    """File metadata plus optional contents."""

    contents: bytes | None = None


@dataclass
class UpsertFileCommand:
    """Create-or-replace request for a single file."""

    path: str
    mime_type: str | None = None
    contents: bytes | None = None
    properties: dict[str, str] | None = None


@dataclass
class Paging:
    """Opaque, backend-owned pagination cursor.

    ``after`` is the last path of the previous page (exclusive);
    ``first`` is the page size.
    """

    after: str = ""
    first: int = 100

    def __post_init__(self) -> None:
        if self.first < 1:
            raise ValueError(f"Page size must be at least 1, got {self.first}")


@dataclass
class ListOptions:
    """Options for ``list_files`` / ``list_folders``."""

    recursive: bool = False
    path_filters: PathFilters | None = None
    with_contents: bool = False


@dataclass
class ListFilesResponse:
    """A page of files."""

    files: list[File] = field(default_factory=list)
    has_more: bool = False
    last_path: str = ""
